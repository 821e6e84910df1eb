"""
Prompt structures for agent invocations.

This module provides:
- PromptTemplate: Structured prompt rendering for workflow steps
- STEP_TASKS: Default task instruction per workflow step
- render_oracle_prompt: The fixed verification prompt used by the oracle

Hosts may replace the step templates; the oracle prompt is fixed because
its response shape is what the verifier parses.
"""

from dataclasses import dataclass

from deliveryguard.domain.models import VerificationScope, WorkflowStep

# =============================================================================
# STEP PROMPTS
# =============================================================================


@dataclass(frozen=True)
class PromptTemplate:
    """Structured prompt template for one agent invocation."""

    role: str
    constraints: str
    task: str
    feedback_wrapper: str = (
        "GUARDRAIL FEEDBACK:\n{feedback}\nInstruction: Address the feedback above."
    )

    def render(
        self,
        module_name: str,
        step: WorkflowStep,
        feedback: tuple[str, ...] = (),
        context: str = "",
    ) -> str:
        """Render the prompt for a module at a step."""
        parts = [
            f"# ROLE\n{self.role}",
            f"# CONSTRAINTS\n{self.constraints}",
            f"# MODULE\n{module_name} (step: {step.value})",
        ]

        if context:
            parts.append(f"# CONTEXT\n{context}")

        if feedback:
            parts.append("# HISTORY")
            for i, item in enumerate(feedback):
                wrapped = self.feedback_wrapper.format(feedback=item)
                parts.append(f"--- Note {i + 1} ---\n{wrapped}")

        parts.append(f"# TASK\n{self.task}")
        return "\n\n".join(parts)


STEP_TASKS: dict[WorkflowStep, str] = {
    WorkflowStep.DRAFT_SPECIFICATION: (
        "Draft the module specification with acceptance criteria as a "
        "checklist (- [ ] item)."
    ),
    WorkflowStep.DETERMINE_DEPENDENCIES: (
        "Determine which other modules and external libraries this module depends on."
    ),
    WorkflowStep.IDENTIFY_COMPONENTS: "Identify the components of this module.",
    WorkflowStep.SELECT_NEXT_COMPONENT: "Select the next unbuilt component.",
    WorkflowStep.BREAK_INTO_TASKS: (
        "Break the selected component into tasks and subtasks."
    ),
    WorkflowStep.ITERATE_THROUGH_TASKS: (
        "Work through the component's tasks. Call verify_task_completion with "
        "evidence before update_task_status(complete)."
    ),
    WorkflowStep.REPEAT: "Assess remaining components and acceptance criteria.",
}


def default_template(step: WorkflowStep) -> PromptTemplate:
    """Template used when the host does not supply one for a step."""
    return PromptTemplate(
        role="software delivery agent",
        constraints=(
            "Only claim completion after a passing verification. "
            "Keep tool calls focused."
        ),
        task=STEP_TASKS[step],
    )


# =============================================================================
# ORACLE PROMPT
# =============================================================================

ORACLE_PROMPT = """You are a verification oracle. Review the evidence and decide whether the {scope} meets its acceptance criteria.

Rules:
- Be strict: every acceptance criterion must be met
- If any criterion is not satisfied, the verification fails
- List each unmet criterion as a separate gap
- Respond ONLY with a JSON object in this exact format: {{"pass": true/false, "gaps": ["gap1", "gap2"]}}
- Do not include any text outside the JSON object

## Acceptance Criteria

{criteria}

## Evidence

{evidence}
"""


def render_oracle_prompt(
    scope: VerificationScope, evidence: str, acceptance_criteria: str
) -> str:
    return ORACLE_PROMPT.format(
        scope=scope.value, criteria=acceptance_criteria, evidence=evidence
    )
