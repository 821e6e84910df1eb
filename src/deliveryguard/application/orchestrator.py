"""
WorkflowOrchestrator: the outer control loop for one module.

Each iteration:
    pause point -> reset verification -> guardrails -> drift check ->
    phase gate -> agent invocation -> token accounting ->
    tool-discipline check -> trigger

The step engine owns transitions; this class decides which trigger to fire
and when to hand control back to a human.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import replace

from deliveryguard.application.drift import SpecificationDriftService
from deliveryguard.application.failure_handler import FailureHandler
from deliveryguard.application.oracle import OracleVerifier
from deliveryguard.application.pause import CancellationToken, PauseController
from deliveryguard.application.phase_controller import PhaseTransitionController
from deliveryguard.application.state_assessor import SpecificationStateAssessor
from deliveryguard.application.step_engine import WorkflowEngine
from deliveryguard.application.tools import ToolHandlers
from deliveryguard.application.verification import CompletionGate, VerificationTracker
from deliveryguard.config import DeliveryGuardConfig
from deliveryguard.domain.exceptions import AgentInvocationError, OperationCancelled
from deliveryguard.domain.hierarchy import WorkNode, WorkTree
from deliveryguard.domain.interfaces import (
    AgentInterface,
    SpecificationStoreInterface,
    TokenTrackerInterface,
)
from deliveryguard.domain.models import (
    FailureAction,
    GuardrailContext,
    NodeKind,
    OrchestrationResult,
    OrchestrationStatus,
    StepResult,
    WorkflowPhase,
    WorkflowStep,
    WorkflowTrigger,
    WorkNodeState,
)
from deliveryguard.domain.prompts import PromptTemplate, default_template
from deliveryguard.domain.workflow import STEP_COMPLETION_TRIGGERS
from deliveryguard.guardrails import (
    ChurnDetectionGuardrail,
    GuardrailPipeline,
    ToolDisciplineGuardrail,
)

logger = logging.getLogger(__name__)

# Called at the human gate; must call approve() or reset() on the controller
Approver = Callable[[str, PhaseTransitionController], bool]


class WorkflowOrchestrator:
    """
    Drives one module through the workflow until it completes or stops.

    Example:
        orchestrator = WorkflowOrchestrator(agent, store, InMemoryTokenTracker())
        result = orchestrator.run("auth")
        if not result.is_complete:
            print(result.reason)
    """

    def __init__(
        self,
        agent: AgentInterface,
        store: SpecificationStoreInterface,
        token_tracker: TokenTrackerInterface,
        config: DeliveryGuardConfig | None = None,
        tree: WorkTree | None = None,
        approver: Approver | None = None,
        pause: PauseController | None = None,
        oracle_agent: AgentInterface | None = None,
        templates: Mapping[WorkflowStep, PromptTemplate] | None = None,
    ):
        """
        Args:
            agent: Worker agent invoked at every step
            store: Read-only module specifications
            token_tracker: Session usage, read by the resource guardrail
            config: Thresholds and models (defaults when omitted)
            tree: Work breakdown for the module; enables tree-based progress
            approver: Human gate for RequirementGathering -> Planning
            pause: Shared pause controller
            oracle_agent: Agent used for verification (defaults to agent)
            templates: Prompt template per step (defaults per step)
        """
        self.config = config or DeliveryGuardConfig()
        self._agent = agent
        self._store = store
        self._token_tracker = token_tracker
        self._approver = approver
        self._templates = dict(templates or {})

        self.tree = tree
        self.pause = pause or PauseController()
        self.phases = PhaseTransitionController()
        self.drift_service = SpecificationDriftService(store)
        self.assessor = SpecificationStateAssessor(store)
        self.engine = WorkflowEngine(self.assessor)
        self.tracker = VerificationTracker()
        self.gate = CompletionGate(self.tracker)
        self.oracle = OracleVerifier(oracle_agent or agent, self.config.oracle.model)
        self.handlers = ToolHandlers(
            self.tracker, self.oracle, self.gate, tree=tree, engine=self.engine
        )
        self.failure_handler = FailureHandler(self.config.failure.failure_threshold)
        self.pipeline = GuardrailPipeline.from_config(
            self.config, token_tracker, self.tracker
        )
        self._tool_discipline = next(
            g for g in self.pipeline.guardrails if isinstance(g, ToolDisciplineGuardrail)
        )

        self._iterations = 0
        self._feedback: list[str] = []

    @property
    def iterations(self) -> int:
        return self._iterations

    # -------------------------------------------------------------------------
    # Outer loop
    # -------------------------------------------------------------------------

    def run(
        self, module_name: str, token: CancellationToken | None = None
    ) -> OrchestrationResult:
        """
        Run the loop for a module.

        Returns:
            OrchestrationResult: completed, interrupted (guardrail block,
            human gate, repeated failure, iteration limit), cancelled, or
            critical error
        """
        if not module_name:
            raise ValueError("module_name must be non-empty")

        self._iterations = 0
        self._feedback.clear()
        self.engine.initialize(module_name)
        logger.info(
            "Starting orchestration for '%s' at step %s",
            module_name,
            self.engine.current_step.value,
        )

        while self._iterations < self.config.workflow.max_iterations:
            try:
                self.pause.wait_if_paused(token)
            except OperationCancelled:
                return self._finish(OrchestrationStatus.CANCELLED, "Cancelled")

            if self.is_module_complete(module_name):
                logger.info(
                    "Module '%s' complete after %d iterations",
                    module_name,
                    self._iterations,
                )
                return self._finish(OrchestrationStatus.COMPLETED)

            try:
                step_result = self.run_step(module_name)
            except OSError as e:
                return self._critical(f"I/O failure in module '{module_name}': {e}")
            except Exception as e:
                logger.exception("Unexpected fault in module '%s'", module_name)
                return self._critical(f"System fault in module '{module_name}': {e}")

            if not step_result.success:
                failure = step_result.failure
                if failure is not None and failure.action is FailureAction.SELF_CORRECT:
                    self._feedback.append(failure.message)
                    continue
                if failure is not None and failure.action is FailureAction.BLOCK:
                    return self._finish(
                        OrchestrationStatus.CRITICAL_ERROR, step_result.summary
                    )
                logger.warning(
                    "Step %s failed: %s",
                    self.engine.current_step.value,
                    step_result.summary,
                )
                return self._finish(OrchestrationStatus.INTERRUPTED, step_result.summary)

            if step_result.requires_user_confirmation:
                if not self._request_approval(module_name):
                    return self._finish(
                        OrchestrationStatus.INTERRUPTED, "User confirmation required"
                    )
                continue

            if step_result.next_trigger is not None:
                if self.engine.fire(step_result.next_trigger):
                    self.assessor.persist_step(module_name, self.engine.current_step)

        return self._finish(
            OrchestrationStatus.INTERRUPTED,
            f"Reached the iteration limit ({self.config.workflow.max_iterations})",
        )

    def _request_approval(self, module_name: str) -> bool:
        if self._approver is None:
            return False
        self._approver(module_name, self.phases)
        return self.phases.is_planning_approved

    def _finish(self, status: OrchestrationStatus, reason: str = "") -> OrchestrationResult:
        return OrchestrationResult(
            status=status,
            iterations=self._iterations,
            final_step=self.engine.current_step,
            reason=reason,
        )

    def _critical(self, message: str) -> OrchestrationResult:
        classification = self.failure_handler.record_critical_error(message)
        return self._finish(OrchestrationStatus.CRITICAL_ERROR, classification.message)

    # -------------------------------------------------------------------------
    # One iteration
    # -------------------------------------------------------------------------

    def run_step(self, module_name: str) -> StepResult:
        """Run a single iteration at the engine's current step."""
        self._iterations += 1
        step = self.engine.current_step
        phase = self.engine.current_phase
        logger.debug(
            "Iteration %d: step=%s, phase=%s", self._iterations, step.value, phase.value
        )

        # A pass recorded in an earlier invocation must not satisfy a new claim
        self.tracker.reset()
        self.handlers.usage.reset()

        task = self.current_task(module_name)
        subject = task.node_id if task is not None else module_name
        context = GuardrailContext(
            module_name=module_name,
            task_name=task.node_id if task is not None else None,
            attempt_number=self.failure_handler.get_failure_count(subject) + 1,
        )
        guardrail = self.pipeline.evaluate(context)
        if guardrail.is_block:
            return StepResult(False, summary=f"Blocked by guardrail: {guardrail.message}")
        if guardrail.is_warn:
            self._feedback.append(guardrail.message)

        for drift in self.drift_service.check_drift(module_name):
            self._feedback.append(
                f"Specification section '{drift.header}' was {drift.change}."
            )

        if step is WorkflowStep.DRAFT_SPECIFICATION:
            if self.phases.is_planning_approved:
                self._record_success(subject)
                return StepResult(
                    True, WorkflowTrigger.SPEC_APPROVED, "Specification approved"
                )
            drafted = self._invoke(module_name, step, phase, context, subject)
            if not drafted.success:
                return drafted
            return StepResult(
                True,
                summary="Specification drafted. Review and approve to continue.",
                requires_user_confirmation=True,
            )

        component = self.current_component(module_name)
        progress = self.assessor.checklist_progress(module_name)

        invoked = self._invoke(module_name, step, phase, context, subject)
        if not invoked.success:
            return invoked

        if self._step_done(module_name, step, component, progress):
            return replace(invoked, next_trigger=STEP_COMPLETION_TRIGGERS[step])
        return invoked

    def _invoke(
        self,
        module_name: str,
        step: WorkflowStep,
        phase: WorkflowPhase,
        context: GuardrailContext,
        subject: str,
    ) -> StepResult:
        template = self._templates.get(step) or default_template(step)
        prompt = template.render(module_name, step, tuple(self._feedback))
        self._feedback.clear()

        try:
            result = self._agent.invoke(
                prompt, self.model_for(phase), self.handlers.definitions()
            )
        except AgentInvocationError as e:
            logger.error("Agent invocation failed at step %s: %s", step.value, e)
            classification = self.failure_handler.record_failure(subject, str(e))
            return StepResult(
                False, summary=classification.message, failure=classification
            )

        self._token_tracker.record_usage(result.token_usage)
        logger.info(
            "Agent invocation complete: %d tokens, %d tool calls",
            result.token_usage.total_tokens,
            result.tool_calls_made,
        )

        usage = self.handlers.usage
        discipline = self._tool_discipline(
            replace(
                context,
                tool_call_count=max(result.tool_calls_made, usage.call_count),
                file_read_counts=usage.file_read_counts(),
                command_retry_counts=usage.command_retry_counts(),
            )
        )
        if discipline.is_warn:
            logger.warning("Tool discipline: %s", discipline.message)
            self._feedback.append(discipline.message)

        self._record_success(subject)
        return StepResult(True, summary=result.output)

    def _record_success(self, subject: str) -> None:
        self.failure_handler.record_success(subject)
        for guardrail in self.pipeline.guardrails:
            if isinstance(guardrail, ChurnDetectionGuardrail):
                guardrail.record_success(subject)

    def _step_done(
        self,
        module_name: str,
        step: WorkflowStep,
        component: WorkNode | None,
        progress_before: tuple[int, int],
    ) -> bool:
        """Whether the invocation just made finished the current step."""
        if step is WorkflowStep.BREAK_INTO_TASKS:
            identified, broken_down = self.planning_facts(module_name)
            if not self.phases.can_transition_to_building(identified, broken_down):
                logger.info("Planning for '%s' not structurally complete yet", module_name)
                return False
            logger.info("Planning for '%s' complete: entering Building", module_name)
            return True

        if step is WorkflowStep.ITERATE_THROUGH_TASKS:
            if self.module_root(module_name) is not None and self.tree is not None:
                return component is None or (
                    self.tree.aggregate_state(component.node_id)
                    is WorkNodeState.COMPLETE
                )
            # Without a tree, a component is done once the checklist moved
            total, completed = self.assessor.checklist_progress(module_name)
            return completed > progress_before[1] or (total > 0 and completed == total)

        if step is WorkflowStep.REPEAT:
            return self.has_more_components(module_name)

        return True

    # -------------------------------------------------------------------------
    # Progress facts
    # -------------------------------------------------------------------------

    def model_for(self, phase: WorkflowPhase) -> str:
        models = self.config.models
        if phase is WorkflowPhase.REQUIREMENT_GATHERING:
            return models.requirement_gathering
        if phase is WorkflowPhase.PLANNING:
            return models.planning
        return models.building

    def module_root(self, module_name: str) -> WorkNode | None:
        if self.tree is None:
            return None
        for root in self.tree.roots():
            if root.node_id == module_name or root.name.casefold() == module_name.casefold():
                return root
        return None

    def current_component(self, module_name: str) -> WorkNode | None:
        """First component of the module that is not yet complete."""
        root = self.module_root(module_name)
        if root is None or self.tree is None:
            return None
        for component in self.tree.children(root.node_id):
            if self.tree.aggregate_state(component.node_id) is not WorkNodeState.COMPLETE:
                return component
        return None

    def current_task(self, module_name: str) -> WorkNode | None:
        """First unfinished task or subtask of the current component."""
        component = self.current_component(module_name)
        if component is None or self.tree is None:
            return None
        for leaf in self.tree.leaves(component.node_id):
            if leaf.kind is not NodeKind.COMPONENT and leaf.state is not WorkNodeState.COMPLETE:
                return leaf
        return None

    def planning_facts(self, module_name: str) -> tuple[bool, bool]:
        """(components identified, every component broken into tasks)."""
        root = self.module_root(module_name)
        if root is None or self.tree is None:
            # Without a tree the agent's own step completion is trusted
            return True, True
        components = self.tree.children(root.node_id)
        identified = bool(components)
        broken_down = identified and all(not c.is_leaf for c in components)
        return identified, broken_down

    def has_more_components(self, module_name: str) -> bool:
        if self.module_root(module_name) is None:
            return self.assessor.has_more_components(module_name)
        return self.current_component(module_name) is not None

    def is_module_complete(self, module_name: str) -> bool:
        """Building -> Complete gate, evaluated at Repeat."""
        if self.engine.current_step is not WorkflowStep.REPEAT:
            return False
        total, completed = self.assessor.checklist_progress(module_name)
        criteria_passed = total > 0 and completed == total
        root = self.module_root(module_name)
        if root is None or self.tree is None:
            components_built = criteria_passed
        else:
            components_built = (
                self.tree.aggregate_state(root.node_id) is WorkNodeState.COMPLETE
            )
        return self.phases.can_transition_to_complete(components_built, criteria_passed)
