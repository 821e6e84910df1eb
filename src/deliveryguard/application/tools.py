"""
Tool handlers bound for the agent.

The verification tools ask the oracle and record the verdict. The status
tool routes completion claims through the completion gate before touching
the work tree. Every handler returns a ToolResult with status "success" or
"error"; gate rejections are results, not exceptions.
"""

import json
import logging
from collections import Counter
from collections.abc import Mapping
from typing import Any

from deliveryguard.application.oracle import OracleVerifier
from deliveryguard.application.step_engine import WorkflowEngine
from deliveryguard.application.verification import CompletionGate, VerificationTracker
from deliveryguard.domain.exceptions import InvalidHierarchy, InvalidStateTransition
from deliveryguard.domain.hierarchy import WorkTree
from deliveryguard.domain.models import (
    NodeKind,
    ToolDefinition,
    ToolResult,
    VerificationScope,
    WorkNodeState,
)

logger = logging.getLogger(__name__)

_EVIDENCE_PARAMS = (
    ("evidence", "What was done and how it was checked"),
    ("acceptance_criteria", "The criteria the work must satisfy"),
)

TOOL_DEFINITIONS: tuple[ToolDefinition, ...] = (
    ToolDefinition(
        name="verify_task_completion",
        description="Ask the verification oracle whether a task meets its acceptance criteria.",
        parameters=(("task_id", "Identifier of the task"), *_EVIDENCE_PARAMS),
        required=("task_id", "evidence", "acceptance_criteria"),
    ),
    ToolDefinition(
        name="verify_component_completion",
        description="Ask the verification oracle whether a component meets its acceptance criteria.",
        parameters=(("component_id", "Identifier of the component"), *_EVIDENCE_PARAMS),
        required=("component_id", "evidence", "acceptance_criteria"),
    ),
    ToolDefinition(
        name="verify_module_completion",
        description="Ask the verification oracle whether a module meets its acceptance criteria.",
        parameters=(("module_id", "Identifier of the module"), *_EVIDENCE_PARAMS),
        required=("module_id", "evidence", "acceptance_criteria"),
    ),
    ToolDefinition(
        name="update_task_status",
        description=(
            "Set the status of a task, component or module "
            "(pending, in_progress, complete, failed). Completing requires a "
            "passing verification."
        ),
        parameters=(
            ("task_id", "Identifier of the node"),
            ("status", "New status"),
        ),
        required=("task_id", "status"),
    ),
    ToolDefinition(
        name="get_current_context",
        description="Report the current workflow step, phase and permitted triggers.",
    ),
)

_SCOPE_FOR_KIND = {
    NodeKind.MODULE: VerificationScope.MODULE,
    NodeKind.COMPONENT: VerificationScope.COMPONENT,
    NodeKind.TASK: VerificationScope.TASK,
    NodeKind.SUBTASK: VerificationScope.TASK,
}

# Host tools whose repetition the tool-discipline guardrail watches
FILE_READ_TOOLS = frozenset({"read_file", "view_file", "read_spec"})
COMMAND_TOOLS = frozenset({"run_command", "run_shell", "execute_command"})


class ToolUsage:
    """Counts tool calls, file reads and command runs within one invocation."""

    def __init__(self) -> None:
        self.call_count = 0
        self._file_reads: Counter[str] = Counter()
        self._commands: Counter[str] = Counter()

    def record(self, name: str, arguments: Mapping[str, Any]) -> None:
        self.call_count += 1
        if name in FILE_READ_TOOLS and arguments.get("path"):
            self._file_reads[str(arguments["path"])] += 1
        elif name in COMMAND_TOOLS and arguments.get("command"):
            self._commands[str(arguments["command"])] += 1

    def file_read_counts(self) -> tuple[tuple[str, int], ...]:
        return tuple(sorted(self._file_reads.items()))

    def command_retry_counts(self) -> tuple[tuple[str, int], ...]:
        return tuple(sorted(self._commands.items()))

    def reset(self) -> None:
        self.call_count = 0
        self._file_reads.clear()
        self._commands.clear()


def _result(status: str, payload: str) -> ToolResult:
    return ToolResult(status=status, payload=payload)


class ToolHandlers:
    """Handlers for the verification and status tools exposed to the agent."""

    def __init__(
        self,
        tracker: VerificationTracker,
        oracle: OracleVerifier,
        gate: CompletionGate | None = None,
        tree: WorkTree | None = None,
        engine: WorkflowEngine | None = None,
    ):
        """
        Args:
            tracker: Where verification verdicts are recorded
            oracle: Verifier consulted by the verify_* tools
            gate: Completion gate (defaults to one over tracker)
            tree: Work tree updated by update_task_status, if any
            engine: Step engine reported by get_current_context, if any
        """
        self._tracker = tracker
        self._oracle = oracle
        self._gate = gate or CompletionGate(tracker)
        self.tree = tree
        self.engine = engine
        self.usage = ToolUsage()

    # -------------------------------------------------------------------------
    # Verification tools
    # -------------------------------------------------------------------------

    def verify_task_completion(
        self, task_id: str, evidence: str, acceptance_criteria: str
    ) -> ToolResult:
        return self._verify(VerificationScope.TASK, task_id, evidence, acceptance_criteria)

    def verify_component_completion(
        self, component_id: str, evidence: str, acceptance_criteria: str
    ) -> ToolResult:
        return self._verify(
            VerificationScope.COMPONENT, component_id, evidence, acceptance_criteria
        )

    def verify_module_completion(
        self, module_id: str, evidence: str, acceptance_criteria: str
    ) -> ToolResult:
        return self._verify(
            VerificationScope.MODULE, module_id, evidence, acceptance_criteria
        )

    def _verify(
        self,
        scope: VerificationScope,
        identifier: str,
        evidence: str,
        acceptance_criteria: str,
    ) -> ToolResult:
        label = scope.value.title()
        if not identifier:
            return _result("error", f"{scope.value}_id is required")
        if not evidence.strip() or not acceptance_criteria.strip():
            # Nothing is recorded: an unverifiable claim never passes
            return _result(
                "error",
                f"{label} '{identifier}': evidence and acceptance_criteria are required",
            )

        verdict = self._oracle.verify(scope, evidence, acceptance_criteria)
        self._tracker.record(scope, identifier, verdict.passed, verdict.gaps)

        if verdict.passed:
            return _result("success", f"{label} '{identifier}' verification passed")
        gaps = "; ".join(verdict.gaps) or "no gaps reported"
        return _result(
            "error", f"{label} '{identifier}' verification failed. Gaps: {gaps}"
        )

    # -------------------------------------------------------------------------
    # Status and context tools
    # -------------------------------------------------------------------------

    def update_task_status(self, task_id: str, status: str) -> ToolResult:
        """
        Set a node's status. "complete" must pass the completion gate.

        Without a work tree the id is gated at task scope and no state is
        stored. With a tree, the node's kind selects the gate scope and the
        transition is applied to the node.
        """
        if not task_id or not status:
            return _result("error", "task_id and status are required")
        try:
            target = WorkNodeState(status.strip().lower())
        except ValueError:
            allowed = ", ".join(s.value for s in WorkNodeState)
            return _result("error", f"Unknown status '{status}'. Use one of: {allowed}")

        scope = VerificationScope.TASK
        if self.tree is not None:
            if task_id not in self.tree:
                return _result("error", f"Unknown task '{task_id}'")
            scope = _SCOPE_FOR_KIND[self.tree.get(task_id).kind]

        if target is WorkNodeState.COMPLETE:
            decision = self._gate.validate_completion(scope, task_id)
            if not decision.allowed:
                return _result("error", decision.reason)

        if self.tree is not None:
            try:
                self.tree.transition(task_id, target)
            except (InvalidStateTransition, InvalidHierarchy) as e:
                return _result("error", f"{scope.value.title()} '{task_id}': {e}")

        logger.info("%s '%s' status updated to %s", scope.value.title(), task_id, target.value)
        return _result(
            "success",
            f"{scope.value.title()} '{task_id}' status updated to '{target.value}'",
        )

    def get_current_context(self) -> ToolResult:
        context: dict[str, Any] = {}
        if self.engine is not None:
            context["module"] = self.engine.module_name
            context["step"] = self.engine.current_step.value
            context["phase"] = self.engine.current_phase.value
            context["permitted_triggers"] = [
                t.value for t in self.engine.permitted_triggers()
            ]
        if self.tree is not None:
            context["nodes"] = {
                root.node_id: self.tree.aggregate_state(root.node_id).value
                for root in self.tree.roots()
            }
        return _result("success", json.dumps(context))

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def definitions(self) -> tuple[ToolDefinition, ...]:
        return TOOL_DEFINITIONS

    def dispatch(self, name: str, arguments: Mapping[str, Any]) -> ToolResult:
        """
        Route a tool call by name. Every call, known or not, is counted.

        Returns:
            The handler's result, or an error result for unknown tools or
            missing arguments
        """
        self.usage.record(name, arguments)
        args = {k: "" if v is None else str(v) for k, v in arguments.items()}

        if name == "verify_task_completion":
            return self.verify_task_completion(
                args.get("task_id", ""),
                args.get("evidence", ""),
                args.get("acceptance_criteria", ""),
            )
        if name == "verify_component_completion":
            return self.verify_component_completion(
                args.get("component_id", ""),
                args.get("evidence", ""),
                args.get("acceptance_criteria", ""),
            )
        if name == "verify_module_completion":
            return self.verify_module_completion(
                args.get("module_id", ""),
                args.get("evidence", ""),
                args.get("acceptance_criteria", ""),
            )
        if name == "update_task_status":
            return self.update_task_status(args.get("task_id", ""), args.get("status", ""))
        if name == "get_current_context":
            return self.get_current_context()
        return _result("error", f"Unknown tool '{name}'")
