"""
Domain models for the delivery control loop.

These are pure data structures shared by every layer. Value objects are
immutable (frozen dataclasses) so they can be passed between the guardrails,
the verification gate and the orchestrator without defensive copying.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum

# =============================================================================
# TASK HIERARCHY
# =============================================================================


class WorkNodeState(Enum):
    """Lifecycle state of a node in the work breakdown tree."""

    PENDING = "pending"  # Identified, not started
    IN_PROGRESS = "in_progress"  # Being worked on (or being retried)
    COMPLETE = "complete"  # Done and verified
    FAILED = "failed"  # Attempt failed, may be retried


class NodeKind(Enum):
    """Level of a node in the work breakdown tree, coarsest first."""

    MODULE = "module"
    COMPONENT = "component"
    TASK = "task"
    SUBTASK = "subtask"

    @property
    def child_kind(self) -> "NodeKind | None":
        """The only kind a node of this kind may own (None for leaves)."""
        return _CHILD_KINDS[self]


_CHILD_KINDS: dict[NodeKind, NodeKind | None] = {
    NodeKind.MODULE: NodeKind.COMPONENT,
    NodeKind.COMPONENT: NodeKind.TASK,
    NodeKind.TASK: NodeKind.SUBTASK,
    NodeKind.SUBTASK: None,
}


# =============================================================================
# WORKFLOW
# =============================================================================


class WorkflowPhase(Enum):
    """Macro phase of a module's delivery."""

    REQUIREMENT_GATHERING = "requirement_gathering"
    PLANNING = "planning"
    BUILDING = "building"
    COMPLETE = "complete"


class WorkflowStep(Enum):
    """The seven steps of the per-module development cycle, in order."""

    DRAFT_SPECIFICATION = "draft_specification"
    DETERMINE_DEPENDENCIES = "determine_dependencies"
    IDENTIFY_COMPONENTS = "identify_components"
    SELECT_NEXT_COMPONENT = "select_next_component"
    BREAK_INTO_TASKS = "break_into_tasks"
    ITERATE_THROUGH_TASKS = "iterate_through_tasks"
    REPEAT = "repeat"


class WorkflowTrigger(Enum):
    """Events that advance the step engine. Each is valid from exactly one step."""

    SPEC_APPROVED = "spec_approved"
    DEPENDENCIES_DETERMINED = "dependencies_determined"
    COMPONENTS_IDENTIFIED = "components_identified"
    COMPONENT_SELECTED = "component_selected"
    TASKS_BROKEN_DOWN = "tasks_broken_down"
    COMPONENT_COMPLETE = "component_complete"


@dataclass(frozen=True)
class StepAssessment:
    """Step recomputed from persisted artifacts, plus the evidence behind it."""

    module_name: str
    step: WorkflowStep
    total_items: int = 0  # Checklist items in the specification
    completed_items: int = 0
    drift: tuple["DriftResult", ...] = ()


# =============================================================================
# GUARDRAILS
# =============================================================================


class VerificationScope(Enum):
    """Granularity at which a completion claim is verified."""

    TASK = "task"
    COMPONENT = "component"
    MODULE = "module"


class GuardrailSeverity(IntEnum):
    """Ordered severity; the pipeline keeps the maximum."""

    PASS = 0
    WARN = 1
    BLOCK = 2


@dataclass(frozen=True)
class GuardrailContext:
    """Immutable snapshot evaluated by every guardrail. Built fresh per evaluation."""

    module_name: str
    task_name: str | None = None
    attempt_number: int = 1  # 1-based, per task
    tool_call_count: int = 0  # Within the current agent invocation
    completion_scope: VerificationScope | None = None  # Set at a completion boundary
    file_read_counts: tuple[tuple[str, int], ...] = ()
    command_retry_counts: tuple[tuple[str, int], ...] = ()

    @property
    def subject(self) -> str:
        """Most specific unit this context is about."""
        return self.task_name or self.module_name


@dataclass(frozen=True)
class GuardrailResult:
    """Outcome of a guardrail: Pass, Warn(message) or Block(message)."""

    severity: GuardrailSeverity
    message: str = ""

    @classmethod
    def passed(cls) -> "GuardrailResult":
        return cls(GuardrailSeverity.PASS)

    @classmethod
    def warn(cls, message: str) -> "GuardrailResult":
        return cls(GuardrailSeverity.WARN, message)

    @classmethod
    def block(cls, message: str) -> "GuardrailResult":
        return cls(GuardrailSeverity.BLOCK, message)

    @property
    def is_pass(self) -> bool:
        return self.severity is GuardrailSeverity.PASS

    @property
    def is_warn(self) -> bool:
        return self.severity is GuardrailSeverity.WARN

    @property
    def is_block(self) -> bool:
        return self.severity is GuardrailSeverity.BLOCK


# =============================================================================
# VERIFICATION
# =============================================================================


@dataclass(frozen=True)
class VerificationRecord:
    """Most recent verification outcome for one (scope, id)."""

    scope: VerificationScope
    identifier: str
    passed: bool
    gaps: tuple[str, ...] = ()
    recorded_at: str = ""  # ISO timestamp


@dataclass(frozen=True)
class OracleVerdict:
    """Parsed oracle response. Anything unparseable becomes passed=False."""

    scope: VerificationScope
    passed: bool
    gaps: tuple[str, ...] = ()


@dataclass(frozen=True)
class GateDecision:
    """Whether a completion-status update may proceed."""

    allowed: bool
    reason: str = ""


@dataclass(frozen=True)
class ToolResult:
    """Result returned to the agent from a bound tool handler."""

    status: str  # "success" or "error"
    payload: str

    @property
    def ok(self) -> bool:
        return self.status == "success"


# =============================================================================
# FAILURE ESCALATION
# =============================================================================


class FailureSeverity(Enum):
    """Severity of a recorded failure, least to most severe."""

    WARNING = "warning"  # Informational only
    TASK_FAILURE = "task_failure"  # Agent may self-correct
    REPEATED_FAILURE = "repeated_failure"  # Threshold reached, hand to a human
    CRITICAL = "critical"  # System fault, halt the loop


class FailureAction(Enum):
    """Action the caller should take for a failure."""

    SELF_CORRECT = "self_correct"
    PROMPT_USER = "prompt_user"
    BLOCK = "block"


@dataclass(frozen=True)
class FailureClassification:
    """Classification returned by the failure handler."""

    severity: FailureSeverity
    action: FailureAction
    message: str
    task_id: str | None = None
    consecutive_failures: int = 0


# =============================================================================
# SPECIFICATION DOCUMENTS
# =============================================================================


@dataclass(frozen=True)
class ModuleInfo:
    """A module discovered in the specification store."""

    name: str
    specification_path: str
    has_specification: bool


@dataclass(frozen=True)
class DocumentSection:
    """A headed section of a markdown specification."""

    header: str
    level: int
    content: str


@dataclass(frozen=True)
class CachedSection:
    """Section content and hash as last seen by the drift detector."""

    document_id: str
    header: str
    content: str
    content_hash: str
    captured_at: str  # ISO timestamp


@dataclass(frozen=True)
class DriftResult:
    """A section whose content changed, appeared or disappeared since caching."""

    header: str
    previous_hash: str | None
    current_hash: str | None
    is_new: bool = False
    is_removed: bool = False

    @property
    def change(self) -> str:
        if self.is_new:
            return "added"
        if self.is_removed:
            return "removed"
        return "changed"


# =============================================================================
# AGENT CONTRACT
# =============================================================================


@dataclass(frozen=True)
class ToolDefinition:
    """A tool exposed to the agent (JSON-schema parameters)."""

    name: str
    description: str
    parameters: tuple[tuple[str, str], ...] = ()  # (name, description), all strings
    required: tuple[str, ...] = ()


@dataclass(frozen=True)
class TokenUsage:
    """Tokens consumed by one agent invocation."""

    input_tokens: int = 0
    output_tokens: int = 0
    is_premium: bool = True  # Counts against the premium-request budget

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


@dataclass(frozen=True)
class SessionMetrics:
    """Cumulative usage for the current run."""

    input_tokens: int = 0
    output_tokens: int = 0
    premium_request_count: int = 0
    invocation_count: int = 0


@dataclass(frozen=True)
class AgentInvocationResult:
    """What the external agent returns for one invocation."""

    output: str
    token_usage: TokenUsage = TokenUsage()
    tool_calls_made: int = 0
    is_complete: bool = False


# =============================================================================
# ORCHESTRATION
# =============================================================================


class OrchestrationStatus(Enum):
    """How a control-loop run ended."""

    COMPLETED = "completed"
    INTERRUPTED = "interrupted"  # Guardrail block, human gate, repeated failure
    CANCELLED = "cancelled"
    CRITICAL_ERROR = "critical_error"


@dataclass(frozen=True)
class StepResult:
    """Outcome of one orchestrator iteration."""

    success: bool
    next_trigger: WorkflowTrigger | None = None
    summary: str = ""
    requires_user_confirmation: bool = False
    failure: FailureClassification | None = None


@dataclass(frozen=True)
class OrchestrationResult:
    """Outcome of a full control-loop run for one module."""

    status: OrchestrationStatus
    iterations: int
    final_step: WorkflowStep
    reason: str = ""

    @property
    def is_complete(self) -> bool:
        return self.status is OrchestrationStatus.COMPLETED
