"""
Domain layer for the delivery control loop.

Contains core rules and value objects with no external dependencies.
"""

from deliveryguard.domain.exceptions import (
    AgentInvocationError,
    DeliveryGuardError,
    InvalidHierarchy,
    InvalidStateTransition,
    InvalidTrigger,
    OperationCancelled,
)
from deliveryguard.domain.hierarchy import WorkNode, WorkTree
from deliveryguard.domain.interfaces import (
    AgentInterface,
    SpecificationStoreInterface,
    TokenTrackerInterface,
)
from deliveryguard.domain.models import (
    AgentInvocationResult,
    CachedSection,
    DocumentSection,
    DriftResult,
    FailureAction,
    FailureClassification,
    FailureSeverity,
    GateDecision,
    GuardrailContext,
    GuardrailResult,
    GuardrailSeverity,
    ModuleInfo,
    NodeKind,
    OracleVerdict,
    OrchestrationResult,
    OrchestrationStatus,
    SessionMetrics,
    StepAssessment,
    StepResult,
    TokenUsage,
    ToolDefinition,
    ToolResult,
    VerificationRecord,
    VerificationScope,
    WorkflowPhase,
    WorkflowStep,
    WorkflowTrigger,
    WorkNodeState,
)
from deliveryguard.domain.prompts import PromptTemplate

__all__ = [
    # Models
    "AgentInvocationResult",
    "CachedSection",
    "DocumentSection",
    "DriftResult",
    "FailureAction",
    "FailureClassification",
    "FailureSeverity",
    "GateDecision",
    "GuardrailContext",
    "GuardrailResult",
    "GuardrailSeverity",
    "ModuleInfo",
    "NodeKind",
    "OracleVerdict",
    "OrchestrationResult",
    "OrchestrationStatus",
    "SessionMetrics",
    "StepAssessment",
    "StepResult",
    "TokenUsage",
    "ToolDefinition",
    "ToolResult",
    "VerificationRecord",
    "VerificationScope",
    "WorkflowPhase",
    "WorkflowStep",
    "WorkflowTrigger",
    "WorkNodeState",
    # Work tree
    "WorkNode",
    "WorkTree",
    # Prompts
    "PromptTemplate",
    # Interfaces
    "AgentInterface",
    "SpecificationStoreInterface",
    "TokenTrackerInterface",
    # Exceptions
    "DeliveryGuardError",
    "InvalidStateTransition",
    "InvalidTrigger",
    "InvalidHierarchy",
    "AgentInvocationError",
    "OperationCancelled",
]
