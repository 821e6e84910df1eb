"""
DeliveryGuard: guardrails and verification gates for autonomous delivery loops.

Walks an external LLM-backed agent through Requirement Gathering, Planning,
Building and Complete for a module, while refusing completion claims that
lack a passing oracle verification and throttling runaway resource use,
repeated failures and wasteful tool usage.

Example:
    from deliveryguard import WorkflowOrchestrator
    from deliveryguard.infrastructure import (
        ConsoleApprover,
        FilesystemSpecificationStore,
        InMemoryTokenTracker,
        OllamaAgent,
    )

    store = FilesystemSpecificationStore(".")
    agent = OllamaAgent()
    orchestrator = WorkflowOrchestrator(
        agent, store, InMemoryTokenTracker(), approver=ConsoleApprover(store)
    )
    agent.tool_executor = orchestrator.handlers.dispatch
    result = orchestrator.run("auth")
"""

# Application layer (orchestration)
from deliveryguard.application import (
    CancellationToken,
    CompletionGate,
    DriftDetector,
    FailureHandler,
    OracleVerifier,
    PauseController,
    PhaseTransitionController,
    SpecificationDriftService,
    SpecificationStateAssessor,
    ToolHandlers,
    VerificationTracker,
    WorkflowEngine,
    WorkflowOrchestrator,
)

# Configuration
from deliveryguard.config import DeliveryGuardConfig, load_config

# Domain exceptions
from deliveryguard.domain.exceptions import (
    AgentInvocationError,
    DeliveryGuardError,
    InvalidHierarchy,
    InvalidStateTransition,
    InvalidTrigger,
    OperationCancelled,
)

# Domain interfaces (for type hints and custom implementations)
from deliveryguard.domain.interfaces import (
    AgentInterface,
    SpecificationStoreInterface,
    TokenTrackerInterface,
)

# Domain models (most commonly used)
from deliveryguard.domain.hierarchy import WorkNode, WorkTree
from deliveryguard.domain.models import (
    FailureAction,
    FailureSeverity,
    GuardrailContext,
    GuardrailResult,
    GuardrailSeverity,
    NodeKind,
    OrchestrationResult,
    OrchestrationStatus,
    VerificationScope,
    WorkflowPhase,
    WorkflowStep,
    WorkflowTrigger,
    WorkNodeState,
)
from deliveryguard.domain.prompts import PromptTemplate

# Guardrails
from deliveryguard.guardrails import (
    ChurnDetectionGuardrail,
    GuardrailPipeline,
    QualityGateGuardrail,
    ResourceLimitGuardrail,
    ToolDisciplineGuardrail,
)

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Application
    "WorkflowOrchestrator",
    "WorkflowEngine",
    "PhaseTransitionController",
    "SpecificationStateAssessor",
    "DriftDetector",
    "SpecificationDriftService",
    "VerificationTracker",
    "CompletionGate",
    "OracleVerifier",
    "ToolHandlers",
    "FailureHandler",
    "PauseController",
    "CancellationToken",
    # Configuration
    "DeliveryGuardConfig",
    "load_config",
    # Guardrails
    "GuardrailPipeline",
    "ResourceLimitGuardrail",
    "ChurnDetectionGuardrail",
    "QualityGateGuardrail",
    "ToolDisciplineGuardrail",
    # Domain models
    "WorkNode",
    "WorkTree",
    "WorkNodeState",
    "NodeKind",
    "WorkflowPhase",
    "WorkflowStep",
    "WorkflowTrigger",
    "GuardrailContext",
    "GuardrailResult",
    "GuardrailSeverity",
    "VerificationScope",
    "FailureSeverity",
    "FailureAction",
    "OrchestrationResult",
    "OrchestrationStatus",
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
