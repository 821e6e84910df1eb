"""
Application layer for the delivery control loop.

Contains the step engine, phase gates, verification gate, failure escalation
and the orchestrator that drives them.
"""

from deliveryguard.application.drift import DriftDetector, SpecificationDriftService
from deliveryguard.application.failure_handler import FailureHandler
from deliveryguard.application.oracle import OracleResponse, OracleVerifier, parse_verdict
from deliveryguard.application.orchestrator import Approver, WorkflowOrchestrator
from deliveryguard.application.pause import CancellationToken, PauseController
from deliveryguard.application.phase_controller import PhaseTransitionController
from deliveryguard.application.state_assessor import SpecificationStateAssessor
from deliveryguard.application.step_engine import WorkflowEngine
from deliveryguard.application.tools import TOOL_DEFINITIONS, ToolHandlers, ToolUsage
from deliveryguard.application.verification import CompletionGate, VerificationTracker

__all__ = [
    # State machines
    "WorkflowEngine",
    "PhaseTransitionController",
    "SpecificationStateAssessor",
    # Drift
    "DriftDetector",
    "SpecificationDriftService",
    # Verification
    "VerificationTracker",
    "CompletionGate",
    "OracleVerifier",
    "OracleResponse",
    "parse_verdict",
    # Tools
    "ToolHandlers",
    "ToolUsage",
    "TOOL_DEFINITIONS",
    # Failure and flow control
    "FailureHandler",
    "PauseController",
    "CancellationToken",
    # Orchestration
    "Approver",
    "WorkflowOrchestrator",
]
