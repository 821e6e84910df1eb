"""
Domain exceptions for the delivery control loop.

These represent rule violations that the caller must handle by re-deriving
state. Verification mismatches are deliberately absent: they are reported as
rejected tool results, not raised.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from deliveryguard.domain.models import (
        WorkflowStep,
        WorkflowTrigger,
        WorkNodeState,
    )


class DeliveryGuardError(Exception):
    """Base class for all deliveryguard errors."""


class InvalidStateTransition(DeliveryGuardError):
    """
    Raised when a work node is asked to move to a state its current state
    does not permit.

    The node's state is left unchanged.
    """

    def __init__(self, current: "WorkNodeState", target: "WorkNodeState"):
        """
        Args:
            current: State the node is in
            target: State that was requested
        """
        super().__init__(f"Cannot transition from {current.value} to {target.value}")
        self.current = current
        self.target = target


class InvalidTrigger(DeliveryGuardError):
    """Raised by strict step-engine firing when a trigger is out of order."""

    def __init__(self, step: "WorkflowStep", trigger: "WorkflowTrigger"):
        super().__init__(
            f"Trigger {trigger.value} is not permitted from step {step.value}"
        )
        self.step = step
        self.trigger = trigger


class InvalidHierarchy(DeliveryGuardError):
    """Raised when a node cannot be attached where it was requested."""


class AgentInvocationError(DeliveryGuardError):
    """
    Raised by agent adapters when the external agent call fails.

    The orchestrator routes this through the failure handler rather than
    halting immediately.
    """


class OperationCancelled(DeliveryGuardError):
    """Raised when a cooperative wait is interrupted by cancellation."""
