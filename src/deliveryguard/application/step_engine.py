"""
Per-module workflow step engine.

Consumes triggers against the step transition table. A trigger that is not
permitted from the current step is rejected and the step stays unchanged.
"""

import logging

from deliveryguard.application.state_assessor import SpecificationStateAssessor
from deliveryguard.domain.exceptions import InvalidTrigger
from deliveryguard.domain.models import WorkflowPhase, WorkflowStep, WorkflowTrigger
from deliveryguard.domain.workflow import next_step, permitted_triggers, phase_for_step

logger = logging.getLogger(__name__)


class WorkflowEngine:
    """
    Strict linear-then-cyclic step machine for one module.

    Starts at DraftSpecification. Use initialize() to resume from the step
    recomputed by the assessor instead of from a persisted pointer.
    """

    def __init__(
        self,
        assessor: SpecificationStateAssessor | None = None,
        initial_step: WorkflowStep = WorkflowStep.DRAFT_SPECIFICATION,
    ):
        """
        Args:
            assessor: Used by initialize() to recover the current step
            initial_step: Step to start from when not initialized
        """
        self._assessor = assessor
        self._step = initial_step
        self._module_name: str | None = None

    @property
    def current_step(self) -> WorkflowStep:
        return self._step

    @property
    def current_phase(self) -> WorkflowPhase:
        return phase_for_step(self._step)

    @property
    def module_name(self) -> str | None:
        return self._module_name

    def initialize(self, module_name: str) -> WorkflowStep:
        """
        Set the current step from the module's persisted artifacts.

        Raises:
            RuntimeError: If the engine has no assessor
        """
        if self._assessor is None:
            raise RuntimeError("WorkflowEngine.initialize() requires an assessor")
        self._module_name = module_name
        self._step = self._assessor.get_current_step(module_name)
        logger.info("Module '%s' resumes at step %s", module_name, self._step.value)
        return self._step

    def permitted_triggers(self) -> list[WorkflowTrigger]:
        return permitted_triggers(self._step)

    def can_fire(self, trigger: WorkflowTrigger) -> bool:
        return next_step(self._step, trigger) is not None

    def fire(self, trigger: WorkflowTrigger) -> bool:
        """
        Apply a trigger.

        Returns:
            True if the step advanced, False if the trigger was rejected
        """
        target = next_step(self._step, trigger)
        if target is None:
            logger.warning(
                "Trigger %s rejected at step %s", trigger.value, self._step.value
            )
            return False

        logger.info(
            "Step %s -> %s (%s)", self._step.value, target.value, trigger.value
        )
        self._step = target
        return True

    def advance(self, trigger: WorkflowTrigger) -> WorkflowStep:
        """
        Apply a trigger, raising instead of returning False.

        Raises:
            InvalidTrigger: If the trigger is not permitted from the current step
        """
        if not self.fire(trigger):
            raise InvalidTrigger(self._step, trigger)
        return self._step
