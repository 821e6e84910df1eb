"""
Macro phase gate: RequirementGathering -> Planning -> Building -> Complete.

Only the first transition holds state (a human approval). The other two are
predicates over facts the caller computes from the specification, the work
tree and the verification tracker; the controller inspects nothing itself.
"""

import logging

from deliveryguard.domain.models import WorkflowPhase

logger = logging.getLogger(__name__)


class PhaseTransitionController:
    """Human and automatic gates between workflow phases."""

    def __init__(self) -> None:
        self._planning_approved = False

    @property
    def is_planning_approved(self) -> bool:
        return self._planning_approved

    def approve(self) -> None:
        """Record the human approval of the specification."""
        self._planning_approved = True
        logger.info("Specification approved: Planning unlocked")

    def reset(self) -> None:
        """Revoke the approval."""
        self._planning_approved = False
        logger.debug("Specification approval reset")

    def can_transition_to_planning(self) -> bool:
        return self._planning_approved

    def can_transition_to_building(
        self, components_identified: bool, tasks_broken_down: bool
    ) -> bool:
        return components_identified and tasks_broken_down

    def can_transition_to_complete(
        self, all_components_built: bool, all_criteria_passed: bool
    ) -> bool:
        return all_components_built and all_criteria_passed

    def can_transition(
        self,
        target: WorkflowPhase,
        components_identified: bool = False,
        tasks_broken_down: bool = False,
        all_components_built: bool = False,
        all_criteria_passed: bool = False,
    ) -> bool:
        """Evaluate the gate guarding entry to target."""
        if target is WorkflowPhase.PLANNING:
            return self.can_transition_to_planning()
        if target is WorkflowPhase.BUILDING:
            return self.can_transition_to_building(
                components_identified, tasks_broken_down
            )
        if target is WorkflowPhase.COMPLETE:
            return self.can_transition_to_complete(
                all_components_built, all_criteria_passed
            )
        # RequirementGathering is the entry phase; nothing gates it
        return True
