"""Tests for PhaseTransitionController."""

import pytest

from deliveryguard.application.phase_controller import PhaseTransitionController
from deliveryguard.domain.models import WorkflowPhase


class TestPlanningGate:
    """RequirementGathering -> Planning needs a human approval."""

    def test_not_approved_initially(self):
        controller = PhaseTransitionController()
        assert not controller.is_planning_approved
        assert not controller.can_transition_to_planning()

    def test_approve_then_reset(self):
        controller = PhaseTransitionController()
        controller.approve()
        assert controller.can_transition_to_planning()
        controller.reset()
        assert not controller.can_transition_to_planning()


class TestAutomaticGates:
    @pytest.mark.parametrize(
        "identified,broken_down,expected",
        [(True, True, True), (True, False, False), (False, True, False), (False, False, False)],
    )
    def test_building_gate(self, identified, broken_down, expected):
        controller = PhaseTransitionController()
        assert controller.can_transition_to_building(identified, broken_down) is expected

    @pytest.mark.parametrize(
        "built,passed,expected",
        [(True, True, True), (True, False, False), (False, True, False)],
    )
    def test_complete_gate(self, built, passed, expected):
        controller = PhaseTransitionController()
        assert controller.can_transition_to_complete(built, passed) is expected


class TestCanTransition:
    def test_dispatches_on_target(self):
        controller = PhaseTransitionController()
        assert not controller.can_transition(WorkflowPhase.PLANNING)
        assert controller.can_transition(
            WorkflowPhase.BUILDING, components_identified=True, tasks_broken_down=True
        )
        assert not controller.can_transition(
            WorkflowPhase.COMPLETE, all_components_built=True
        )
        assert controller.can_transition(WorkflowPhase.REQUIREMENT_GATHERING)
