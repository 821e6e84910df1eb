"""Tests for the step transition table."""

import itertools

import pytest

from deliveryguard.domain.models import WorkflowPhase, WorkflowStep, WorkflowTrigger
from deliveryguard.domain.workflow import (
    STEP_COMPLETION_TRIGGERS,
    STEP_TRANSITIONS,
    next_step,
    permitted_triggers,
    phase_for_step,
)

CANONICAL = [
    (WorkflowTrigger.SPEC_APPROVED, WorkflowStep.DETERMINE_DEPENDENCIES),
    (WorkflowTrigger.DEPENDENCIES_DETERMINED, WorkflowStep.IDENTIFY_COMPONENTS),
    (WorkflowTrigger.COMPONENTS_IDENTIFIED, WorkflowStep.SELECT_NEXT_COMPONENT),
    (WorkflowTrigger.COMPONENT_SELECTED, WorkflowStep.BREAK_INTO_TASKS),
    (WorkflowTrigger.TASKS_BROKEN_DOWN, WorkflowStep.ITERATE_THROUGH_TASKS),
    (WorkflowTrigger.COMPONENT_COMPLETE, WorkflowStep.REPEAT),
]


class TestStepTransitions:
    def test_canonical_order(self):
        """Firing the six triggers in order walks Draft to Repeat."""
        step = WorkflowStep.DRAFT_SPECIFICATION
        for trigger, expected in CANONICAL:
            step = next_step(step, trigger)
            assert step is expected

    def test_repeat_cycles_back_to_break_into_tasks(self):
        assert (
            next_step(WorkflowStep.REPEAT, WorkflowTrigger.COMPONENT_SELECTED)
            is WorkflowStep.BREAK_INTO_TASKS
        )

    @pytest.mark.parametrize(
        "step,trigger", list(itertools.product(WorkflowStep, WorkflowTrigger))
    )
    def test_every_pair_is_mapped_or_rejected(self, step, trigger):
        result = next_step(step, trigger)
        if (step, trigger) in STEP_TRANSITIONS:
            assert result is STEP_TRANSITIONS[(step, trigger)]
        else:
            assert result is None

    def test_out_of_order_trigger_rejected(self):
        assert next_step(WorkflowStep.DRAFT_SPECIFICATION, WorkflowTrigger.TASKS_BROKEN_DOWN) is None

    def test_permitted_triggers(self):
        assert permitted_triggers(WorkflowStep.REPEAT) == [WorkflowTrigger.COMPONENT_SELECTED]
        assert permitted_triggers(WorkflowStep.DRAFT_SPECIFICATION) == [
            WorkflowTrigger.SPEC_APPROVED
        ]


class TestStepPhases:
    def test_draft_is_requirement_gathering(self):
        assert (
            phase_for_step(WorkflowStep.DRAFT_SPECIFICATION)
            is WorkflowPhase.REQUIREMENT_GATHERING
        )

    @pytest.mark.parametrize(
        "step",
        [
            WorkflowStep.DETERMINE_DEPENDENCIES,
            WorkflowStep.IDENTIFY_COMPONENTS,
            WorkflowStep.SELECT_NEXT_COMPONENT,
            WorkflowStep.BREAK_INTO_TASKS,
        ],
    )
    def test_planning_steps(self, step):
        assert phase_for_step(step) is WorkflowPhase.PLANNING

    def test_building_steps(self):
        assert phase_for_step(WorkflowStep.ITERATE_THROUGH_TASKS) is WorkflowPhase.BUILDING
        assert phase_for_step(WorkflowStep.REPEAT) is WorkflowPhase.BUILDING

    def test_every_step_has_a_completion_trigger_it_accepts(self):
        for step, trigger in STEP_COMPLETION_TRIGGERS.items():
            assert next_step(step, trigger) is not None
