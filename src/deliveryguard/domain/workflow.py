"""
Step transition table for the per-module development cycle.

DraftSpecification -> DetermineDependencies -> IdentifyComponents ->
SelectNextComponent -> BreakIntoTasks -> IterateThroughTasks -> Repeat,
then Repeat -> BreakIntoTasks for each further component.

Every (step, trigger) pair maps to exactly one next step or is rejected.
"""

from deliveryguard.domain.models import WorkflowPhase, WorkflowStep, WorkflowTrigger

STEP_TRANSITIONS: dict[tuple[WorkflowStep, WorkflowTrigger], WorkflowStep] = {
    (
        WorkflowStep.DRAFT_SPECIFICATION,
        WorkflowTrigger.SPEC_APPROVED,
    ): WorkflowStep.DETERMINE_DEPENDENCIES,
    (
        WorkflowStep.DETERMINE_DEPENDENCIES,
        WorkflowTrigger.DEPENDENCIES_DETERMINED,
    ): WorkflowStep.IDENTIFY_COMPONENTS,
    (
        WorkflowStep.IDENTIFY_COMPONENTS,
        WorkflowTrigger.COMPONENTS_IDENTIFIED,
    ): WorkflowStep.SELECT_NEXT_COMPONENT,
    (
        WorkflowStep.SELECT_NEXT_COMPONENT,
        WorkflowTrigger.COMPONENT_SELECTED,
    ): WorkflowStep.BREAK_INTO_TASKS,
    (
        WorkflowStep.BREAK_INTO_TASKS,
        WorkflowTrigger.TASKS_BROKEN_DOWN,
    ): WorkflowStep.ITERATE_THROUGH_TASKS,
    (
        WorkflowStep.ITERATE_THROUGH_TASKS,
        WorkflowTrigger.COMPONENT_COMPLETE,
    ): WorkflowStep.REPEAT,
    # Cycle: selecting the next component from Repeat
    (
        WorkflowStep.REPEAT,
        WorkflowTrigger.COMPONENT_SELECTED,
    ): WorkflowStep.BREAK_INTO_TASKS,
}

STEP_PHASES: dict[WorkflowStep, WorkflowPhase] = {
    WorkflowStep.DRAFT_SPECIFICATION: WorkflowPhase.REQUIREMENT_GATHERING,
    WorkflowStep.DETERMINE_DEPENDENCIES: WorkflowPhase.PLANNING,
    WorkflowStep.IDENTIFY_COMPONENTS: WorkflowPhase.PLANNING,
    WorkflowStep.SELECT_NEXT_COMPONENT: WorkflowPhase.PLANNING,
    WorkflowStep.BREAK_INTO_TASKS: WorkflowPhase.PLANNING,
    WorkflowStep.ITERATE_THROUGH_TASKS: WorkflowPhase.BUILDING,
    WorkflowStep.REPEAT: WorkflowPhase.BUILDING,
}

# Trigger the orchestrator fires after a successful invocation at each step.
STEP_COMPLETION_TRIGGERS: dict[WorkflowStep, WorkflowTrigger] = {
    WorkflowStep.DRAFT_SPECIFICATION: WorkflowTrigger.SPEC_APPROVED,
    WorkflowStep.DETERMINE_DEPENDENCIES: WorkflowTrigger.DEPENDENCIES_DETERMINED,
    WorkflowStep.IDENTIFY_COMPONENTS: WorkflowTrigger.COMPONENTS_IDENTIFIED,
    WorkflowStep.SELECT_NEXT_COMPONENT: WorkflowTrigger.COMPONENT_SELECTED,
    WorkflowStep.BREAK_INTO_TASKS: WorkflowTrigger.TASKS_BROKEN_DOWN,
    WorkflowStep.ITERATE_THROUGH_TASKS: WorkflowTrigger.COMPONENT_COMPLETE,
    WorkflowStep.REPEAT: WorkflowTrigger.COMPONENT_SELECTED,
}


def next_step(step: WorkflowStep, trigger: WorkflowTrigger) -> WorkflowStep | None:
    """Target step for a trigger, or None if the trigger is rejected."""
    return STEP_TRANSITIONS.get((step, trigger))


def permitted_triggers(step: WorkflowStep) -> list[WorkflowTrigger]:
    return [t for (s, t) in STEP_TRANSITIONS if s is step]


def phase_for_step(step: WorkflowStep) -> WorkflowPhase:
    return STEP_PHASES[step]
