"""
Re-entrant step recovery.

Recomputes which workflow step a module is in from its persisted
specification, so the control loop can be killed and restarted without a
stored step pointer. A persisted step is only a hint, consulted when the
artifacts themselves show no progress.
"""

import logging

from deliveryguard.application.drift import SpecificationDriftService
from deliveryguard.domain.interfaces import SpecificationStoreInterface
from deliveryguard.domain.markdown import count_checkboxes
from deliveryguard.domain.models import StepAssessment, WorkflowStep

logger = logging.getLogger(__name__)

# Below this many characters a specification is treated as not yet drafted
SUBSTANTIVE_SPEC_LENGTH = 100


class SpecificationStateAssessor:
    """
    Derives a module's WorkflowStep from its specification document.

    - no specification (or unreadable)    -> DraftSpecification
    - every checklist item complete       -> Repeat
    - some checklist items complete       -> IterateThroughTasks
    - persisted hint available            -> the hint
    - substantive specification           -> DetermineDependencies
    - otherwise                           -> DraftSpecification
    """

    def __init__(
        self,
        store: SpecificationStoreInterface,
        drift_service: SpecificationDriftService | None = None,
    ):
        """
        Args:
            store: Read-only access to module specifications
            drift_service: Folded into assess() when supplied
        """
        self._store = store
        self._drift_service = drift_service
        self._persisted: dict[str, WorkflowStep] = {}

    def _read(self, module_name: str) -> str | None:
        if not module_name:
            raise ValueError("module_name must be non-empty")
        try:
            return self._store.read_specification(module_name)
        except OSError as e:
            logger.warning("Failed to read specification for '%s': %s", module_name, e)
            return None

    def get_current_step(self, module_name: str) -> WorkflowStep:
        content = self._read(module_name)
        if content is None:
            logger.info("Module '%s': no specification, at DraftSpecification", module_name)
            return WorkflowStep.DRAFT_SPECIFICATION
        return self._step_from_content(module_name, content)

    def _step_from_content(self, module_name: str, content: str) -> WorkflowStep:
        total, completed = count_checkboxes(content)

        if total > 0 and completed == total:
            logger.info("Module '%s': all %d criteria complete", module_name, total)
            return WorkflowStep.REPEAT

        if completed > 0:
            logger.info(
                "Module '%s': %d/%d criteria complete, at IterateThroughTasks",
                module_name,
                completed,
                total,
            )
            return WorkflowStep.ITERATE_THROUGH_TASKS

        persisted = self._persisted.get(module_name.casefold())
        if persisted is not None:
            logger.info("Module '%s': using persisted step %s", module_name, persisted.value)
            return persisted

        if len(content) > SUBSTANTIVE_SPEC_LENGTH:
            return WorkflowStep.DETERMINE_DEPENDENCIES
        return WorkflowStep.DRAFT_SPECIFICATION

    def persist_step(self, module_name: str, step: WorkflowStep) -> None:
        """Remember a step as a hint for modules without checklist progress."""
        if not module_name:
            raise ValueError("module_name must be non-empty")
        self._persisted[module_name.casefold()] = step
        logger.debug("Persisted step %s for '%s'", step.value, module_name)

    def is_spec_ready(self, module_name: str) -> bool:
        return any(
            m.name.casefold() == module_name.casefold() and m.has_specification
            for m in self._store.list_modules()
        )

    def checklist_progress(self, module_name: str) -> tuple[int, int]:
        """(total, completed) checklist items; (0, 0) without a readable spec."""
        content = self._read(module_name)
        if content is None:
            return 0, 0
        return count_checkboxes(content)

    def has_more_components(self, module_name: str) -> bool:
        """Whether the specification still has unchecked items."""
        content = self._read(module_name)
        if content is None:
            return False
        total, completed = count_checkboxes(content)
        return total > 0 and completed < total

    def assess(self, module_name: str) -> StepAssessment:
        """Current step plus checklist progress and any drift since last time."""
        content = self._read(module_name)
        if content is None:
            return StepAssessment(module_name, WorkflowStep.DRAFT_SPECIFICATION)

        step = self._step_from_content(module_name, content)
        total, completed = count_checkboxes(content)
        drift = ()
        if self._drift_service is not None:
            drift = tuple(self._drift_service.check_drift(module_name))
        return StepAssessment(module_name, step, total, completed, drift)
