"""
Failure escalation.

Classifies failures into the action the caller should take:
- below the threshold on the same task: self-correct
- at or above the threshold: prompt the user
- system fault: block, regardless of task counters
- warning: informational only

The handler never retries anything itself.
"""

import logging

from deliveryguard.domain.models import (
    FailureAction,
    FailureClassification,
    FailureSeverity,
)

logger = logging.getLogger(__name__)


class FailureHandler:
    """
    Consecutive-failure counter for the most recently failing task.

    A failure on a different task restarts the count; so does
    record_success() for the counted task. Severity is computed from the
    count on every call, never stored.
    """

    def __init__(self, failure_threshold: int = 3):
        """
        Args:
            failure_threshold: Consecutive failures before prompting the user

        Raises:
            ValueError: If the threshold is not positive
        """
        if failure_threshold <= 0:
            raise ValueError("failure_threshold must be positive")
        self.failure_threshold = failure_threshold
        self._task_id: str | None = None
        self._count = 0

    def record_failure(self, task_id: str, message: str) -> FailureClassification:
        if not task_id:
            raise ValueError("task_id must be non-empty")

        if task_id != self._task_id:
            self._task_id = task_id
            self._count = 0
        self._count += 1
        count = self._count

        if count >= self.failure_threshold:
            logger.warning(
                "Task '%s' has failed %d times (threshold %d): user intervention needed",
                task_id,
                count,
                self.failure_threshold,
            )
            return FailureClassification(
                FailureSeverity.REPEATED_FAILURE,
                FailureAction.PROMPT_USER,
                f"Task '{task_id}' has failed {count} consecutive times. "
                f"User intervention recommended. Last error: {message}",
                task_id,
                count,
            )

        logger.info(
            "Task '%s' failed (%d/%d), self-correcting: %s",
            task_id,
            count,
            self.failure_threshold,
            message,
        )
        return FailureClassification(
            FailureSeverity.TASK_FAILURE,
            FailureAction.SELF_CORRECT,
            f"Task '{task_id}' failed (attempt {count}/{self.failure_threshold}). "
            f"Self-correcting. Error: {message}",
            task_id,
            count,
        )

    def record_critical_error(self, message: str) -> FailureClassification:
        """Classify a system fault. Always blocks."""
        logger.error("Critical error, blocking: %s", message)
        return FailureClassification(
            FailureSeverity.CRITICAL, FailureAction.BLOCK, message
        )

    def record_warning(self, message: str) -> FailureClassification:
        logger.warning("Warning: %s", message)
        return FailureClassification(
            FailureSeverity.WARNING, FailureAction.SELF_CORRECT, message
        )

    def record_success(self, task_id: str) -> None:
        if task_id == self._task_id:
            self._task_id = None
            self._count = 0

    def get_failure_count(self, task_id: str) -> int:
        return self._count if task_id == self._task_id else 0
