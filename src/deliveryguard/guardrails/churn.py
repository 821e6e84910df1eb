"""
Churn-detection guardrail.

Tracks consecutive attempts on the same task across evaluations within a run.
"""

import logging

from deliveryguard.domain.models import GuardrailContext, GuardrailResult

logger = logging.getLogger(__name__)


class ChurnDetectionGuardrail:
    """
    Detects repeated attempts on the same task.

    The only stateful guardrail: it remembers the task last evaluated and how
    many consecutive evaluations it has seen for it. Switching tasks, or
    calling record_success(), resets the counter.

    With threshold 3, attempts 1, 2, 3 yield Pass, Warn, Block.
    """

    def __init__(self, failure_threshold: int = 3):
        """
        Args:
            failure_threshold: Attempt number at which the task is blocked

        Raises:
            ValueError: If the threshold is below 2
        """
        if failure_threshold < 2:
            raise ValueError("failure_threshold must be at least 2")
        self.failure_threshold = failure_threshold
        self._current_task: str | None = None
        self._attempts = 0

    @property
    def current_task(self) -> str | None:
        return self._current_task

    def attempts_for(self, task: str) -> int:
        return self._attempts if task == self._current_task else 0

    def record_success(self, task: str) -> None:
        """Reset the counter after the task succeeded."""
        if task == self._current_task:
            self._current_task = None
            self._attempts = 0

    def __call__(self, context: GuardrailContext) -> GuardrailResult:
        task = context.subject
        if task != self._current_task:
            self._current_task = task
            self._attempts = 0
        self._attempts += 1

        # The caller's attempt number wins when it is further along
        attempt = max(self._attempts, context.attempt_number)

        if attempt >= self.failure_threshold:
            logger.warning("Churn on '%s': attempt %d", task, attempt)
            return GuardrailResult.block(
                f"Task '{task}' has been attempted {attempt} times without "
                f"success (threshold {self.failure_threshold}). "
                "Stop and escalate to the user."
            )
        if attempt == self.failure_threshold - 1:
            return GuardrailResult.warn(
                f"Task '{task}' is on attempt {attempt}. One more failure will "
                "block further attempts; try a different approach."
            )
        return GuardrailResult.passed()
