"""
Resource-limit guardrail.

Compares premium-request usage against a configured budget.
"""

import logging

from deliveryguard.domain.interfaces import TokenTrackerInterface
from deliveryguard.domain.models import GuardrailContext, GuardrailResult

logger = logging.getLogger(__name__)


class ResourceLimitGuardrail:
    """
    Warns, then blocks, as premium-request usage approaches the budget.

    ratio = premium requests used / budget
    - ratio <  warn_threshold           -> Pass
    - warn_threshold <= ratio < block   -> Warn
    - ratio >= block_threshold          -> Block
    """

    def __init__(
        self,
        tracker: TokenTrackerInterface,
        premium_request_budget: int,
        warn_threshold: float = 0.8,
        block_threshold: float = 0.9,
    ):
        """
        Args:
            tracker: Source of session usage
            premium_request_budget: Premium requests allowed for the run
            warn_threshold: Usage ratio at which to warn
            block_threshold: Usage ratio at which to block

        Raises:
            ValueError: If the budget or thresholds are out of range
        """
        if premium_request_budget <= 0:
            raise ValueError("premium_request_budget must be positive")
        if not 0 < warn_threshold <= 1 or not 0 < block_threshold <= 1:
            raise ValueError("thresholds must be in (0, 1]")
        if warn_threshold >= block_threshold:
            raise ValueError("warn_threshold must be below block_threshold")

        self._tracker = tracker
        self.premium_request_budget = premium_request_budget
        self.warn_threshold = warn_threshold
        self.block_threshold = block_threshold

    def __call__(self, context: GuardrailContext) -> GuardrailResult:
        used = self._tracker.get_session_metrics().premium_request_count
        ratio = used / self.premium_request_budget
        usage = (
            f"{used}/{self.premium_request_budget} premium requests "
            f"({ratio:.0%}) used while working on '{context.subject}'"
        )

        if ratio >= self.block_threshold:
            logger.warning("Resource budget exhausted: %s", usage)
            return GuardrailResult.block(
                f"Premium request budget exhausted: {usage}. "
                "Stop and ask the user to raise the budget."
            )
        if ratio >= self.warn_threshold:
            return GuardrailResult.warn(
                f"Premium request budget running low: {usage}."
            )
        return GuardrailResult.passed()
