"""
Guardrail pipeline: run every policy, keep the most severe result.

Policies are plain callables ``GuardrailContext -> GuardrailResult``; there is
no shared base class. Order only affects the order messages are joined in.
"""

import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

from deliveryguard.domain.interfaces import TokenTrackerInterface
from deliveryguard.domain.models import (
    GuardrailContext,
    GuardrailResult,
    GuardrailSeverity,
)
from deliveryguard.guardrails.churn import ChurnDetectionGuardrail
from deliveryguard.guardrails.quality import QualityGateGuardrail
from deliveryguard.guardrails.resource import ResourceLimitGuardrail
from deliveryguard.guardrails.tool_discipline import ToolDisciplineGuardrail

if TYPE_CHECKING:
    from deliveryguard.config import DeliveryGuardConfig

logger = logging.getLogger(__name__)

Guardrail = Callable[[GuardrailContext], GuardrailResult]


def most_severe(results: Sequence[GuardrailResult]) -> GuardrailResult:
    """
    Fold results with Pass < Warn < Block.

    Messages of every result at the winning severity are joined, so two
    warnings are both reported.
    """
    if not results:
        return GuardrailResult.passed()
    worst = max(result.severity for result in results)
    if worst is GuardrailSeverity.PASS:
        return GuardrailResult.passed()
    messages = [r.message for r in results if r.severity is worst and r.message]
    return GuardrailResult(worst, "\n".join(messages))


class GuardrailPipeline:
    """
    Ordered list of guardrails evaluated against one context.

    Every guardrail is evaluated, even after a Block, so that stateful
    policies (churn) observe every attempt.
    """

    def __init__(self, guardrails: Sequence[Guardrail]):
        """
        Args:
            guardrails: Policies to evaluate, in order
        """
        self._guardrails = tuple(guardrails)

    @property
    def guardrails(self) -> tuple[Guardrail, ...]:
        return self._guardrails

    def evaluate_all(self, context: GuardrailContext) -> list[GuardrailResult]:
        """Evaluate every guardrail and return the individual results."""
        return [guardrail(context) for guardrail in self._guardrails]

    def evaluate(self, context: GuardrailContext) -> GuardrailResult:
        """Evaluate every guardrail and return the most severe result."""
        result = most_severe(self.evaluate_all(context))
        if not result.is_pass:
            logger.warning(
                "Guardrail %s for '%s': %s",
                result.severity.name,
                context.subject,
                result.message,
            )
        return result

    @classmethod
    def from_config(
        cls,
        config: "DeliveryGuardConfig",
        tracker: TokenTrackerInterface,
        verification: Any,
    ) -> "GuardrailPipeline":
        """
        Build the standard four-policy pipeline.

        Args:
            config: Thresholds for every policy
            tracker: Token tracker read by the resource-limit policy
            verification: Object exposing is_verified(scope, identifier)
        """
        return cls(
            [
                ResourceLimitGuardrail(
                    tracker,
                    premium_request_budget=config.budget.premium_request_budget,
                    warn_threshold=config.budget.warn_threshold,
                    block_threshold=config.budget.block_threshold,
                ),
                ChurnDetectionGuardrail(config.churn.failure_threshold),
                QualityGateGuardrail.for_tracker(verification),
                ToolDisciplineGuardrail(
                    tool_call_threshold=config.tool_discipline.tool_call_threshold,
                    max_file_reads=config.tool_discipline.max_file_reads,
                    max_command_retries=config.tool_discipline.max_command_retries,
                ),
            ]
        )
