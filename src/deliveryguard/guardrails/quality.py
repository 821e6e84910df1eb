"""
Quality-gate guardrail.

At a completion boundary, blocks unless a matching passing verification exists.
"""

import logging
from collections.abc import Callable
from typing import Any

from deliveryguard.domain.models import (
    GuardrailContext,
    GuardrailResult,
    VerificationScope,
)

logger = logging.getLogger(__name__)

_VERIFY_TOOLS = {
    VerificationScope.TASK: "verify_task_completion",
    VerificationScope.COMPONENT: "verify_component_completion",
    VerificationScope.MODULE: "verify_module_completion",
}


def _at_completion_boundary(context: GuardrailContext) -> bool:
    return context.completion_scope is not None


class QualityGateGuardrail:
    """
    Blocks completion claims that lack a passing verification. Never warns.

    Outside a completion boundary the guardrail always passes.
    """

    def __init__(
        self,
        has_passing_verification: Callable[[GuardrailContext], bool],
        is_completion_boundary: Callable[
            [GuardrailContext], bool
        ] = _at_completion_boundary,
    ):
        """
        Args:
            has_passing_verification: Whether a matching, current pass exists
            is_completion_boundary: Whether the context claims completion
        """
        self._has_passing_verification = has_passing_verification
        self._is_completion_boundary = is_completion_boundary

    @classmethod
    def for_tracker(cls, tracker: Any) -> "QualityGateGuardrail":
        """Build a gate over anything exposing is_verified(scope, identifier)."""

        def has_pass(context: GuardrailContext) -> bool:
            scope = context.completion_scope or VerificationScope.TASK
            return tracker.is_verified(scope, context.subject)

        return cls(has_pass)

    def __call__(self, context: GuardrailContext) -> GuardrailResult:
        if not self._is_completion_boundary(context):
            return GuardrailResult.passed()
        if self._has_passing_verification(context):
            return GuardrailResult.passed()

        scope = context.completion_scope or VerificationScope.TASK
        kind = scope.value.title()
        logger.warning("Unverified completion claim for %s '%s'", kind, context.subject)
        return GuardrailResult.block(
            f"{kind} '{context.subject}' claims completion without a passing "
            f"verification. Call {_VERIFY_TOOLS[scope]} with evidence first."
        )
