"""
Verification tracker and completion gate.

The tracker records the latest verification outcome per (scope, identifier).
The gate allows a completion-status update only when the record for exactly
that (scope, identifier) exists and passed. A reset clears every record; the
orchestrator resets at the start of each agent invocation so a stale pass
can never satisfy a later claim.
"""

import logging
from collections.abc import Sequence
from datetime import datetime

from deliveryguard.domain.models import GateDecision, VerificationRecord, VerificationScope

logger = logging.getLogger(__name__)

_VERIFY_TOOLS = {
    VerificationScope.TASK: "verify_task_completion",
    VerificationScope.COMPONENT: "verify_component_completion",
    VerificationScope.MODULE: "verify_module_completion",
}


class VerificationTracker:
    """Last-write-wins mapping of (scope, identifier) to VerificationRecord."""

    def __init__(self) -> None:
        self._records: dict[tuple[VerificationScope, str], VerificationRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def record(
        self,
        scope: VerificationScope,
        identifier: str,
        passed: bool,
        gaps: Sequence[str] = (),
    ) -> VerificationRecord:
        """Store an outcome, replacing any earlier one for the same key."""
        if not identifier:
            raise ValueError("identifier must be non-empty")
        record = VerificationRecord(
            scope=scope,
            identifier=identifier,
            passed=passed,
            gaps=tuple(gaps),
            recorded_at=datetime.now().isoformat(),
        )
        self._records[(scope, identifier)] = record
        return record

    def get(self, scope: VerificationScope, identifier: str) -> VerificationRecord | None:
        return self._records.get((scope, identifier))

    def is_verified(self, scope: VerificationScope, identifier: str) -> bool:
        record = self.get(scope, identifier)
        return record is not None and record.passed

    def records(self) -> list[VerificationRecord]:
        return list(self._records.values())

    def reset(self) -> None:
        """Clear every record."""
        self._records.clear()


class CompletionGate:
    """Intercepts completion-status updates and checks the tracker."""

    def __init__(self, tracker: VerificationTracker):
        self._tracker = tracker

    def validate_completion(
        self, scope: VerificationScope, identifier: str
    ) -> GateDecision:
        """
        Decide whether (scope, identifier) may be marked complete.

        Returns:
            GateDecision; when rejected, the reason names the scope and id
        """
        if self._tracker.is_verified(scope, identifier):
            logger.debug("Completion allowed for %s '%s'", scope.value, identifier)
            return GateDecision(allowed=True)

        record = self._tracker.get(scope, identifier)
        reason = (
            f"Cannot mark {scope.value} '{identifier}' as complete: no passing "
            f"oracle verification found. Call {_VERIFY_TOOLS[scope]} first and "
            "ensure it passes."
        )
        if record is not None and record.gaps:
            reason += " Outstanding gaps: " + "; ".join(record.gaps)
        logger.warning("Completion rejected for %s '%s'", scope.value, identifier)
        return GateDecision(allowed=False, reason=reason)
