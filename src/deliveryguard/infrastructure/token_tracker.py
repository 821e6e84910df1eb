"""
In-memory token tracker.

Accumulates usage for the current run; nothing is persisted.
"""

import threading

from deliveryguard.domain.interfaces import TokenTrackerInterface
from deliveryguard.domain.models import SessionMetrics, TokenUsage


class InMemoryTokenTracker(TokenTrackerInterface):
    """Cumulative usage per run, safe to update from the agent's thread."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._history: list[TokenUsage] = []

    def record_usage(self, usage: TokenUsage) -> None:
        with self._lock:
            self._history.append(usage)

    def get_session_metrics(self) -> SessionMetrics:
        with self._lock:
            history = list(self._history)
        return SessionMetrics(
            input_tokens=sum(u.input_tokens for u in history),
            output_tokens=sum(u.output_tokens for u in history),
            premium_request_count=sum(1 for u in history if u.is_premium),
            invocation_count=len(history),
        )

    @property
    def history(self) -> tuple[TokenUsage, ...]:
        with self._lock:
            return tuple(self._history)

    def reset(self) -> None:
        with self._lock:
            self._history.clear()
