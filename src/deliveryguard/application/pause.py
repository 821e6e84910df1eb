"""
Cooperative pause/resume and cancellation for the control loop.

The loop calls wait_if_paused() at safe points. Pausing only sets a flag;
waiting blocks until resumed or until the cancellation token fires, in which
case OperationCancelled is raised and no state is touched.
"""

import threading
from collections.abc import Callable

from deliveryguard.domain.exceptions import OperationCancelled


class CancellationToken:
    """One-shot cancellation signal shared between a host and the loop."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Signal cancellation and run registered callbacks once."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks = list(self._callbacks)
            self._callbacks.clear()
        for callback in callbacks:
            callback()

    def register(self, callback: Callable[[], None]) -> Callable[[], None]:
        """
        Run callback on cancellation (immediately if already cancelled).

        Returns:
            A function that unregisters the callback
        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)

                def unregister() -> None:
                    with self._lock:
                        if callback in self._callbacks:
                            self._callbacks.remove(callback)

                return unregister
        callback()
        return lambda: None

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise OperationCancelled("Operation was cancelled")


class PauseController:
    """Thread-safe pause flag with a blocking wait point."""

    def __init__(self) -> None:
        self._condition = threading.Condition()
        self._paused = False

    @property
    def is_paused(self) -> bool:
        with self._condition:
            return self._paused

    def pause(self) -> None:
        with self._condition:
            self._paused = True

    def resume(self) -> None:
        with self._condition:
            self._paused = False
            self._condition.notify_all()

    def toggle(self) -> bool:
        """Flip the flag atomically. Returns the new paused state."""
        with self._condition:
            self._paused = not self._paused
            if not self._paused:
                self._condition.notify_all()
            return self._paused

    def wait_if_paused(self, token: CancellationToken | None = None) -> None:
        """
        Block while paused.

        Raises:
            OperationCancelled: If the token is or becomes cancelled
        """
        if token is None:
            with self._condition:
                self._condition.wait_for(lambda: not self._paused)
            return

        token.raise_if_cancelled()

        def wake() -> None:
            with self._condition:
                self._condition.notify_all()

        unregister = token.register(wake)
        try:
            with self._condition:
                self._condition.wait_for(
                    lambda: not self._paused or token.is_cancelled
                )
        finally:
            unregister()
        token.raise_if_cancelled()
