"""Tests for PauseController and CancellationToken."""

import threading

import pytest

from deliveryguard.application.pause import CancellationToken, PauseController
from deliveryguard.domain.exceptions import OperationCancelled


class TestCancellationToken:
    def test_cancel_runs_callbacks_once(self):
        token = CancellationToken()
        calls = []
        token.register(lambda: calls.append(1))

        token.cancel()
        token.cancel()

        assert token.is_cancelled
        assert calls == [1]

    def test_register_after_cancel_runs_immediately(self):
        token = CancellationToken()
        token.cancel()
        calls = []
        token.register(lambda: calls.append(1))
        assert calls == [1]

    def test_unregister(self):
        token = CancellationToken()
        calls = []
        unregister = token.register(lambda: calls.append(1))
        unregister()
        token.cancel()
        assert calls == []

    def test_raise_if_cancelled(self):
        token = CancellationToken()
        token.raise_if_cancelled()
        token.cancel()
        with pytest.raises(OperationCancelled):
            token.raise_if_cancelled()


class TestPauseController:
    """Cooperative pause point."""

    def test_toggle_returns_new_state(self):
        controller = PauseController()
        assert controller.toggle() is True
        assert controller.is_paused
        assert controller.toggle() is False
        assert not controller.is_paused

    def test_concurrent_toggles_are_atomic(self):
        """An even number of toggles from many threads lands back on running."""
        controller = PauseController()
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            for _ in range(250):
                controller.toggle()

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)

        assert controller.is_paused is False

    def test_mixed_concurrent_calls_leave_a_usable_controller(self):
        controller = PauseController()
        barrier = threading.Barrier(6)
        operations = [controller.toggle, controller.pause, controller.resume]

        def worker(operation):
            barrier.wait()
            for _ in range(200):
                operation()

        threads = [
            threading.Thread(target=worker, args=(operations[i % 3],))
            for i in range(6)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)

        assert isinstance(controller.is_paused, bool)

        controller.pause()
        released = threading.Event()

        def waiter():
            controller.wait_if_paused(CancellationToken())
            released.set()

        thread = threading.Thread(target=waiter)
        thread.start()
        assert not released.wait(timeout=0.05)

        controller.resume()
        thread.join(timeout=2)
        assert released.is_set()

    def test_wait_returns_immediately_when_running(self):
        PauseController().wait_if_paused(CancellationToken())

    def test_resume_releases_waiter(self):
        controller = PauseController()
        controller.pause()
        released = threading.Event()

        def worker():
            controller.wait_if_paused()
            released.set()

        thread = threading.Thread(target=worker)
        thread.start()
        assert not released.wait(timeout=0.05)

        controller.resume()
        thread.join(timeout=2)
        assert released.is_set()

    def test_cancel_interrupts_paused_waiter(self):
        controller = PauseController()
        controller.pause()
        token = CancellationToken()
        errors = []

        def worker():
            try:
                controller.wait_if_paused(token)
            except OperationCancelled as e:
                errors.append(e)

        thread = threading.Thread(target=worker)
        thread.start()
        token.cancel()
        thread.join(timeout=2)

        assert not thread.is_alive()
        assert len(errors) == 1
        assert controller.is_paused

    def test_already_cancelled_token_raises(self):
        token = CancellationToken()
        token.cancel()
        with pytest.raises(OperationCancelled):
            PauseController().wait_if_paused(token)
