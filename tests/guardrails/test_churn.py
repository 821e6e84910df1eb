"""Tests for ChurnDetectionGuardrail."""

import pytest

from deliveryguard.domain.models import GuardrailContext
from deliveryguard.guardrails import ChurnDetectionGuardrail


def _context(task: str, attempt: int = 1) -> GuardrailContext:
    return GuardrailContext(module_name="auth", task_name=task, attempt_number=attempt)


class TestChurnDetectionGuardrail:
    """Consecutive attempts on the same task with threshold 3."""

    def test_pass_warn_block_sequence(self):
        guardrail = ChurnDetectionGuardrail(failure_threshold=3)
        results = [guardrail(_context("T")) for _ in range(3)]

        assert results[0].is_pass
        assert results[1].is_warn
        assert results[2].is_block
        assert "attempted 3 times" in results[2].message

    def test_switching_task_resets_count(self):
        guardrail = ChurnDetectionGuardrail(failure_threshold=3)
        guardrail(_context("T"))
        guardrail(_context("T"))

        assert guardrail(_context("U")).is_pass
        assert guardrail.current_task == "U"
        assert guardrail.attempts_for("T") == 0

    def test_record_success_resets(self):
        guardrail = ChurnDetectionGuardrail(failure_threshold=3)
        guardrail(_context("T"))
        guardrail(_context("T"))
        guardrail.record_success("T")

        assert guardrail(_context("T")).is_pass

    def test_record_success_for_other_task_is_ignored(self):
        guardrail = ChurnDetectionGuardrail(failure_threshold=3)
        guardrail(_context("T"))
        guardrail.record_success("U")
        assert guardrail.attempts_for("T") == 1

    def test_caller_attempt_number_is_honoured(self):
        """A context already on attempt 3 blocks on its first evaluation."""
        guardrail = ChurnDetectionGuardrail(failure_threshold=3)
        assert guardrail(_context("T", attempt=3)).is_block

    def test_module_is_subject_without_task(self):
        guardrail = ChurnDetectionGuardrail(failure_threshold=2)
        context = GuardrailContext(module_name="auth")
        assert guardrail(context).is_warn
        assert guardrail.current_task == "auth"

    def test_threshold_must_leave_room_for_a_warning(self):
        with pytest.raises(ValueError):
            ChurnDetectionGuardrail(failure_threshold=1)
