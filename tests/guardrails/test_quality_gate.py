"""Tests for QualityGateGuardrail."""

from deliveryguard.application.verification import VerificationTracker
from deliveryguard.domain.models import GuardrailContext, VerificationScope
from deliveryguard.guardrails import QualityGateGuardrail


class TestQualityGateGuardrail:
    """Completion claims need a passing verification."""

    def test_passes_outside_completion_boundary(self):
        guardrail = QualityGateGuardrail(lambda context: False)
        assert guardrail(GuardrailContext(module_name="auth")).is_pass

    def test_blocks_unverified_claim(self):
        guardrail = QualityGateGuardrail(lambda context: False)
        context = GuardrailContext(
            module_name="auth",
            task_name="T",
            completion_scope=VerificationScope.TASK,
        )
        result = guardrail(context)

        assert result.is_block
        assert "Task 'T'" in result.message
        assert "verify_task_completion" in result.message

    def test_passes_verified_claim(self):
        guardrail = QualityGateGuardrail(lambda context: True)
        context = GuardrailContext(
            module_name="auth", completion_scope=VerificationScope.MODULE
        )
        assert guardrail(context).is_pass

    def test_custom_boundary_predicate(self):
        guardrail = QualityGateGuardrail(
            lambda context: False,
            is_completion_boundary=lambda context: context.tool_call_count > 0,
        )
        assert guardrail(GuardrailContext(module_name="m", tool_call_count=1)).is_block
        assert guardrail(GuardrailContext(module_name="m")).is_pass


class TestQualityGateForTracker:
    """The tracker-backed gate matches scope and identifier exactly."""

    def test_uses_tracker_records(self):
        tracker = VerificationTracker()
        guardrail = QualityGateGuardrail.for_tracker(tracker)
        context = GuardrailContext(
            module_name="auth",
            task_name="auth.login",
            completion_scope=VerificationScope.COMPONENT,
        )

        assert guardrail(context).is_block
        tracker.record(VerificationScope.COMPONENT, "auth.login", passed=True)
        assert guardrail(context).is_pass

    def test_other_scope_does_not_satisfy(self):
        tracker = VerificationTracker()
        tracker.record(VerificationScope.TASK, "auth.login", passed=True)
        guardrail = QualityGateGuardrail.for_tracker(tracker)
        context = GuardrailContext(
            module_name="auth",
            task_name="auth.login",
            completion_scope=VerificationScope.COMPONENT,
        )

        result = guardrail(context)
        assert result.is_block
        assert "verify_component_completion" in result.message
