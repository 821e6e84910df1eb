"""Tests for oracle verdict parsing and OracleVerifier."""

import pytest

from deliveryguard.application.oracle import OracleVerifier, extract_json, parse_verdict
from deliveryguard.domain.exceptions import AgentInvocationError
from deliveryguard.domain.models import VerificationScope
from deliveryguard.infrastructure.llm.mock import MockAgent

TASK = VerificationScope.TASK


class TestExtractJson:
    def test_strips_markdown_fence(self):
        text = '```json\n{"pass": true, "gaps": []}\n```'
        assert extract_json(text) == '{"pass": true, "gaps": []}'

    def test_cuts_surrounding_prose(self):
        assert extract_json('Verdict: {"pass": false} done') == '{"pass": false}'


class TestParseVerdict:
    """The verdict fails closed on anything unexpected."""

    def test_pass_without_gaps(self):
        verdict = parse_verdict('{"pass": true, "gaps": []}', TASK)
        assert verdict.passed
        assert verdict.gaps == ()
        assert verdict.scope is TASK

    def test_fail_with_gaps(self):
        verdict = parse_verdict('{"pass": false, "gaps": ["no tests", "no docs"]}', TASK)
        assert not verdict.passed
        assert verdict.gaps == ("no tests", "no docs")

    def test_pass_with_gaps_is_a_fail(self):
        verdict = parse_verdict('{"pass": true, "gaps": ["edge case"]}', TASK)
        assert not verdict.passed

    def test_missing_gaps_defaults_to_empty(self):
        assert parse_verdict('{"pass": true}', TASK).passed

    def test_keys_are_case_insensitive(self):
        assert parse_verdict('{"PASS": true, "Gaps": []}', TASK).passed

    def test_fenced_response(self):
        assert parse_verdict('```json\n{"pass": true, "gaps": []}\n```', TASK).passed

    @pytest.mark.parametrize("output", ["", "   ", None])
    def test_empty_output(self, output):
        verdict = parse_verdict(output, TASK)
        assert not verdict.passed
        assert verdict.gaps == ("Oracle returned empty response",)

    def test_not_json(self):
        verdict = parse_verdict("Looks good to me!", TASK)
        assert not verdict.passed
        assert verdict.gaps[0].startswith("Oracle response was not valid JSON")

    @pytest.mark.parametrize(
        "output",
        ['{"pass": "yes", "gaps": []}', '{"gaps": []}', '["pass"]', '{"pass": 1}'],
    )
    def test_wrong_shape(self, output):
        verdict = parse_verdict(output, TASK)
        assert not verdict.passed
        assert "could not be parsed" in verdict.gaps[0]


class TestOracleVerifier:
    def test_verify_uses_model_and_no_tools(self):
        agent = MockAgent(['{"pass": true, "gaps": []}'])
        verifier = OracleVerifier(agent, model="cheap-model")

        verdict = verifier.verify(TASK, "all tests pass", "- [ ] tests pass")

        assert verdict.passed
        call = agent.calls[0]
        assert call.model == "cheap-model"
        assert call.tool_names == ()
        assert "all tests pass" in call.system_prompt

    def test_invocation_failure_is_a_failed_verdict(self):
        agent = MockAgent([AgentInvocationError("timeout")])
        verdict = OracleVerifier(agent).verify(TASK, "evidence", "criteria")

        assert not verdict.passed
        assert verdict.gaps == ("Oracle invocation failed: timeout",)

    @pytest.mark.parametrize("evidence,criteria", [("", "c"), ("e", "  ")])
    def test_blank_inputs_rejected(self, evidence, criteria):
        verifier = OracleVerifier(MockAgent([]))
        with pytest.raises(ValueError):
            verifier.verify(TASK, evidence, criteria)

    def test_default_model(self):
        assert OracleVerifier(MockAgent([])).model == "gpt-5-mini"
