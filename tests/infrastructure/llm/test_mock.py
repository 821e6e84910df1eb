"""Tests for MockAgent."""

import pytest

from deliveryguard.application.tools import TOOL_DEFINITIONS
from deliveryguard.domain.exceptions import AgentInvocationError
from deliveryguard.domain.models import AgentInvocationResult, TokenUsage, ToolResult
from deliveryguard.infrastructure.llm.mock import MockAgent, ScriptedTurn


class TestMockAgent:
    """Scripted responses in order."""

    def test_strings_become_complete_results(self):
        agent = MockAgent(["first", "second"])

        first = agent.invoke("prompt", "model-a")
        second = agent.invoke("prompt", "model-b")

        assert (first.output, second.output) == ("first", "second")
        assert first.is_complete
        assert first.token_usage == TokenUsage(100, 50)
        assert agent.call_count == 2

    def test_records_calls(self):
        agent = MockAgent(["ok"])
        agent.invoke("do the thing", "gpt-5", TOOL_DEFINITIONS[:2])

        call = agent.calls[0]
        assert call.system_prompt == "do the thing"
        assert call.model == "gpt-5"
        assert call.tool_names == ("verify_task_completion", "verify_component_completion")

    def test_exceptions_are_raised(self):
        agent = MockAgent([AgentInvocationError("offline")])
        with pytest.raises(AgentInvocationError, match="offline"):
            agent.invoke("p", "m")

    def test_results_pass_through(self):
        result = AgentInvocationResult("raw", TokenUsage(1, 2, is_premium=False), 0, False)
        assert MockAgent([result]).invoke("p", "m") is result

    def test_scripted_turn_runs_tool_calls(self):
        seen = []

        def executor(name, arguments):
            seen.append((name, dict(arguments)))
            return ToolResult("success", "ok")

        agent = MockAgent(
            [ScriptedTurn("done", tool_calls=(("get_current_context", {}),))],
            tool_executor=executor,
        )
        result = agent.invoke("p", "m")

        assert result.output == "done"
        assert result.tool_calls_made == 1
        assert seen == [("get_current_context", {})]
        assert agent.tool_results == [ToolResult("success", "ok")]

    def test_scripted_tool_calls_need_executor(self):
        agent = MockAgent([ScriptedTurn("x", tool_calls=(("t", {}),))])
        with pytest.raises(RuntimeError):
            agent.invoke("p", "m")

    def test_exhausted(self):
        agent = MockAgent(["only"])
        agent.invoke("p", "m")
        with pytest.raises(RuntimeError, match="exhausted"):
            agent.invoke("p", "m")

    def test_reset_reuses_responses(self):
        agent = MockAgent(["only"])
        agent.invoke("p", "m")
        agent.reset()

        assert agent.call_count == 0
        assert agent.invoke("p", "m").output == "only"
