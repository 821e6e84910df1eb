"""Tests for OllamaAgent against a stubbed chat-completions client."""

import json
from types import SimpleNamespace

import pytest

from deliveryguard.application.tools import TOOL_DEFINITIONS
from deliveryguard.domain.exceptions import AgentInvocationError
from deliveryguard.domain.models import ToolResult
from deliveryguard.infrastructure.llm.ollama import (
    OllamaAgent,
    OllamaAgentConfig,
    to_openai_tool,
)


def _response(content="", tool_calls=None, finish_reason="stop", usage=(10, 5)):
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(
        choices=[SimpleNamespace(message=message, finish_reason=finish_reason)],
        usage=SimpleNamespace(prompt_tokens=usage[0], completion_tokens=usage[1]),
    )


def _tool_call(call_id, name, arguments):
    return SimpleNamespace(
        id=call_id, function=SimpleNamespace(name=name, arguments=arguments)
    )


class FakeCompletions:
    def __init__(self, responses):
        self.responses = list(responses)
        self.requests = []

    def create(self, **request):
        self.requests.append(request)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def make_agent():
    pytest.importorskip("openai")

    def factory(responses, tool_executor=None, **config):
        agent = OllamaAgent(OllamaAgentConfig(**config), tool_executor=tool_executor)
        completions = FakeCompletions(responses)
        agent._client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
        return agent, completions

    return factory


class TestToOpenAITool:
    def test_function_schema(self):
        schema = to_openai_tool(TOOL_DEFINITIONS[0])
        function = schema["function"]

        assert schema["type"] == "function"
        assert function["name"] == "verify_task_completion"
        assert function["parameters"]["required"] == [
            "task_id",
            "evidence",
            "acceptance_criteria",
        ]
        assert function["parameters"]["properties"]["task_id"]["type"] == "string"


class TestOllamaAgent:
    """Chat loop behaviour."""

    def test_plain_answer(self, make_agent):
        agent, completions = make_agent([_response("all good")])
        result = agent.invoke("system", "qwen", TOOL_DEFINITIONS)

        assert result.output == "all good"
        assert result.is_complete
        assert result.token_usage.total_tokens == 15
        assert result.token_usage.is_premium
        # No executor, so no tools are offered
        assert "tools" not in completions.requests[0]
        assert completions.requests[0]["model"] == "qwen"

    def test_tool_calls_are_executed(self, make_agent):
        calls = []

        def executor(name, arguments):
            calls.append((name, arguments))
            return ToolResult("success", "context")

        agent, completions = make_agent(
            [
                _response(
                    tool_calls=[_tool_call("c1", "get_current_context", "{}")],
                    finish_reason="tool_calls",
                ),
                _response("finished"),
            ],
            tool_executor=executor,
        )
        result = agent.invoke("system", "qwen", TOOL_DEFINITIONS)

        assert calls == [("get_current_context", {})]
        assert result.tool_calls_made == 1
        assert result.output == "finished"
        assert result.token_usage.input_tokens == 20
        tool_message = completions.requests[1]["messages"][-1]
        assert tool_message["role"] == "tool"
        assert json.loads(tool_message["content"]) == {
            "status": "success",
            "payload": "context",
        }

    def test_invalid_tool_arguments(self, make_agent):
        agent, completions = make_agent(
            [
                _response(
                    tool_calls=[_tool_call("c1", "update_task_status", "{not json")],
                    finish_reason="tool_calls",
                ),
                _response("ok"),
            ],
            tool_executor=lambda name, arguments: ToolResult("success", "unused"),
        )
        agent.invoke("system", "qwen", TOOL_DEFINITIONS)

        content = json.loads(completions.requests[1]["messages"][-1]["content"])
        assert content["status"] == "error"
        assert "not valid JSON" in content["payload"]

    def test_tool_calls_without_executor_end_the_turn(self, make_agent):
        agent, completions = make_agent(
            [
                _response(
                    "partial",
                    tool_calls=[_tool_call("c1", "get_current_context", "{}")],
                    finish_reason="tool_calls",
                )
            ]
        )
        result = agent.invoke("system", "qwen", TOOL_DEFINITIONS)

        assert result.output == "partial"
        assert result.tool_calls_made == 0
        assert not result.is_complete
        assert len(completions.requests) == 1

    def test_turn_limit(self, make_agent):
        looping = _response(
            tool_calls=[_tool_call("c", "get_current_context", "{}")],
            finish_reason="tool_calls",
        )
        agent, _ = make_agent(
            [looping, looping],
            tool_executor=lambda name, arguments: ToolResult("success", "x"),
            max_turns=2,
        )
        result = agent.invoke("system", "qwen", TOOL_DEFINITIONS)

        assert not result.is_complete
        assert result.tool_calls_made == 2

    def test_endpoint_failure(self, make_agent):
        from openai import OpenAIError

        agent, _ = make_agent([OpenAIError("connection refused")])
        with pytest.raises(AgentInvocationError, match="connection refused"):
            agent.invoke("system", "qwen")

    def test_kwargs_build_config(self):
        pytest.importorskip("openai")
        agent = OllamaAgent(base_url="http://gpu-box:11434/v1", premium=False)
        assert agent._config.base_url == "http://gpu-box:11434/v1"
        assert agent._config.premium is False

    def test_unknown_config_field_rejected(self):
        with pytest.raises(TypeError):
            OllamaAgentConfig(colour="blue")
