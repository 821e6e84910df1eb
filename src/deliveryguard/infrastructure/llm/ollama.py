"""
Ollama agent implementation.

Connects to Ollama (or any OpenAI-compatible endpoint) via the chat
completions API, with function tools executed through a supplied executor.
"""

import json
import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, cast

from deliveryguard.domain.exceptions import AgentInvocationError
from deliveryguard.domain.interfaces import AgentInterface
from deliveryguard.domain.models import (
    AgentInvocationResult,
    TokenUsage,
    ToolDefinition,
    ToolResult,
)

logger = logging.getLogger(__name__)

DEFAULT_OLLAMA_URL = "http://localhost:11434/v1"

ToolExecutor = Callable[[str, Mapping[str, Any]], ToolResult]


@dataclass
class OllamaAgentConfig:
    """Configuration for OllamaAgent.

    This typed config ensures unknown fields are rejected at construction time.
    """

    base_url: str = DEFAULT_OLLAMA_URL
    api_key: str = "ollama"  # required by the client, unused by Ollama
    timeout: float = 120.0
    temperature: float = 0.2
    max_turns: int = 20
    premium: bool = True


def to_openai_tool(tool: ToolDefinition) -> dict[str, Any]:
    """Convert a ToolDefinition to the chat-completions function schema."""
    return {
        "type": "function",
        "function": {
            "name": tool.name,
            "description": tool.description,
            "parameters": {
                "type": "object",
                "properties": {
                    name: {"type": "string", "description": description}
                    for name, description in tool.parameters
                },
                "required": list(tool.required),
            },
        },
    }


class OllamaAgent(AgentInterface):
    """Connects to an Ollama instance using the OpenAI-compatible API."""

    config_class = OllamaAgentConfig

    def __init__(
        self,
        config: OllamaAgentConfig | None = None,
        tool_executor: ToolExecutor | None = None,
        **kwargs: Any,
    ):
        """
        Args:
            config: Typed configuration object (preferred)
            tool_executor: Runs tool calls the model makes (e.g. ToolHandlers.dispatch)
            **kwargs: Fields of OllamaAgentConfig when no config is given
        """
        if config is None:
            config = OllamaAgentConfig(**kwargs)

        try:
            from openai import OpenAI, OpenAIError
        except ImportError as err:
            raise ImportError("openai library required: pip install openai") from err

        self._config = config
        self._client = OpenAI(
            base_url=config.base_url,
            api_key=config.api_key,
            timeout=config.timeout,
        )
        self._client_error = OpenAIError
        self.tool_executor = tool_executor

    def invoke(
        self,
        system_prompt: str,
        model: str,
        tools: Sequence[ToolDefinition] = (),
    ) -> AgentInvocationResult:
        """
        Run the chat loop until the model stops calling tools.

        Raises:
            AgentInvocationError: If the endpoint fails
        """
        messages: list[dict[str, Any]] = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": "Carry out the task described above."},
        ]
        executor = self.tool_executor
        openai_tools = [to_openai_tool(t) for t in tools] if executor else []

        input_tokens = 0
        output_tokens = 0
        tool_calls_made = 0
        content = ""
        is_complete = False

        for _ in range(self._config.max_turns):
            request: dict[str, Any] = {
                "model": model,
                "messages": cast(Any, messages),
                "temperature": self._config.temperature,
            }
            if openai_tools:
                request["tools"] = openai_tools

            try:
                response = self._client.chat.completions.create(**request)
            except self._client_error as e:
                raise AgentInvocationError(f"Agent request failed: {e}") from e

            if response.usage is not None:
                input_tokens += response.usage.prompt_tokens
                output_tokens += response.usage.completion_tokens

            choice = response.choices[0]
            message = choice.message
            content = message.content or ""

            if not message.tool_calls or executor is None:
                is_complete = choice.finish_reason == "stop"
                break

            messages.append(
                {
                    "role": "assistant",
                    "content": content,
                    "tool_calls": [
                        {
                            "id": call.id,
                            "type": "function",
                            "function": {
                                "name": call.function.name,
                                "arguments": call.function.arguments,
                            },
                        }
                        for call in message.tool_calls
                    ],
                }
            )
            for call in message.tool_calls:
                tool_calls_made += 1
                result = self._execute(
                    executor, call.function.name, call.function.arguments
                )
                messages.append(
                    {
                        "role": "tool",
                        "tool_call_id": call.id,
                        "content": json.dumps(
                            {"status": result.status, "payload": result.payload}
                        ),
                    }
                )
        else:
            logger.warning(
                "Agent reached the turn limit (%d) with tool calls pending",
                self._config.max_turns,
            )

        return AgentInvocationResult(
            output=content,
            token_usage=TokenUsage(input_tokens, output_tokens, self._config.premium),
            tool_calls_made=tool_calls_made,
            is_complete=is_complete,
        )

    def _execute(
        self, executor: ToolExecutor, name: str, raw_arguments: str
    ) -> ToolResult:
        try:
            arguments = json.loads(raw_arguments or "{}")
        except json.JSONDecodeError as e:
            return ToolResult("error", f"Arguments for '{name}' are not valid JSON: {e}")
        if not isinstance(arguments, dict):
            return ToolResult("error", f"Arguments for '{name}' must be a JSON object")
        return executor(name, arguments)
