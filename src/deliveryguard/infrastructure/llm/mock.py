"""
Mock agent for testing without an LLM.

Returns predefined responses in sequence.
"""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from deliveryguard.domain.interfaces import AgentInterface
from deliveryguard.domain.models import (
    AgentInvocationResult,
    TokenUsage,
    ToolDefinition,
    ToolResult,
)

ToolExecutor = Callable[[str, Mapping[str, Any]], ToolResult]


@dataclass(frozen=True)
class ScriptedTurn:
    """One scripted invocation: tool calls to make, then the final output."""

    output: str = ""
    tool_calls: tuple[tuple[str, Mapping[str, Any]], ...] = ()
    token_usage: TokenUsage = TokenUsage(input_tokens=100, output_tokens=50)
    is_complete: bool = True


@dataclass(frozen=True)
class RecordedCall:
    system_prompt: str
    model: str
    tool_names: tuple[str, ...] = field(default_factory=tuple)


class MockAgent(AgentInterface):
    """Returns predefined responses for testing."""

    def __init__(
        self,
        responses: Sequence[str | ScriptedTurn | AgentInvocationResult | Exception],
        tool_executor: ToolExecutor | None = None,
    ):
        """
        Args:
            responses: Returned in sequence. Strings become complete results,
                exceptions are raised, ScriptedTurns run their tool calls
                through tool_executor first.
            tool_executor: Receives scripted tool calls (e.g. ToolHandlers.dispatch)
        """
        self._responses = list(responses)
        self._call_count = 0
        self.tool_executor = tool_executor
        self.calls: list[RecordedCall] = []
        self.tool_results: list[ToolResult] = []

    def invoke(
        self,
        system_prompt: str,
        model: str,
        tools: Sequence[ToolDefinition] = (),
    ) -> AgentInvocationResult:
        """Return the next predefined response."""
        if self._call_count >= len(self._responses):
            raise RuntimeError("MockAgent exhausted responses")

        response = self._responses[self._call_count]
        self._call_count += 1
        self.calls.append(
            RecordedCall(system_prompt, model, tuple(t.name for t in tools))
        )

        if isinstance(response, Exception):
            raise response
        if isinstance(response, AgentInvocationResult):
            return response
        if isinstance(response, str):
            return AgentInvocationResult(
                output=response, token_usage=TokenUsage(100, 50), is_complete=True
            )

        for name, arguments in response.tool_calls:
            if self.tool_executor is None:
                raise RuntimeError("ScriptedTurn has tool calls but no tool_executor")
            self.tool_results.append(self.tool_executor(name, arguments))

        return AgentInvocationResult(
            output=response.output,
            token_usage=response.token_usage,
            tool_calls_made=len(response.tool_calls),
            is_complete=response.is_complete,
        )

    @property
    def call_count(self) -> int:
        """Number of times invoke() has been called."""
        return self._call_count

    def reset(self) -> None:
        """Reset the call counter to reuse responses."""
        self._call_count = 0
        self.calls.clear()
        self.tool_results.clear()
