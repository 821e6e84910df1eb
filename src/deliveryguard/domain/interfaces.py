"""
Domain interfaces (Ports) for the delivery control loop.

These abstract base classes define the contracts adapters must satisfy.
They have no external dependencies and represent the core's boundaries
with the agent, the specification storage and usage accounting.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from deliveryguard.domain.models import (
        AgentInvocationResult,
        ModuleInfo,
        SessionMetrics,
        TokenUsage,
        ToolDefinition,
    )


class AgentInterface(ABC):
    """
    Port for invoking the external LLM-backed agent.

    The core assumes nothing about the agent beyond this request/response
    shape. The agent may run its own tool loop; from the core's point of view
    one call is one invocation.
    """

    @abstractmethod
    def invoke(
        self,
        system_prompt: str,
        model: str,
        tools: "Sequence[ToolDefinition]" = (),
    ) -> "AgentInvocationResult":
        """
        Run one agent invocation.

        Args:
            system_prompt: Fully rendered prompt for this invocation
            model: Model identifier to use
            tools: Tools the agent may call during the invocation

        Returns:
            AgentInvocationResult with output text, usage and tool-call count

        Raises:
            AgentInvocationError: If the agent could not be invoked
        """
        pass


class SpecificationStoreInterface(ABC):
    """
    Port for read-only access to per-module specification documents.
    """

    @abstractmethod
    def list_modules(self) -> list["ModuleInfo"]:
        """
        Discover modules known to the store.

        Returns:
            One ModuleInfo per module, with or without a specification
        """
        pass

    @abstractmethod
    def read_specification(self, module_name: str) -> str | None:
        """
        Read a module's specification content.

        Args:
            module_name: Module to read (case-insensitive)

        Returns:
            The document text, or None if the module has no specification

        Raises:
            OSError: If the document exists but cannot be read
        """
        pass


class TokenTrackerInterface(ABC):
    """
    Port for accumulating agent usage within a run.
    """

    @abstractmethod
    def record_usage(self, usage: "TokenUsage") -> None:
        """
        Record usage for one agent invocation.

        Args:
            usage: Tokens consumed and whether the request was premium
        """
        pass

    @abstractmethod
    def get_session_metrics(self) -> "SessionMetrics":
        """
        Returns:
            Cumulative metrics for the current run
        """
        pass
