"""
Infrastructure layer for the delivery control loop.

Contains adapters for external concerns (agents, specification storage,
usage accounting, console interaction, registry).
"""

from deliveryguard.infrastructure.console import ConsoleApprover
from deliveryguard.infrastructure.llm import (
    MockAgent,
    OllamaAgent,
    OllamaAgentConfig,
    ScriptedTurn,
)
from deliveryguard.infrastructure.persistence import (
    FilesystemSpecificationStore,
    InMemorySpecificationStore,
)
from deliveryguard.infrastructure.registry import AgentRegistry
from deliveryguard.infrastructure.token_tracker import InMemoryTokenTracker

__all__ = [
    # Specification stores
    "InMemorySpecificationStore",
    "FilesystemSpecificationStore",
    # Agents
    "OllamaAgent",
    "OllamaAgentConfig",
    "MockAgent",
    "ScriptedTurn",
    # Registry
    "AgentRegistry",
    # Usage
    "InMemoryTokenTracker",
    # Human gate
    "ConsoleApprover",
]
