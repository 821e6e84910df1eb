"""
Agent Registry with Entry Points Discovery.

Provides dynamic agent loading via Python entry points (deliveryguard.agents group).
External packages can register agents in their pyproject.toml:

    [project.entry-points."deliveryguard.agents"]
    MyAgent = "mypackage.agents:MyAgent"
"""

import warnings
from importlib.metadata import entry_points
from typing import Any

from deliveryguard.domain.interfaces import AgentInterface


class AgentRegistry:
    """
    Registry for AgentInterface implementations.

    Discovers agents via the 'deliveryguard.agents' entry point group.
    Entry points are only loaded on first access.

    Example usage:
        registry = AgentRegistry()
        agent = registry.create("OllamaAgent", base_url="http://gpu-box:11434/v1")
    """

    _agents: dict[str, type[AgentInterface]] = {}
    _loaded: bool = False

    @classmethod
    def _load_entry_points(cls) -> None:
        """Load agents from entry points (lazy, called once)."""
        if cls._loaded:
            return

        for ep in entry_points(group="deliveryguard.agents"):
            try:
                cls._agents[ep.name] = ep.load()
            except (ImportError, AttributeError) as e:
                warnings.warn(
                    f"Failed to load agent '{ep.name}' from entry point: {e}",
                    stacklevel=2,
                )

        cls._loaded = True

    @classmethod
    def register(cls, name: str, agent_class: type[AgentInterface]) -> None:
        """
        Manually register an agent class.

        Args:
            name: Agent identifier (e.g., "OllamaAgent")
            agent_class: Class implementing AgentInterface
        """
        cls._agents[name] = agent_class

    @classmethod
    def get(cls, name: str) -> type[AgentInterface]:
        """
        Raises:
            KeyError: If agent not found
        """
        cls._load_entry_points()
        if name not in cls._agents:
            available = ", ".join(cls._agents.keys()) or "(none)"
            raise KeyError(f"Agent '{name}' not found. Available agents: {available}")
        return cls._agents[name]

    @classmethod
    def create(cls, name: str, **config: Any) -> AgentInterface:
        """
        Create an agent instance by name.

        Args:
            name: Agent identifier
            **config: Configuration passed to the agent constructor

        Raises:
            KeyError: If agent not found
            TypeError: If config doesn't match constructor signature
        """
        return cls.get(name)(**config)

    @classmethod
    def available(cls) -> list[str]:
        cls._load_entry_points()
        return list(cls._agents.keys())

    @classmethod
    def clear(cls) -> None:
        """
        Clear all registered agents (useful for testing).

        Also resets the loaded flag so entry points can be reloaded.
        """
        cls._agents.clear()
        cls._loaded = False
