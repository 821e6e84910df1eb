"""
Agent adapters.
"""

from deliveryguard.infrastructure.llm.mock import MockAgent, ScriptedTurn
from deliveryguard.infrastructure.llm.ollama import OllamaAgent, OllamaAgentConfig

__all__ = [
    "MockAgent",
    "ScriptedTurn",
    "OllamaAgent",
    "OllamaAgentConfig",
]
