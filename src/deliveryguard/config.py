"""
Configuration objects for the delivery control loop.

The core never reads files or environment variables on its own: hosts build
these objects (directly, from a dict, or from a JSON file via load_config())
and pass them in. Unknown fields are rejected at construction time.
"""

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any


@dataclass
class BudgetConfig:
    """Premium-request budget for the resource-limit guardrail."""

    premium_request_budget: int = 100
    warn_threshold: float = 0.8
    block_threshold: float = 0.9

    def __post_init__(self) -> None:
        if self.premium_request_budget <= 0:
            raise ValueError("budget.premium_request_budget must be positive")
        if not 0 < self.warn_threshold < self.block_threshold <= 1:
            raise ValueError(
                "budget thresholds must satisfy 0 < warn_threshold < block_threshold <= 1"
            )


@dataclass
class ChurnConfig:
    failure_threshold: int = 3

    def __post_init__(self) -> None:
        if self.failure_threshold < 2:
            raise ValueError("churn.failure_threshold must be at least 2")


@dataclass
class ToolDisciplineConfig:
    tool_call_threshold: int = 50
    max_file_reads: int = 3
    max_command_retries: int = 3

    def __post_init__(self) -> None:
        if min(self.tool_call_threshold, self.max_file_reads, self.max_command_retries) <= 0:
            raise ValueError("tool_discipline limits must be positive")


@dataclass
class FailureConfig:
    failure_threshold: int = 3

    def __post_init__(self) -> None:
        if self.failure_threshold < 1:
            raise ValueError("failure.failure_threshold must be at least 1")


@dataclass
class OracleConfig:
    model: str = "gpt-5-mini"

    def __post_init__(self) -> None:
        if not self.model:
            raise ValueError("oracle.model must be non-empty")


@dataclass
class ModelConfig:
    """Model used for agent invocations in each phase."""

    requirement_gathering: str = "gpt-5"
    planning: str = "gpt-5"
    building: str = "gpt-5"


@dataclass
class WorkflowConfig:
    max_iterations: int = 100

    def __post_init__(self) -> None:
        if self.max_iterations <= 0:
            raise ValueError("workflow.max_iterations must be positive")


@dataclass
class DeliveryGuardConfig:
    """All tunables of the control loop, grouped by concern."""

    budget: BudgetConfig = field(default_factory=BudgetConfig)
    churn: ChurnConfig = field(default_factory=ChurnConfig)
    tool_discipline: ToolDisciplineConfig = field(default_factory=ToolDisciplineConfig)
    failure: FailureConfig = field(default_factory=FailureConfig)
    oracle: OracleConfig = field(default_factory=OracleConfig)
    models: ModelConfig = field(default_factory=ModelConfig)
    workflow: WorkflowConfig = field(default_factory=WorkflowConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DeliveryGuardConfig":
        """
        Build a config from nested dicts.

        Raises:
            TypeError: On unknown sections or fields
            ValueError: On out-of-range values
        """
        sections = {
            "budget": BudgetConfig,
            "churn": ChurnConfig,
            "tool_discipline": ToolDisciplineConfig,
            "failure": FailureConfig,
            "oracle": OracleConfig,
            "models": ModelConfig,
            "workflow": WorkflowConfig,
        }
        unknown = set(data) - set(sections)
        if unknown:
            raise TypeError(f"Unknown config sections: {', '.join(sorted(unknown))}")
        return cls(**{name: sections[name](**data.get(name, {})) for name in sections})

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def load_config(path: str | Path) -> DeliveryGuardConfig:
    """
    Load configuration from a JSON file.

    Args:
        path: JSON file whose top-level keys are config sections

    Returns:
        Validated DeliveryGuardConfig

    Raises:
        FileNotFoundError: If the file does not exist
        json.JSONDecodeError: If the file is not valid JSON
    """
    with open(path) as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise TypeError("Config file must contain a JSON object")
    return DeliveryGuardConfig.from_dict(data)
