"""
Oracle verifier: an independent, agent-backed check of completion evidence.

The oracle is asked, with a fixed prompt, whether evidence meets acceptance
criteria and must answer {"pass": bool, "gaps": [str]}. Anything that does
not parse into that shape is a failed verdict.
"""

import json
import logging

from pydantic import BaseModel, ConfigDict, Field, StrictBool, ValidationError

from deliveryguard.domain.exceptions import AgentInvocationError
from deliveryguard.domain.interfaces import AgentInterface
from deliveryguard.domain.models import OracleVerdict, VerificationScope
from deliveryguard.domain.prompts import render_oracle_prompt

logger = logging.getLogger(__name__)

DEFAULT_ORACLE_MODEL = "gpt-5-mini"


class OracleResponse(BaseModel):
    """Structured oracle output. ``pass`` must be a JSON boolean."""

    model_config = ConfigDict(populate_by_name=True)

    passed: StrictBool = Field(alias="pass")
    gaps: list[str] = Field(default_factory=list)


def extract_json(text: str) -> str:
    """Strip markdown fences and cut the outermost {...} span."""
    trimmed = text.strip()
    if trimmed.startswith("```"):
        first_newline = trimmed.find("\n")
        if first_newline >= 0:
            trimmed = trimmed[first_newline + 1 :]
        last_fence = trimmed.rfind("```")
        if last_fence >= 0:
            trimmed = trimmed[:last_fence]

    start = trimmed.find("{")
    end = trimmed.rfind("}")
    if start >= 0 and end > start:
        return trimmed[start : end + 1]
    return trimmed


def parse_verdict(output: str | None, scope: VerificationScope) -> OracleVerdict:
    """
    Parse raw oracle output into a verdict.

    Passes only when ``pass`` is true and no gaps are listed. Empty,
    non-JSON or wrongly shaped output yields passed=False with a gap
    describing the problem.
    """
    if not output or output.isspace():
        return OracleVerdict(scope, False, ("Oracle returned empty response",))

    try:
        data = json.loads(extract_json(output))
    except json.JSONDecodeError:
        return OracleVerdict(
            scope, False, (f"Oracle response was not valid JSON: {output[:200]}",)
        )

    if isinstance(data, dict):
        # Keys are matched case-insensitively
        data = {str(k).lower(): v for k, v in data.items()}
    try:
        response = OracleResponse.model_validate(data)
    except ValidationError as e:
        return OracleVerdict(
            scope,
            False,
            (f"Oracle response could not be parsed: {e.error_count()} error(s)",),
        )

    gaps = tuple(response.gaps)
    return OracleVerdict(scope, response.passed and not gaps, gaps)


class OracleVerifier:
    """Dispatches the oracle through the agent contract and parses its verdict."""

    def __init__(self, agent: AgentInterface, model: str = DEFAULT_ORACLE_MODEL):
        """
        Args:
            agent: Agent used for oracle invocations (no tools are offered)
            model: Model identifier, typically a cheap fast model
        """
        if not model:
            raise ValueError("model must be non-empty")
        self._agent = agent
        self.model = model

    def verify(
        self, scope: VerificationScope, evidence: str, acceptance_criteria: str
    ) -> OracleVerdict:
        """
        Ask the oracle whether evidence satisfies the criteria.

        Raises:
            ValueError: If evidence or acceptance criteria are blank
        """
        if not evidence or evidence.isspace():
            raise ValueError("evidence must be non-empty")
        if not acceptance_criteria or acceptance_criteria.isspace():
            raise ValueError("acceptance_criteria must be non-empty")

        logger.info(
            "Dispatching oracle verification for %s using model %s",
            scope.value,
            self.model,
        )
        prompt = render_oracle_prompt(scope, evidence, acceptance_criteria)

        try:
            result = self._agent.invoke(prompt, self.model, ())
        except AgentInvocationError as e:
            logger.error("Oracle invocation failed for %s: %s", scope.value, e)
            return OracleVerdict(scope, False, (f"Oracle invocation failed: {e}",))

        verdict = parse_verdict(result.output, scope)
        logger.info(
            "Oracle verdict for %s: passed=%s, gaps=%d",
            scope.value,
            verdict.passed,
            len(verdict.gaps),
        )
        return verdict
