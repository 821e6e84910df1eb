"""
Guardrails for the delivery control loop.

Each guardrail is a callable returning Pass, Warn(message) or Block(message)
for a GuardrailContext. The pipeline runs them all and keeps the most severe.

- resource: premium-request budget
- churn: repeated attempts on the same task (stateful)
- quality: completion claims without a passing verification
- tool_discipline: excessive tool calls, re-reads and retries
"""

from deliveryguard.guardrails.churn import ChurnDetectionGuardrail
from deliveryguard.guardrails.pipeline import Guardrail, GuardrailPipeline, most_severe
from deliveryguard.guardrails.quality import QualityGateGuardrail
from deliveryguard.guardrails.resource import ResourceLimitGuardrail
from deliveryguard.guardrails.tool_discipline import ToolDisciplineGuardrail

__all__ = [
    # Policies
    "ResourceLimitGuardrail",
    "ChurnDetectionGuardrail",
    "QualityGateGuardrail",
    "ToolDisciplineGuardrail",
    # Composition
    "Guardrail",
    "GuardrailPipeline",
    "most_severe",
]
