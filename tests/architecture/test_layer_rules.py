"""
DDD/Hexagonal Architecture Layer Rules.

Permanent tests enforcing dependency direction between layers:
- Domain must not access Guardrails, Application or Infrastructure
- Guardrails must not access Application or Infrastructure
- Application must not access Infrastructure

These rules use PyTestArch's LayerRule API for declarative enforcement.
"""

import pytest
from pytestarch import LayerRule


class TestDDDLayerRules:
    """Permanent architecture rules enforcing Hexagonal architecture."""

    @pytest.mark.parametrize("outer", ["guardrails", "application", "infrastructure"])
    def test_domain_does_not_access_outer_layers(self, evaluable, layers, outer):
        """Domain must be pure: no policy, orchestration or adapter dependency."""
        rule = (
            LayerRule()
            .based_on(layers)
            .layers_that()
            .are_named("domain")
            .should_not()
            .access_layers_that()
            .are_named(outer)
        )
        rule.assert_applies(evaluable)

    @pytest.mark.parametrize("outer", ["application", "infrastructure"])
    def test_guardrails_do_not_access_outer_layers(self, evaluable, layers, outer):
        """Guardrails evaluate contexts; they never reach into the loop or adapters."""
        rule = (
            LayerRule()
            .based_on(layers)
            .layers_that()
            .are_named("guardrails")
            .should_not()
            .access_layers_that()
            .are_named(outer)
        )
        rule.assert_applies(evaluable)

    def test_application_does_not_access_infrastructure(self, evaluable, layers):
        """Application depends on domain ports, not concrete adapters."""
        rule = (
            LayerRule()
            .based_on(layers)
            .layers_that()
            .are_named("application")
            .should_not()
            .access_layers_that()
            .are_named("infrastructure")
        )
        rule.assert_applies(evaluable)
