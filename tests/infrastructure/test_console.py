"""Tests for ConsoleApprover."""

import io

import pytest
from rich.console import Console
from rich.prompt import Prompt

from deliveryguard.application.phase_controller import PhaseTransitionController
from deliveryguard.infrastructure.console import ConsoleApprover
from deliveryguard.infrastructure.persistence.memory import InMemorySpecificationStore


@pytest.fixture
def console() -> Console:
    return Console(file=io.StringIO(), width=100)


def _answer(monkeypatch, answer):
    monkeypatch.setattr(Prompt, "ask", classmethod(lambda cls, *a, **kw: answer))


class TestConsoleApprover:
    """Human review of a drafted specification."""

    def test_yes_approves(self, monkeypatch, spec_store, console):
        _answer(monkeypatch, "y")
        controller = PhaseTransitionController()

        assert ConsoleApprover(spec_store, console)("auth", controller)
        assert controller.is_planning_approved

        output = console.file.getvalue()
        assert "SPECIFICATION REVIEW REQUIRED" in output
        assert "0/2 checked" in output

    def test_no_resets(self, monkeypatch, spec_store, console):
        _answer(monkeypatch, "n")
        controller = PhaseTransitionController()
        controller.approve()

        assert not ConsoleApprover(spec_store, console)("auth", controller)
        assert not controller.is_planning_approved

    def test_missing_spec_is_not_approvable(self, monkeypatch, console):
        _answer(monkeypatch, "y")
        controller = PhaseTransitionController()

        approver = ConsoleApprover(InMemorySpecificationStore(), console)
        assert not approver("auth", controller)
        assert "No specification found" in console.file.getvalue()
