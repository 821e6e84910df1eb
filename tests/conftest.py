"""Shared pytest fixtures for deliveryguard tests."""

import pytest

from deliveryguard.domain.hierarchy import WorkTree
from deliveryguard.domain.models import GuardrailContext
from deliveryguard.infrastructure.persistence.memory import InMemorySpecificationStore
from deliveryguard.infrastructure.token_tracker import InMemoryTokenTracker

AUTH_SPEC = """# Auth Module

## Overview
Users sign in with an email address and a password. Sessions last one day.

## Acceptance Criteria
- [ ] Login works
- [ ] Logout works
"""


@pytest.fixture
def auth_spec() -> str:
    """A drafted specification with two unchecked acceptance criteria."""
    return AUTH_SPEC


@pytest.fixture
def spec_store(auth_spec: str) -> InMemorySpecificationStore:
    """Store holding the 'auth' specification and a module without one."""
    return InMemorySpecificationStore({"auth": auth_spec, "billing": None})


@pytest.fixture
def token_tracker() -> InMemoryTokenTracker:
    return InMemoryTokenTracker()


@pytest.fixture
def work_tree() -> WorkTree:
    """auth -> auth.login -> auth.login.form"""
    tree = WorkTree()
    tree.add_module("auth", "Auth")
    tree.add_child("auth", "auth.login", "Login")
    tree.add_child("auth.login", "auth.login.form", "Render form")
    return tree


@pytest.fixture
def sample_context() -> GuardrailContext:
    return GuardrailContext(module_name="auth", task_name="auth.login.form")
