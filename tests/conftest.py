"""
Pytest fixtures for policy-finder tests.

Provides common fixtures used across all test modules.
"""

from __future__ import annotations

from typing import Any, Generator

import pytest

from policy_finder.finder.updatable import UpdatablePolicyFinderModule
from policy_finder.observability import InMemoryMetricHook, ObservabilityHooks
from policy_finder.parsing import DocumentPolicyParser
from policy_finder.policies.store import PolicyStore


# ============================================================================
# Observability Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def reset_observability_hooks() -> Generator[None, None, None]:
    """Reset the process-wide ObservabilityHooks instance around each test."""
    ObservabilityHooks.reset_instance()
    yield
    ObservabilityHooks.reset_instance()


@pytest.fixture
def memory_hook() -> InMemoryMetricHook:
    return InMemoryMetricHook()


@pytest.fixture
def hooks(memory_hook: InMemoryMetricHook) -> ObservabilityHooks:
    """A private hooks registry wired to an in-memory metric hook."""
    registry = ObservabilityHooks()
    registry.add_metric_hook(memory_hook)
    return registry


# ============================================================================
# Store and Finder Fixtures
# ============================================================================


@pytest.fixture
def store() -> PolicyStore:
    return PolicyStore()


@pytest.fixture
def parser() -> DocumentPolicyParser:
    return DocumentPolicyParser()


@pytest.fixture
def finder(store: PolicyStore, hooks: ObservabilityHooks) -> UpdatablePolicyFinderModule:
    """An updatable finder in the default (combine) mode."""
    return UpdatablePolicyFinderModule(store=store, hooks=hooks)


@pytest.fixture
def strict_finder(store: PolicyStore, hooks: ObservabilityHooks) -> UpdatablePolicyFinderModule:
    """An updatable finder that reports several matches as an error."""
    return UpdatablePolicyFinderModule(
        {"selection_mode": "error_on_ambiguity"}, store=store, hooks=hooks
    )


# ============================================================================
# Document Fixtures
# ============================================================================


@pytest.fixture
def read_policy_document() -> dict[str, Any]:
    return {
        "type": "Policy",
        "id": "urn:example:policy:read",
        "version": "1.2",
        "description": "Anyone may read documents",
        "target": {"action": ["read"], "resource-type": ["document"]},
        "required_attributes": ["action"],
    }


@pytest.fixture
def admin_policy_set_document() -> dict[str, Any]:
    return {
        "type": "PolicySet",
        "id": "urn:example:policyset:admin",
        "target": {"role": ["admin"]},
        "combining_algorithm": "deny-overrides",
        "policies": [
            {"type": "Policy", "id": "urn:example:policy:admin-write", "target": {"action": "write"}},
            {"type": "Policy", "id": "urn:example:policy:admin-delete", "target": {"action": "delete"}},
        ],
    }
