"""Pytest configuration and shared fixtures."""

import pytest

from tagfields import IntrospectionConfig, Introspector


@pytest.fixture
def introspector() -> Introspector:
    """Introspector with default config and its own empty cache."""
    return Introspector()


@pytest.fixture
def single_slot_introspector() -> Introspector:
    """Introspector reserving one slot per absent composed record."""
    return Introspector(IntrospectionConfig(absent_slot_policy="single"))
