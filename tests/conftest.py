"""Shared fixtures for ruleforge tests."""

import pytest

from ruleforge.validation.formats import FormatRegistry


@pytest.fixture(autouse=True)
def fresh_format_registry():
    """Give every test its own process-wide format registry."""
    FormatRegistry.reset_default()
    yield
    FormatRegistry.reset_default()
