"""Shared fixtures."""

import pytest

from rulekit.config import get_settings
from rulekit.predicates import PredicateRegistry, default_registry


@pytest.fixture
def registry() -> PredicateRegistry:
    return default_registry()


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are lru_cached; isolate tests that touch the environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
