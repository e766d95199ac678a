"""Shared test fixtures."""

import pytest

import draftpr.settings as settings_module
from draftpr.models import Issue


@pytest.fixture(autouse=True)
def reset_lru_cache():
    settings_module._load_toml.cache_clear()
    yield
    settings_module._load_toml.cache_clear()


@pytest.fixture
def issue() -> Issue:
    return Issue(
        number=123,
        title="Fix bug",
        description="desc",
        url="https://x/123",
    )

