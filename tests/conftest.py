"""Shared pytest fixtures for the moderation service tests."""

from __future__ import annotations

import pytest

from zplus import create_app
from zplus.services.kv_store import MemoryStore
from zplus.services.moderation import ContentModerationFilter
from zplus.utils.cache import clear_pattern_cache


@pytest.fixture(autouse=True)
def _fresh_pattern_cache():
    clear_pattern_cache()
    yield
    clear_pattern_cache()


@pytest.fixture()
def store():
    return MemoryStore()


@pytest.fixture()
def moderation(store):
    """A filter seeded lazily with the default word list."""
    return ContentModerationFilter(store)


@pytest.fixture()
def empty_moderation(store):
    """A filter whose list starts empty instead of with the defaults."""
    return ContentModerationFilter(store, defaults=[])


@pytest.fixture()
def app(store):
    """An app on TestConfig sharing the ``store`` fixture."""
    return create_app("zplus.config.TestConfig", store=store)


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def runner(app):
    return app.test_cli_runner()
