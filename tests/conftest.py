"""
Root conftest.py for augurk-expiration tests.

This file provides:
1. Common pytest markers for test categorization
2. Shared fixtures for the in-memory document store and its provider

Helpers to persist documents and read metadata back live in tests/helpers.py.
"""

from __future__ import annotations

import pytest

from augurk_expiration.db.nosql.memory import InMemoryDocumentStore
from augurk_expiration.db.provider import DocumentStoreProvider
from augurk_expiration.db.settings import StoreSettings
from tests.helpers import FakeClock

# =============================================================================
# PYTEST CONFIGURATION
# =============================================================================


def pytest_collection_modifyitems(config, items):
    """Tag tests by folder so `-m store` or `-m jobs` select them."""
    for item in items:
        norm = str(item.fspath).replace("\\", "/")
        if "/tests/unit/db/" in norm:
            item.add_marker(pytest.mark.store)
        if "/tests/unit/jobs/" in norm:
            item.add_marker(pytest.mark.jobs)


def pytest_configure(config):
    # Ensure custom markers are registered even if pyproject.toml isn't picked up in some contexts
    for name, desc in [
        ("store", "Document store and session tests"),
        ("expiration", "Expiration policy tests"),
        ("jobs", "Background jobs and scheduling tests"),
        ("cli", "Command line interface tests"),
    ]:
        config.addinivalue_line("markers", f"{name}: {desc}")


# =============================================================================
# STORE FIXTURES
# =============================================================================


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock) -> InMemoryDocumentStore:
    return InMemoryDocumentStore(clock=clock)


@pytest.fixture
def store_settings() -> StoreSettings:
    return StoreSettings(backend="memory", batch_size=512)


@pytest.fixture
def store_provider(store, store_settings) -> DocumentStoreProvider:
    """Provider wrapping the in-memory store, already initialized."""
    return DocumentStoreProvider(store, settings=store_settings)
