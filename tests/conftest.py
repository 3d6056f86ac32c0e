"""
Shared pytest fixtures for the Todo test suite.

Provides the in-process stub service, configuration values pointing at
it, and a client bound to that configuration.  Live-service fixtures
live in ``tests/api/conftest.py``.

Key Concepts Demonstrated:
- Session-scoped live server shared across tests
- Function-scoped state reset for test isolation
- Explicit configuration values instead of global state
"""

from __future__ import annotations

from collections.abc import Generator

import pytest
from faker import Faker

from config import TodoTestConfig
from tests.stub_server import TodoStore, create_app, serve
from todo_client.api import TodoApiClient


fake = Faker()


# -----------------------------------------------------------------------------
# Stub Service Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture(scope="session")
def stub_store() -> TodoStore:
    """Provide the store backing the stub service."""
    return TodoStore()


@pytest.fixture(scope="session")
def stub_base_url(stub_store) -> Generator[str, None, None]:
    """
    Start the stub service for the whole session.

    Yields:
        Base URL of the running stub.
    """
    with serve(create_app(stub_store)) as base_url:
        yield base_url


@pytest.fixture
def clean_store(stub_store) -> Generator[TodoStore, None, None]:
    """Empty the stub before and after a test and restore atomic creates."""
    stub_store.clear()
    stub_store.atomic = True
    yield stub_store
    stub_store.clear()
    stub_store.atomic = True
    stub_store.race_window = 0.05


@pytest.fixture
def racy_store(clean_store) -> TodoStore:
    """Switch the stub to non-atomic creates with a wide race window for one test."""
    clean_store.atomic = False
    clean_store.race_window = 0.3
    return clean_store


# -----------------------------------------------------------------------------
# Client Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def stub_config(stub_base_url) -> TodoTestConfig:
    """Configuration pointing at the stub service with short timeouts."""
    return TodoTestConfig(
        base_url=stub_base_url,
        ws_url="ws://127.0.0.1:1/ws",
        request_timeout=5.0,
        connect_timeout=1.0,
        race_join_timeout=10.0,
    )


@pytest.fixture
def stub_api(stub_config, clean_store) -> Generator[TodoApiClient, None, None]:
    """Provide a client bound to an empty stub service."""
    with TodoApiClient(stub_config) as client:
        yield client


# -----------------------------------------------------------------------------
# Test Data Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture
def todo_text() -> str:
    """Provide a random, human-readable todo text."""
    return fake.sentence(nb_words=5)
