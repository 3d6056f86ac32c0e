"""
Fixtures for the live-service API suite.

Configuration comes from ``get_config()`` (profile, ``test.yml`` and
``TODO_*`` environment variables).  Every test starts and ends with an
empty todo list; cleanup failures are logged, not raised, so that a
flaky teardown does not mask the real test result.

Key SDET Concepts Demonstrated:
- Session-scoped live service discovery shared across the suite
- Autouse setup/teardown for test isolation
- Module-scoped WebSocket connection reused by related tests
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Generator
from dataclasses import replace

import pytest
import requests

from config import TodoTestConfig, get_config
from shared.live_stack import live_service_url
from todo_client.api import TodoApiClient, TodoApiError
from todo_client.notifications import NotificationClient

logger = logging.getLogger(__name__)


@pytest.fixture(scope="session")
def todo_config() -> TodoTestConfig:
    settings = get_config()
    logger.info("Base URL: %s", settings.base_url)
    logger.info("WebSocket URL: %s", settings.ws_url)
    return settings


@pytest.fixture(scope="session")
def todo_base_url(todo_config) -> Generator[str, None, None]:
    """Yield the URL of a healthy Todo service, or skip the suite."""
    yield from live_service_url(
        base_url=todo_config.base_url,
        suite_name="api",
        compose_project_default=f"todo-api-{uuid.uuid4().hex[:8]}",
    )


@pytest.fixture(scope="session")
def api(todo_config, todo_base_url) -> Generator[TodoApiClient, None, None]:
    """Provide a client bound to the live service."""
    with TodoApiClient(replace(todo_config, base_url=todo_base_url)) as client:
        yield client


def _clean_up(api: TodoApiClient, phase: str) -> None:
    try:
        api.clean_up_all_todos()
        logger.info("Successfully cleaned up all todos %s test", phase)
    except (requests.RequestException, TodoApiError) as exc:
        logger.warning("Failed to clean up todos %s test: %s", phase, exc)


@pytest.fixture(autouse=True)
def clean_todos(request, api) -> Generator[None, None, None]:
    """Empty the todo list before and after every test."""
    logger.info("Setting up test environment for: %s", request.node.name)
    _clean_up(api, "before")
    yield
    logger.info("Cleaning up after test: %s", request.node.name)
    _clean_up(api, "after")


@pytest.fixture(scope="module")
def ws_client(todo_config, todo_base_url) -> Generator[NotificationClient, None, None]:
    """Provide one open notification client per test module."""
    client = NotificationClient.from_config(todo_config)
    try:
        client.connect()
    except ConnectionError as exc:
        pytest.fail(f"WebSocket connection to {todo_config.ws_url} failed: {exc}")
    yield client
    client.close()
