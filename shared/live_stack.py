"""Live-service helpers for the black-box API and performance suites."""

from __future__ import annotations

import os
import subprocess
import time
from collections.abc import Generator
from pathlib import Path

import pytest
import requests


def is_service_ready(url: str, timeout: int = 2) -> bool:
    """Return True when ``GET /todos`` answers 200."""
    try:
        response = requests.get(f"{url}/todos", timeout=timeout)
    except requests.RequestException:
        return False
    return response.status_code == 200


def wait_for_service_healthy(url: str, timeout: int = 60, interval: int = 1) -> None:
    """Poll the todo list endpoint until ready or timeout."""
    deadline = time.time() + timeout
    while time.time() < deadline:
        if is_service_ready(url):
            return
        time.sleep(interval)
    raise RuntimeError(f"Todo service at {url} not healthy after {timeout}s")


def live_service_url(
    *,
    base_url: str,
    suite_name: str,
    base_url_env: str = "TODO_BASE_URL",
    compose_project_env: str = "TODO_COMPOSE_PROJECT",
    compose_file_env: str = "TODO_COMPOSE_FILE",
    compose_project_default: str = "todo-api-tests",
    compose_file_default: str = "docker-compose.test.yml",
) -> Generator[str, None, None]:
    """
    Yield a healthy Todo service base URL.

    Priority:
    1. Use an explicit URL from `base_url_env` (and wait for health).
    2. Reuse a service already answering at `base_url`.
    3. Start the compose stack when its file exists, tear it down on exit.
    4. Otherwise skip the requesting suite.
    """
    provided_base_url = os.getenv(base_url_env)
    if provided_base_url:
        wait_for_service_healthy(provided_base_url)
        yield provided_base_url
        return

    if is_service_ready(base_url):
        yield base_url
        return

    compose_file = os.getenv(compose_file_env, compose_file_default)
    if not Path(compose_file).exists():
        pytest.skip(
            f"Todo service not reachable at {base_url}; set {base_url_env} "
            f"or provide {compose_file} to run {suite_name} tests"
        )

    project_name = os.getenv(compose_project_env, compose_project_default)
    compose_cmd = ["docker", "compose", "-p", project_name, "-f", compose_file]
    compose_up_cmd = [*compose_cmd, "up", "-d"]
    compose_down_cmd = [*compose_cmd, "down", "-v", "--remove-orphans"]

    try:
        subprocess.run(
            compose_up_cmd,
            check=True,
            text=True,
            capture_output=True,
        )
    except FileNotFoundError:
        pytest.skip(
            f"docker is not installed; set {base_url_env} to run {suite_name} tests"
        )
    except subprocess.CalledProcessError as exc:
        subprocess.run(
            compose_down_cmd,
            check=False,
            text=True,
            capture_output=True,
        )
        raise RuntimeError(
            f"Failed to start docker compose stack.\n"
            f"stdout:\n{exc.stdout or ''}\nstderr:\n{exc.stderr or ''}"
        ) from exc

    try:
        wait_for_service_healthy(base_url)
        yield base_url
    finally:
        subprocess.run(compose_down_cmd, check=False)
