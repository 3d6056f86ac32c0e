"""
Test-suite configuration module.

This module defines the immutable configuration value handed to every
client, harness and fixture in the suite.  Values come from a named
profile, an optional YAML file and environment variables, in that order
of precedence (environment wins).

Key Concepts Demonstrated:
- Frozen dataclass configuration passed explicitly instead of a global
- Environment-variable overrides for CI deployability
- Profile lookup table with a safe default
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

# Base directory of the project
BASE_DIR = Path(__file__).resolve().parent

DEFAULT_CONFIG_FILE = BASE_DIR / "test.yml"


@dataclass(frozen=True)
class TodoTestConfig:
    """
    Connection and timing settings for one test session.

    Attributes:
        base_url: Root URL of the Todo HTTP API.
        ws_url: URL of the push-notification WebSocket endpoint.
        admin_username: Username for Basic auth on DELETE.
        admin_password: Password for Basic auth on DELETE.
        request_timeout: Per-request HTTP timeout in seconds.
        connect_timeout: Seconds to wait for the WebSocket to open.
        race_join_timeout: Seconds the race harness waits for its actors.
        race_actor_count: Number of concurrent actors per race.
    """

    base_url: str = "http://localhost:8080"
    ws_url: str = "ws://localhost:4242/ws"
    admin_username: str = "admin"
    admin_password: str = "admin"
    request_timeout: float = 10.0
    connect_timeout: float = 5.0
    race_join_timeout: float = 30.0
    race_actor_count: int = 5


# Profile defaults.  CI runs against a compose network with longer timeouts.
PROFILES: dict[str, dict[str, Any]] = {
    "local": {},
    "ci": {
        "base_url": "http://todo-app:4242",
        "ws_url": "ws://todo-app:4242/ws",
        "request_timeout": 20.0,
        "connect_timeout": 10.0,
        "race_join_timeout": 60.0,
    },
    "testing": {
        "request_timeout": 2.0,
        "connect_timeout": 1.0,
        "race_join_timeout": 5.0,
    },
}
PROFILES["default"] = PROFILES["local"]

ENV_OVERRIDES: dict[str, str] = {
    "base_url": "TODO_BASE_URL",
    "ws_url": "TODO_WS_URL",
    "admin_username": "TODO_ADMIN_USERNAME",
    "admin_password": "TODO_ADMIN_PASSWORD",
    "request_timeout": "TODO_REQUEST_TIMEOUT",
    "connect_timeout": "TODO_CONNECT_TIMEOUT",
    "race_join_timeout": "TODO_RACE_JOIN_TIMEOUT",
    "race_actor_count": "TODO_RACE_ACTORS",
}

# YAML files use dotted property names, e.g. "base.url".
FILE_KEYS: dict[str, str] = {
    "base.url": "base_url",
    "ws.url": "ws_url",
    "admin.username": "admin_username",
    "admin.password": "admin_password",
    "request.timeout": "request_timeout",
    "connect.timeout": "connect_timeout",
    "race.join.timeout": "race_join_timeout",
    "race.actors": "race_actor_count",
}


def _coerce(name: str, value: Any) -> Any:
    """Convert a raw file/env value to the type declared on the dataclass."""
    field_types = {f.name: f.type for f in fields(TodoTestConfig)}
    declared = field_types[name]
    try:
        if declared == "float":
            return float(value)
        if declared == "int":
            return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Config value for '{name}' must be numeric, got {value!r}") from exc
    return str(value)


def _load_file(path: Path) -> dict[str, Any]:
    """
    Read overrides from a YAML file.

    Returns an empty mapping when the file does not exist.

    Raises:
        ValueError: If the file is not a YAML mapping.
    """
    if not path.exists():
        logger.warning("Unable to find %s, using default configuration", path)
        return {}

    with path.open("r", encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Config file {path} is not valid YAML") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")

    overrides: dict[str, Any] = {}
    for key, value in data.items():
        name = FILE_KEYS.get(key, key)
        if name not in ENV_OVERRIDES:
            logger.warning("Ignoring unknown config key %r in %s", key, path)
            continue
        overrides[name] = _coerce(name, value)
    return overrides


def _load_env() -> dict[str, Any]:
    """Collect overrides from ``TODO_*`` environment variables."""
    overrides: dict[str, Any] = {}
    for name, env_var in ENV_OVERRIDES.items():
        raw = os.environ.get(env_var)
        if raw:
            overrides[name] = _coerce(name, raw)
    return overrides


def get_config(env: str | None = None, path: str | Path | None = None) -> TodoTestConfig:
    """
    Build the configuration value for a test session.

    Args:
        env: Profile name ("local", "ci", "testing").  If None, uses the
             TODO_TEST_ENV environment variable.
        path: Optional YAML file.  If None, uses TODO_TEST_CONFIG or
              ``test.yml`` next to this module.

    Returns:
        An immutable TodoTestConfig.
    """
    if env is None:
        env = os.environ.get("TODO_TEST_ENV", "local")
    profile = PROFILES.get(env, PROFILES["default"])

    if path is None:
        path = os.environ.get("TODO_TEST_CONFIG", DEFAULT_CONFIG_FILE)

    settings = replace(TodoTestConfig(), **profile)
    settings = replace(settings, **_load_file(Path(path)))
    settings = replace(settings, **_load_env())

    logger.info("Loaded test config profile=%s base_url=%s ws_url=%s", env, settings.base_url, settings.ws_url)
    return settings
