"""
Helper utilities for Locust performance scenarios.

Todo ids are chosen by the client, so every virtual user needs ids that
no other user (or earlier run) has taken.  Payloads vary a little so the
service does not keep hitting one code path.
"""

from __future__ import annotations

import base64
import random
import string
import time
from typing import Any


def basic_auth_header(username: str, password: str) -> dict[str, str]:
    """Build the headers a DELETE needs."""
    token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return {"Authorization": f"Basic {token}"}


def unique_todo_id() -> int:
    """
    Return an id unlikely to collide across users and runs.

    A millisecond timestamp shifted left leaves room for a random suffix,
    so parallel users starting in the same millisecond still differ.
    """
    return int(time.time() * 1000) * 1000 + random.randint(0, 999)


def random_todo_payload(todo_id: int) -> dict[str, Any]:
    """Build a valid todo body for ``todo_id``."""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=5))
    return {
        "id": todo_id,
        "text": f"Perf todo {suffix}",
        "completed": random.random() < 0.3,
    }
