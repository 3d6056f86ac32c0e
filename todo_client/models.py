"""
Value objects for the Todo service.

This module defines the Todo payload sent to and read from the HTTP API,
and the push notification the service emits over WebSocket when a todo
is created.
"""

from __future__ import annotations

import itertools
import json
import time
from dataclasses import dataclass
from typing import Any, Mapping

from todo_client.constants import NEW_TODO_EVENT

# Seeded from the wall clock so ids differ between runs; the counter keeps
# them unique between threads of one run.
_id_sequence = itertools.count(int(time.time() * 1000))


def next_todo_id() -> int:
    """Return a fresh todo id, unique within this process."""
    return next(_id_sequence)


@dataclass
class Todo:
    """
    Todo item as exchanged with the API.

    Every field is optional so that tests can build deliberately
    incomplete payloads (missing id, text or completed).

    Attributes:
        id: Client-chosen identifier.
        text: Description of the todo.
        completed: Completion flag.
    """

    id: int | None = None
    text: str | None = None
    completed: bool | None = None

    @classmethod
    def default(cls) -> Todo:
        """Create a todo with default test values."""
        return cls(id=next_todo_id(), text="Test TODO", completed=False)

    @classmethod
    def with_text(cls, text: str) -> Todo:
        """Create an open todo with the given text."""
        return cls(id=next_todo_id(), text=text, completed=False)

    @classmethod
    def custom(cls, text: str, completed: bool) -> Todo:
        """Create a todo with the given text and completion status."""
        return cls(id=next_todo_id(), text=text, completed=completed)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Todo:
        """Build a todo from one item of an API response."""
        return cls(
            id=data.get("id"),
            text=data.get("text"),
            completed=data.get("completed"),
        )

    def to_dict(self) -> dict[str, Any]:
        """
        Convert the todo to a request body.

        Fields that are None are left out, so a missing field is absent
        from the JSON rather than sent as null.
        """
        body = {"id": self.id, "text": self.text, "completed": self.completed}
        return {key: value for key, value in body.items() if value is not None}


@dataclass(frozen=True)
class TodoNotification:
    """Push message emitted by the service when a todo is created."""

    type: str
    id: int | None
    text: str | None
    completed: bool | None

    @classmethod
    def parse(cls, message: str) -> TodoNotification:
        """
        Parse a raw WebSocket text frame.

        Raises:
            ValueError: If the frame is not a JSON object with a ``type``.
        """
        try:
            data = json.loads(message)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Notification is not valid JSON: {message!r}") from exc

        if not isinstance(data, dict) or "type" not in data:
            raise ValueError(f"Notification has no 'type' field: {message!r}")

        # Some service builds nest the entity under "data".
        payload = data.get("data", data)
        if not isinstance(payload, dict):
            payload = data
        return cls(
            type=data["type"],
            id=payload.get("id"),
            text=payload.get("text"),
            completed=payload.get("completed"),
        )

    @property
    def is_new_todo(self) -> bool:
        return self.type == NEW_TODO_EVENT

    def matches(self, todo: Todo) -> bool:
        """Return True if this is the creation notice for ``todo``."""
        return (
            self.is_new_todo
            and self.id == todo.id
            and self.text == todo.text
            and self.completed == todo.completed
        )
