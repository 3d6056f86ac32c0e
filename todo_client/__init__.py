"""
Test-support tooling for the Todo HTTP/WebSocket service.

This package holds everything the test suites share:

- api: thin ``requests`` client for the /todos endpoints
- notifications: WebSocket client that buffers push notifications
- race: harness that fires concurrent actors at one conflict key
- load: threaded load runner with latency statistics
- models: Todo and push-notification value objects
"""

import logging

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

from todo_client.api import TodoApiClient, TodoApiError
from todo_client.models import Todo, TodoNotification, next_todo_id
from todo_client.notifications import ConnectionState, NotificationClient
from todo_client.race import ActorOutcome, HarnessTimeoutError, RaceHarness, RaceResult

__all__ = [
    "ActorOutcome",
    "ConnectionState",
    "HarnessTimeoutError",
    "NotificationClient",
    "RaceHarness",
    "RaceResult",
    "Todo",
    "TodoApiClient",
    "TodoApiError",
    "TodoNotification",
    "next_todo_id",
]
