"""
HTTP client for the Todo service REST API.

Wraps the /todos endpoints with one method per verb and variant used by
the tests.  Each thread gets its own ``requests.Session`` so that the
race harness and load runner can call the client from many workers at
once.

Endpoints:
    GET    /todos         - List todos (offset/limit supported)
    GET    /todos/<id>    - Get a single todo
    POST   /todos         - Create a todo
    PUT    /todos/<id>    - Update a todo
    DELETE /todos/<id>    - Delete a todo (Basic auth required)
"""

from __future__ import annotations

import base64
import logging
import threading
from typing import Any, Callable, Mapping

import requests

from config import TodoTestConfig
from todo_client.constants import (
    APPLICATION_JSON,
    AUTHORIZATION,
    LIMIT,
    OFFSET,
    STATUS_CREATED,
    STATUS_OK,
    TODO_BY_ID_ENDPOINT,
    TODOS_ENDPOINT,
)
from todo_client.models import Todo

logger = logging.getLogger(__name__)

TodoPayload = Todo | Mapping[str, Any]


class TodoApiError(RuntimeError):
    """Raised when a setup call against the service does not succeed."""


def _body(todo: TodoPayload) -> Any:
    if isinstance(todo, Todo):
        return todo.to_dict()
    return dict(todo)


class TodoApiClient:
    """
    Client for the Todo REST API.

    Args:
        config: Session configuration (base URL, credentials, timeouts).
        session_factory: Callable returning a new ``requests.Session``;
            called once per thread.
    """

    def __init__(
        self,
        config: TodoTestConfig,
        session_factory: Callable[[], requests.Session] = requests.Session,
    ):
        self.config = config
        self.base_url = config.base_url.rstrip("/")
        self._session_factory = session_factory
        self._local = threading.local()
        self._sessions: list[requests.Session] = []
        self._sessions_lock = threading.Lock()

    # -------------------------------------------------------------------------
    # Plumbing
    # -------------------------------------------------------------------------

    @property
    def session(self) -> requests.Session:
        """Return the calling thread's session, creating it on first use."""
        session = getattr(self._local, "session", None)
        if session is None:
            session = self._session_factory()
            session.headers.update({"Accept": APPLICATION_JSON})
            self._local.session = session
            with self._sessions_lock:
                self._sessions.append(session)
        return session

    def _url(self, todo_id: Any | None = None) -> str:
        if todo_id is None:
            return f"{self.base_url}{TODOS_ENDPOINT}"
        return f"{self.base_url}{TODO_BY_ID_ENDPOINT.format(id=todo_id)}"

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        kwargs.setdefault("timeout", self.config.request_timeout)
        response = self.session.request(method, url, **kwargs)
        logger.debug("%s %s -> %s %s", method, url, response.status_code, response.text)
        return response

    def close(self) -> None:
        """Close every session opened by this client."""
        with self._sessions_lock:
            for session in self._sessions:
                session.close()
            self._sessions.clear()
        self._local = threading.local()

    def __enter__(self) -> TodoApiClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def basic_auth_header(self) -> str:
        """Build the Basic auth header value for the admin account."""
        credentials = f"{self.config.admin_username}:{self.config.admin_password}"
        return "Basic " + base64.b64encode(credentials.encode("utf-8")).decode("ascii")

    # -------------------------------------------------------------------------
    # Read
    # -------------------------------------------------------------------------

    def list_todos(self, offset: int | None = None, limit: int | None = None) -> requests.Response:
        """GET /todos, optionally paginated."""
        params: dict[str, int] = {}
        if offset is not None:
            params[OFFSET] = offset
        if limit is not None:
            params[LIMIT] = limit
        if params:
            logger.info("Getting TODOs with offset %s and limit %s", offset, limit)
        else:
            logger.info("Getting all TODOs")
        return self._request("GET", self._url(), params=params or None)

    def list_todos_with_params(self, params: Mapping[str, str]) -> requests.Response:
        """GET /todos with arbitrary, possibly invalid, query parameters."""
        logger.info("Getting TODOs with raw params %s", dict(params))
        return self._request("GET", self._url(), params=dict(params))

    def get_todo(self, todo_id: Any) -> requests.Response:
        """GET /todos/<id>."""
        logger.info("Getting TODO with ID: %s", todo_id)
        return self._request("GET", self._url(todo_id))

    @staticmethod
    def todos_from_response(response: requests.Response) -> list[Todo]:
        """Parse a list response into Todo objects."""
        return [Todo.from_dict(item) for item in response.json()]

    def fetch_all_todos(self) -> list[Todo]:
        """Read back the authoritative list of todos."""
        response = self.list_todos()
        if response.status_code != STATUS_OK:
            raise TodoApiError(f"Listing todos failed. Status code: {response.status_code}")
        return self.todos_from_response(response)

    # -------------------------------------------------------------------------
    # Write
    # -------------------------------------------------------------------------

    def create_todo(self, todo: TodoPayload) -> requests.Response:
        """POST /todos with a Todo or a raw mapping as the body."""
        logger.info("Creating a new TODO: %s", todo)
        return self._request("POST", self._url(), json=_body(todo))

    def update_todo(self, todo_id: Any, todo: TodoPayload) -> requests.Response:
        """PUT /todos/<id>."""
        logger.info("Updating TODO with ID %s: %s", todo_id, todo)
        return self._request("PUT", self._url(todo_id), json=_body(todo))

    def update_todo_raw(self, todo: Todo) -> requests.Response:
        """
        PUT a todo to the path taken from its own id.

        A todo without an id is sent to ``/todos/0`` so that the request
        still reaches the update handler.
        """
        todo_id = todo.id if todo.id is not None else 0
        logger.info("Updating TODO with raw data: %s", todo)
        return self._request("PUT", self._url(todo_id), json=_body(todo))

    def delete_todo(self, todo_id: Any) -> requests.Response:
        """DELETE /todos/<id> with admin credentials."""
        return self.delete_todo_with_authorization(todo_id, self.basic_auth_header())

    def delete_todo_with_authorization(self, todo_id: Any, authorization: str) -> requests.Response:
        """DELETE /todos/<id> with an explicit Authorization header value."""
        logger.info("Deleting TODO with ID: %s", todo_id)
        return self._request("DELETE", self._url(todo_id), headers={AUTHORIZATION: authorization})

    def delete_todo_without_auth(self, todo_id: Any) -> requests.Response:
        """DELETE /todos/<id> with no Authorization header."""
        logger.info("Deleting TODO with ID %s without credentials", todo_id)
        return self._request("DELETE", self._url(todo_id))

    # -------------------------------------------------------------------------
    # Test data helpers
    # -------------------------------------------------------------------------

    def create_test_todo(self, text: str) -> Todo:
        """
        Create a todo and return it as stored by the service.

        The API answers a create with an empty body, so the stored entity
        is read back from the list.

        Raises:
            TodoApiError: If creation fails or the entity is not listed.
        """
        todo = Todo.with_text(text)
        response = self.create_todo(todo)

        if response.status_code not in (STATUS_CREATED, STATUS_OK):
            logger.error("Failed to create test TODO: %s", response.text)
            raise TodoApiError(f"Failed to create test TODO. Status code: {response.status_code}")

        for stored in self.fetch_all_todos():
            if stored.id == todo.id:
                return stored
        raise TodoApiError("Created todo not found in todos list")

    def clean_up_all_todos(self) -> None:
        """Delete every todo the service currently lists."""
        for todo in self.fetch_all_todos():
            self.delete_todo(todo.id)
