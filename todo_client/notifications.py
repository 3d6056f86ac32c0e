"""
WebSocket client that buffers push notifications for assertions.

The client keeps one streaming connection open for the length of a test,
appends every inbound text frame to an ordered buffer and lets the test
thread block until a number of new frames has arrived.

``websocket-client`` delivers the open/message/close/error callbacks on
its own thread, so the buffer, the countdown and the connection state are
only touched under ``self._lock``.

State machine::

    disconnected --connect()--> connecting --on_open--> open
    connecting --on_error/on_close/timeout--> disconnected
    open --close()/on_close--> disconnected

There is no automatic reconnection.  ``reconnect()`` only resets local
state; the caller opens a new session with ``connect()``.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Any, Callable

import websocket

from todo_client.models import TodoNotification

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    """Lifecycle of the streaming connection."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSING = "closing"


class _MessageLatch:
    """One-shot countdown released after ``count`` new messages."""

    def __init__(self, count: int):
        self.remaining = count
        self.released = threading.Event()
        if count <= 0:
            self.released.set()

    def count_down(self) -> None:
        if self.remaining > 0:
            self.remaining -= 1
            if self.remaining == 0:
                self.released.set()


class NotificationClient:
    """
    Buffering client for the Todo push-notification channel.

    Args:
        url: WebSocket endpoint, e.g. ``ws://localhost:4242/ws``.
        connect_timeout: Default seconds ``connect()`` waits for the open
            handshake.
        app_factory: Builds the transport; defaults to
            ``websocket.WebSocketApp``.  Tests pass a fake here.
    """

    def __init__(
        self,
        url: str,
        connect_timeout: float = 5.0,
        app_factory: Callable[..., Any] = websocket.WebSocketApp,
    ):
        self.url = url
        self.connect_timeout = connect_timeout
        self._app_factory = app_factory
        self._app: Any | None = None
        self._thread: threading.Thread | None = None

        self._lock = threading.Lock()
        self._state_changed = threading.Condition(self._lock)
        self._messages: list[str] = []
        self._latch: _MessageLatch | None = None
        self._state = ConnectionState.DISCONNECTED

    @classmethod
    def from_config(cls, config) -> NotificationClient:
        """Create a client for the WebSocket URL in a TodoTestConfig."""
        return cls(config.ws_url, connect_timeout=config.connect_timeout)

    # -------------------------------------------------------------------------
    # Connection lifecycle
    # -------------------------------------------------------------------------

    @property
    def state(self) -> ConnectionState:
        with self._lock:
            return self._state

    def _set_state(self, state: ConnectionState) -> None:
        with self._state_changed:
            self._state = state
            self._state_changed.notify_all()

    def connect(self, timeout: float | None = None) -> None:
        """
        Open the connection and block until the server acknowledges it.

        Raises:
            ConnectionError: If the connection is not open within
                ``timeout`` seconds, or the transport fails first.
        """
        if timeout is None:
            timeout = self.connect_timeout

        with self._state_changed:
            if self._state is ConnectionState.OPEN:
                return
            self._state = ConnectionState.CONNECTING

        logger.info("Connecting to WebSocket %s", self.url)
        app = self._app_factory(
            self.url,
            on_open=self.on_open,
            on_message=self.on_message,
            on_close=self.on_close,
            on_error=self.on_error,
        )
        thread = threading.Thread(target=app.run_forever, name="notification-client", daemon=True)
        with self._lock:
            self._app, self._thread = app, thread
        thread.start()

        with self._state_changed:
            self._state_changed.wait_for(
                lambda: self._state is not ConnectionState.CONNECTING,
                timeout=timeout,
            )
            opened = self._state is ConnectionState.OPEN
            if not opened:
                self._state = ConnectionState.DISCONNECTED
                detached = self._detach_transport()

        if not opened:
            self._stop_transport(*detached)
            raise ConnectionError(f"WebSocket {self.url} did not open within {timeout}s")

    def close(self, timeout: float | None = None) -> None:
        """Close the connection and wait for the transport thread to stop."""
        with self._state_changed:
            if self._state is ConnectionState.DISCONNECTED and self._app is None:
                return
            if self._state is ConnectionState.OPEN:
                self._state = ConnectionState.CLOSING
            detached = self._detach_transport()

        logger.info("Closing WebSocket %s", self.url)
        self._stop_transport(*detached, timeout=timeout)
        self._set_state(ConnectionState.DISCONNECTED)

    def _detach_transport(self) -> tuple[Any | None, threading.Thread | None]:
        """Forget the current transport; the caller holds ``self._lock``."""
        detached = (self._app, self._thread)
        self._app, self._thread = None, None
        return detached

    def _stop_transport(
        self,
        app: Any | None,
        thread: threading.Thread | None,
        timeout: float | None = None,
    ) -> None:
        if app is not None:
            app.close()
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout if timeout is not None else self.connect_timeout)

    def _shutdown_transport(self, timeout: float | None = None) -> None:
        with self._lock:
            detached = self._detach_transport()
        self._stop_transport(*detached, timeout=timeout)

    def reconnect(self) -> None:
        """
        Reset to a fresh, unconnected client bound to the same URL.

        Closes an open connection (blocking), clears the buffer and marks
        the client disconnected.  No new connection is made; call
        ``connect()`` to open one.
        """
        if self.is_connected():
            self.close()
        else:
            self._shutdown_transport()

        with self._state_changed:
            self._messages.clear()
            self._latch = None
            self._state = ConnectionState.DISCONNECTED
            self._state_changed.notify_all()
        logger.info("WebSocket client reset for %s", self.url)

    def is_connected(self) -> bool:
        """
        Return the last state reported by the transport callbacks.

        This may lag the socket while a close is in flight.
        """
        return self.state is ConnectionState.OPEN

    def __enter__(self) -> NotificationClient:
        self.connect()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Transport callbacks (run on the transport thread)
    # -------------------------------------------------------------------------

    # Callbacks from a transport that was already shut down are ignored.

    def on_open(self, ws: Any) -> None:
        with self._state_changed:
            if ws is not self._app or self._state is not ConnectionState.CONNECTING:
                return
            self._state = ConnectionState.OPEN
            self._state_changed.notify_all()
        logger.info("WebSocket connection opened: %s", self.url)

    def on_message(self, ws: Any, message: str) -> None:
        with self._lock:
            if ws is not self._app:
                return
            self._messages.append(message)
            if self._latch is not None:
                self._latch.count_down()
        logger.info("WebSocket message received: %s", message)

    def on_close(self, ws: Any, status_code: int | None, reason: str | None) -> None:
        logger.info("WebSocket connection closed. Code: %s, Reason: %s", status_code, reason)
        with self._state_changed:
            if ws is not self._app:
                return
            self._state = ConnectionState.DISCONNECTED
            self._state_changed.notify_all()

    def on_error(self, ws: Any, error: Exception) -> None:
        logger.error("WebSocket error: %s", error)
        with self._state_changed:
            if ws is not self._app:
                return
            if self._state is ConnectionState.CONNECTING:
                self._state = ConnectionState.DISCONNECTED
                self._state_changed.notify_all()

    # -------------------------------------------------------------------------
    # Buffer
    # -------------------------------------------------------------------------

    def wait_for_messages(self, count: int, timeout: float) -> bool:
        """
        Block until ``count`` messages arrive after this call, or timeout.

        Each call arms a fresh countdown; overlapping waits are not
        supported.

        Returns:
            True if the messages arrived in time, False otherwise.
        """
        latch = _MessageLatch(count)
        with self._lock:
            self._latch = latch
        satisfied = latch.released.wait(timeout)
        if not satisfied:
            logger.warning("Received %d of %d expected messages within %ss", count - latch.remaining, count, timeout)
        return satisfied

    def get_received_messages(self) -> tuple[str, ...]:
        """Return a snapshot of the buffer in arrival order."""
        with self._lock:
            return tuple(self._messages)

    def received_notifications(self) -> list[TodoNotification]:
        """Parse the buffered frames as Todo notifications."""
        return [TodoNotification.parse(message) for message in self.get_received_messages()]

    def clear_messages(self) -> None:
        """Empty the buffer; the connection is left as it is."""
        with self._lock:
            self._messages.clear()
