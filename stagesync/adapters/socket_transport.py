"""Socket.IO transport adapter for one authenticated timer-service room.

The adapter wraps a threaded ``socketio.Client`` with library reconnection
disabled and runs its own bounded reconnection loop instead, so it can surface
the manager signals (``reconnect_attempt``, ``reconnect``, ``reconnect_failed``)
that ``python-socketio`` only logs.

Dependencies:
    - ``python-socketio`` (client extra) for the wire protocol.

Call context:
    - Built by ``ConnectionSession.start`` through a ``TransportFactory``;
      ``SocketIOTransport`` itself is that factory.
"""

from __future__ import annotations

import logging
import random
import threading
from typing import Any, Callable, Dict, List, Optional

import socketio
from socketio import exceptions as sio_exc

from stagesync.domain.ports import (
    CLIENT_DISCONNECT_REASON,
    EventHandler,
    TransportHandle,
    TransportOptions,
)

CLIENT_DISCONNECT = CLIENT_DISCONNECT_REASON
SERVER_DISCONNECT = "io server disconnect"
TRANSPORT_ERROR = "transport error"
TRANSPORT_CLOSE = "transport close"

# python-socketio reason strings -> Socket.IO client vocabulary
_REASONS = {
    "client disconnect": CLIENT_DISCONNECT,
    "server disconnect": SERVER_DISCONNECT,
    "transport error": TRANSPORT_ERROR,
}
_LIFECYCLE_EVENTS = ("connect", "connect_error", "disconnect", "error")


def _default_client() -> socketio.Client:
    return socketio.Client(reconnection=False, logger=False, engineio_logger=False)


class SocketIOTransport(TransportHandle):
    """Transport handle with socket-level and manager-level listeners."""

    def __init__(
        self,
        options: TransportOptions,
        *,
        client_factory: Optional[Callable[[], Any]] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.options = options
        self._client = (client_factory or _default_client)()
        self._rng = rng or random.Random()
        self._log = logging.getLogger(__name__)
        self._listeners: Dict[str, List[EventHandler]] = {}
        self._manager_listeners: Dict[str, List[EventHandler]] = {}
        self._lock = threading.Lock()
        self._closing = False
        self._reconnecting = False
        self._connect_error_reported = False

        self._client.on("connect", self._handle_connect)
        self._client.on("connect_error", self._handle_connect_error)
        self._client.on("disconnect", self._handle_disconnect)

    # ---------- TransportHandle ----------

    @property
    def connected(self) -> bool:
        return bool(self._client.connected)

    def on(self, event: str, handler: EventHandler) -> None:
        handlers = self._listeners.setdefault(event, [])
        if not handlers and event not in _LIFECYCLE_EVENTS:
            self._client.on(event, self._forwarder(event))
        handlers.append(handler)

    def on_manager(self, event: str, handler: EventHandler) -> None:
        self._manager_listeners.setdefault(event, []).append(handler)

    def connect(self) -> None:
        """Open the channel; a failed first attempt enters the reconnect loop."""
        with self._lock:
            self._closing = False
        try:
            self._open()
        except sio_exc.ConnectionError as exc:
            self._report_connect_failure(exc)
            self._start_reconnect()

    def disconnect(self) -> None:
        """Close the channel for good; no reconnection happens afterwards."""
        with self._lock:
            self._closing = True
        self._client.disconnect()

    # ---------- Reconnection ----------

    def backoff_delay(self, attempt: int) -> float:
        """Delay before reconnect ``attempt`` (1-based), jittered and capped."""
        opts = self.options
        delay = opts.reconnection_delay_s * (2 ** max(0, attempt - 1))
        if opts.randomization_factor:
            rand = self._rng.random()
            deviation = rand * opts.randomization_factor * delay
            delay = delay - deviation if int(rand * 10) % 2 == 0 else delay + deviation
        return max(0.0, min(delay, opts.reconnection_delay_max_s))

    def _start_reconnect(self) -> None:
        with self._lock:
            if self._reconnecting or self._closing:
                return
            self._reconnecting = True
        self._client.start_background_task(self._reconnect_loop)

    def _reconnect_loop(self) -> None:
        attempt = 0
        try:
            while not self._closing:
                if attempt >= self.options.reconnection_attempts:
                    self._log.info("Giving up after %d reconnection attempts", attempt)
                    self._emit_manager("reconnect_failed")
                    return
                attempt += 1
                self._client.sleep(self.backoff_delay(attempt))
                if self._closing:
                    return
                self._emit_manager("reconnect_attempt", attempt)
                try:
                    self._open()
                except sio_exc.ConnectionError as exc:
                    self._report_connect_failure(exc)
                    continue
                if self._closing:
                    # disconnect() raced the handshake; drop the late connection.
                    self._client.disconnect()
                    return
                # Dropped again before the handshake settled.
                if not self.connected:
                    continue
                self._emit_manager("reconnect", attempt)
                return
        finally:
            with self._lock:
                self._reconnecting = False

    def _open(self) -> None:
        self._connect_error_reported = False
        try:
            self._client.connect(
                self.options.url,
                auth=dict(self.options.auth),
                socketio_path=self.options.socket_path,
                wait_timeout=self.options.connect_timeout_s,
            )
        except sio_exc.ConnectionError:
            raise
        except sio_exc.SocketIOError as exc:
            self._emit("error", exc)
            raise sio_exc.ConnectionError(str(exc)) from exc

    def _report_connect_failure(self, exc: Exception) -> None:
        self._emit_manager("error", exc)
        if not self._connect_error_reported:
            self._emit("connect_error", exc)

    # ---------- socketio.Client callbacks ----------

    def _handle_connect(self) -> None:
        # Listeners may block on HTTP fetches; client.connect() waits on this callback.
        self._client.start_background_task(self._deliver_connect)

    def _deliver_connect(self) -> None:
        if self._closing:
            self._client.disconnect()
            return
        self._emit("connect")

    def _handle_connect_error(self, data: Any = None) -> None:
        self._connect_error_reported = True
        if isinstance(data, dict):
            message = str(data.get("message") or data)
        else:
            message = str(data or "connection refused")
        self._emit("connect_error", sio_exc.ConnectionError(message))

    def _handle_disconnect(self, reason: Optional[str] = None) -> None:
        if self._closing:
            mapped = CLIENT_DISCONNECT
        else:
            mapped = _REASONS.get(reason or "", reason or TRANSPORT_CLOSE)
        self._emit("disconnect", mapped)
        if not self._closing and mapped not in (CLIENT_DISCONNECT, SERVER_DISCONNECT):
            self._start_reconnect()

    # ---------- Listener fan-out ----------

    def _forwarder(self, event: str) -> EventHandler:
        def forward(*args: Any) -> None:
            self._emit(event, *args)

        return forward

    def _emit(self, event: str, *args: Any) -> None:
        for handler in list(self._listeners.get(event, ())):
            try:
                handler(*args)
            except Exception as exc:
                self._log.exception("Listener for %r failed", event)
                if event != "error":
                    self._emit("error", exc)

    def _emit_manager(self, event: str, *args: Any) -> None:
        for handler in list(self._manager_listeners.get(event, ())):
            try:
                handler(*args)
            except Exception:
                self._log.exception("Manager listener for %r failed", event)


__all__ = [
    "CLIENT_DISCONNECT",
    "SERVER_DISCONNECT",
    "SocketIOTransport",
    "TRANSPORT_CLOSE",
    "TRANSPORT_ERROR",
]
