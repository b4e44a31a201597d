"""Connection lifecycle manager for one timer-service room.

``ConnectionSession`` owns at most one transport at a time. It maps transport
and manager signals to ``ConnectionStatus`` values through two dispatch
tables, runs the bootstrap fetches after every successful connection, and
registers the push-event table on each new transport.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from stagesync.domain.config import ConnectionConfig
from stagesync.domain.entities import ConnectionStatus
from stagesync.domain.ports import (
    CLIENT_DISCONNECT_REASON,
    ApiClientPort,
    SessionConfigError,
    StateStorePort,
    StatusSink,
    TransportFactory,
    TransportHandle,
    TransportOptions,
)
from stagesync.usecases.bootstrap_sync import BootstrapSynchronizer
from stagesync.usecases.event_dispatcher import EventDispatcher
from stagesync.usecases.sync_timer import SyncTimer

RECONNECTION_ATTEMPTS = 5
RECONNECTION_DELAY_MAX_S = 10.0

SignalHandler = Callable[..., None]


def _noop(*_: object, **__: object) -> None:
    """Default no-op callback used for hooks."""


@dataclass
class SessionHooks:
    """Optional callbacks for hosts that need more than the status sink."""

    on_connected: Callable[[], None] = _noop
    on_gave_up: Callable[[], None] = _noop

    def __post_init__(self) -> None:
        self.on_connected = self.on_connected or _noop
        self.on_gave_up = self.on_gave_up or _noop


def _describe(error: Any) -> str:
    message = getattr(error, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(error) or error.__class__.__name__


class ConnectionSession:
    """Use-case object with ``start``/``stop`` as its only mutators."""

    def __init__(
        self,
        *,
        status: StatusSink,
        api: ApiClientPort,
        store: StateStorePort,
        transport_factory: TransportFactory,
        bootstrap: Optional[Callable[[], None]] = None,
        dispatcher: Optional[EventDispatcher] = None,
        hooks: Optional[SessionHooks] = None,
        reconnection_attempts: int = RECONNECTION_ATTEMPTS,
        reconnection_delay_max_s: float = RECONNECTION_DELAY_MAX_S,
    ) -> None:
        self.status = status
        self.transport_factory = transport_factory
        sync_timer = SyncTimer(api=api, store=store, status=status)
        self.bootstrap = bootstrap or BootstrapSynchronizer(api, store, status, sync_timer=sync_timer)
        self.dispatcher = dispatcher or EventDispatcher(api, store, status, sync_timer=sync_timer)
        self.hooks = hooks or SessionHooks()
        self.reconnection_attempts = reconnection_attempts
        self.reconnection_delay_max_s = reconnection_delay_max_s
        self._transport: Optional[TransportHandle] = None

    @property
    def transport(self) -> Optional[TransportHandle]:
        """The live transport, if any."""
        return self._transport

    def stop(self) -> None:
        """Disconnect the current transport; safe to call at any time."""
        transport, self._transport = self._transport, None
        if transport is None:
            return
        transport.disconnect()

    def start(self, config: ConnectionConfig) -> TransportHandle:
        """Tear down any previous transport and connect with ``config``.

        Raises:
            SessionConfigError: ``config`` is missing or incomplete.
        """
        self._check_config(config)
        self.stop()

        self.status.log("info", "Connecting to Stagetimer.io...")
        self.status.update_status(ConnectionStatus.CONNECTING)

        transport = self.transport_factory(self._transport_options(config))
        for event, handler in self.lifecycle_table().items():
            transport.on(event, handler)
        for event, handler in self.manager_table().items():
            transport.on_manager(event, handler)
        for event, handler in self.dispatcher.table().items():
            transport.on(event, handler)

        self._transport = transport
        transport.connect()
        return transport

    # ---------- Dispatch tables ----------

    def lifecycle_table(self) -> Dict[str, SignalHandler]:
        """Socket-level signal -> status transition."""
        return {
            "connect": self._on_connect,
            "connect_error": self._on_connect_error,
            "disconnect": self._on_disconnect,
            "error": self._on_error,
        }

    def manager_table(self) -> Dict[str, SignalHandler]:
        """Reconnection-manager signal -> status transition."""
        return {
            "reconnect_attempt": self._on_reconnect_attempt,
            "reconnect": self._on_reconnect,
            "reconnect_failed": self._on_reconnect_failed,
            "error": self._on_manager_error,
        }

    # ---------- Transitions ----------

    def _on_connect(self, *_: Any) -> None:
        self.status.log("info", "Connected!")
        self.status.update_status(ConnectionStatus.OK)
        self.bootstrap()
        self.hooks.on_connected()

    def _on_connect_error(self, error: Any = None, *_: Any) -> None:
        self.status.log("warn", f"Failed to connect! ({_describe(error)})")
        self.status.update_status(ConnectionStatus.CONNECTION_FAILURE)

    def _on_disconnect(self, reason: Any = None, *_: Any) -> None:
        if reason == CLIENT_DISCONNECT_REASON:
            return
        self.status.log("warn", f"Disconnected! Reason: {reason}")
        self.status.update_status(ConnectionStatus.DISCONNECTED)

    def _on_error(self, error: Any = None, *_: Any) -> None:
        self.status.log("error", f"Unexpected error: {_describe(error)}")
        self.status.update_status(ConnectionStatus.UNKNOWN_ERROR)

    def _on_reconnect_attempt(self, attempt: Any = None, *_: Any) -> None:
        self.status.log("warn", f"Reconnecting... (Attempt #{attempt})")
        self.status.update_status(ConnectionStatus.CONNECTING)

    def _on_reconnect(self, attempt: Any = None, *_: Any) -> None:
        # Bootstrap already ran on the ``connect`` that accompanies a reconnect.
        self.status.log("info", f"Reconnected on attempt #{attempt}!")
        self.status.update_status(ConnectionStatus.OK)

    def _on_reconnect_failed(self, *_: Any) -> None:
        self.status.log("error", "Unable to connect to Stagetimer.io!")
        self.status.update_status(ConnectionStatus.CONNECTION_FAILURE)
        self.hooks.on_gave_up()

    def _on_manager_error(self, error: Any = None, *_: Any) -> None:
        self.status.log("debug", f"[Socket manager] Unexpected error: {_describe(error)}")

    # ---------- Helpers ----------

    @staticmethod
    def _check_config(config: Any) -> None:
        if config is None:
            raise SessionConfigError("Connection config required")
        if not isinstance(config, ConnectionConfig):
            raise SessionConfigError(
                f"Expected ConnectionConfig, got {type(config).__name__}"
            )
        missing = [
            name
            for name in ("service_origin", "socket_path", "room_id", "api_key")
            if not getattr(config, name)
        ]
        if missing:
            raise SessionConfigError(f"Connection config missing: {', '.join(missing)}")

    def _transport_options(self, config: ConnectionConfig) -> TransportOptions:
        return TransportOptions(
            url=config.service_origin,
            socket_path=config.socket_path,
            auth=config.auth(),
            reconnection_attempts=self.reconnection_attempts,
            reconnection_delay_max_s=self.reconnection_delay_max_s,
        )


__all__ = ["CLIENT_DISCONNECT_REASON", "ConnectionSession", "SessionHooks"]
