from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Literal, Mapping, Optional, Protocol

from stagesync.domain.entities import ConnectionStatus, RequestKind

# Disconnect reason reported for a close the client asked for itself.
CLIENT_DISCONNECT_REASON = "io client disconnect"

LogLevel = Literal["info", "warn", "error", "debug"]
EventHandler = Callable[..., None]


# ---- Error model ----
class UseCaseError(Exception):
    """Base class for use case level errors (user-presentable)."""

    def __init__(self, code: str, message: str, meta: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.meta = meta

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class SessionConfigError(UseCaseError):
    """Raised synchronously when a session is started without usable config."""

    def __init__(self, message: str):
        super().__init__("SESSION_CONFIG_INVALID", message)


# ---- Value types crossing the ports ----
@dataclass(frozen=True)
class ApiResponse:
    """Successful reply of a request/response call."""

    data: Dict[str, Any] = field(default_factory=dict)
    message: Optional[str] = None


@dataclass(frozen=True)
class TransportOptions:
    """Everything a transport needs to open one authenticated room channel.

    Attributes:
        url: Service origin, e.g. ``https://api.stagetimer.io``.
        socket_path: Handshake path, e.g. ``/v1/socket.io``.
        auth: Handshake auth payload (``room_id`` and ``api_key``).
        reconnection_attempts: Reconnect attempts before giving up.
        reconnection_delay_s: Initial backoff delay.
        reconnection_delay_max_s: Upper bound for any single backoff delay.
        randomization_factor: Jitter applied to each backoff delay.
        connect_timeout_s: How long one connect attempt waits for the handshake.
    """

    url: str
    socket_path: str
    auth: Mapping[str, str]
    reconnection_attempts: int = 5
    reconnection_delay_s: float = 1.0
    reconnection_delay_max_s: float = 10.0
    randomization_factor: float = 0.5
    connect_timeout_s: float = 5.0


# ---- Ports (Hexagonal boundaries) ----
class StatusSink(Protocol):
    """Host-facing connection status and log channel."""

    def update_status(self, status: ConnectionStatus) -> None: ...
    def log(self, level: LogLevel, message: str) -> None: ...


class ApiClientPort(Protocol):
    """Typed request/response calls against the timer service API.

    Failures raise ``ApiError`` subclasses with a descriptive message.
    """

    def send(self, kind: RequestKind, params: Mapping[str, Any]) -> ApiResponse: ...


class StateStorePort(Protocol):
    """Merges partial field sets; omitted fields are left untouched."""

    def update_room_state(self, partial: Mapping[str, Any]) -> None: ...
    def update_playback_state(self, partial: Mapping[str, Any]) -> None: ...
    def update_timer_state(self, partial: Mapping[str, Any]) -> None: ...
    def update_message_state(self, partial: Mapping[str, Any]) -> None: ...
    def update_flashing_state(self, count: int) -> None: ...


class TransportHandle(Protocol):
    """Bidirectional event channel to one authenticated room.

    Socket events: ``connect``, ``connect_error``, ``disconnect`` (reason),
    ``error`` plus the push events. Manager events: ``reconnect_attempt``
    (attempt), ``reconnect`` (attempt), ``reconnect_failed``, ``error``.
    """

    @property
    def connected(self) -> bool: ...
    def on(self, event: str, handler: EventHandler) -> None: ...
    def on_manager(self, event: str, handler: EventHandler) -> None: ...
    def connect(self) -> None: ...
    def disconnect(self) -> None: ...


TransportFactory = Callable[[TransportOptions], TransportHandle]
