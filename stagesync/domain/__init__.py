"""Domain package exports for value objects and ports."""

from .config import ConnectionConfig, DEFAULT_API_URL, ServiceSettings
from .entities import (
    ConnectionStatus,
    MessageSnapshot,
    PlaybackSnapshot,
    PushEvent,
    RequestKind,
    RoomSnapshot,
    TimerSnapshot,
    UNSET,
    flash_count,
)
from .ports import (
    ApiResponse,
    SessionConfigError,
    TransportOptions,
    UseCaseError,
)

__all__ = [
    "ApiResponse",
    "ConnectionConfig",
    "ConnectionStatus",
    "DEFAULT_API_URL",
    "MessageSnapshot",
    "PlaybackSnapshot",
    "PushEvent",
    "RequestKind",
    "RoomSnapshot",
    "ServiceSettings",
    "SessionConfigError",
    "TimerSnapshot",
    "TransportOptions",
    "UNSET",
    "UseCaseError",
    "flash_count",
]
