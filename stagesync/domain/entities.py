from __future__ import annotations

"""Domain value objects shared across adapters, use-cases, and the state store."""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, Mapping, Optional


class _Unset:
    """Marker for snapshot fields that were not carried by a payload."""

    _instance: Optional["_Unset"] = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


class ConnectionStatus(str, Enum):
    """Connection status reported to the host status sink."""

    CONNECTING = "connecting"
    OK = "ok"
    DISCONNECTED = "disconnected"
    CONNECTION_FAILURE = "connection_failure"
    UNKNOWN_ERROR = "unknown_error"

    def __str__(self) -> str:
        return self.value


class PushEvent(str, Enum):
    """Push events the timer service sends over the socket."""

    PLAYBACK_STATUS = "playback_status"
    ROOM = "room"
    FLASH = "flash"
    MESSAGE = "message"


class RequestKind(str, Enum):
    """Request/response calls used to fill in data the push stream omits."""

    GET_ROOM = "get_room"
    GET_STATUS = "get_status"
    GET_TIMER = "get_timer"


def _payload(data: Any) -> Mapping[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise TypeError(f"Expected an object payload, got {type(data).__name__}")
    return data


@dataclass(frozen=True)
class _Snapshot:
    """Base for partial field sets merged into the state store."""

    def as_update(self) -> Dict[str, Any]:
        """Return only the fields that were set on this snapshot."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNSET
        }


@dataclass(frozen=True)
class RoomSnapshot(_Snapshot):
    room_id: Any = UNSET
    room_name: Any = UNSET
    room_blackout: Any = UNSET
    room_focus: Any = UNSET

    @classmethod
    def from_room(cls, data: Any) -> "RoomSnapshot":
        """Full snapshot from a ``get_room`` response."""
        payload = _payload(data)
        return cls(
            room_id=payload.get("_id"),
            room_name=payload.get("name"),
            room_blackout=payload.get("blackout"),
            room_focus=payload.get("focus_message"),
        )

    @classmethod
    def from_event(cls, data: Any) -> "RoomSnapshot":
        """Partial snapshot from a ``room`` push event.

        The event never carries the room id or name, so those stay unset and
        the store keeps whatever it already has.
        """
        payload = _payload(data)
        return cls(
            room_blackout=payload.get("blackout"),
            room_focus=payload.get("focus_message"),
        )


@dataclass(frozen=True)
class PlaybackSnapshot(_Snapshot):
    current_timer_id: Any = UNSET
    is_running: Any = UNSET
    kickoff: Any = UNSET
    deadline: Any = UNSET
    last_stop: Any = UNSET

    @classmethod
    def from_payload(cls, data: Any) -> "PlaybackSnapshot":
        payload = _payload(data)
        return cls(
            current_timer_id=payload.get("timer_id"),
            is_running=payload.get("running"),
            kickoff=payload.get("start"),
            deadline=payload.get("finish"),
            last_stop=payload.get("pause"),
        )


@dataclass(frozen=True)
class TimerSnapshot(_Snapshot):
    name: Any = UNSET
    speaker: Any = UNSET
    notes: Any = UNSET
    duration: Any = UNSET
    wrap_up_yellow_at: Any = UNSET
    wrap_up_red_at: Any = UNSET

    @classmethod
    def from_payload(cls, data: Any) -> "TimerSnapshot":
        payload = _payload(data)
        return cls(
            name=payload.get("name"),
            speaker=payload.get("speaker"),
            notes=payload.get("notes"),
            duration=payload.get("duration"),
            wrap_up_yellow_at=payload.get("wrap_up_yellow"),
            wrap_up_red_at=payload.get("wrap_up_red"),
        )


@dataclass(frozen=True)
class MessageSnapshot(_Snapshot):
    showing: Any = UNSET
    text: Any = UNSET
    color: Any = UNSET
    bold: Any = UNSET
    uppercase: Any = UNSET

    @classmethod
    def from_payload(cls, data: Any) -> "MessageSnapshot":
        payload = _payload(data)
        return cls(
            showing=payload.get("showing"),
            text=payload.get("text"),
            color=payload.get("color"),
            bold=payload.get("bold"),
            uppercase=payload.get("uppercase"),
        )


def flash_count(data: Any) -> int:
    """Extract the flash count from a ``flash`` push event."""
    payload = _payload(data)
    raw = payload.get("count")
    # Forwarded verbatim: only a real integer is accepted.
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ValueError(f"flash: invalid count {raw!r}")
    return raw


__all__ = [
    "ConnectionStatus",
    "MessageSnapshot",
    "PlaybackSnapshot",
    "PushEvent",
    "RequestKind",
    "RoomSnapshot",
    "TimerSnapshot",
    "UNSET",
    "flash_count",
]
