from __future__ import annotations

import threading
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from stagesync.domain.config import ConnectionConfig
from stagesync.domain.entities import ConnectionStatus, RequestKind
from stagesync.domain.ports import ApiResponse, TransportOptions


class RecordingStatusSink:
    def __init__(self) -> None:
        self.statuses: List[ConnectionStatus] = []
        self.logs: List[Tuple[str, str]] = []

    def update_status(self, status: ConnectionStatus) -> None:
        self.statuses.append(status)

    def log(self, level: str, message: str) -> None:
        self.logs.append((level, message))

    def messages(self, level: str) -> List[str]:
        return [msg for lvl, msg in self.logs if lvl == level]


class RecordingStore:
    def __init__(self) -> None:
        self.calls: List[Tuple[str, Any]] = []
        self._lock = threading.Lock()

    def _record(self, name: str, value: Any) -> None:
        with self._lock:
            self.calls.append((name, value))

    def update_room_state(self, partial: Mapping[str, Any]) -> None:
        self._record("room", dict(partial))

    def update_playback_state(self, partial: Mapping[str, Any]) -> None:
        self._record("playback", dict(partial))

    def update_timer_state(self, partial: Mapping[str, Any]) -> None:
        self._record("timer", dict(partial))

    def update_message_state(self, partial: Mapping[str, Any]) -> None:
        self._record("message", dict(partial))

    def update_flashing_state(self, count: int) -> None:
        self._record("flash", count)

    def of(self, name: str) -> List[Any]:
        return [value for kind, value in self.calls if kind == name]


class FakeApi:
    """Responds per request kind with a dict payload or raises an exception."""

    def __init__(self, replies: Optional[Dict[RequestKind, Any]] = None) -> None:
        self.replies: Dict[RequestKind, Any] = dict(replies or {})
        self.calls: List[Tuple[RequestKind, Dict[str, Any]]] = []
        self._lock = threading.Lock()

    def send(self, kind: RequestKind, params: Mapping[str, Any]) -> ApiResponse:
        with self._lock:
            self.calls.append((kind, dict(params)))
        reply = self.replies.get(kind)
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            reply = reply(dict(params))
        return ApiResponse(data=dict(reply or {}))

    def calls_for(self, kind: RequestKind) -> List[Dict[str, Any]]:
        return [params for k, params in self.calls if k == kind]


class FakeTransport:
    """Records registrations; tests fire signals by hand."""

    def __init__(self, options: TransportOptions) -> None:
        self.options = options
        self.handlers: Dict[str, List[Callable[..., None]]] = {}
        self.manager_handlers: Dict[str, List[Callable[..., None]]] = {}
        self.connect_calls = 0
        self.disconnect_calls = 0
        self.connected = False

    def on(self, event: str, handler: Callable[..., None]) -> None:
        self.handlers.setdefault(event, []).append(handler)

    def on_manager(self, event: str, handler: Callable[..., None]) -> None:
        self.manager_handlers.setdefault(event, []).append(handler)

    def connect(self) -> None:
        self.connect_calls += 1

    def disconnect(self) -> None:
        self.disconnect_calls += 1
        if self.connected:
            self.connected = False
            self.fire("disconnect", "io client disconnect")

    def fire(self, event: str, *args: Any) -> None:
        if event == "connect":
            self.connected = True
        for handler in self.handlers.get(event, []):
            handler(*args)

    def fire_manager(self, event: str, *args: Any) -> None:
        for handler in self.manager_handlers.get(event, []):
            handler(*args)


class TransportRecorder:
    """TransportFactory that keeps every transport it built."""

    def __init__(self) -> None:
        self.built: List[FakeTransport] = []

    def __call__(self, options: TransportOptions) -> FakeTransport:
        transport = FakeTransport(options)
        self.built.append(transport)
        return transport


def make_config(**overrides: str) -> ConnectionConfig:
    values = {
        "service_origin": "https://api.stagetimer.io",
        "socket_path": "/v1/socket.io",
        "room_id": "ROOM1234",
        "api_key": "secret-key",
    }
    values.update(overrides)
    return ConnectionConfig(**values)


__all__ = [
    "FakeApi",
    "FakeTransport",
    "RecordingStatusSink",
    "RecordingStore",
    "TransportRecorder",
    "make_config",
]
