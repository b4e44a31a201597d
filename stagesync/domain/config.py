from __future__ import annotations

"""Connection settings and the per-attempt connection config derived from them."""

from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Mapping
from urllib.parse import urlsplit

from stagesync.domain.ports import SessionConfigError

DEFAULT_API_URL = "https://api.stagetimer.io/v1/"
SOCKET_IO_SEGMENT = "socket.io"


@dataclass(frozen=True)
class ConnectionConfig:
    """Immutable inputs for one connection attempt."""

    service_origin: str
    socket_path: str
    room_id: str
    api_key: str

    def auth(self) -> Dict[str, str]:
        """Handshake auth payload expected by the timer service."""
        return {"room_id": self.room_id, "api_key": self.api_key}


@dataclass(frozen=True)
class ServiceSettings:
    """User-supplied settings: API base URL, room id, and API key."""

    api_url: str = DEFAULT_API_URL
    room_id: str = ""
    api_key: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ServiceSettings":
        defaults = cls()
        return cls(
            api_url=str(data.get("api_url") or defaults.api_url).strip(),
            room_id=str(data.get("room_id") or "").strip(),
            api_key=str(data.get("api_key") or "").strip(),
        )

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)

    def validate(self) -> "ServiceSettings":
        """Return a normalized copy or raise ``SessionConfigError``.

        A URL path without a trailing slash gets one so that request kinds and
        the ``socket.io`` segment append cleanly.
        """
        if not self.room_id.strip():
            raise SessionConfigError("Room ID is required")
        if not self.api_key.strip():
            raise SessionConfigError("API key is required")
        parts = urlsplit(self.api_url.strip())
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise SessionConfigError(f"Invalid API URL: {self.api_url!r}")
        path = parts.path or "/"
        if not path.endswith("/"):
            path = f"{path}/"
        api_url = f"{parts.scheme}://{parts.netloc}{path}"
        return replace(
            self,
            api_url=api_url,
            room_id=self.room_id.strip(),
            api_key=self.api_key.strip(),
        )

    def connection_config(self) -> ConnectionConfig:
        """Split the API URL into origin and handshake path."""
        settings = self.validate()
        parts = urlsplit(settings.api_url)
        return ConnectionConfig(
            service_origin=f"{parts.scheme}://{parts.netloc}",
            socket_path=f"{parts.path}{SOCKET_IO_SEGMENT}",
            room_id=settings.room_id,
            api_key=settings.api_key,
        )


__all__ = ["ConnectionConfig", "DEFAULT_API_URL", "ServiceSettings"]
