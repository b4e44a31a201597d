from __future__ import annotations

from typing import Any, Iterable, Optional

# Keys the timer service (and proxies in front of it) use for error text.
_MESSAGE_KEYS = ("message", "detail", "error", "title")
_CODE_KEYS = ("code", "error_code", "error")
_HINT_KEYS = ("hint", "details", "errors")


class ApiError(RuntimeError):
    """Base class for timer service API failures.

    Attributes:
        status: HTTP status when the server answered, else ``None``.
        code: Machine-readable error code from the reply body, if any.
        hint: Extra detail from the reply body, if any.
        payload: Parsed reply body (dict or text snippet).
        context: Request kind or ``GET <url>`` the failure belongs to.
    """

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        code: Optional[str] = None,
        hint: Optional[str] = None,
        payload: Any = None,
        context: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.code = code
        self.hint = hint
        self.payload = payload
        self.context = context


class ApiClientError(ApiError):
    """HTTP 4xx, or a 2xx body flagged ``ok: false`` by the service."""

    def __init__(self, message: str, *, status: int, **details: Any) -> None:
        super().__init__(message, status=status, **details)


class ApiServerError(ApiError):
    """HTTP 5xx from the timer service."""

    def __init__(self, message: str, *, status: int, payload: Any = None, context: Optional[str] = None) -> None:
        super().__init__(message, status=status, payload=payload, context=context)


class ApiTimeoutError(ApiError):
    """Request timed out or never reached the service."""

    def __init__(self, message: str, *, context: Optional[str] = None) -> None:
        super().__init__(message, context=context)


def parse_error_payload(resp: Any) -> Any:
    """JSON body of a failed reply, or a short text snippet; never raises."""
    try:
        return resp.json()
    except ValueError:
        text = getattr(resp, "text", "") or ""
        return text[:400] or None


def build_error_message(ctx: str, status: int, payload: Any) -> str:
    detail = first_string(payload)
    if detail:
        return f"{ctx}: {detail} (HTTP {status})"
    return f"{ctx}: HTTP {status}"


def extract_error_code(payload: Any) -> Optional[str]:
    for value in _values(payload, _CODE_KEYS):
        if value is None or isinstance(value, (bool, dict, list)):
            continue
        return str(value)
    return None


def extract_error_hint(payload: Any) -> Optional[str]:
    if isinstance(payload, str):
        return payload.strip() or None
    for value in _values(payload, _HINT_KEYS):
        text = stringify(value)
        if text:
            return text
    return None


def first_string(payload: Any) -> Optional[str]:
    """First non-empty human-readable string in a reply body."""
    if isinstance(payload, str):
        return payload.strip() or None
    if isinstance(payload, list):
        candidates: Iterable[Any] = payload
    else:
        candidates = _values(payload, _MESSAGE_KEYS)
    for value in candidates:
        text = first_string(value) if isinstance(value, (str, dict, list)) else None
        if text:
            return text
    return None


def stringify(data: Any, *, limit: int = 200) -> Optional[str]:
    """Flatten a hint value into one short line."""
    if data is None:
        return None
    if isinstance(data, list):
        parts = [text for text in (stringify(item, limit=limit) for item in data[:3]) if text]
        joined = "; ".join(parts)
    elif isinstance(data, dict):
        pairs = [(key, stringify(value, limit=limit)) for key, value in list(data.items())[:4]]
        joined = ", ".join(f"{key}={text}" for key, text in pairs if text)
    else:
        joined = str(data).strip()
    return joined[:limit] or None


def _values(payload: Any, keys: Iterable[str]) -> Iterable[Any]:
    if not isinstance(payload, dict):
        return []
    return [payload[key] for key in keys if key in payload]


__all__ = [
    "ApiClientError",
    "ApiError",
    "ApiServerError",
    "ApiTimeoutError",
    "build_error_message",
    "extract_error_code",
    "extract_error_hint",
    "first_string",
    "parse_error_payload",
    "stringify",
]
