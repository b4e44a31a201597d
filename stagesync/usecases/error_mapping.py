"""Translate adapter errors into user-facing UseCaseError instances."""

from __future__ import annotations


from typing import Optional

from stagesync.adapters.api_errors import (
    ApiClientError,
    ApiError,
    ApiServerError,
    ApiTimeoutError,
    extract_error_hint,
)
from stagesync.domain.entities import RequestKind
from stagesync.domain.ports import StatusSink, UseCaseError


def map_api_error(
    exc: Exception,
    *,
    default_code: str,
    default_message: Optional[str] = None,
) -> UseCaseError:
    """Map adapter exceptions to stable UseCaseError codes.

    Args:
        exc: Exception raised by an ``ApiClientPort`` call.
        default_code: Code used when ``exc`` is not an API error.
        default_message: Message used when ``exc`` has no text of its own.

    Returns:
        UseCaseError: Error whose ``code`` is stable across adapters.
    """
    if isinstance(exc, UseCaseError):
        return exc
    if isinstance(exc, ApiTimeoutError):
        return UseCaseError("REQUEST_TIMEOUT", "Request timed out. Check connection.")
    if isinstance(exc, ApiClientError):
        status = exc.status or 0
        hint = exc.hint or extract_error_hint(getattr(exc, "payload", None))
        if status in (401, 403):
            return UseCaseError("AUTH_FAILED", "Auth failed / API key invalid.")
        if status == 404:
            return UseCaseError("NOT_FOUND", _compose_error_message(str(exc), hint))
        return UseCaseError("REQUEST_FAILED", _compose_error_message(str(exc), hint))
    if isinstance(exc, ApiServerError):
        return UseCaseError("SERVER_ERROR", "Timer service error, try again.")
    if isinstance(exc, ApiError):
        return UseCaseError("API_ERROR", str(exc))

    message = str(exc) or default_message or exc.__class__.__name__
    return UseCaseError(default_code, message)


def report_fetch_failure(sink: StatusSink, kind: RequestKind | str, exc: Exception) -> UseCaseError:
    """Log a failed request/response call at error level and return the mapped error."""
    err = map_api_error(exc, default_code="FETCH_FAILED")
    label = kind.value if isinstance(kind, RequestKind) else str(kind)
    sink.log("error", f"{label} failed: {err}")
    return err


def _compose_error_message(base: str, hint: Optional[str]) -> str:
    hint_text = (hint or "").strip()
    if hint_text and hint_text not in base:
        return f"{base}: {hint_text}"
    return base


__all__ = ["map_api_error", "report_fetch_failure"]
