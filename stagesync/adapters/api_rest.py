from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

import requests

from stagesync.domain.config import ServiceSettings
from stagesync.domain.entities import RequestKind
from stagesync.domain.ports import ApiClientPort, ApiResponse

from .api_errors import (
    ApiClientError,
    ApiError,
    ApiServerError,
    build_error_message,
    extract_error_code,
    extract_error_hint,
    first_string,
    parse_error_payload,
)
from .http_client import HttpConfig, RetryingSession


class StagetimerApiClient(ApiClientPort):
    """REST adapter for the Stagetimer.io v1 request/response API.

    Every request kind is a ``GET <api_url><kind>`` scoped to one room. The
    service wraps replies as ``{"ok": bool, "message": str, "data": {...}}``.
    """

    def __init__(
        self,
        settings: ServiceSettings,
        *,
        request_timeout_s: float = 10,
        retries: int = 2,
    ) -> None:
        settings = settings.validate()
        self.base_url = settings.api_url
        self.room_id = settings.room_id
        self.cfg = HttpConfig(request_timeout_s=request_timeout_s, retries=retries)
        self.session = RetryingSession(settings.api_key, self.cfg)
        self._log = logging.getLogger(__name__)

    def send(self, kind: RequestKind | str, params: Optional[Mapping[str, Any]] = None) -> ApiResponse:
        action = self._action_name(kind)
        query: Dict[str, Any] = {"room_id": self.room_id}
        query.update({k: v for k, v in dict(params or {}).items() if v is not None})
        url = f"{self.base_url}{action}"
        self._log.debug("%s %s", action, {k: v for k, v in query.items() if k != "room_id"})

        resp = self.session.get(url, params=query)
        self._ensure_ok(resp, action)
        body = self._json_object(resp, action)
        if body.get("ok") is False:
            message = first_string(body) or "request rejected"
            raise ApiClientError(
                f"{action}: {message}",
                status=resp.status_code,
                code=extract_error_code(body),
                hint=extract_error_hint(body),
                payload=body,
                context=action,
            )
        data = body.get("data")
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ApiError(f"{action}: expected object data, got {type(data).__name__}", context=action)
        return ApiResponse(data=data, message=body.get("message"))

    def close(self) -> None:
        self.session.close()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _action_name(kind: RequestKind | str) -> str:
        value = kind.value if isinstance(kind, RequestKind) else str(kind)
        value = value.strip().strip("/")
        if not value:
            raise ValueError("Request kind must be a non-empty string")
        return value

    @staticmethod
    def _ensure_ok(resp: requests.Response, ctx: str) -> None:
        status = resp.status_code
        if 200 <= status < 300:
            return
        payload = parse_error_payload(resp)
        message = build_error_message(ctx, status, payload)
        if 400 <= status < 500:
            raise ApiClientError(
                message,
                status=status,
                code=extract_error_code(payload),
                hint=extract_error_hint(payload),
                payload=payload,
                context=ctx,
            )
        if status >= 500:
            raise ApiServerError(message, status=status, payload=payload, context=ctx)
        raise ApiError(message, status=status, payload=payload, context=ctx)

    @staticmethod
    def _json_object(resp: requests.Response, ctx: str) -> Dict[str, Any]:
        try:
            body = resp.json()
        except ValueError as exc:
            raise ApiError(f"{ctx}: response is not JSON", status=resp.status_code, context=ctx) from exc
        if not isinstance(body, dict):
            raise ApiError(f"{ctx}: expected object response", status=resp.status_code, context=ctx)
        return body


__all__ = ["StagetimerApiClient"]
