"""Shared HTTP transport utilities for the timer service REST adapter.

This module provides a thin wrapper around ``requests.Session`` so the API
adapter gets one place for timeout policy, retry behavior, and bearer-token
header construction.

Dependencies:
    - ``requests`` for network I/O.
    - ``stagesync.adapters.api_errors.ApiTimeoutError`` for typed transport failures.

Call context:
    - Constructed by ``stagesync.adapters.api_rest.StagetimerApiClient``.
    - Used only inside the adapter layer; use cases interact through ports.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import requests
from requests import exceptions as req_exc

from stagesync.adapters.api_errors import ApiError, ApiTimeoutError


@dataclass
class HttpConfig:
    """Timeout and retry configuration for adapter HTTP calls.

    Attributes:
        request_timeout_s: Timeout in seconds for one JSON API call.
        retries: Number of retry attempts after the initial request.
    """
    request_timeout_s: float = 10
    retries: int = 2


class RetryingSession:
    """Shared requests wrapper with bearer-token headers and a retry loop.

    Transport-only: callers provide endpoint URLs and decide how to map
    non-2xx responses into domain errors.
    """

    def __init__(self, api_key: Optional[str], cfg: HttpConfig) -> None:
        """Create a retry-enabled session.

        Args:
            api_key: Room API key sent as ``Authorization: Bearer``, or ``None``.
            cfg: Shared timeout and retry settings.
        """
        self.session = requests.Session()
        self.api_key = api_key
        self.cfg = cfg

    def _headers(self, accept: str = "application/json") -> Dict[str, str]:
        headers = {"Accept": accept}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def get(
        self,
        url: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> requests.Response:
        """Send a GET request with retries on timeout/connectivity failures.

        Returns:
            ``requests.Response`` from the first attempt that reached the server.

        Raises:
            ApiTimeoutError: If all attempts fail with timeout/connection errors.
            ApiError: For any other ``requests`` failure (invalid URL, TLS, ...).
        """
        context = f"GET {url}"
        last_err: ApiTimeoutError | None = None
        attempts = self.cfg.retries + 1
        for _ in range(attempts):
            try:
                return self.session.get(
                    url,
                    params=dict(params or {}),
                    headers=self._headers(),
                    timeout=timeout or self.cfg.request_timeout_s,
                )
            except (req_exc.Timeout, req_exc.ConnectionError):
                last_err = ApiTimeoutError(f"Timeout contacting {url}", context=context)
            except req_exc.RequestException as exc:
                raise ApiError(str(exc), context=context) from exc
        raise last_err

    def close(self) -> None:
        self.session.close()


__all__ = ["HttpConfig", "RetryingSession"]
