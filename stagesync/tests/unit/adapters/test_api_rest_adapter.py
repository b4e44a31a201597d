from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Union

import pytest
from requests import exceptions as req_exc

from stagesync.adapters.api_errors import ApiClientError, ApiError, ApiServerError, ApiTimeoutError
from stagesync.adapters.api_rest import StagetimerApiClient
from stagesync.domain.config import ServiceSettings
from stagesync.domain.entities import RequestKind
from stagesync.domain.ports import SessionConfigError


class _ResponseStub:
    def __init__(self, payload: Any, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code
        self.text = str(payload)

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class _SessionStub:
    def __init__(self, responses: Sequence[Union[_ResponseStub, Exception]]) -> None:
        self._responses = list(responses)
        self.calls: List[Dict[str, Any]] = []
        self._idx = 0

    def get(
        self,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> _ResponseStub:
        self.calls.append({"url": url, "params": dict(params or {}), "headers": dict(headers or {}), "timeout": timeout})
        if self._idx >= len(self._responses):
            raise RuntimeError("No stub response configured")
        resp = self._responses[self._idx]
        self._idx += 1
        if isinstance(resp, Exception):
            raise resp
        return resp

    def close(self) -> None:
        pass


def _client(responses, **kwargs) -> tuple:
    settings = ServiceSettings(api_url="https://api.stagetimer.io/v1", room_id="ROOM1234", api_key="secret-key")
    client = StagetimerApiClient(settings, **kwargs)
    stub = _SessionStub(responses)
    client.session.session = stub  # type: ignore[assignment]
    return client, stub


def test_get_room_hits_kind_endpoint_with_room_and_bearer() -> None:
    client, stub = _client([_ResponseStub({"ok": True, "message": "Room", "data": {"_id": "R1", "name": "Main"}})])

    response = client.send(RequestKind.GET_ROOM, {})

    assert response.data == {"_id": "R1", "name": "Main"}
    assert response.message == "Room"
    call = stub.calls[0]
    assert call["url"] == "https://api.stagetimer.io/v1/get_room"
    assert call["params"] == {"room_id": "ROOM1234"}
    assert call["headers"]["Authorization"] == "Bearer secret-key"
    assert call["headers"]["Accept"] == "application/json"
    assert call["timeout"] == 10


def test_get_timer_forwards_params_and_drops_none() -> None:
    client, stub = _client([_ResponseStub({"ok": True, "data": {"name": "Keynote"}})])

    client.send(RequestKind.GET_TIMER, {"timer_id": "T1", "index": None})

    assert stub.calls[0]["url"].endswith("/get_timer")
    assert stub.calls[0]["params"] == {"room_id": "ROOM1234", "timer_id": "T1"}


def test_missing_data_maps_to_empty_dict() -> None:
    client, _ = _client([_ResponseStub({"ok": True, "message": "Nothing", "data": None})])

    assert client.send(RequestKind.GET_STATUS, {}).data == {}


def test_ok_false_body_raises_client_error() -> None:
    client, _ = _client([_ResponseStub({"ok": False, "message": "Timer not found"})])

    with pytest.raises(ApiClientError) as excinfo:
        client.send(RequestKind.GET_TIMER, {"timer_id": "nope"})

    assert str(excinfo.value) == "get_timer: Timer not found"
    assert excinfo.value.status == 200


@pytest.mark.parametrize(
    "status, exc_type",
    [(401, ApiClientError), (404, ApiClientError), (503, ApiServerError)],
)
def test_http_errors_map_to_api_errors(status, exc_type) -> None:
    client, _ = _client([_ResponseStub({"ok": False, "message": "Denied"}, status_code=status)])

    with pytest.raises(exc_type) as excinfo:
        client.send(RequestKind.GET_ROOM, {})

    assert excinfo.value.status == status
    assert str(excinfo.value) == f"get_room: Denied (HTTP {status})"


def test_non_json_body_raises_api_error() -> None:
    client, _ = _client([_ResponseStub(ValueError("no json"))])

    with pytest.raises(ApiError, match="not JSON"):
        client.send(RequestKind.GET_STATUS, {})


def test_non_object_data_raises_api_error() -> None:
    client, _ = _client([_ResponseStub({"ok": True, "data": ["a", "b"]})])

    with pytest.raises(ApiError, match="expected object data"):
        client.send(RequestKind.GET_STATUS, {})


def test_connection_errors_are_retried_then_surface_as_timeout() -> None:
    client, stub = _client(
        [req_exc.ConnectionError("down"), req_exc.Timeout("slow"), req_exc.ConnectionError("down")],
        retries=2,
    )

    with pytest.raises(ApiTimeoutError):
        client.send(RequestKind.GET_ROOM, {})

    assert len(stub.calls) == 3


def test_retry_recovers_after_transient_failure() -> None:
    client, stub = _client(
        [req_exc.Timeout("slow"), _ResponseStub({"ok": True, "data": {"timer_id": None}})],
    )

    assert client.send(RequestKind.GET_STATUS, {}).data == {"timer_id": None}
    assert len(stub.calls) == 2


def test_invalid_settings_rejected_at_construction() -> None:
    with pytest.raises(SessionConfigError) as excinfo:
        StagetimerApiClient(ServiceSettings(room_id="", api_key="k"))

    assert "Room ID" in str(excinfo.value)
