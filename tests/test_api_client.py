from __future__ import annotations

import asyncio
import json
import threading
import time
from typing import Any, List
from unittest.mock import patch

import pytest
import requests

from collabkit.api.client import ApiClient, ApiError, TransportError, build_client, error_message, is_public_path


class DummyResponse:
    def __init__(self, status_code: int, payload: Any = None, content: bytes | None = None) -> None:
        self.status_code = status_code
        self._payload = payload
        if content is not None:
            self.content = content
        elif payload is None:
            self.content = b""
        else:
            self.content = json.dumps(payload).encode("utf-8")

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload


def test_post_sends_json_with_bearer_token() -> None:
    client = ApiClient("http://api.local/", timeout=5, token="tok-1")
    with patch.object(client.session, "request", return_value=DummyResponse(200, {"ok": True})) as mocked:
        result = client.post("/contract/sign", {"contractId": "C1"})

    assert result == {"ok": True}
    mocked.assert_called_once_with(
        "POST",
        "http://api.local/contract/sign",
        headers={"Authorization": "Bearer tok-1"},
        timeout=5,
        json={"contractId": "C1"},
    )


def test_public_paths_skip_authorization() -> None:
    assert is_public_path("/auth/login")
    assert is_public_path("public/plans?x=1")
    assert not is_public_path("/contract/preview")

    client = ApiClient("http://api.local", token="tok-1")
    with patch.object(client.session, "request", return_value=DummyResponse(200, {})) as mocked:
        client.post("/auth/login", {"email": "a@b.c"})
    assert mocked.call_args.kwargs["headers"] == {}


def test_server_rejection_uses_message_field() -> None:
    client = ApiClient("http://api.local")
    response = DummyResponse(422, {"message": "Contract already signed"})
    with patch.object(client.session, "request", return_value=response):
        with pytest.raises(ApiError) as excinfo:
            client.post("/contract/resend", {})

    assert excinfo.value.message == "Contract already signed"
    assert excinfo.value.status_code == 422


def test_server_rejection_without_body_falls_back_to_status() -> None:
    client = ApiClient("http://api.local")
    with patch.object(client.session, "request", return_value=DummyResponse(500)):
        with pytest.raises(ApiError, match="HTTP 500"):
            client.get("/contract/preview")


def test_transport_failure_raises_transport_error() -> None:
    client = ApiClient("http://api.local")
    with patch.object(client.session, "request", side_effect=requests.ConnectionError("refused")):
        with pytest.raises(TransportError, match="Network error"):
            client.get("/contract/preview", {"contractId": "C1"})


def test_unauthorized_clears_token_and_notifies() -> None:
    events: List[str] = []
    client = ApiClient("http://api.local", token="tok-1", on_unauthorized=lambda: events.append("logout"))
    with patch.object(client.session, "request", return_value=DummyResponse(401, {"message": "expired"})):
        with pytest.raises(ApiError, match="expired"):
            client.get("/notifications")

    assert client.token == ""
    assert events == ["logout"]


def test_async_helpers_run_blocking_calls_off_loop() -> None:
    client = ApiClient("http://api.local")
    with patch.object(client.session, "request", return_value=DummyResponse(200, content=b"%PDF")):
        content = asyncio.run(client.aget_bytes("/contract/preview", {"contractId": "C1", "pdf": 1}))
    assert content == b"%PDF"

    with patch.object(client.session, "request", return_value=DummyResponse(204)):
        assert asyncio.run(client.apost("/contract/update-notes", {"notes": {}})) == {}


def test_error_message_prefers_message_attribute() -> None:
    assert error_message(ApiError("bad input", 400), "Failed") == "bad input"
    assert error_message(RuntimeError(""), "Failed to save") == "Failed to save"
    assert error_message(ValueError("Missing contract id."), "Failed") == "Missing contract id."


def test_build_client_reads_api_section() -> None:
    client = build_client({"api": {"base_url": "http://cfg.local", "timeout": 7, "token": "t"}})
    assert client.base_url == "http://cfg.local"
    assert client.timeout == 7.0
    assert client.token == "t"


def test_concurrent_async_calls_do_not_share_the_session_at_once() -> None:
    client = ApiClient("http://api.local")
    guard = threading.Lock()
    active = [0]
    peak = [0]

    def fake_request(*args: Any, **kwargs: Any) -> DummyResponse:
        with guard:
            active[0] += 1
            peak[0] = max(peak[0], active[0])
        time.sleep(0.02)
        with guard:
            active[0] -= 1
        return DummyResponse(200, {"ok": True})

    async def _run() -> List[Any]:
        return await asyncio.gather(
            *(client.apost("/influencer/onboarding/save", {"section": name}) for name in ("round1", "round2", "round3"))
        )

    with patch.object(client.session, "request", side_effect=fake_request) as mocked:
        results = asyncio.run(_run())

    assert results == [{"ok": True}] * 3
    assert mocked.call_count == 3
    assert peak[0] == 1
