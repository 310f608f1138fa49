from __future__ import annotations

from datetime import date

import httpx
import pytest

from moodcal.client import CalendarApiClient
from moodcal.config import EndpointPaths
from moodcal.errors import MalformedResponse, NoSession, TransportFailure
from moodcal.models import ViewedMonth


def _client(handler) -> CalendarApiClient:
    return CalendarApiClient(base_url="http://backend/", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_requests_carry_bearer_token_and_scoping_params() -> None:
    seen: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[])

    client = _client(_handler)
    await client.get_sentiment_by_month("tok", ViewedMonth(2024, 1))
    await client.get_tracks_by_day("tok", date(2024, 1, 15))
    await client.get_playlist_by_day("tok", date(2024, 1, 15))

    assert [request.url.path for request in seen] == [
        "/getSentimentByMonth",
        "/getTracksByDay",
        "/getPlaylistByDay",
    ]
    assert seen[0].url.params["month"] == "2024-01"
    assert seen[1].url.params["day"] == "2024-01-15"
    assert all(request.headers["Authorization"] == "Bearer tok" for request in seen)


@pytest.mark.asyncio
async def test_custom_paths_are_used() -> None:
    paths: list[str] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        return httpx.Response(200, json={"min": "2024-01-01", "max": "2024-01-31"})

    client = CalendarApiClient(
        base_url="http://backend",
        paths=EndpointPaths(range="/calender/range"),
        transport=httpx.MockTransport(_handler),
    )
    payload = await client.get_range("tok")

    assert paths == ["/calender/range"]
    assert payload["min"] == "2024-01-01"


@pytest.mark.asyncio
async def test_error_status_raises_transport_failure() -> None:
    client = _client(lambda request: httpx.Response(503, text="maintenance"))

    with pytest.raises(TransportFailure) as excinfo:
        await client.get_range("tok")

    assert excinfo.value.status_code == 503
    assert excinfo.value.body == "maintenance"


@pytest.mark.asyncio
async def test_connection_error_raises_transport_failure() -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(TransportFailure) as excinfo:
        await _client(_handler).get_last("tok")

    assert excinfo.value.status_code is None


@pytest.mark.asyncio
async def test_invalid_json_raises_malformed_response() -> None:
    client = _client(lambda request: httpx.Response(200, text="<html>"))

    with pytest.raises(MalformedResponse):
        await client.get_last("tok")


@pytest.mark.asyncio
async def test_missing_token_never_reaches_transport() -> None:
    calls: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={})

    with pytest.raises(NoSession):
        await _client(_handler).get_range(None)
    assert calls == []


@pytest.mark.asyncio
async def test_upload_posts_multipart_file() -> None:
    captured: dict[str, object] = {}

    def _handler(request: httpx.Request) -> httpx.Response:
        captured["method"] = request.method
        captured["content_type"] = request.headers["Content-Type"]
        captured["body"] = request.read()
        return httpx.Response(200, json={"min": "2023-05-01", "max": "2024-02-10"})

    payload = await _client(_handler).upload_file("tok", "history.json", b'{"plays": []}')

    assert captured["method"] == "POST"
    assert str(captured["content_type"]).startswith("multipart/form-data")
    body = captured["body"]
    assert isinstance(body, bytes)
    assert b'name="files"; filename="history.json"' in body
    assert payload == {"min": "2023-05-01", "max": "2024-02-10"}
