from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest

from logstreamio import LogGroup
from logstreamio.clients.http import HttpLogAPI, HttpLogAPIConfig
from logstreamio.core.api import RejectionReport
from logstreamio.core.errors import StreamAlreadyExistsError, TransportError
from logstreamio.core.events import LogEvent


def _api(handler: Callable[[httpx.Request], httpx.Response]) -> HttpLogAPI:
    client = httpx.AsyncClient(
        base_url="https://logs.example.com/v1",
        transport=httpx.MockTransport(handler),
    )
    return HttpLogAPI({"base_url": "https://logs.example.com/v1"}, client=client)


def test_config_coerces_headers_and_rejects_unknown_fields() -> None:
    cfg = HttpLogAPIConfig(base_url="https://x", headers=None)
    assert cfg.headers == {}
    with pytest.raises(ValueError):
        HttpLogAPIConfig(base_url="https://x", retries=3)  # type: ignore[call-arg]
    with pytest.raises(ValueError):
        HttpLogAPIConfig(base_url="https://x", timeout_seconds=0)


@pytest.mark.asyncio
async def test_create_stream_conflict_maps_to_already_exists() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(409, json={"error": "exists"})

    api = _api(handler)
    with pytest.raises(StreamAlreadyExistsError):
        await api.create_stream("my group", "s1")
    assert seen[0].method == "POST"
    assert seen[0].url.path == "/v1/groups/my%20group/streams"
    assert json.loads(seen[0].content) == {"streamName": "s1"}


@pytest.mark.asyncio
async def test_create_stream_server_error_raises_http_error() -> None:
    api = _api(lambda request: httpx.Response(500))
    with pytest.raises(httpx.HTTPStatusError):
        await api.create_stream("g", "s")


@pytest.mark.asyncio
async def test_describe_streams_parses_descriptions() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["prefix"] == "s1"
        return httpx.Response(
            200,
            json={
                "streams": [
                    {"streamName": "s1", "sequenceToken": "tok"},
                    {"streamName": "s10"},
                ]
            },
        )

    descriptions = await _api(handler).describe_streams("g", "s1")
    assert [(d.stream_name, d.sequence_token) for d in descriptions] == [
        ("s1", "tok"),
        ("s10", None),
    ]


@pytest.mark.asyncio
async def test_submit_batch_sends_events_and_token() -> None:
    bodies: list[dict[str, Any]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(
            200,
            json={
                "nextSequenceToken": "t2",
                "rejectedEvents": {"tooOldEndIndex": 1},
            },
        )

    result = await _api(handler).submit_batch(
        "g", "s", [LogEvent(message="hi\n", timestamp_millis=5)], "t1"
    )
    assert bodies == [
        {"events": [{"message": "hi\n", "timestamp": 5}], "sequenceToken": "t1"}
    ]
    assert result.next_sequence_token == "t2"
    assert result.rejection == RejectionReport(too_old_end_index=1)


@pytest.mark.asyncio
async def test_submit_batch_omits_missing_token() -> None:
    bodies: list[dict[str, Any]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json={"nextSequenceToken": "t1"})

    result = await _api(handler).submit_batch("g", "s", [], None)
    assert "sequenceToken" not in bodies[0]
    assert result.rejection is None


@pytest.mark.asyncio
async def test_fetch_page_passes_cursor_and_reads_from_head() -> None:
    params: list[dict[str, str]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        params.append(dict(request.url.params))
        return httpx.Response(
            200,
            json={
                "events": [{"message": "x", "timestamp": 1}],
                "nextCursor": "c2",
            },
        )

    page = await _api(handler).fetch_page("g", "s", "c1")
    assert params == [{"startFromHead": "true", "cursor": "c1"}]
    assert page.events == [LogEvent(message="x", timestamp_millis=1)]
    assert page.next_cursor == "c2"


@pytest.mark.asyncio
async def test_http_failure_becomes_sticky_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "POST" and request.url.path.endswith("/streams"):
            return httpx.Response(201)
        return httpx.Response(503, json={"error": "unavailable"})

    async with _api(handler) as api:
        writer = await LogGroup(api, "g").create("s")
        writer.write(b"payload\n")
        with pytest.raises(TransportError, match="could not submit log events") as excinfo:  # fmt: skip
            await writer.flush()
        assert isinstance(excinfo.value.cause, httpx.HTTPStatusError)
        with pytest.raises(TransportError):
            await writer.close()


@pytest.mark.asyncio
async def test_aclose_leaves_injected_client_open() -> None:
    client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))  # fmt: skip
    api = HttpLogAPI(HttpLogAPIConfig(base_url="https://x"), client=client)
    await api.aclose()
    assert client.is_closed is False
    await client.aclose()

    owned = HttpLogAPI(HttpLogAPIConfig(base_url="https://x"))
    await owned.aclose()
