"""
RemoteLogAPI over a JSON HTTP log service.

Endpoints (relative to ``base_url``):

- ``POST /groups/{group}/streams``             create a stream (409 if it exists)
- ``GET  /groups/{group}/streams?prefix=...``  describe streams
- ``POST /groups/{group}/streams/{stream}/events``  submit a batch
- ``GET  /groups/{group}/streams/{stream}/events``  fetch a page from the head

No retries are performed here; wrap the client or configure the transport
for retry/backoff.
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.api import Page, RejectionReport, StreamDescription, SubmitResult
from ..core.errors import StreamAlreadyExistsError
from ..core.events import LogEvent

__all__ = ["HttpLogAPI", "HttpLogAPIConfig"]


class HttpLogAPIConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    base_url: str
    headers: dict[str, str] = Field(default_factory=dict)
    timeout_seconds: float = Field(default=10.0, gt=0.0)

    @field_validator("headers", mode="before")
    @classmethod
    def _coerce_headers(cls, value: Mapping[str, str] | None) -> dict[str, str]:
        if value is None:
            return {}
        return dict(value)


def _segment(value: str) -> str:
    return quote(value, safe="")


class HttpLogAPI:
    """Async HTTP client implementing the RemoteLogAPI protocol."""

    def __init__(
        self,
        config: HttpLogAPIConfig | dict[str, Any],
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        cfg = config if isinstance(config, HttpLogAPIConfig) else HttpLogAPIConfig(**config)  # fmt: skip
        self._config = cfg
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=cfg.base_url,
            headers=cfg.headers,
            timeout=cfg.timeout_seconds,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HttpLogAPI:
        return self

    async def __aexit__(self, *_exc: Any) -> None:
        await self.aclose()

    async def create_stream(self, group_name: str, stream_name: str) -> None:
        resp = await self._client.post(
            f"/groups/{_segment(group_name)}/streams",
            json={"streamName": stream_name},
        )
        if resp.status_code == 409:
            raise StreamAlreadyExistsError(
                "log stream already exists",
                group_name=group_name,
                stream_name=stream_name,
                operation="create_stream",
            )
        resp.raise_for_status()

    async def describe_streams(
        self, group_name: str, stream_prefix: str
    ) -> list[StreamDescription]:
        resp = await self._client.get(
            f"/groups/{_segment(group_name)}/streams",
            params={"prefix": stream_prefix},
        )
        resp.raise_for_status()
        return [
            StreamDescription(
                stream_name=item["streamName"],
                sequence_token=item.get("sequenceToken"),
            )
            for item in resp.json().get("streams", [])
        ]

    async def submit_batch(
        self,
        group_name: str,
        stream_name: str,
        events: Sequence[LogEvent],
        sequence_token: str | None,
    ) -> SubmitResult:
        payload: dict[str, Any] = {"events": [e.to_dict() for e in events]}
        if sequence_token is not None:
            payload["sequenceToken"] = sequence_token
        resp = await self._client.post(self._events_path(group_name, stream_name), json=payload)  # fmt: skip
        resp.raise_for_status()
        body = resp.json()
        rejection = None
        info = body.get("rejectedEvents")
        if info:
            rejection = RejectionReport(
                too_new_start_index=info.get("tooNewStartIndex"),
                too_old_end_index=info.get("tooOldEndIndex"),
                expired_end_index=info.get("expiredEndIndex"),
            )
        return SubmitResult(
            next_sequence_token=body.get("nextSequenceToken"),
            rejection=rejection,
        )

    async def fetch_page(
        self,
        group_name: str,
        stream_name: str,
        cursor: str | None,
    ) -> Page:
        params = {"startFromHead": "true"}
        if cursor is not None:
            params["cursor"] = cursor
        resp = await self._client.get(self._events_path(group_name, stream_name), params=params)  # fmt: skip
        resp.raise_for_status()
        body = resp.json()
        return Page(
            events=[LogEvent.from_dict(item) for item in body.get("events", [])],
            next_cursor=body.get("nextCursor"),
        )

    def _events_path(self, group_name: str, stream_name: str) -> str:
        return f"/groups/{_segment(group_name)}/streams/{_segment(stream_name)}/events"


# Mark Pydantic validators as used for vulture
_VULTURE_USED: tuple[object, ...] = (HttpLogAPIConfig._coerce_headers,)
