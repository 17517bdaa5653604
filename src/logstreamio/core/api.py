"""
Capability interface of the remote log service.

The adapter never talks to a concrete service directly. Anything implementing
``RemoteLogAPI`` (an SDK wrapper, an HTTP client, the in-memory fake in
``logstreamio.testing``) can back a LogGroup. Implementations own retry and
backoff policy; the adapter calls each method once per attempt.
"""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from .events import LogEvent


class StreamDescription(BaseModel):
    model_config = ConfigDict(frozen=True)

    stream_name: str
    sequence_token: str | None = None


class RejectionReport(BaseModel):
    """Indices of events the service refused within one submission."""

    model_config = ConfigDict(frozen=True)

    too_new_start_index: int | None = None
    too_old_end_index: int | None = None
    expired_end_index: int | None = None


class SubmitResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    next_sequence_token: str | None = None
    rejection: RejectionReport | None = None


class Page(BaseModel):
    """One page of events returned by ``fetch_page``."""

    model_config = ConfigDict(frozen=True)

    events: list[LogEvent] = Field(default_factory=list)
    next_cursor: str | None = None


@runtime_checkable
class RemoteLogAPI(Protocol):
    """Async remote log-stream service.

    ``create_stream`` must raise ``StreamAlreadyExistsError`` when the
    stream exists; any other exception is treated as a transport failure.
    """

    async def create_stream(self, group_name: str, stream_name: str) -> None:
        ...

    async def describe_streams(
        self, group_name: str, stream_prefix: str
    ) -> Sequence[StreamDescription]:
        ...

    async def submit_batch(
        self,
        group_name: str,
        stream_name: str,
        events: Sequence[LogEvent],
        sequence_token: str | None,
    ) -> SubmitResult:
        ...

    async def fetch_page(
        self,
        group_name: str,
        stream_name: str,
        cursor: str | None,
    ) -> Page:
        """Fetch events from the head of the stream, resuming at ``cursor``."""
        ...


__all__ = [
    "Page",
    "RejectionReport",
    "RemoteLogAPI",
    "StreamDescription",
    "SubmitResult",
]
