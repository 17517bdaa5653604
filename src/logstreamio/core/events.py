"""
Log event model for logstreamio.

A LogEvent is one line of caller input bound for a remote log stream. This
module also owns size accounting against the batch ceilings and the handling
of messages that are too large to fit any batch on their own.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from .errors import OversizedEventError
from .limits import EVENT_OVERHEAD_BYTES, MAX_EVENT_MESSAGE_BYTES

OversizedEventPolicy = Literal["split", "truncate", "reject"]


@dataclass
class LogEvent:
    """A single log line with its enqueue timestamp in epoch milliseconds."""

    message: str
    timestamp_millis: int

    @property
    def message_bytes(self) -> int:
        return len(self.message.encode("utf-8"))

    @property
    def size_bytes(self) -> int:
        """Bytes this event counts towards a batch, overhead included."""
        return self.message_bytes + EVENT_OVERHEAD_BYTES

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "timestamp": self.timestamp_millis}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LogEvent:
        return cls(
            message=str(data["message"]),
            timestamp_millis=int(data["timestamp"]),
        )


def _utf8_cut(data: bytes, limit: int) -> int:
    """Return the largest cut index <= limit that does not split a character."""
    if limit >= len(data):
        return len(data)
    cut = limit
    # Continuation bytes look like 0b10xxxxxx
    while cut > 0 and (data[cut] & 0xC0) == 0x80:
        cut -= 1
    return cut


def split_message(message: str, limit: int = MAX_EVENT_MESSAGE_BYTES) -> list[str]:
    """Split a message into chunks of at most ``limit`` UTF-8 bytes."""
    if limit <= 0:
        raise ValueError("limit must be > 0")
    data = message.encode("utf-8")
    chunks: list[str] = []
    while data:
        cut = _utf8_cut(data, limit)
        if cut == 0:
            # Limit smaller than a single character; keep it whole
            cut = 1
            while cut < len(data) and (data[cut] & 0xC0) == 0x80:
                cut += 1
        chunks.append(data[:cut].decode("utf-8", errors="replace"))
        data = data[cut:]
    return chunks


def truncate_message(message: str, limit: int = MAX_EVENT_MESSAGE_BYTES) -> str:
    data = message.encode("utf-8")
    if len(data) <= limit:
        return message
    return data[: _utf8_cut(data, limit)].decode("utf-8", errors="replace")


def fit_event(
    event: LogEvent,
    policy: OversizedEventPolicy = "split",
    *,
    limit: int = MAX_EVENT_MESSAGE_BYTES,
) -> list[LogEvent]:
    """Return events that each fit a batch on their own.

    Events that already fit are returned unchanged. Oversized events are
    split into consecutive events sharing the timestamp, truncated, or
    rejected with ``OversizedEventError`` depending on ``policy``.
    """
    if event.message_bytes <= limit:
        return [event]
    if policy == "reject":
        raise OversizedEventError(
            "log event exceeds the maximum batch size",
            metadata={"message_bytes": event.message_bytes, "limit": limit},
        )
    if policy == "truncate":
        return [
            LogEvent(
                message=truncate_message(event.message, limit),
                timestamp_millis=event.timestamp_millis,
            )
        ]
    return [
        LogEvent(message=chunk, timestamp_millis=event.timestamp_millis)
        for chunk in split_message(event.message, limit)
    ]


__all__ = [
    "LogEvent",
    "OversizedEventPolicy",
    "fit_event",
    "split_message",
    "truncate_message",
]
