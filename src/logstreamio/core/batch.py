"""
Batch accumulation for outbound submissions.

``LogBatch`` enforces the per-request ceilings of the remote API and
``EventBuffer`` keeps an ordered run of batches: producers append to the
newest batch while a single consumer drains the oldest one.
"""

from __future__ import annotations

import threading
from collections import deque

from .errors import OversizedEventError
from .events import LogEvent
from .limits import MAX_BATCH_SIZE_BYTES, MAX_BATCH_SIZE_EVENTS


class LogBatch:
    """Events forming a single submission, bounded by size and count."""

    __slots__ = ("count", "events", "sealed", "size_bytes")

    def __init__(self) -> None:
        self.count = 0
        self.size_bytes = 0
        self.events: list[LogEvent] = []
        self.sealed = False

    def __len__(self) -> int:
        return self.count

    def fits(self, event: LogEvent) -> bool:
        return (
            self.size_bytes + event.size_bytes <= MAX_BATCH_SIZE_BYTES
            and self.count + 1 <= MAX_BATCH_SIZE_EVENTS
        )

    def add(self, event: LogEvent) -> LogBatch:
        """Add ``event`` and return the batch that owns it.

        When the event does not fit, this batch is sealed and the event goes
        into a fresh successor batch, which is returned. Events without a
        message are dropped.
        """
        if not event.message:
            return self
        if self.sealed or not self.fits(event):
            successor = LogBatch()
            if not successor.fits(event):
                raise OversizedEventError(
                    "log event exceeds the maximum batch size",
                    metadata={"size_bytes": event.size_bytes},
                )
            self.sealed = True
            return successor.add(event)
        self.events.append(event)
        self.count += 1
        self.size_bytes += event.size_bytes
        return self


class EventBuffer:
    """Thread-safe FIFO of LogBatches.

    The head is the oldest batch and the tail the newest; when the buffer
    holds a single batch they are the same object.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._batches: deque[LogBatch] = deque([LogBatch()])
        self._pending = 0

    @property
    def head(self) -> LogBatch:
        return self._batches[0]

    @property
    def tail(self) -> LogBatch:
        return self._batches[-1]

    def __len__(self) -> int:
        with self._lock:
            return self._pending

    def batch_count(self) -> int:
        with self._lock:
            return len(self._batches)

    def add(self, event: LogEvent) -> None:
        with self._lock:
            tail = self._batches[-1]
            owner = tail.add(event)
            if owner is not tail:
                self._batches.append(owner)
            if event.message:
                self._pending += 1

    def drain(self) -> list[LogEvent]:
        """Take every event of the head batch; empty means nothing is ready."""
        with self._lock:
            head = self._batches.popleft()
            if not self._batches:
                self._batches.append(LogBatch())
            self._pending -= head.count
            return head.events

    def has_pending(self) -> bool:
        with self._lock:
            return self._batches[0].count > 0


__all__ = ["EventBuffer", "LogBatch"]
