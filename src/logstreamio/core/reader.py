"""
Byte-stream reader over a remote log stream.

A background task polls the stream from its head at a bounded rate and
appends each event's message to an internal buffer; ``read`` drains that
buffer without waiting. An empty read means "nothing yet", not end of
stream: a live stream has no end.
"""

from __future__ import annotations

import asyncio
import threading
import types
from enum import Enum

from ..metrics.metrics import MetricsCollector
from . import diagnostics
from .api import RemoteLogAPI
from .errors import ClosedError, LogStreamError
from .limits import READ_INTERVAL_SECONDS
from .remote import call_remote
from .settings import Settings
from .throttle import Throttle


class LockingBuffer:
    """FIFO byte buffer whose reads and writes are mutually exclusive."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._data = bytearray()

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def write(self, data: bytes) -> int:
        with self._lock:
            self._data += data
        return len(data)

    def read(self, size: int = -1) -> bytes:
        with self._lock:
            if size is None or size < 0 or size >= len(self._data):
                out = bytes(self._data)
                self._data.clear()
                return out
            out = bytes(self._data[:size])
            del self._data[:size]
            return out

    def readinto(self, buffer: bytearray | memoryview) -> int:
        view = memoryview(buffer).cast("B")
        chunk = self.read(len(view))
        view[: len(chunk)] = chunk
        return len(chunk)


class ReaderState(str, Enum):
    OPEN = "open"
    ERRORED = "errored"
    CLOSED = "closed"


class LogStreamReader:
    """Read-only, non-blocking byte stream over one remote log stream."""

    def __init__(
        self,
        api: RemoteLogAPI,
        group_name: str,
        stream_name: str,
        *,
        settings: Settings | None = None,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self._api = api
        self._group_name = group_name
        self._stream_name = stream_name
        self._settings = settings or Settings()
        self._metrics = metrics
        self._buffer = LockingBuffer()
        self._cursor: str | None = None
        self._state = ReaderState.OPEN
        self._error: LogStreamError | None = None
        self._poll_lock = asyncio.Lock()
        self._throttle = Throttle(READ_INTERVAL_SECONDS)
        self._task: asyncio.Task[None] | None = None

    @property
    def group_name(self) -> str:
        return self._group_name

    @property
    def stream_name(self) -> str:
        return self._stream_name

    @property
    def cursor(self) -> str | None:
        return self._cursor

    @property
    def state(self) -> ReaderState:
        return self._state

    @property
    def error(self) -> LogStreamError | None:
        return self._error

    @property
    def closed(self) -> bool:
        return self._state is ReaderState.CLOSED

    def readable(self) -> bool:
        return True

    def start(self) -> None:
        """Start the background poll loop on the running event loop."""
        if self._task is not None:
            return
        self._task = asyncio.get_running_loop().create_task(
            self._run(), name=f"logstreamio-reader:{self._stream_name}"
        )

    def read(self, size: int = -1) -> bytes:
        """Return up to ``size`` buffered bytes, or everything when negative.

        Returns ``b""`` when nothing has arrived yet; raises the sticky error
        once a poll has failed.
        """
        self._check_readable()
        if len(self._buffer) == 0:
            return b""
        return self._buffer.read(size)

    def readinto(self, buffer: bytearray | memoryview) -> int:
        self._check_readable()
        if len(self._buffer) == 0:
            return 0
        return self._buffer.readinto(buffer)

    async def poll(self) -> None:
        """Fetch one page and append its events to the read buffer."""
        async with self._poll_lock:
            self._check_readable()
            try:
                page = await call_remote(
                    self._api.fetch_page(
                        self._group_name, self._stream_name, self._cursor
                    ),
                    operation="fetch_page",
                    message="could not fetch log events",
                    group_name=self._group_name,
                    stream_name=self._stream_name,
                    timeout=self._settings.core.call_timeout_seconds,
                )
            except LogStreamError as exc:
                self._error = exc
                if self._state is ReaderState.OPEN:
                    self._state = ReaderState.ERRORED
                if self._metrics is not None:
                    await self._metrics.record_remote_error(
                        stream=self._stream_name, operation="fetch_page"
                    )
                diagnostics.warn(
                    "reader",
                    "poll failed",
                    stream=self._stream_name,
                    error=exc.to_dict(),
                )
                raise

            # An absent cursor means no progress, not a reset
            if page.next_cursor is not None:
                self._cursor = page.next_cursor
            for event in page.events:
                self._buffer.write(event.message.encode("utf-8"))
            if self._metrics is not None:
                await self._metrics.record_poll(
                    stream=self._stream_name, events=len(page.events)
                )

    async def close(self) -> None:
        """Stop polling. Later reads raise ``ClosedError``."""
        if self._state is ReaderState.CLOSED:
            return
        self._state = ReaderState.CLOSED
        task = self._task
        self._task = None
        if task is not None and task is not asyncio.current_task():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)

    async def __aenter__(self) -> LogStreamReader:
        self.start()
        return self

    async def __aexit__(
        self,
        _exc_type: type[BaseException] | None,
        _exc: BaseException | None,
        _tb: types.TracebackType | None,
    ) -> None:
        await self.close()

    async def _run(self) -> None:
        try:
            while self._state is ReaderState.OPEN:
                await self._throttle.wait()
                if self._state is not ReaderState.OPEN:
                    return
                try:
                    await self.poll()
                except LogStreamError:
                    return
        except asyncio.CancelledError:
            return

    def _check_readable(self) -> None:
        if self._state is ReaderState.CLOSED:
            raise ClosedError(
                "log stream reader is closed",
                group_name=self._group_name,
                stream_name=self._stream_name,
                operation="read",
            )
        if self._error is not None:
            raise self._error.with_traceback(None)


__all__ = ["LockingBuffer", "LogStreamReader", "ReaderState"]
