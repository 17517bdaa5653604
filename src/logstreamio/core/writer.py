"""
Byte-stream writer backed by a remote log stream.

``LogStreamWriter.write`` turns bytes into one LogEvent per line and buffers
them without touching the network. A background task wakes on a fixed-rate
throttle and submits the oldest completed batch, threading the sequence
token returned by each submission into the next one.

The first failed or rejected submission becomes a sticky error: the flush
loop stops and every later ``write`` raises that error.
"""

from __future__ import annotations

import asyncio
import io
import time
import types
from enum import Enum
from typing import Any, Callable, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, field_validator

from ..metrics.metrics import MetricsCollector
from . import diagnostics
from .api import RemoteLogAPI
from .batch import EventBuffer
from .errors import ClosedError, LogStreamError, RejectedEventsError
from .events import LogEvent, fit_event
from .limits import WRITE_INTERVAL_SECONDS
from .remote import call_remote
from .settings import Settings
from .throttle import Throttle


@runtime_checkable
class EventInspector(Protocol):
    """Sees each event synchronously before it is buffered.

    Implementations may observe or mutate the event in place; the event is
    not inspected again after it is enqueued.
    """

    def inspect(self, event: LogEvent) -> None:
        ...


class CallbackInspector:
    """Adapts a plain callable to the EventInspector protocol."""

    def __init__(self, callback: Callable[[LogEvent], Any]) -> None:
        self._callback = callback

    def inspect(self, event: LogEvent) -> None:
        self._callback(event)


class WriterConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)  # fmt: skip

    inspector: EventInspector | None = None
    sequence_token: str | None = None
    clock: Callable[[], float] | None = None

    @field_validator("inspector", mode="before")
    @classmethod
    def _coerce_inspector(cls, value: Any) -> Any:
        if value is None or isinstance(value, EventInspector):
            return value
        if callable(value):
            return CallbackInspector(value)
        raise ValueError("inspector must be callable or implement inspect()")


def parse_writer_config(
    config: WriterConfig | dict[str, Any] | None = None, **overrides: Any
) -> WriterConfig:
    if config is None:
        return WriterConfig(**overrides)
    if isinstance(config, WriterConfig):
        if not overrides:
            return config
        return WriterConfig(**{**dict(config), **overrides})
    return WriterConfig(**{**config, **overrides})


class WriterState(str, Enum):
    OPEN = "open"
    ERRORED = "errored"
    CLOSED = "closed"


class LogStreamWriter:
    """Write-only byte stream into one remote log stream.

    Instances are normally created through ``LogGroup.create``, which resolves
    the initial sequence token and starts the flush loop.
    """

    def __init__(
        self,
        api: RemoteLogAPI,
        group_name: str,
        stream_name: str,
        *,
        config: WriterConfig | None = None,
        settings: Settings | None = None,
        metrics: MetricsCollector | None = None,
    ) -> None:
        cfg = config or WriterConfig()
        self._api = api
        self._group_name = group_name
        self._stream_name = stream_name
        self._settings = settings or Settings()
        self._metrics = metrics
        self._inspector = cfg.inspector
        self._clock: Callable[[], float] = cfg.clock or time.time
        self._sequence_token = cfg.sequence_token
        self._events = EventBuffer()
        self._state = WriterState.OPEN
        self._error: LogStreamError | None = None
        # Serializes flush cycles against each other and against close()
        self._flush_lock = asyncio.Lock()
        self._throttle = Throttle(WRITE_INTERVAL_SECONDS)
        self._task: asyncio.Task[None] | None = None

    @property
    def group_name(self) -> str:
        return self._group_name

    @property
    def stream_name(self) -> str:
        return self._stream_name

    @property
    def sequence_token(self) -> str | None:
        return self._sequence_token

    @property
    def state(self) -> WriterState:
        return self._state

    @property
    def error(self) -> LogStreamError | None:
        return self._error

    @property
    def closed(self) -> bool:
        return self._state is WriterState.CLOSED

    @property
    def pending(self) -> int:
        """Number of buffered events not yet submitted."""
        return len(self._events)

    def writable(self) -> bool:
        return True

    def start(self) -> None:
        """Start the background flush loop on the running event loop."""
        if self._task is not None:
            return
        self._task = asyncio.get_running_loop().create_task(
            self._run(), name=f"logstreamio-writer:{self._stream_name}"
        )

    def write(self, data: bytes | bytearray | memoryview) -> int:
        """Buffer ``data`` as one event per line and return its length.

        Raises ``ClosedError`` after ``close`` and the sticky error after a
        failed flush. Never waits on the network.
        """
        if self._state is WriterState.CLOSED:
            raise self._closed_error("write")
        if self._error is not None:
            raise self._error.with_traceback(None)
        if isinstance(data, str):
            raise TypeError("a bytes-like object is required, not 'str'")
        raw = bytes(data)
        policy = self._settings.core.oversized_event_policy
        events: list[LogEvent] = []
        for line in io.BytesIO(raw):
            event = LogEvent(
                message=line.decode("utf-8", errors="replace"),
                timestamp_millis=self._now_millis(),
            )
            if self._inspector is not None:
                self._inspector.inspect(event)
            fitted = fit_event(event, policy)
            if len(fitted) != 1 or fitted[0] is not event:
                diagnostics.warn(
                    "writer",
                    "oversized log event",
                    stream=self._stream_name,
                    policy=policy,
                    message_bytes=event.message_bytes,
                    _rate_limit_key="oversized",
                )
            events.extend(fitted)
        for event in events:
            self._events.add(event)
        return len(raw)

    async def flush(self) -> None:
        """Run one flush cycle now, raising the cycle's error if any."""
        async with self._flush_lock:
            if self._state is WriterState.CLOSED:
                raise self._closed_error("flush")
            if self._error is not None:
                raise self._error.with_traceback(None)
            error = await self._flush_locked()
        if error is not None:
            raise error

    async def close(self) -> None:
        """Close the writer after one final flush of the buffered events.

        Later writes raise ``ClosedError``. The error of the final flush is
        raised to the caller; a writer that already failed is closed without
        another remote call and raises its sticky error. Closing twice is a
        no-op.

        The final flush submits a single batch. Events buffered beyond it
        (more than one batch worth) are discarded with a diagnostics warning;
        call ``flush`` until ``pending`` is zero before closing to keep them.
        """
        if self._state is WriterState.CLOSED:
            return
        self._state = WriterState.CLOSED
        try:
            async with self._flush_lock:
                if self._error is not None:
                    error: LogStreamError | None = self._error
                else:
                    error = await self._flush_locked()
                dropped = len(self._events)
                if dropped:
                    diagnostics.warn(
                        "writer",
                        "events dropped on close",
                        stream=self._stream_name,
                        dropped=dropped,
                    )
        finally:
            await self._stop_task()
        if error is not None:
            raise error.with_traceback(None)

    async def __aenter__(self) -> LogStreamWriter:
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
            while self._state is WriterState.OPEN:
                await self._throttle.wait()
                async with self._flush_lock:
                    if self._state is not WriterState.OPEN:
                        return
                    if await self._flush_locked() is not None:
                        return
        except asyncio.CancelledError:
            return
        except Exception as exc:  # pragma: no cover - defensive catch
            diagnostics.warn(
                "writer",
                "flush loop error",
                stream=self._stream_name,
                error_type=type(exc).__name__,
                error=str(exc),
            )

    async def _stop_task(self) -> None:
        task = self._task
        self._task = None
        if task is None or task is asyncio.current_task():
            return
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)

    async def _flush_locked(self) -> LogStreamError | None:
        """Submit the oldest ready batch. Caller holds ``_flush_lock``."""
        events = self._events.drain()
        if not events:
            return None
        start = time.perf_counter()
        try:
            result = await call_remote(
                self._api.submit_batch(
                    self._group_name,
                    self._stream_name,
                    events,
                    self._sequence_token,
                ),
                operation="submit_batch",
                message="could not submit log events",
                group_name=self._group_name,
                stream_name=self._stream_name,
                timeout=self._settings.core.call_timeout_seconds,
            )
        except LogStreamError as exc:
            if self._metrics is not None:
                await self._metrics.record_remote_error(
                    stream=self._stream_name, operation="submit_batch"
                )
            return self._fail(exc, events=len(events))

        if result.rejection is not None:
            if self._metrics is not None:
                await self._metrics.record_events_rejected(
                    stream=self._stream_name, events=len(events)
                )
            return self._fail(
                RejectedEventsError(
                    report=result.rejection,
                    group_name=self._group_name,
                    stream_name=self._stream_name,
                    operation="submit_batch",
                ),
                events=len(events),
            )

        self._sequence_token = result.next_sequence_token
        if self._metrics is not None:
            await self._metrics.record_batch_submitted(
                stream=self._stream_name,
                events=len(events),
                latency_seconds=time.perf_counter() - start,
            )
        return None

    def _fail(self, error: LogStreamError, *, events: int) -> LogStreamError:
        self._error = error
        if self._state is WriterState.OPEN:
            self._state = WriterState.ERRORED
        diagnostics.warn(
            "writer",
            "flush failed",
            stream=self._stream_name,
            events=events,
            error=error.to_dict(),
        )
        return error

    def _closed_error(self, operation: str) -> ClosedError:
        return ClosedError(
            "log stream writer is closed",
            group_name=self._group_name,
            stream_name=self._stream_name,
            operation=operation,
        )

    def _now_millis(self) -> int:
        return int(self._clock() * 1000)


__all__ = [
    "CallbackInspector",
    "EventInspector",
    "LogStreamWriter",
    "WriterConfig",
    "WriterState",
    "parse_writer_config",
]
