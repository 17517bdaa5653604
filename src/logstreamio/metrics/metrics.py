"""
Async-first metrics collection for logstreamio.

Prometheus-compatible counters and a submit-latency histogram for writers
and readers.

Design goals:
- Pure async/await, no blocking I/O
- Zero global state; each collector owns an isolated registry
- Safe no-op exporters when metrics are disabled, while still tracking
  in-memory counters for tests
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

from prometheus_client import CollectorRegistry, Counter, Histogram


@dataclass
class StreamMetrics:
    """Captured runtime metrics for quick assertions in tests."""

    batches_submitted: int = 0
    events_submitted: int = 0
    events_rejected: int = 0
    submit_errors: int = 0
    polls: int = 0
    events_received: int = 0
    poll_errors: int = 0


class MetricsCollector:
    """Collector shared by the writers and readers of a LogGroup."""

    def __init__(self, *, enabled: bool = False) -> None:
        self._enabled = bool(enabled)
        self._lock = asyncio.Lock()
        self._state = StreamMetrics()

        self._c_batches: Any | None = None
        self._c_events_out: Any | None = None
        self._c_rejected: Any | None = None
        self._c_errors: Any | None = None
        self._c_polls: Any | None = None
        self._c_events_in: Any | None = None
        self._h_submit_latency: Any | None = None
        self._registry: CollectorRegistry | None = None

        if self._enabled:
            self._registry = CollectorRegistry()
            self._c_batches = Counter(
                "logstreamio_batches_submitted_total",
                "Total number of batches submitted to the remote service",
                ["stream"],
                registry=self._registry,
            )
            self._c_events_out = Counter(
                "logstreamio_events_submitted_total",
                "Total number of events accepted by the remote service",
                ["stream"],
                registry=self._registry,
            )
            self._c_rejected = Counter(
                "logstreamio_events_rejected_total",
                "Total number of events in batches with a rejection report",
                ["stream"],
                registry=self._registry,
            )
            self._c_errors = Counter(
                "logstreamio_remote_errors_total",
                "Total number of failed remote calls",
                ["stream", "operation"],
                registry=self._registry,
            )
            self._c_polls = Counter(
                "logstreamio_polls_total",
                "Total number of page fetches",
                ["stream"],
                registry=self._registry,
            )
            self._c_events_in = Counter(
                "logstreamio_events_received_total",
                "Total number of events read from the remote service",
                ["stream"],
                registry=self._registry,
            )
            self._h_submit_latency = Histogram(
                "logstreamio_submit_seconds",
                "Latency of a single batch submission",
                ["stream"],
                buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
                registry=self._registry,
            )

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    @property
    def registry(self) -> CollectorRegistry | None:
        """Expose the isolated Prometheus registry when enabled."""
        return self._registry

    async def record_batch_submitted(
        self,
        *,
        stream: str,
        events: int,
        latency_seconds: float | None = None,
    ) -> None:
        async with self._lock:
            self._state.batches_submitted += 1
            self._state.events_submitted += events
        if not self._enabled:
            return
        if self._c_batches is not None:
            self._c_batches.labels(stream=stream).inc()
        if self._c_events_out is not None:
            self._c_events_out.labels(stream=stream).inc(events)
        if latency_seconds is not None and self._h_submit_latency is not None:
            self._h_submit_latency.labels(stream=stream).observe(latency_seconds)

    async def record_events_rejected(self, *, stream: str, events: int) -> None:
        async with self._lock:
            self._state.events_rejected += events
        if self._enabled and self._c_rejected is not None:
            self._c_rejected.labels(stream=stream).inc(events)

    async def record_remote_error(self, *, stream: str, operation: str) -> None:
        async with self._lock:
            if operation == "fetch_page":
                self._state.poll_errors += 1
            else:
                self._state.submit_errors += 1
        if self._enabled and self._c_errors is not None:
            self._c_errors.labels(stream=stream, operation=operation).inc()

    async def record_poll(self, *, stream: str, events: int) -> None:
        async with self._lock:
            self._state.polls += 1
            self._state.events_received += events
        if not self._enabled:
            return
        if self._c_polls is not None:
            self._c_polls.labels(stream=stream).inc()
        if self._c_events_in is not None and events:
            self._c_events_in.labels(stream=stream).inc(events)

    async def snapshot(self) -> StreamMetrics:
        async with self._lock:
            return StreamMetrics(**vars(self._state))


__all__ = ["MetricsCollector", "StreamMetrics"]
