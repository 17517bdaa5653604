from __future__ import annotations

import pytest

from logstreamio.metrics import MetricsCollector, StreamMetrics


@pytest.mark.asyncio
async def test_disabled_collector_still_tracks_counts() -> None:
    metrics = MetricsCollector()
    assert metrics.is_enabled is False
    assert metrics.registry is None

    await metrics.record_batch_submitted(stream="s", events=3, latency_seconds=0.01)
    await metrics.record_events_rejected(stream="s", events=2)
    await metrics.record_remote_error(stream="s", operation="submit_batch")
    await metrics.record_remote_error(stream="s", operation="fetch_page")
    await metrics.record_poll(stream="s", events=4)

    assert await metrics.snapshot() == StreamMetrics(
        batches_submitted=1,
        events_submitted=3,
        events_rejected=2,
        submit_errors=1,
        polls=1,
        events_received=4,
        poll_errors=1,
    )


@pytest.mark.asyncio
async def test_enabled_collector_exports_prometheus_samples() -> None:
    metrics = MetricsCollector(enabled=True)
    await metrics.record_batch_submitted(stream="a", events=2, latency_seconds=0.02)
    await metrics.record_batch_submitted(stream="b", events=1)
    await metrics.record_remote_error(stream="a", operation="create_stream")
    await metrics.record_poll(stream="a", events=0)

    registry = metrics.registry
    assert registry is not None
    sample = registry.get_sample_value
    assert sample("logstreamio_batches_submitted_total", {"stream": "a"}) == 1.0
    assert sample("logstreamio_events_submitted_total", {"stream": "b"}) == 1.0
    assert (
        sample(
            "logstreamio_remote_errors_total",
            {"stream": "a", "operation": "create_stream"},
        )
        == 1.0
    )
    assert sample("logstreamio_polls_total", {"stream": "a"}) == 1.0
    assert sample("logstreamio_submit_seconds_count", {"stream": "a"}) == 1.0


@pytest.mark.asyncio
async def test_collectors_use_isolated_registries() -> None:
    first = MetricsCollector(enabled=True)
    second = MetricsCollector(enabled=True)
    await first.record_poll(stream="s", events=1)
    assert second.registry is not None
    assert second.registry.get_sample_value("logstreamio_polls_total", {"stream": "s"}) is None  # fmt: skip
