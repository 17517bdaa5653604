"""
Pytest fixtures for code built on logstreamio.

Register with ``pytest_plugins = ("logstreamio.testing.fixtures",)``.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import pytest

from ..core import diagnostics
from ..core.group import LogGroup
from ..core.settings import Settings
from .mocks import InMemoryLogService, ScriptedLogAPI


@pytest.fixture
def memory_log_service() -> InMemoryLogService:
    return InMemoryLogService()


@pytest.fixture
def scripted_log_api() -> ScriptedLogAPI:
    return ScriptedLogAPI()


@pytest.fixture
def log_group(memory_log_service: InMemoryLogService) -> LogGroup:
    return LogGroup(memory_log_service, "test-group", settings=Settings())


@pytest.fixture
def captured_diagnostics(
    monkeypatch: pytest.MonkeyPatch,
) -> Iterator[list[dict[str, Any]]]:
    """Enable internal diagnostics and collect their payloads."""
    monkeypatch.setenv("LOGSTREAMIO_CORE__INTERNAL_LOGGING_ENABLED", "true")
    monkeypatch.setenv("LOGSTREAMIO_CORE__DIAGNOSTICS_RATE_LIMIT_SECONDS", "0")
    diagnostics._internal_logging_enabled = None
    diagnostics._rate_limit_seconds = None
    captured: list[dict[str, Any]] = []
    diagnostics.set_writer_for_tests(captured.append)
    try:
        yield captured
    finally:
        diagnostics.set_writer_for_tests(None)
