"""
Root pytest configuration.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Callable, Generator

import pytest


def get_test_timeout(base: float, max_multiplier: float = 5.0) -> float:
    """Apply CI timeout multiplier to a base timeout value.

    Environment:
        CI_TIMEOUT_MULTIPLIER: Multiplier for CI environments (default: 1.0)
    """
    raw = os.getenv("CI_TIMEOUT_MULTIPLIER", "1.0")
    try:
        multiplier = float(raw) if raw else 1.0
        multiplier = min(multiplier, max_multiplier)
    except ValueError:
        multiplier = 1.0
    return base * multiplier


async def wait_until(
    predicate: Callable[[], bool], *, timeout: float = 2.0, step: float = 0.01
) -> None:
    """Poll ``predicate`` until true; fail the test after ``timeout``."""
    deadline = asyncio.get_running_loop().time() + get_test_timeout(timeout)
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            pytest.fail("condition not met before timeout")
        await asyncio.sleep(step)


# Register logstreamio testing fixtures for all tests
pytest_plugins = ("logstreamio.testing.fixtures",)


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line(
        "markers",
        "critical: Tests that must never fail - core functionality",
    )
    config.addinivalue_line(
        "markers",
        "slow: Tests that take >1 second",
    )
    config.addinivalue_line(
        "markers",
        "property: Property-based tests (may be slow)",
    )


@pytest.fixture(autouse=True)
def reset_diagnostics_writer() -> Generator[None, None, None]:
    """Restore the default diagnostics writer around each test.

    The diagnostics module caches its settings at first access; clearing the
    cache lets each test enable diagnostics through the environment.
    """
    from logstreamio.core import diagnostics

    diagnostics.set_writer_for_tests(None)
    diagnostics._internal_logging_enabled = None
    diagnostics._rate_limit_seconds = None
    yield
    diagnostics.set_writer_for_tests(None)
    diagnostics._internal_logging_enabled = None
    diagnostics._rate_limit_seconds = None


@pytest.fixture(name="wait_until")
def wait_until_fixture() -> Callable[..., object]:
    return wait_until
