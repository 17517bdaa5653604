"""
Internal diagnostics for non-fatal adapter errors.

Diagnostics are structured JSON lines written to stderr, never through the
application's logging configuration, and only when
``LOGSTREAMIO_CORE__INTERNAL_LOGGING_ENABLED`` is set. Emission is
rate-limited per key and must never raise into the caller.
"""

from __future__ import annotations

import json
import sys
import threading
import time
from typing import Any, Callable

DiagnosticsWriter = Callable[[dict[str, Any]], None]

_writer: DiagnosticsWriter | None = None
# Read from settings at first use; tests reset both to None
_internal_logging_enabled: bool | None = None
_rate_limit_seconds: float | None = None
_last_emit: dict[str, float] = {}
_lock = threading.Lock()


def _default_writer(payload: dict[str, Any]) -> None:
    sys.stderr.write(json.dumps(payload, default=str) + "\n")


def set_writer_for_tests(writer: DiagnosticsWriter | None) -> None:
    """Redirect diagnostics payloads; ``None`` restores stderr output."""
    global _writer
    _writer = writer
    with _lock:
        _last_emit.clear()


def _settings() -> tuple[bool, float]:
    global _internal_logging_enabled, _rate_limit_seconds
    if _internal_logging_enabled is None or _rate_limit_seconds is None:
        try:
            from .settings import Settings

            core = Settings().core
            _internal_logging_enabled = core.internal_logging_enabled
            _rate_limit_seconds = core.diagnostics_rate_limit_seconds
        except Exception:
            _internal_logging_enabled, _rate_limit_seconds = False, 1.0
    return _internal_logging_enabled, _rate_limit_seconds


def _allowed(key: str | None, interval: float) -> bool:
    if key is None or interval <= 0:
        return True
    now = time.monotonic()
    with _lock:
        last = _last_emit.get(key)
        if last is not None and now - last < interval:
            return False
        _last_emit[key] = now
    return True


def _emit(
    level: str,
    component: str,
    message: str,
    rate_limit_key: str | None,
    fields: dict[str, Any],
) -> None:
    enabled, interval = _settings()
    if not enabled:
        return
    if not _allowed(rate_limit_key, interval):
        return
    payload: dict[str, Any] = {
        "timestamp": time.time(),
        "level": level,
        "component": component,
        "message": message,
        **fields,
    }
    try:
        (_writer or _default_writer)(payload)
    except Exception:
        # Diagnostics must never break the caller
        pass


def warn(
    component: str,
    message: str,
    *,
    _rate_limit_key: str | None = None,
    **fields: Any,
) -> None:
    _emit("WARN", component, message, _rate_limit_key, fields)


def debug(
    component: str,
    message: str,
    *,
    _rate_limit_key: str | None = None,
    **fields: Any,
) -> None:
    _emit("DEBUG", component, message, _rate_limit_key, fields)


__all__ = ["debug", "set_writer_for_tests", "warn"]
