"""
logstreamio: byte streams over quota-limited remote log streams.

Write bytes into a remote log stream through a batching, rate-limited
writer, and read a stream back as bytes through a paginating reader.
"""

from __future__ import annotations

from ._version import __version__
from .core.api import (
    Page,
    RejectionReport,
    RemoteLogAPI,
    StreamDescription,
    SubmitResult,
)
from .core.errors import (
    ClosedError,
    ConfigurationError,
    LogStreamError,
    OversizedEventError,
    RejectedEventsError,
    RejectionError,
    StreamAlreadyExistsError,
    TransportError,
)
from .core.events import LogEvent
from .core.group import LogGroup
from .core.reader import LogStreamReader
from .core.settings import Settings
from .core.writer import EventInspector, LogStreamWriter, WriterConfig
from .metrics.metrics import MetricsCollector

__all__ = [
    "ClosedError",
    "ConfigurationError",
    "EventInspector",
    "LogEvent",
    "LogGroup",
    "LogStreamError",
    "LogStreamReader",
    "LogStreamWriter",
    "MetricsCollector",
    "OversizedEventError",
    "Page",
    "RejectedEventsError",
    "RejectionError",
    "RejectionReport",
    "RemoteLogAPI",
    "Settings",
    "StreamAlreadyExistsError",
    "StreamDescription",
    "SubmitResult",
    "TransportError",
    "WriterConfig",
    "__version__",
    "VERSION",
]

VERSION = __version__
