"""
Error taxonomy for logstreamio.

Every error raised by the package derives from ``LogStreamError`` and carries
an ``ErrorContext`` describing where it happened (group, stream, operation)
so that sticky errors surfaced long after the failing remote call still say
which call failed.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ErrorCategory(str, Enum):
    """Broad classification of failures."""

    CONFIG = "config"
    NETWORK = "network"
    REJECTED = "rejected"
    STATE = "state"
    VALIDATION = "validation"


class ErrorSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorContext(BaseModel):
    """Structured context attached to every LogStreamError."""

    model_config = ConfigDict(frozen=True)

    error_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    category: ErrorCategory = ErrorCategory.STATE
    severity: ErrorSeverity = ErrorSeverity.MEDIUM
    group_name: str | None = None
    stream_name: str | None = None
    operation: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class LogStreamError(Exception):
    """Base class for all logstreamio errors."""

    default_category = ErrorCategory.STATE
    default_severity = ErrorSeverity.MEDIUM

    def __init__(
        self,
        message: str,
        *,
        cause: BaseException | None = None,
        category: ErrorCategory | None = None,
        severity: ErrorSeverity | None = None,
        group_name: str | None = None,
        stream_name: str | None = None,
        operation: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.context = ErrorContext(
            category=category or self.default_category,
            severity=severity or self.default_severity,
            group_name=group_name,
            stream_name=stream_name,
            operation=operation,
            metadata=dict(metadata or {}),
        )
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {str(self.cause) or type(self.cause).__name__}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Serialize for diagnostics payloads."""
        data: dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
            "error_id": self.context.error_id,
            "timestamp": self.context.timestamp.isoformat(),
            "category": self.context.category.value,
            "severity": self.context.severity.value,
        }
        for key in ("group_name", "stream_name", "operation"):
            value = getattr(self.context, key)
            if value is not None:
                data[key] = value
        if self.context.metadata:
            data["metadata"] = dict(self.context.metadata)
        if self.cause is not None:
            data["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return data


class ConfigurationError(LogStreamError):
    """The remote stream is not in the state the caller expects."""

    default_category = ErrorCategory.CONFIG
    default_severity = ErrorSeverity.HIGH


class TransportError(LogStreamError):
    """A remote API call failed, timed out or was cancelled."""

    default_category = ErrorCategory.NETWORK
    default_severity = ErrorSeverity.HIGH


class RejectedEventsError(LogStreamError):
    """The remote service rejected some or all events of a batch."""

    default_category = ErrorCategory.REJECTED

    def __init__(self, message: str = "log messages were rejected", *, report: Any = None, **kwargs: Any) -> None:  # fmt: skip
        metadata = dict(kwargs.pop("metadata", None) or {})
        if report is not None and hasattr(report, "model_dump"):
            metadata.setdefault("rejection", report.model_dump(exclude_none=True))
        super().__init__(message, metadata=metadata, **kwargs)
        self.report = report


# Shorter alias
RejectionError = RejectedEventsError


class ClosedError(LogStreamError):
    """Operation attempted on a closed writer or reader."""

    default_severity = ErrorSeverity.LOW


class OversizedEventError(LogStreamError):
    """A single event cannot fit any batch on its own."""

    default_category = ErrorCategory.VALIDATION


class StreamAlreadyExistsError(LogStreamError):
    """Raised by RemoteLogAPI.create_stream when the stream already exists."""

    default_category = ErrorCategory.CONFIG
    default_severity = ErrorSeverity.LOW


__all__ = [
    "ClosedError",
    "ConfigurationError",
    "ErrorCategory",
    "ErrorContext",
    "ErrorSeverity",
    "LogStreamError",
    "OversizedEventError",
    "RejectedEventsError",
    "RejectionError",
    "StreamAlreadyExistsError",
    "TransportError",
]
