"""
Helpers for invoking RemoteLogAPI methods.

Every remote call goes through ``call_remote`` so that deadlines and error
wrapping behave the same for writers, readers and groups.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

from .errors import LogStreamError, TransportError

T = TypeVar("T")


async def call_remote(
    awaitable: Awaitable[T],
    *,
    operation: str,
    message: str,
    group_name: str,
    stream_name: str,
    timeout: float | None = None,
) -> T:
    """Await a remote call, converting failures into ``TransportError``.

    Errors that are already ``LogStreamError`` (for instance
    ``StreamAlreadyExistsError`` from ``create_stream``) pass through
    unchanged. Deadline expiry is reported like any other transport failure.
    """
    try:
        if timeout is None:
            return await awaitable
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except LogStreamError:
        raise
    except asyncio.TimeoutError as exc:
        raise TransportError(
            message,
            cause=exc,
            group_name=group_name,
            stream_name=stream_name,
            operation=operation,
            metadata={"timeout_seconds": timeout},
        ) from exc
    except Exception as exc:
        raise TransportError(
            message,
            cause=exc,
            group_name=group_name,
            stream_name=stream_name,
            operation=operation,
        ) from exc


__all__ = ["call_remote"]
