"""
LogGroup: entry point binding a remote log group to writers and readers.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from ..metrics.metrics import MetricsCollector
from . import diagnostics
from .api import RemoteLogAPI
from .errors import ConfigurationError, StreamAlreadyExistsError
from .reader import LogStreamReader
from .remote import call_remote
from .settings import Settings
from .writer import LogStreamWriter, WriterConfig, parse_writer_config


class LogGroup:
    """A named remote log group, usable as a source of byte streams.

    Usage:
        group = LogGroup(api, "my-service")
        async with await group.create("worker-1") as writer:
            writer.write(b"hello\\n")

        reader = group.open("worker-1")
        data = reader.read()
    """

    def __init__(
        self,
        api: RemoteLogAPI,
        name: str,
        *,
        settings: Settings | None = None,
        metrics: MetricsCollector | None = None,
    ) -> None:
        if not name:
            raise ValueError("group name must not be empty")
        self._api = api
        self._name = name
        self._settings = settings or Settings()
        if metrics is None and self._settings.core.enable_metrics:
            metrics = MetricsCollector(enabled=True)
        self._metrics = metrics
        # Per-stream creation locks with their number of holders and waiters
        self._stream_locks: dict[str, asyncio.Lock] = {}
        self._stream_lock_users: dict[str, int] = {}

    @property
    def name(self) -> str:
        return self._name

    @property
    def metrics(self) -> MetricsCollector | None:
        return self._metrics

    async def create(
        self,
        stream_name: str,
        config: WriterConfig | dict[str, Any] | None = None,
        **overrides: Any,
    ) -> LogStreamWriter:
        """Create (or attach to) ``stream_name`` and return a running writer.

        Keyword overrides are ``inspector``, ``sequence_token`` and
        ``clock``. Supplying ``sequence_token`` skips the remote create and
        describe calls entirely.
        """
        cfg = parse_writer_config(config, **overrides)
        if cfg.sequence_token is None:
            async with self._stream_lock(stream_name):
                token = await self._prepare_stream(stream_name)
            cfg = parse_writer_config(cfg, sequence_token=token)
        writer = LogStreamWriter(
            self._api,
            self._name,
            stream_name,
            config=cfg,
            settings=self._settings,
            metrics=self._metrics,
        )
        writer.start()
        return writer

    def open(self, stream_name: str) -> LogStreamReader:
        """Return a running reader; failures surface on ``read``."""
        reader = LogStreamReader(
            self._api,
            self._name,
            stream_name,
            settings=self._settings,
            metrics=self._metrics,
        )
        reader.start()
        return reader

    @asynccontextmanager
    async def _stream_lock(self, stream_name: str) -> AsyncIterator[None]:
        """Serialize stream setup per name; the lock is dropped when unused."""
        lock = self._stream_locks.get(stream_name)
        if lock is None:
            lock = self._stream_locks[stream_name] = asyncio.Lock()
        self._stream_lock_users[stream_name] = (
            self._stream_lock_users.get(stream_name, 0) + 1
        )
        try:
            async with lock:
                yield
        finally:
            users = self._stream_lock_users[stream_name] - 1
            if users:
                self._stream_lock_users[stream_name] = users
            else:
                del self._stream_lock_users[stream_name]
                del self._stream_locks[stream_name]

    async def _prepare_stream(self, stream_name: str) -> str | None:
        """Create the stream, or fetch the sequence token of an existing one."""
        timeout = self._settings.core.call_timeout_seconds
        try:
            await call_remote(
                self._api.create_stream(self._name, stream_name),
                operation="create_stream",
                message="could not create a log stream",
                group_name=self._name,
                stream_name=stream_name,
                timeout=timeout,
            )
            return None
        except StreamAlreadyExistsError:
            diagnostics.debug(
                "group",
                "log stream exists, resuming from its sequence token",
                group=self._name,
                stream=stream_name,
            )

        descriptions = await call_remote(
            self._api.describe_streams(self._name, stream_name),
            operation="describe_streams",
            message="couldn't get log stream description",
            group_name=self._name,
            stream_name=stream_name,
            timeout=timeout,
        )
        # The prefix query may also return longer names sharing the prefix
        matches = [d for d in descriptions if d.stream_name == stream_name]
        if not matches:
            raise ConfigurationError(
                "log stream exists but has no description",
                group_name=self._name,
                stream_name=stream_name,
                operation="describe_streams",
                metadata={"returned": len(descriptions)},
            )
        return matches[0].sequence_token


__all__ = ["LogGroup"]
