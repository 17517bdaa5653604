"""
Testing utilities for code built on logstreamio.

Test doubles are always available. Pytest fixtures require the testing
extra: `pip install logstreamio[testing]`

Example:
    from logstreamio import LogGroup
    from logstreamio.testing import InMemoryLogService

    async def test_roundtrip():
        service = InMemoryLogService()
        writer = await LogGroup(service, "app").create("worker")
        writer.write(b"hello\\n")
        await writer.close()
        assert service.messages("app", "worker") == ["hello\\n"]
"""

from .mocks import (
    BatchLimitExceededError,
    InMemoryLogService,
    InvalidSequenceTokenError,
    RecordedCall,
    ScriptedLogAPI,
    StreamNotFoundError,
)

__all__ = [
    "BatchLimitExceededError",
    "InMemoryLogService",
    "InvalidSequenceTokenError",
    "RecordedCall",
    "ScriptedLogAPI",
    "StreamNotFoundError",
]
