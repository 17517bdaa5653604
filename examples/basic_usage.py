"""
Basic usage example for logstreamio.

Writes a few lines into a log stream and reads them back, using the
in-memory service from ``logstreamio.testing`` in place of a real backend.
"""

import asyncio
import sys
from pathlib import Path

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from logstreamio import LogEvent, LogGroup
from logstreamio.testing import InMemoryLogService


def tag_host(event: LogEvent) -> None:
    event.message = f"[example-host] {event.message}"


async def main() -> None:
    """Demonstrate a write/read round trip."""

    service = InMemoryLogService()
    group = LogGroup(service, "example-service")

    # Writer: lines are buffered and flushed at most 5 times per second
    async with await group.create("worker-1", inspector=tag_host) as writer:
        writer.write(b"Application started\n")
        writer.write(b"Processing request\nRequest done")

    # Reader: polls the stream in the background, read() never blocks
    reader = group.open("worker-1")
    received = b""
    try:
        for _ in range(20):
            received += reader.read()
            if received.count(b"[example-host]") == 3:
                break
            await asyncio.sleep(0.1)
    finally:
        await reader.close()

    print(received.decode())


if __name__ == "__main__":
    asyncio.run(main())
