"""
Fixed quota constants of the remote log-stream API.

These mirror the service-side limits and are intentionally not exposed
through settings: exceeding them only produces rejected requests.
"""

from __future__ import annotations

# Per-request ceilings for a single batch submission
MAX_BATCH_SIZE_BYTES = 1_048_576
MAX_BATCH_SIZE_EVENTS = 10_000

# Fixed per-event overhead counted by the service towards the batch size
EVENT_OVERHEAD_BYTES = 26

# Largest message that fits a batch on its own
MAX_EVENT_MESSAGE_BYTES = MAX_BATCH_SIZE_BYTES - EVENT_OVERHEAD_BYTES

# At most 5 submissions per second per stream
WRITE_INTERVAL_SECONDS = 1.0 / 5

# At most 10 page fetches per second
READ_INTERVAL_SECONDS = 1.0 / 10
