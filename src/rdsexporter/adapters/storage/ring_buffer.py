"""Ring buffer storage for the exporter's own log entries.

Provides bounded in-memory storage that automatically evicts oldest
entries when the buffer is full, so a long-running exporter keeps a
predictable memory footprint.
"""

from collections import deque
from collections.abc import Iterable

from rdsexporter.core.models import LogEntry

DEFAULT_MAX_SIZE = 1000


class RingBufferLogStorage:
    """Ring buffer implementation of LogStoragePort.

    Stores log entries in a fixed-size circular buffer. When the buffer
    is full, the oldest entry is automatically evicted to make room for
    new entries.

    Args:
        max_size: Maximum number of entries to store.
    """

    def __init__(self, max_size: int = DEFAULT_MAX_SIZE) -> None:
        self._buffer: deque[LogEntry] = deque(maxlen=max_size)

    async def write(self, entry: LogEntry) -> None:
        """Write a log entry to storage."""
        self._buffer.append(entry)

    def write_sync(self, entry: LogEntry) -> None:
        """Synchronous write for logging handlers and other non-async contexts."""
        self._buffer.append(entry)

    def read(self, since: float = 0, level: str | None = None) -> Iterable[LogEntry]:
        """Read log entries since the given timestamp.

        Returns entries with timestamp > since (and the given level, if any),
        ordered by timestamp ascending.
        """
        filtered = [
            e
            for e in list(self._buffer)
            if e.timestamp > since and (level is None or e.level == level)
        ]
        return sorted(filtered, key=lambda e: e.timestamp)

    def __len__(self) -> int:
        return len(self._buffer)
