"""Storage adapters implementing core ports."""

from rdsexporter.adapters.storage.in_memory import SnapshotStore
from rdsexporter.adapters.storage.ring_buffer import RingBufferLogStorage

__all__ = [
    "RingBufferLogStorage",
    "SnapshotStore",
]
