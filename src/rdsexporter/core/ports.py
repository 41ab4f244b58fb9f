"""Port interfaces for telemetry sources and storage adapters.

These protocols define the contracts that adapters must implement.
The core domain depends only on these interfaces, not concrete implementations.
"""

from collections.abc import AsyncIterator, Iterable, Sequence
from datetime import datetime, timedelta
from typing import Protocol, runtime_checkable

from rdsexporter.core.models import (
    LogEntry,
    LogEvent,
    MetricSample,
    MonitoredInstance,
    PollResult,
)


class LogSourceError(RuntimeError):
    """Raised when a log query or one of its pages fails."""


class MetricSourceError(RuntimeError):
    """Raised when fetching CloudWatch metric statistics fails."""


@runtime_checkable
class LogEventSourcePort(Protocol):
    """Port for paginated log event queries.

    Examples: CloudWatchLogsSource, and the fakes used in tests.
    """

    def filter_log_events(
        self,
        log_group: str,
        stream_names: Sequence[str],
        start_time_ms: int,
    ) -> AsyncIterator[list[LogEvent]]:
        """Yield pages of events with timestamp >= start_time_ms.

        Pages may be empty. Iteration stops only when the provider reports
        that there are no more pages.

        Raises:
            LogSourceError: If the query or a page request fails.
        """
        ...


@runtime_checkable
class MetricStatisticsPort(Protocol):
    """Port for periodic aggregate metrics of one instance."""

    async def latest_values(
        self,
        instance: MonitoredInstance,
        metric_names: Sequence[str],
        period: timedelta,
        window: timedelta,
    ) -> dict[str, tuple[datetime, float]]:
        """Return the most recent datapoint of each metric that has one.

        Raises:
            MetricSourceError: If the request fails.
        """
        ...


@runtime_checkable
class SnapshotPort(Protocol):
    """Port for handing poll results to the serving layer.

    Examples: SnapshotStore.
    """

    async def publish(self, source: str, result: PollResult) -> None:
        """Replace the snapshot published by the given poll loop."""
        ...

    def read(self) -> list[MetricSample]:
        """Return the samples of every current snapshot."""
        ...

    def messages(self) -> dict[str, str]:
        """Return the raw last message of every resource id."""
        ...


@runtime_checkable
class LogStoragePort(Protocol):
    """Port for the exporter's own log entries.

    Examples: RingBufferLogStorage.
    """

    async def write(self, entry: LogEntry) -> None:
        """Write a log entry to storage."""
        ...

    def write_sync(self, entry: LogEntry) -> None:
        """Write a log entry from a non-async context."""
        ...

    def read(self, since: float = 0, level: str | None = None) -> Iterable[LogEntry]:
        """Read log entries since the given timestamp.

        Args:
            since: Unix timestamp. Returns entries with timestamp > since.
            level: Optional level filter (e.g., "ERROR").

        Returns:
            Iterable of LogEntry objects, ordered by timestamp ascending.
        """
        ...
