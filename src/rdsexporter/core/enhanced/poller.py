"""Polling of the Enhanced Monitoring log group.

Each poll queries the log streams of every monitored instance, starting at
the current watermark, decodes every returned event, and keeps only the
newest event per instance. The watermark for the next poll comes from
:func:`rdsexporter.core.enhanced.reconcile.reconcile`.
"""

import asyncio
import logging
from collections import defaultdict
from collections.abc import Callable, Iterable, Iterator, Sequence
from datetime import UTC, datetime, timedelta
from itertools import batched

from rdsexporter.core.enhanced.parser import (
    MessageParseError,
    MessageParser,
    SchemaDriftError,
    make_samples,
)
from rdsexporter.core.enhanced.reconcile import reconcile
from rdsexporter.core.models import (
    LogEvent,
    MetricSample,
    MonitoredInstance,
    PollResult,
)
from rdsexporter.core.ports import LogEventSourcePort, LogSourceError

logger = logging.getLogger(__name__)

LOG_GROUP = "RDSOSMetrics"
# FilterLogEvents accepts at most 100 log stream names per request.
MAX_STREAMS_PER_REQUEST = 100
DEFAULT_START_OFFSET = timedelta(minutes=3)

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def to_millis(moment: datetime) -> int:
    """Convert an aware datetime to integer milliseconds since the epoch."""
    return (moment - _EPOCH) // timedelta(milliseconds=1)


def from_millis(millis: int) -> datetime:
    """Convert milliseconds since the epoch to an aware UTC datetime."""
    return _EPOCH + timedelta(milliseconds=millis)


# (samples, raw message) of one event
_Entry = tuple[list[MetricSample], str]


class _Buckets:
    """Resource id -> event timestamp -> entry, rebuilt for every poll."""

    def __init__(self) -> None:
        self._events: defaultdict[str, dict[datetime, _Entry]] = defaultdict(dict)

    def add(
        self,
        resource_id: str,
        timestamp: datetime,
        samples: list[MetricSample],
        message: str,
    ) -> None:
        self._events[resource_id][timestamp] = (samples, message)

    def merge(self, other: "_Buckets") -> None:
        for resource_id, events in other._events.items():
            self._events[resource_id].update(events)

    def timestamps(self) -> dict[str, list[datetime]]:
        return {rid: list(events) for rid, events in self._events.items()}

    def get(self, resource_id: str, timestamp: datetime) -> _Entry:
        return self._events[resource_id][timestamp]


class LogEventPoller:
    """Polls one log group for a fixed set of instances.

    The poller owns the watermark (``next_start_time``); it is only replaced
    at the end of :meth:`poll`, after every batch has been collected.

    Args:
        source: Log event source to query.
        instances: Monitored instances; their resource ids are the stream names.
        parser: Message parser (default: a lenient MessageParser).
        log_group: Log group to query.
        batch_size: Stream names per request, at most 100.
        start_offset: How far back the first poll starts.
        clock: Returns the current aware datetime; injectable for tests.
    """

    def __init__(
        self,
        source: LogEventSourcePort,
        instances: Iterable[MonitoredInstance],
        parser: MessageParser | None = None,
        *,
        log_group: str = LOG_GROUP,
        batch_size: int = MAX_STREAMS_PER_REQUEST,
        start_offset: timedelta = DEFAULT_START_OFFSET,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if not 0 < batch_size <= MAX_STREAMS_PER_REQUEST:
            raise ValueError(
                f"batch_size must be between 1 and {MAX_STREAMS_PER_REQUEST}"
            )
        self._source = source
        self._instances = {i.resource_id: i for i in instances}
        self._parser = parser or MessageParser()
        self._log_group = log_group
        self._batch_size = batch_size
        self._clock = clock or (lambda: datetime.now(UTC))
        self.next_start_time = self._clock() - start_offset

    @property
    def stream_names(self) -> list[str]:
        """Log streams queried on each poll; disabled instances are left out."""
        return [
            resource_id
            for resource_id, instance in self._instances.items()
            if not instance.disable_enhanced_metrics
        ]

    def _batches(self) -> Iterator[tuple[str, ...]]:
        return batched(self.stream_names, self._batch_size)

    async def poll(self, timeout: float | None = None) -> PollResult:
        """Run one poll and advance the watermark.

        Reaching ``timeout`` does not fail the poll: batches and pages that
        completed before the deadline are kept and reconciled as usual.

        Args:
            timeout: Seconds the queries may run in total; None for no limit.

        Returns:
            PollResult with, for each instance that reported at least one
            event, the samples and raw message of its newest event.

        Raises:
            SchemaDriftError: If the parser runs in strict mode and a message
                has fields the schema does not know.
        """
        start = self.next_start_time
        start_ms = to_millis(start)
        logger.debug(
            "Requesting metrics",
            extra={
                "next_start": start.isoformat(),
                "since_last": (self._clock() - start).total_seconds(),
            },
        )

        collected = _Buckets()
        pending: _Buckets | None = None
        deadline = asyncio.timeout(timeout)
        try:
            async with deadline:
                for batch in self._batches():
                    pending = _Buckets()
                    if await self._query_batch(batch, start_ms, pending):
                        collected.merge(pending)
                    pending = None
        except TimeoutError:
            if not deadline.expired():
                raise
            # keep the pages of the interrupted batch
            if pending is not None:
                collected.merge(pending)
            logger.warning(
                "Poll deadline reached, publishing partial results",
                extra={"timeout": timeout},
            )

        selected, self.next_start_time = reconcile(
            collected.timestamps(), now=self._clock()
        )

        samples: dict[str, list[MetricSample]] = {}
        messages: dict[str, str] = {}
        for resource_id, timestamp in selected.items():
            samples[resource_id], messages[resource_id] = collected.get(
                resource_id, timestamp
            )
        return PollResult(
            samples=samples, messages=messages, watermark=self.next_start_time
        )

    async def _query_batch(
        self, stream_names: Sequence[str], start_ms: int, into: _Buckets
    ) -> bool:
        """Drain every page of one batch query into ``into``.

        A ``TimeoutError`` raised by the source counts as a failed query. The
        poll deadline reaches this coroutine as a cancellation instead.

        Returns:
            False if the query failed; the caller then drops the batch.
        """
        try:
            async for page in self._source.filter_log_events(
                self._log_group, stream_names, start_ms
            ):
                for event in page:
                    self._collect(event, into)
        except (LogSourceError, TimeoutError):
            logger.exception(
                "Failed to filter log events", extra={"streams": len(stream_names)}
            )
            return False
        return True

    def _collect(self, event: LogEvent, into: _Buckets) -> None:
        context: dict[str, str] = {
            "event_id": event.event_id,
            "log_stream_name": event.stream_name,
            "event_time": event.timestamp.isoformat(),
            "ingestion_time": event.ingestion_time.isoformat(),
        }

        instance = self._instances.get(event.stream_name)
        if instance is None:
            logger.error("Failed to find instance", extra=context)
            return
        if instance.disable_enhanced_metrics:
            logger.debug(
                "Enhanced metrics are disabled for instance %s",
                instance.instance,
                extra=context,
            )
            return
        context.update(region=instance.region, instance=instance.instance)

        try:
            record = self._parser.parse(event.message)
        except SchemaDriftError:
            raise
        except MessageParseError as exc:
            logger.error("Failed to parse metrics: %s", exc, extra=context)
            return

        logger.debug(
            "Timestamp from message: %s; from event: %s",
            record.timestamp.isoformat(),
            event.timestamp.isoformat(),
            extra=context,
        )
        into.add(
            instance.resource_id,
            event.timestamp,
            make_samples(record, instance),
            event.message,
        )
