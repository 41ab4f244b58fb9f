"""CloudWatch Logs implementation of LogEventSourcePort."""

from collections.abc import AsyncIterator, Sequence
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from rdsexporter.core.enhanced.poller import from_millis
from rdsexporter.core.models import LogEvent
from rdsexporter.core.ports import LogSourceError


def _to_event(raw: dict[str, Any]) -> LogEvent:
    timestamp = from_millis(raw["timestamp"])
    ingested = raw.get("ingestionTime")
    return LogEvent(
        stream_name=raw["logStreamName"],
        timestamp=timestamp,
        ingestion_time=timestamp if ingested is None else from_millis(ingested),
        message=raw["message"],
        event_id=raw.get("eventId", ""),
    )


class CloudWatchLogsSource:
    """Runs FilterLogEvents queries through an aiobotocore ``logs`` client.

    The boto paginator follows ``nextToken`` until the service stops
    returning one; pages without events do not end the iteration.
    """

    def __init__(self, client: Any) -> None:
        self._client = client

    async def filter_log_events(
        self,
        log_group: str,
        stream_names: Sequence[str],
        start_time_ms: int,
    ) -> AsyncIterator[list[LogEvent]]:
        """Yield pages of events with timestamp >= start_time_ms.

        Raises:
            LogSourceError: If a page request fails.
        """
        paginator = self._client.get_paginator("filter_log_events")
        try:
            async for page in paginator.paginate(
                logGroupName=log_group,
                logStreamNames=list(stream_names),
                startTime=start_time_ms,
            ):
                yield [_to_event(raw) for raw in page.get("events", [])]
        except (BotoCoreError, ClientError) as exc:
            raise LogSourceError(
                f"FilterLogEvents on {log_group} for {len(stream_names)} "
                f"streams failed: {exc}"
            ) from exc
