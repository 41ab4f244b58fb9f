"""Shared builders and fakes for the test suite."""

import asyncio
import json
from collections.abc import AsyncIterator, Iterable, Sequence
from datetime import UTC, datetime, timedelta
from typing import Any

from rdsexporter.core.enhanced.poller import to_millis
from rdsexporter.core.models import LogEvent, MonitoredInstance
from rdsexporter.core.ports import LogSourceError

BASE_TIME = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)


def at(seconds: float) -> datetime:
    """Return BASE_TIME shifted by the given number of seconds."""
    return BASE_TIME + timedelta(seconds=seconds)


def make_instance(
    resource_id: str,
    instance: str | None = None,
    region: str = "us-east-1",
    labels: dict[str, str] | None = None,
    **flags: bool,
) -> MonitoredInstance:
    return MonitoredInstance(
        resource_id=resource_id,
        instance=instance or f"db-{resource_id.lower()}",
        region=region,
        labels=tuple(sorted((labels or {}).items())),
        **flags,
    )


def message_document(resource_id: str, timestamp: datetime) -> dict[str, Any]:
    """A MySQL Enhanced Monitoring document, trimmed to one entry per list."""
    return {
        "engine": "MySQL",
        "instanceID": f"db-{resource_id.lower()}",
        "instanceResourceID": resource_id,
        "timestamp": timestamp.strftime("%Y-%m-%dT%H:%M:%SZ"),
        "version": 1.0,
        "uptime": "12 days, 3:04:05",
        "numVCPUs": 2,
        "cpuUtilization": {
            "guest": 0.0,
            "irq": 0.01,
            "system": 1.2,
            "wait": 0.15,
            "idle": 96.5,
            "user": 1.9,
            "total": 3.5,
            "steal": 0.05,
            "nice": 0.0,
        },
        "loadAverageMinute": {"one": 0.25, "five": 0.5, "fifteen": 0.75},
        "memory": {
            "writeback": 0,
            "hugePagesFree": 0,
            "hugePagesRsvd": 0,
            "hugePagesSurp": 0,
            "cached": 1024,
            "hugePagesSize": 2048,
            "free": 512,
            "hugePagesTotal": 0,
            "inactive": 256,
            "pageTables": 16,
            "dirty": 8,
            "mapped": 64,
            "active": 2048,
            "total": 4096,
            "slab": 32,
            "buffers": 128,
        },
        "tasks": {
            "sleeping": 300,
            "zombie": 0,
            "running": 2,
            "stopped": 0,
            "total": 302,
            "blocked": 1,
        },
        "swap": {"cached": 0, "total": 2048, "free": 1024, "in": 3, "out": 4},
        "network": [{"interface": "eth0", "rx": 1500.5, "tx": 2500.5}],
        "diskIO": [
            {
                "writeKbPS": 10.0,
                "readIOsPS": 1.0,
                "await": 0.5,
                "readKbPS": 4.0,
                "rrqmPS": 0.0,
                "util": 0.1,
                "avgQueueLen": 0.01,
                "tps": 2.0,
                "readKb": 40,
                "device": "rdsdev",
                "writeKb": 100,
                "avgReqSz": 8.0,
                "wrqmPS": 1.5,
                "writeIOsPS": 1.0,
            }
        ],
        "fileSys": [
            {
                "used": 1000,
                "name": "rdsfilesys",
                "usedFiles": 100,
                "usedFilePercent": 0.01,
                "maxFiles": 10000,
                "mountPoint": "/rdsdbdata",
                "total": 5000,
                "usedPercent": 20.0,
            }
        ],
        "processList": [
            {
                "vss": 1000,
                "name": "mysqld",
                "tgid": 42,
                "vmlimit": "unlimited",
                "parentID": 1,
                "memoryUsedPc": 12.5,
                "cpuUsedPc": 0.5,
                "id": 42,
                "rss": 500,
            }
        ],
    }


def make_message(resource_id: str, timestamp: datetime, **extra: Any) -> str:
    """Serialize a message document; ``extra`` adds or replaces top-level keys."""
    return json.dumps({**message_document(resource_id, timestamp), **extra})


def make_event(
    resource_id: str, timestamp: datetime, message: str | None = None
) -> LogEvent:
    return LogEvent(
        stream_name=resource_id,
        timestamp=timestamp,
        ingestion_time=timestamp + timedelta(seconds=2),
        message=make_message(resource_id, timestamp) if message is None else message,
        event_id=f"{resource_id}-{to_millis(timestamp)}",
    )


class FakeClock:
    """Settable clock for pollers and sources."""

    def __init__(self, now: datetime = BASE_TIME) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class FakeLogSource:
    """In-memory LogEventSourcePort.

    Returns the stored events of the requested streams whose timestamp is at
    or after the start time, ``page_size`` per page, with an empty page
    first when ``leading_empty_page`` is set.

    Args:
        events: Events to serve.
        page_size: Events per page.
        fail_calls: Indexes of calls that fail after ``fail_after_pages`` pages.
        fail_after_pages: Pages yielded before a failing call raises.
        page_delay: Seconds to sleep before each page.
        leading_empty_page: Yield an empty page before the first real one.
    """

    def __init__(
        self,
        events: Iterable[LogEvent] = (),
        page_size: int = 2,
        fail_calls: Iterable[int] = (),
        fail_after_pages: int = 0,
        page_delay: float = 0.0,
        leading_empty_page: bool = False,
    ) -> None:
        self.events = list(events)
        self.page_size = page_size
        self.fail_calls = set(fail_calls)
        self.fail_after_pages = fail_after_pages
        self.page_delay = page_delay
        self.leading_empty_page = leading_empty_page
        self.calls: list[tuple[str, tuple[str, ...], int]] = []

    async def filter_log_events(
        self,
        log_group: str,
        stream_names: Sequence[str],
        start_time_ms: int,
    ) -> AsyncIterator[list[LogEvent]]:
        call_index = len(self.calls)
        self.calls.append((log_group, tuple(stream_names), start_time_ms))
        wanted = set(stream_names)
        matching = [
            e
            for e in self.events
            if e.stream_name in wanted and to_millis(e.timestamp) >= start_time_ms
        ]
        pages = [
            matching[i : i + self.page_size]
            for i in range(0, len(matching), self.page_size)
        ]
        if self.leading_empty_page:
            pages.insert(0, [])

        for number, page in enumerate(pages):
            if call_index in self.fail_calls and number >= self.fail_after_pages:
                break
            if self.page_delay:
                await asyncio.sleep(self.page_delay)
            yield page
        if call_index in self.fail_calls:
            raise LogSourceError(f"call {call_index} failed")
