"""Core domain models for RDS telemetry."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class LogEntry:
    """A structured log entry emitted by the exporter itself.

    Attributes:
        timestamp: Unix timestamp in seconds.
        level: Log level (e.g., INFO, ERROR, DEBUG).
        message: The log message.
        attributes: Additional structured fields.
    """

    timestamp: float
    level: str
    message: str
    attributes: dict[str, str | int | float | bool] = field(default_factory=dict)


@dataclass(frozen=True)
class MetricSample:
    """A single metric measurement ready for exposition.

    Attributes:
        name: Metric name (e.g., node_load1).
        timestamp: Unix timestamp in seconds.
        value: The metric value.
        labels: Key-value pairs for metric dimensions.
        help: Optional help text rendered as a ``# HELP`` line.
        type: Prometheus metric type: counter, gauge, summary or untyped.
            Samples of a summary are named after the family plus ``_sum``
            or ``_count``.
    """

    name: str
    timestamp: float
    value: float
    labels: dict[str, str] = field(default_factory=dict)
    help: str = ""
    type: str = "untyped"


@dataclass(frozen=True)
class MonitoredInstance:
    """A database instance under observation.

    Attributes:
        resource_id: Stable ``DbiResourceId``; also the log stream name.
        instance: Display name (the DB instance identifier).
        region: AWS region of the instance.
        labels: Extra output labels as sorted key/value pairs.
        disable_enhanced_metrics: Skip the per-instance log feed.
        disable_basic_metrics: Skip the CloudWatch metrics feed.
    """

    resource_id: str
    instance: str
    region: str
    labels: tuple[tuple[str, str], ...] = ()
    disable_enhanced_metrics: bool = False
    disable_basic_metrics: bool = False

    def base_labels(self) -> dict[str, str]:
        """Return the labels attached to every sample of this instance."""
        return {**dict(self.labels), "instance": self.instance, "region": self.region}


@dataclass(frozen=True)
class LogEvent:
    """One entry returned by the log source.

    Attributes:
        stream_name: Owning log stream; the instance's resource id.
        timestamp: Event timestamp (UTC).
        ingestion_time: When the log service ingested the event (UTC).
        message: Raw message body.
        event_id: Opaque id, used for logging only.
    """

    stream_name: str
    timestamp: datetime
    ingestion_time: datetime
    message: str
    event_id: str = ""


@dataclass(frozen=True)
class PollResult:
    """Outcome of one poll of the enhanced monitoring log group.

    Attributes:
        samples: Resource id -> samples of the latest event.
        messages: Resource id -> raw message of the latest event.
        watermark: Start time that the next poll will use.
    """

    samples: dict[str, list[MetricSample]]
    messages: dict[str, str]
    watermark: datetime
