"""Enhanced Monitoring feed: per-instance OS metrics from CloudWatch Logs."""

from rdsexporter.core.enhanced.loop import PollLoop
from rdsexporter.core.enhanced.parser import (
    MessageParseError,
    MessageParser,
    SchemaDriftError,
    make_samples,
)
from rdsexporter.core.enhanced.payload import OSMetrics
from rdsexporter.core.enhanced.poller import LogEventPoller
from rdsexporter.core.enhanced.reconcile import reconcile

__all__ = [
    "LogEventPoller",
    "MessageParseError",
    "MessageParser",
    "OSMetrics",
    "PollLoop",
    "SchemaDriftError",
    "make_samples",
    "reconcile",
]
