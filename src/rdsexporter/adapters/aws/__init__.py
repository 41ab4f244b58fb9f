"""AWS adapters: CloudWatch Logs, CloudWatch and RDS through aioboto3."""

from rdsexporter.adapters.aws.cloudwatch import CloudWatchMetricsSource
from rdsexporter.adapters.aws.cloudwatch_logs import CloudWatchLogsSource
from rdsexporter.adapters.aws.instrumentation import RequestMetrics
from rdsexporter.adapters.aws.sessions import (
    ConnectedSession,
    SessionGroup,
    build_sessions,
    group_instances,
)

__all__ = [
    "CloudWatchLogsSource",
    "CloudWatchMetricsSource",
    "ConnectedSession",
    "RequestMetrics",
    "SessionGroup",
    "build_sessions",
    "group_instances",
]
