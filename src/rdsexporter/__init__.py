"""Prometheus exporter for AWS RDS basic and Enhanced Monitoring metrics."""

from rdsexporter.core.models import LogEntry, MetricSample, MonitoredInstance

__version__ = "0.1.0"

__all__ = ["LogEntry", "MetricSample", "MonitoredInstance", "__version__"]
