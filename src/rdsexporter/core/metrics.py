"""Metric helper functions for creating MetricSample objects."""

import time

from rdsexporter.core.models import MetricSample


def counter(
    name: str,
    value: float = 1.0,
    labels: dict[str, str] | None = None,
    help_text: str = "",
) -> MetricSample:
    """Create a counter metric sample.

    Args:
        name: Metric name (e.g., "rds_exporter_requests_total")
        value: Cumulative value (default: 1.0)
        labels: Optional dimension labels
        help_text: Optional help text

    Returns:
        MetricSample with current timestamp
    """
    return MetricSample(
        name=name,
        timestamp=time.time(),
        value=value,
        labels=labels or {},
        help=help_text,
        type="counter",
    )


def gauge(
    name: str,
    value: float,
    labels: dict[str, str] | None = None,
    timestamp: float | None = None,
    help_text: str = "",
) -> MetricSample:
    """Create a gauge metric sample.

    Args:
        name: Metric name (e.g., "node_load1")
        value: Current gauge value
        labels: Optional dimension labels
        timestamp: Measurement time; defaults to now
        help_text: Optional help text

    Returns:
        MetricSample stamped with the given or current time
    """
    return MetricSample(
        name=name,
        timestamp=time.time() if timestamp is None else timestamp,
        value=value,
        labels=labels or {},
        help=help_text,
        type="gauge",
    )


def summary(
    name: str,
    total: float,
    count: int,
    labels: dict[str, str] | None = None,
    help_text: str = "",
) -> list[MetricSample]:
    """Create the ``_sum`` and ``_count`` samples of a summary without quantiles.

    Args:
        name: Family name (e.g., "rds_exporter_responses_durations_seconds")
        total: Sum of all observations
        count: Number of observations
        labels: Optional dimension labels
        help_text: Optional help text

    Returns:
        The ``_sum`` sample followed by the ``_count`` sample
    """
    now = time.time()
    return [
        MetricSample(
            name=f"{name}{suffix}",
            timestamp=now,
            value=value,
            labels=labels or {},
            help=help_text,
            type="summary",
        )
        for suffix, value in (("_sum", total), ("_count", float(count)))
    ]
