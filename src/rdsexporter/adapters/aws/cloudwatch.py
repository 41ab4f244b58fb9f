"""CloudWatch implementation of MetricStatisticsPort."""

from collections.abc import Callable, Sequence
from datetime import UTC, datetime, timedelta
from itertools import batched
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from rdsexporter.core.models import MonitoredInstance
from rdsexporter.core.ports import MetricSourceError

NAMESPACE = "AWS/RDS"
STATISTIC = "Average"
# GetMetricData accepts at most 500 queries per request.
MAX_QUERIES_PER_REQUEST = 500


class CloudWatchMetricsSource:
    """Reads the latest AWS/RDS datapoints through GetMetricData.

    Args:
        client: An aiobotocore ``cloudwatch`` client.
        clock: Returns the current aware datetime; injectable for tests.
    """

    def __init__(
        self, client: Any, clock: Callable[[], datetime] | None = None
    ) -> None:
        self._client = client
        self._clock = clock or (lambda: datetime.now(UTC))

    async def latest_values(
        self,
        instance: MonitoredInstance,
        metric_names: Sequence[str],
        period: timedelta,
        window: timedelta,
    ) -> dict[str, tuple[datetime, float]]:
        """Return the most recent Average datapoint of each metric that has one.

        Raises:
            MetricSourceError: If a request fails.
        """
        end = self._clock()
        start = end - window
        latest: dict[str, tuple[datetime, float]] = {}
        dimension = {"Name": "DBInstanceIdentifier", "Value": instance.instance}
        for chunk in batched(metric_names, MAX_QUERIES_PER_REQUEST):
            ids = {f"m{index}": name for index, name in enumerate(chunk)}
            queries = [
                {
                    "Id": query_id,
                    "MetricStat": {
                        "Metric": {
                            "Namespace": NAMESPACE,
                            "MetricName": name,
                            "Dimensions": [dimension],
                        },
                        "Period": int(period.total_seconds()),
                        "Stat": STATISTIC,
                    },
                    "ReturnData": True,
                }
                for query_id, name in ids.items()
            ]
            paginator = self._client.get_paginator("get_metric_data")
            try:
                async for page in paginator.paginate(
                    MetricDataQueries=queries,
                    StartTime=start,
                    EndTime=end,
                    ScanBy="TimestampDescending",
                ):
                    for result in page.get("MetricDataResults", []):
                        name = ids[result["Id"]]
                        for timestamp, value in zip(
                            result.get("Timestamps", []), result.get("Values", [])
                        ):
                            if name not in latest or timestamp > latest[name][0]:
                                latest[name] = (timestamp, value)
            except (BotoCoreError, ClientError) as exc:
                raise MetricSourceError(
                    f"GetMetricData for {instance.instance} failed: {exc}"
                ) from exc
        return latest
