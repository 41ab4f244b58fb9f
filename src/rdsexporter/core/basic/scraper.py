"""On-demand scrape of CloudWatch aggregate metrics."""

import asyncio
import logging
from collections.abc import Iterable, Sequence
from datetime import timedelta

from rdsexporter.core.basic.catalog import METRICS, CatalogMetric
from rdsexporter.core.metrics import gauge
from rdsexporter.core.models import MetricSample, MonitoredInstance
from rdsexporter.core.ports import MetricSourceError, MetricStatisticsPort

logger = logging.getLogger(__name__)

DEFAULT_PERIOD = timedelta(minutes=1)
DEFAULT_WINDOW = timedelta(minutes=10)


class BasicScraper:
    """Fetches the latest catalog metrics of every instance of one session.

    Args:
        source: Metric statistics source for the session's region/credentials.
        instances: Instances reachable through ``source``.
        metrics: Catalog entries to fetch.
        period: Aggregation period of the requested datapoints.
        window: How far back to look for the most recent datapoint.
    """

    def __init__(
        self,
        source: MetricStatisticsPort,
        instances: Iterable[MonitoredInstance],
        metrics: Sequence[CatalogMetric] = METRICS,
        period: timedelta = DEFAULT_PERIOD,
        window: timedelta = DEFAULT_WINDOW,
    ) -> None:
        self._source = source
        self._instances = [i for i in instances if not i.disable_basic_metrics]
        self._metrics = metrics
        self._period = period
        self._window = window

    async def scrape(self) -> list[MetricSample]:
        """Fetch all instances concurrently; failed instances are skipped."""
        results = await asyncio.gather(
            *(self._scrape_instance(instance) for instance in self._instances)
        )
        return [sample for samples in results for sample in samples]

    async def _scrape_instance(self, instance: MonitoredInstance) -> list[MetricSample]:
        try:
            values = await self._source.latest_values(
                instance,
                [metric.cloudwatch_name for metric in self._metrics],
                self._period,
                self._window,
            )
        except MetricSourceError:
            logger.exception(
                "Failed to get metric statistics",
                extra={"instance": instance.instance, "region": instance.region},
            )
            return []

        labels = instance.base_labels()
        samples = []
        for metric in self._metrics:
            if metric.cloudwatch_name not in values:
                continue
            timestamp, value = values[metric.cloudwatch_name]
            samples.append(
                gauge(
                    metric.name,
                    value,
                    labels,
                    timestamp=timestamp.timestamp(),
                    help_text=metric.help,
                )
            )
        return samples
