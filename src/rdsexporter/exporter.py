"""Exporter runtime: wires AWS sessions to the pollers and scrapers."""

import asyncio
import logging
from contextlib import AsyncExitStack

from rdsexporter.adapters.aws import (
    CloudWatchLogsSource,
    CloudWatchMetricsSource,
    RequestMetrics,
    build_sessions,
)
from rdsexporter.adapters.storage import SnapshotStore
from rdsexporter.config import Config
from rdsexporter.core.basic import BasicScraper
from rdsexporter.core.enhanced import LogEventPoller, MessageParser, PollLoop
from rdsexporter.core.models import MetricSample

logger = logging.getLogger(__name__)


class Exporter:
    """Owns the AWS clients, the enhanced poll loops and the basic scrapers.

    One poll loop runs per session group that has at least one instance with
    enhanced metrics enabled; each loop publishes under its own name, so
    every group keeps an independent watermark.

    Args:
        config: Parsed configuration.
        interval: Seconds between enhanced polls.
        snapshots: Receives the enhanced poll results.
        request_metrics: Instruments the AWS clients.
        parser: Message parser shared by every poller.
    """

    def __init__(
        self,
        config: Config,
        interval: float,
        snapshots: SnapshotStore | None = None,
        request_metrics: RequestMetrics | None = None,
        parser: MessageParser | None = None,
    ) -> None:
        self.config = config
        self.interval = interval
        self.snapshots = snapshots or SnapshotStore()
        self.request_metrics = request_metrics or RequestMetrics()
        self._parser = parser or MessageParser()
        self._stack: AsyncExitStack | None = None
        self.loops: list[PollLoop] = []
        self.scrapers: list[BasicScraper] = []

    async def start(self) -> None:
        """Open the sessions and start the poll loops."""
        if self._stack is not None:
            return
        stack = AsyncExitStack()
        try:
            sessions = await build_sessions(self.config, stack, self.request_metrics)
        except BaseException:
            await stack.aclose()
            raise
        self._stack = stack

        for index, session in enumerate(sessions):
            metrics_source = CloudWatchMetricsSource(session.cloudwatch)
            self.scrapers.append(BasicScraper(metrics_source, session.instances))
            poller = LogEventPoller(
                CloudWatchLogsSource(session.logs), session.instances, self._parser
            )
            if not poller.stream_names:
                continue
            loop = PollLoop(
                poller,
                self.snapshots,
                self.interval,
                name=f"enhanced-{session.region}-{index}",
            )
            loop.start()
            self.loops.append(loop)
        logger.info(
            "Exporter started",
            extra={"poll_loops": len(self.loops), "sessions": len(sessions)},
        )

    async def stop(self) -> None:
        """Stop the poll loops and close the AWS clients."""
        loops, self.loops = self.loops, []
        self.scrapers.clear()
        stack, self._stack = self._stack, None
        try:
            for loop in loops:
                await loop.stop()
        finally:
            if stack is not None:
                await stack.aclose()

    async def scrape_basic(self) -> list[MetricSample]:
        """Fetch the basic feed of every session group."""
        results = await asyncio.gather(*(s.scrape() for s in self.scrapers))
        return [sample for samples in results for sample in samples]
