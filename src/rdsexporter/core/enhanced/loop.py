"""Periodic driver of a LogEventPoller."""

import asyncio
import contextlib
import logging
import math

from rdsexporter.core.enhanced.parser import SchemaDriftError
from rdsexporter.core.enhanced.poller import LogEventPoller
from rdsexporter.core.models import PollResult
from rdsexporter.core.ports import SnapshotPort

logger = logging.getLogger(__name__)


class PollLoop:
    """Runs one poll per interval and publishes each result.

    Every poll gets a timeout equal to the interval, so a slow poll is cut
    short and its partial result is still published. Results are published
    even when they hold no instances; an absent resource id means no fresh
    data for that instance.

    Args:
        poller: The poller to drive. The loop is its only caller.
        snapshots: Where results are published.
        interval: Seconds between polls.
        name: Identifies this loop's snapshot in the store and in logs.
    """

    def __init__(
        self,
        poller: LogEventPoller,
        snapshots: SnapshotPort,
        interval: float,
        name: str = "enhanced",
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._poller = poller
        self._snapshots = snapshots
        self._interval = interval
        self.name = name
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run(self) -> None:
        """Poll on every tick until cancelled."""
        loop = asyncio.get_running_loop()
        next_tick = loop.time()
        while True:
            next_tick += self._interval
            delay = next_tick - loop.time()
            if delay < 0:
                # the previous poll overran; drop the ticks it missed
                next_tick += math.ceil(-delay / self._interval) * self._interval
                delay = next_tick - loop.time()
            await asyncio.sleep(delay)
            try:
                await self.run_once()
            except SchemaDriftError:
                logger.critical(
                    "Stopping poll loop on unknown message fields",
                    exc_info=True,
                    extra={"poll_loop": self.name},
                )
                raise

    async def run_once(self) -> PollResult | None:
        """Run and publish a single poll.

        Returns:
            The published result, or None if the poll failed.

        Raises:
            SchemaDriftError: Only raised by a strict-mode parser.
        """
        try:
            result = await self._poller.poll(timeout=self._interval)
        except SchemaDriftError:
            raise
        except Exception:
            logger.exception("Poll failed", extra={"poll_loop": self.name})
            return None

        await self._snapshots.publish(self.name, result)
        logger.debug(
            "Published snapshot",
            extra={
                "poll_loop": self.name,
                "instances": len(result.samples),
                "watermark": result.watermark.isoformat(),
            },
        )
        return result

    def start(self) -> None:
        """Start polling in a background task."""
        if self.running:
            return
        self._task = asyncio.create_task(self.run(), name=f"poll-loop-{self.name}")

    async def stop(self) -> None:
        """Cancel the background task and wait for it to finish.

        A loop already stopped by schema drift has logged its error, so the
        error is not raised again here.
        """
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError, SchemaDriftError):
            await task
