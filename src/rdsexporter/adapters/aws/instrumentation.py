"""Request counting and latency tracking for AWS API calls.

Hooks into the botocore event system of each client, so every HTTP round
trip is observed, including the individual pages of paginated calls.
"""

import logging
import time
from typing import Any

from rdsexporter.core.metrics import counter, summary
from rdsexporter.core.models import MetricSample

logger = logging.getLogger(__name__)

REQUESTS_TOTAL = "rds_exporter_requests_total"
RESPONSES_DURATION = "rds_exporter_responses_durations_seconds"

_START_KEY = "rds_exporter_started_at"


class RequestMetrics:
    """Counts AWS API requests and accumulates response latency per status.

    Calls that fail before a response is received are recorded with the
    status ``err``.
    """

    def __init__(self) -> None:
        self._requests = 0
        self._durations: dict[str, tuple[float, int]] = {}

    def instrument(self, client: Any) -> Any:
        """Register the event handlers on a botocore/aiobotocore client."""
        events = client.meta.events
        events.register("before-call", self._before_call, unique_id=_START_KEY)
        events.register("after-call", self._after_call, unique_id="rds_exporter_after")
        events.register(
            "after-call-error", self._after_call_error, unique_id="rds_exporter_error"
        )
        return client

    def _before_call(self, context: dict[str, Any], **kwargs: Any) -> None:
        context[_START_KEY] = time.perf_counter()
        self._requests += 1

    def _after_call(
        self, http_response: Any, model: Any, context: dict[str, Any], **kwargs: Any
    ) -> None:
        duration = self._elapsed(context)
        status = int(getattr(http_response, "status_code", 0))
        self.observe(str(status), duration)
        logger.debug(
            "%s -> %d (%.3fs)",
            getattr(model, "name", "unknown"),
            status,
            duration,
            extra={"status": status, "duration_seconds": duration},
        )

    def _after_call_error(
        self, exception: Exception, context: dict[str, Any], **kwargs: Any
    ) -> None:
        duration = self._elapsed(context)
        self.observe("err", duration)
        logger.error(
            "AWS request failed: %s (%.3fs)",
            exception,
            duration,
            extra={"duration_seconds": duration},
        )

    @staticmethod
    def _elapsed(context: dict[str, Any]) -> float:
        started = context.get(_START_KEY)
        if started is None:
            return 0.0
        return time.perf_counter() - started

    def observe(self, status: str, duration: float) -> None:
        """Record one response with the given status label."""
        total, count = self._durations.get(status, (0.0, 0))
        self._durations[status] = (total + duration, count + 1)

    def samples(self) -> list[MetricSample]:
        """Return the current values as metric samples."""
        samples = [
            counter(
                REQUESTS_TOTAL,
                float(self._requests),
                help_text="Total number of AWS API requests.",
            )
        ]
        for status in sorted(self._durations):
            total, count = self._durations[status]
            labels = {"status": status}
            samples.extend(
                summary(
                    RESPONSES_DURATION,
                    total,
                    count,
                    labels,
                    help_text="AWS API responses latency distributions.",
                )
            )
        return samples
