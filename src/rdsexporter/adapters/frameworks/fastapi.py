"""FastAPI adapter for the exporter endpoints."""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Protocol

from fastapi import APIRouter, FastAPI, Query, Response
from fastapi.responses import JSONResponse

from rdsexporter.adapters.aws.instrumentation import RequestMetrics
from rdsexporter.adapters.frameworks.query_params import parse_level, parse_since
from rdsexporter.adapters.storage import SnapshotStore
from rdsexporter.core.encoding.ndjson import encode_logs, encode_messages
from rdsexporter.core.encoding.prometheus import CONTENT_TYPE, encode_samples
from rdsexporter.core.metrics import gauge
from rdsexporter.core.models import MetricSample
from rdsexporter.core.ports import LogStoragePort

logger = logging.getLogger(__name__)

NDJSON_CONTENT_TYPE = "application/x-ndjson"
WATERMARK_METRIC = "rds_exporter_enhanced_watermark_seconds"


class ExporterRuntime(Protocol):
    """What the app needs from the running exporter."""

    snapshots: SnapshotStore
    request_metrics: RequestMetrics

    async def start(self) -> None: ...

    async def stop(self) -> None: ...

    async def scrape_basic(self) -> list[MetricSample]: ...


def _error_response() -> Response:
    return JSONResponse({"error": "Internal Server Error"}, status_code=500)


def watermark_samples(snapshots: SnapshotStore) -> list[MetricSample]:
    """One gauge per poll loop with the start time of its next poll."""
    return [
        gauge(
            WATERMARK_METRIC,
            result.watermark.timestamp(),
            {"poll_loop": name},
            help_text="Start time of the next Enhanced Monitoring poll.",
        )
        for name, result in sorted(snapshots.sources().items())
    ]


def create_exporter_router(
    scrape_basic: Callable[[], Awaitable[list[MetricSample]]],
    snapshots: SnapshotStore,
    log_storage: LogStoragePort,
    request_metrics: RequestMetrics | None = None,
    basic_path: str = "/basic",
    enhanced_path: str = "/enhanced",
) -> APIRouter:
    """Create a FastAPI router with the telemetry and log endpoints.

    Args:
        scrape_basic: Fetches the basic feed on every request.
        snapshots: Latest enhanced poll results.
        log_storage: The exporter's own log entries.
        request_metrics: AWS request metrics appended to the basic feed.
        basic_path: Path of the basic feed.
        enhanced_path: Path of the enhanced feed; raw messages are served
            below it, at ``<enhanced_path>/messages``.

    Returns:
        APIRouter with the endpoints configured.
    """
    router = APIRouter()

    @router.get(basic_path)
    async def get_basic() -> Response:
        """Return the basic feed and the exporter's own metrics."""
        try:
            samples = await scrape_basic()
            if request_metrics is not None:
                samples.extend(request_metrics.samples())
            samples.extend(watermark_samples(snapshots))
            body = encode_samples(samples)
        except Exception:
            logger.exception("Failed to serve basic metrics")
            return _error_response()
        return Response(content=body, media_type=CONTENT_TYPE)

    @router.get(enhanced_path)
    async def get_enhanced() -> Response:
        """Return the latest enhanced snapshot, with sample timestamps."""
        try:
            body = encode_samples(snapshots.read(), with_timestamps=True)
        except Exception:
            logger.exception("Failed to serve enhanced metrics")
            return _error_response()
        return Response(content=body, media_type=CONTENT_TYPE)

    @router.get(f"{enhanced_path.rstrip('/')}/messages")
    async def get_messages() -> Response:
        """Return the raw last message of every instance in NDJSON format."""
        try:
            body = encode_messages(snapshots.messages())
        except Exception:
            logger.exception("Failed to serve enhanced messages")
            return _error_response()
        return Response(content=body, media_type=NDJSON_CONTENT_TYPE)

    @router.get("/logs")
    async def get_logs(
        since: str | None = Query(default=None),
        level: str | None = Query(default=None),
    ) -> Response:
        """Return the exporter's log entries in NDJSON format.

        Args:
            since: Unix timestamp. Returns entries with timestamp > since.
            level: Only return entries of this level.
        """
        try:
            entries = log_storage.read(
                since=parse_since(since), level=parse_level(level)
            )
            body = encode_logs(entries)
        except Exception:
            logger.exception("Failed to serve logs")
            return _error_response()
        return Response(content=body, media_type=NDJSON_CONTENT_TYPE)

    return router


def create_app(
    exporter: ExporterRuntime,
    log_storage: LogStoragePort,
    basic_path: str = "/basic",
    enhanced_path: str = "/enhanced",
) -> FastAPI:
    """Create the exporter application.

    The exporter is started when the application starts and stopped when it
    shuts down.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await exporter.start()
        try:
            yield
        finally:
            await exporter.stop()

    app = FastAPI(title="RDS exporter", lifespan=lifespan)
    app.include_router(
        create_exporter_router(
            exporter.scrape_basic,
            exporter.snapshots,
            log_storage,
            exporter.request_metrics,
            basic_path=basic_path,
            enhanced_path=enhanced_path,
        )
    )
    return app
