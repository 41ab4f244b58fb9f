"""Integration tests for the FastAPI endpoints."""

import json

import pytest
from fastapi import FastAPI

import rdsexporter.adapters.frameworks.fastapi as fastapi_module
from rdsexporter.adapters.aws import RequestMetrics
from rdsexporter.adapters.frameworks.fastapi import create_app, create_exporter_router
from rdsexporter.adapters.storage import RingBufferLogStorage, SnapshotStore
from rdsexporter.core.metrics import gauge
from rdsexporter.core.models import LogEntry, PollResult
from tests.helpers import at


class FakeExporter:
    """Stands in for Exporter; records lifecycle calls."""

    def __init__(self, snapshots: SnapshotStore) -> None:
        self.snapshots = snapshots
        self.request_metrics = RequestMetrics()
        self.events: list[str] = []
        self.basic = [gauge("rds_cpu_utilization", 12.5, {"instance": "orders"})]

    async def start(self) -> None:
        self.events.append("start")

    async def stop(self) -> None:
        self.events.append("stop")

    async def scrape_basic(self):
        return list(self.basic)


@pytest.fixture
def exporter(snapshots: SnapshotStore) -> FakeExporter:
    return FakeExporter(snapshots)


@pytest.fixture
def app(exporter: FakeExporter, log_storage: RingBufferLogStorage) -> FastAPI:
    return create_app(exporter, log_storage)


async def publish_sample(snapshots: SnapshotStore) -> None:
    sample = gauge(
        "node_load1",
        0.25,
        {"instance": "orders", "region": "us-east-1"},
        timestamp=at(0).timestamp(),
        help_text="1m load average.",
    )
    await snapshots.publish(
        "enhanced-us-east-1-0",
        PollResult(
            samples={"db-A": [sample]},
            messages={"db-A": '{"engine": "MySQL"}'},
            watermark=at(-30),
        ),
    )


class TestBasicEndpoint:
    """Tests for /basic."""

    @pytest.mark.api
    @pytest.mark.integration
    async def test_serves_basic_and_exporter_metrics(
        self, app: FastAPI, exporter: FakeExporter, asgi_test_client
    ) -> None:
        exporter.request_metrics.observe("200", 0.5)
        await publish_sample(exporter.snapshots)

        async with asgi_test_client(app) as client:
            response = await client.get("/basic")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain; version=0.0.4")
        text = response.text
        assert 'rds_cpu_utilization{instance="orders"} 12.5\n' in text
        assert "# TYPE rds_exporter_requests_total counter" in text
        assert "# TYPE rds_exporter_responses_durations_seconds summary" in text
        assert (
            'rds_exporter_responses_durations_seconds_count{status="200"} 1.0' in text
        )
        assert (
            'rds_exporter_enhanced_watermark_seconds{poll_loop="enhanced-us-east-1-0"} '
            f"{at(-30).timestamp()!r}" in text
        )

    @pytest.mark.api
    @pytest.mark.integration
    async def test_scrape_failure_returns_500(
        self, app: FastAPI, exporter: FakeExporter, asgi_test_client
    ) -> None:
        async def failing_scrape():
            raise RuntimeError("boom")

        exporter.scrape_basic = failing_scrape
        app = create_app(exporter, RingBufferLogStorage())

        async with asgi_test_client(app) as client:
            response = await client.get("/basic")

        assert response.status_code == 500
        assert response.json() == {"error": "Internal Server Error"}
        assert "boom" not in response.text


class TestEnhancedEndpoints:
    """Tests for /enhanced and /enhanced/messages."""

    @pytest.mark.api
    @pytest.mark.integration
    async def test_empty_snapshot(self, app: FastAPI, asgi_test_client) -> None:
        async with asgi_test_client(app) as client:
            response = await client.get("/enhanced")

        assert response.status_code == 200
        assert response.text == ""

    @pytest.mark.api
    @pytest.mark.integration
    async def test_samples_carry_timestamps(
        self, app: FastAPI, snapshots: SnapshotStore, asgi_test_client
    ) -> None:
        await publish_sample(snapshots)

        async with asgi_test_client(app) as client:
            response = await client.get("/enhanced")

        assert response.text == (
            "# HELP node_load1 1m load average.\n"
            "# TYPE node_load1 gauge\n"
            'node_load1{instance="orders",region="us-east-1"} 0.25 1709294400000\n'
        )

    @pytest.mark.api
    @pytest.mark.integration
    async def test_raw_messages(
        self, app: FastAPI, snapshots: SnapshotStore, asgi_test_client
    ) -> None:
        await publish_sample(snapshots)

        async with asgi_test_client(app) as client:
            response = await client.get("/enhanced/messages")

        assert response.headers["content-type"].startswith("application/x-ndjson")
        assert json.loads(response.text) == {
            "resource_id": "db-A",
            "message": '{"engine": "MySQL"}',
        }

    @pytest.mark.api
    @pytest.mark.integration
    async def test_encoding_failure_returns_500(
        self,
        app: FastAPI,
        snapshots: SnapshotStore,
        asgi_test_client,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        def failing_encode(*_args, **_kwargs):
            raise ValueError("Encoding failed")

        monkeypatch.setattr(fastapi_module, "encode_samples", failing_encode)
        monkeypatch.setattr(fastapi_module, "encode_messages", failing_encode)

        async with asgi_test_client(app) as client:
            enhanced = await client.get("/enhanced")
            messages = await client.get("/enhanced/messages")

        assert enhanced.status_code == 500
        assert messages.status_code == 500
        assert "Encoding failed" not in enhanced.text

    @pytest.mark.api
    @pytest.mark.integration
    async def test_custom_paths(
        self,
        exporter: FakeExporter,
        log_storage: RingBufferLogStorage,
        asgi_test_client,
    ) -> None:
        app = FastAPI()
        app.include_router(
            create_exporter_router(
                exporter.scrape_basic,
                exporter.snapshots,
                log_storage,
                basic_path="/metrics/basic",
                enhanced_path="/metrics/enhanced",
            )
        )

        async with asgi_test_client(app) as client:
            basic = await client.get("/metrics/basic")
            messages = await client.get("/metrics/enhanced/messages")
            default = await client.get("/basic")

        assert basic.status_code == 200
        assert "rds_exporter_requests_total" not in basic.text
        assert messages.status_code == 200
        assert default.status_code == 404


class TestLogsEndpoint:
    """Tests for /logs."""

    @pytest.fixture
    def filled_storage(self, log_storage: RingBufferLogStorage) -> RingBufferLogStorage:
        log_storage.write_sync(LogEntry(timestamp=1.0, level="INFO", message="a"))
        log_storage.write_sync(LogEntry(timestamp=2.0, level="ERROR", message="b"))
        log_storage.write_sync(LogEntry(timestamp=3.0, level="INFO", message="c"))
        return log_storage

    @pytest.mark.api
    @pytest.mark.integration
    @pytest.mark.parametrize(
        ("query", "expected"),
        [
            ("", ["a", "b", "c"]),
            ("?since=1.5", ["b", "c"]),
            ("?level=error", ["b"]),
            ("?since=2&level=INFO", ["c"]),
            ("?since=-5", ["a", "b", "c"]),
            ("?since=nan", ["a", "b", "c"]),
            ("?since=abc", ["a", "b", "c"]),
            ("?level=verbose", ["a", "b", "c"]),
        ],
    )
    async def test_filters(
        self,
        exporter: FakeExporter,
        filled_storage: RingBufferLogStorage,
        asgi_test_client,
        query: str,
        expected: list[str],
    ) -> None:
        app = create_app(exporter, filled_storage)

        async with asgi_test_client(app) as client:
            response = await client.get(f"/logs{query}")

        assert response.status_code == 200
        messages = [json.loads(line)["message"] for line in response.text.splitlines()]
        assert messages == expected


class TestLifespan:
    """Tests for starting and stopping the exporter with the app."""

    @pytest.mark.api
    @pytest.mark.integration
    async def test_exporter_follows_app_lifespan(
        self, app: FastAPI, exporter: FakeExporter
    ) -> None:
        async with app.router.lifespan_context(app):
            assert exporter.events == ["start"]

        assert exporter.events == ["start", "stop"]
