"""Shared test fixtures for all test modules."""

import httpx
import pytest

from rdsexporter.adapters.storage import RingBufferLogStorage, SnapshotStore
from rdsexporter.core.enhanced import MessageParser
from tests.helpers import FakeClock


@pytest.fixture
def strict_parser() -> MessageParser:
    """Parser that fails on fields the payload schema doesn't know."""
    return MessageParser(strict_unknown_fields=True)


@pytest.fixture
def clock() -> FakeClock:
    """Clock fixed at BASE_TIME until a test moves it."""
    return FakeClock()


@pytest.fixture
def snapshots() -> SnapshotStore:
    """Fixture providing an empty snapshot store."""
    return SnapshotStore()


@pytest.fixture
def log_storage() -> RingBufferLogStorage:
    """Fixture providing an empty log storage."""
    return RingBufferLogStorage()


@pytest.fixture
def asgi_test_client():
    """Factory fixture that creates an httpx.AsyncClient for ASGI testing.

    Usage:
        async def test_something(asgi_test_client):
            async with asgi_test_client(app) as client:
                response = await client.get("/enhanced")
    """

    def _get_client(app):
        """Return an AsyncClient context manager for the given app."""
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://test"
        )

    return _get_client
