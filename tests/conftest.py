"""Pytest configuration and fixtures."""

import pytest
import tempfile
from pathlib import Path

import httpx

from fake_backend import FakeStore, create_app
from fitsync.clients.api import ApiClient
from fitsync.config import Settings
from fitsync.db import CacheRepository, PendingRequestRepository, init_db
from fitsync.services import BackendStatus

BASE_URL = "http://backend.test/api"


def refuse_connections(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("Connection refused", request=request)


@pytest.fixture
def temp_db_path():
    """Create a temporary database path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "test.db"


@pytest.fixture
async def db_path(temp_db_path):
    """A temporary database with the schema created."""
    await init_db(temp_db_path)
    return temp_db_path


@pytest.fixture
def cache(db_path):
    return CacheRepository(db_path)


@pytest.fixture
def queue(db_path):
    return PendingRequestRepository(db_path)


@pytest.fixture
def status(cache):
    return BackendStatus(cache)


@pytest.fixture
def backend():
    """State of the fake REST backend."""
    return FakeStore()


@pytest.fixture
def backend_transport(backend):
    return httpx.ASGITransport(app=create_app(backend))


@pytest.fixture
def dead_transport():
    """Transport for a backend that refuses every connection."""
    return httpx.MockTransport(refuse_connections)


@pytest.fixture
async def live_api(backend_transport):
    async with ApiClient(BASE_URL, transport=backend_transport) as api:
        yield api


@pytest.fixture
async def dead_api(dead_transport):
    async with ApiClient(BASE_URL, transport=dead_transport) as api:
        yield api


@pytest.fixture
def settings(tmp_path):
    return Settings(
        api_base_url=BASE_URL,
        data_dir=tmp_path / "data",
        chat_backend="backend",
        log_level="WARNING",
    )
