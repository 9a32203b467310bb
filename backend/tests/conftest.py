"""
CampusLog Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Service and route tests run against real backends that need no
       network: the SQL table store on a temporary SQLite file and the local
       blob store in a temporary directory. Google clients are mocked in
       their own test modules.

Fixture Hierarchy (all function-scoped, fresh per test):
    ├── engine:        async SQLite engine with table_rows created
    ├── table_store:   SqlTableStore on that engine
    ├── blob_root:     temporary STORAGE_ROOT
    ├── blob_stores:   LocalBlobStore per upload domain
    ├── clock:         deterministic timestamps, one second apart
    ├── container:     ServiceContainer wired from the above, headers written
    ├── test_settings: Settings pointing at the temporary backends
    └── test_client:   HTTPX AsyncClient talking to create_app(...)
"""

import os
import tempfile
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Set BEFORE any campuslog import: config.py builds its singleton on import
os.environ["STORE_BACKEND"] = "database"
os.environ["BLOB_BACKEND"] = "local"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="campuslog_test_")
os.environ["LOG_LEVEL"] = "WARNING"

from campuslog.config import Settings  # noqa: E402
from campuslog.container import DOMAINS, UPLOAD_DOMAINS, ServiceContainer  # noqa: E402
from campuslog.database import build_engine, build_session_factory, init_models  # noqa: E402
from campuslog.services.local_blob_store import LocalBlobStore  # noqa: E402
from campuslog.services.sql_table_store import SqlTableStore  # noqa: E402


class SteppingClock:
    """Returns 2024-01-15T12:00:00.000Z, then one second later on every call."""

    def __init__(self):
        self.now = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> str:
        value = self.now.isoformat(timespec="milliseconds").replace("+00:00", "Z")
        self.now += timedelta(seconds=1)
        return value


# ══════════════════════════════════════════════════════════════════════════
# Backends
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'tables.db'}")
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def table_store(engine):
    return SqlTableStore(build_session_factory(engine))


@pytest.fixture
def blob_root(tmp_path):
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return storage_dir


@pytest.fixture
def blob_stores(blob_root):
    return {
        domain: LocalBlobStore(str(blob_root), domain, "http://test")
        for domain in UPLOAD_DOMAINS
    }


@pytest.fixture
def clock():
    return SteppingClock()


@pytest_asyncio.fixture
async def container(table_store, blob_stores, clock):
    """All six services on the SQL store, with every table's header row written."""
    container = ServiceContainer.from_stores(
        table_store,
        blob_stores,
        {domain: domain for domain in DOMAINS},
        clock=clock,
        max_attachment_size=1_048_576,
    )
    await container.ensure_headers()
    return container


# ══════════════════════════════════════════════════════════════════════════
# HTTP
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def test_settings(blob_root):
    return Settings(
        _env_file=None,
        store_backend="database",
        blob_backend="local",
        storage_root=str(blob_root),
        public_base_url="http://test",
        max_file_size=1_048_576,
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def test_client(test_settings, container):
    """
    HTTPX AsyncClient routed straight into the app.

    ASGITransport does not run the lifespan, so the container is injected
    through create_app().
    """
    from campuslog.main import create_app

    app = create_app(test_settings, container)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def sample_image_bytes():
    """Smallest valid JPEG: SOI + JFIF header + EOI."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )
