"""Service test fixtures - in-memory database, store client, repository, API client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - The store client never sleeps (backoff 0) so retry paths run instantly
    - app.state is populated by hand: ASGITransport does not run the lifespan

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for the services table
    - DatabaseSessionManager built with __new__ around the test engine instead of a URL,
      so the fixture engine and the manager share one in-memory database
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

from catalog_sync.config import Settings
from catalog_sync.core.domain_types import TargetKind
from catalog_sync.db.base import Base
from catalog_sync.infrastructure.database import DatabaseSessionManager
from catalog_sync.infrastructure.resilient_store import ResilientStoreClient
from catalog_sync.main import app
from catalog_sync.repositories.service_repository import ServiceRecordRepository
from catalog_sync.services.sync_coordinator import MultiTargetSyncCoordinator
import catalog_sync.models  # noqa: F401


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def db_manager(test_engine, test_session_factory):
    manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    manager.engine = test_engine
    manager._session_factory = test_session_factory
    return manager


@pytest.fixture
def store(db_manager):
    return ResilientStoreClient(db_manager, max_attempts=5, backoff_base_ms=0)


@pytest.fixture
def repository(store, db_manager):
    return ServiceRecordRepository(store, db_manager)


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        snapshot_path=str(tmp_path / "src" / "data" / "servicos.js"),
        sync_targets=[TargetKind.DATABASE, TargetKind.STATIC_FILE],
        remote_api_url="http://pricing.test",
        remote_api_email="admin@test.local",
        remote_api_password="test-password",
    )


@pytest.fixture
async def client(test_settings, store, repository):
    """FastAPI test client wired to the in-memory store."""
    app.state.settings = test_settings
    app.state.store = store
    app.state.repository = repository
    app.state.coordinator = MultiTargetSyncCoordinator()

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    for name in ("settings", "store", "repository", "coordinator"):
        delattr(app.state, name)
