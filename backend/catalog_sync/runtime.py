"""Runtime Wiring - builds the object graph shared by the API process and the CLI.

Invariants:
    - Exactly one DatabaseSessionManager and one ResilientStoreClient per process
    - close() disposes the engine; callers own the Runtime lifetime

Design Decisions:
    - Plain constructor injection instead of module singletons: tests build a Runtime
      around an in-memory engine without touching globals
"""

import logging
from dataclasses import dataclass

from catalog_sync.config import Settings
from catalog_sync.infrastructure.database import DatabaseSessionManager
from catalog_sync.infrastructure.resilient_store import ResilientStoreClient
from catalog_sync.repositories.service_repository import ServiceRecordRepository
from catalog_sync.services.sync_coordinator import MultiTargetSyncCoordinator

logger = logging.getLogger(__name__)


@dataclass
class Runtime:
    settings: Settings
    db: DatabaseSessionManager
    store: ResilientStoreClient
    repository: ServiceRecordRepository
    coordinator: MultiTargetSyncCoordinator

    async def close(self) -> None:
        await self.db.close()


def build_runtime(
    settings: Settings, db: DatabaseSessionManager | None = None,
) -> Runtime:
    db = db or DatabaseSessionManager(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    store = ResilientStoreClient(
        db,
        max_attempts=settings.store_max_reconnect_attempts,
        backoff_base_ms=settings.store_reconnect_delay_ms,
    )
    return Runtime(
        settings=settings,
        db=db,
        store=store,
        repository=ServiceRecordRepository(store, db),
        coordinator=MultiTargetSyncCoordinator(),
    )


async def open_runtime(settings: Settings) -> Runtime:
    """build_runtime plus schema creation when configured."""
    runtime = build_runtime(settings)
    if settings.database_auto_create:
        await runtime.db.create_schema()
        logger.info("Database schema ensured", extra={"operation": "create_schema"})
    return runtime
