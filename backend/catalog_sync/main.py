"""Catalog Sync API - FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map CatalogSyncError -> structured JSON responses
    - Runtime (database, store client, repository, coordinator) built on startup via
      lifespan and exposed on app.state

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from catalog_sync.api.error_handlers import register_error_handlers
from catalog_sync.api.routes import health, services, sync
from catalog_sync.config import get_settings
from catalog_sync.infrastructure.observability import setup_logging
from catalog_sync.runtime import open_runtime

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    runtime = await open_runtime(settings)
    app.state.settings = runtime.settings
    app.state.store = runtime.store
    app.state.repository = runtime.repository
    app.state.coordinator = runtime.coordinator
    logger.info("Catalog Sync API started")
    yield
    logger.info("Catalog Sync API shutting down")
    await runtime.close()


app = FastAPI(title="Catalog Sync API", version="1.0.0", lifespan=lifespan)

# Routes: explicit registration
app.include_router(health.router)
app.include_router(sync.router)
app.include_router(services.router)

register_error_handlers(app)
