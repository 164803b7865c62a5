"""Database Session Manager - async engine, sessions with rollback, and the store connection.

Invariants:
    - Every session auto-rolls-back on exception (no partial commits leak)
    - Connection pool uses pool_pre_ping for stale connection detection
    - All SQLAlchemy exceptions mapped to DatabaseError (core/errors.py) with the
      retryable flag set from the driver error, so the retry policy can classify them
    - Implements StoreConnection (ping / disconnect / connect) for ResilientStoreClient

Design Decisions:
    - No module-level singleton: the FastAPI lifespan and the CLI each build one manager
      and inject it, so tests construct their own against in-memory SQLite
    - expire_on_commit=False: prevents lazy-load issues in async context
    - disconnect() disposes the pool; the engine lazily opens fresh connections afterwards
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

from catalog_sync.core.errors import DatabaseError
from catalog_sync.core.retry_policy import error_codes_of, is_retryable
from catalog_sync.db.base import Base
import catalog_sync.models  # noqa: F401

logger = logging.getLogger(__name__)


class DatabaseSessionManager:
    """Manages async database sessions with pooling, rollback, and health checks."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        engine_kwargs: dict = {"pool_pre_ping": True}
        if not database_url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600,
            )
        self.engine = create_async_engine(database_url, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide session with auto-rollback on exception."""
        session = self._session_factory()
        try:
            yield session
        except IntegrityError as e:
            await session.rollback()
            logger.error(f"DB integrity error: {e}")
            raise _map_error(e, "commit", retryable=False) from e
        except (OperationalError, DBAPIError) as e:
            await session.rollback()
            retryable = bool(e.connection_invalidated) or is_retryable(e.orig or e)
            logger.error(
                f"DB driver error: {e}", extra={"operation": "execute"},
            )
            raise _map_error(e, "execute", retryable=retryable) from e
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"SQLAlchemy error: {e}")
            raise _map_error(e, "query", retryable=False) from e
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    # ─── StoreConnection ────────────────────────────────────────

    async def ping(self) -> bool:
        """SELECT 1 round trip. Never raises."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}", extra={"operation": "ping"})
            return False

    async def disconnect(self) -> None:
        await self.engine.dispose()

    async def connect(self) -> None:
        """Open a fresh connection and verify it. Raises DatabaseError on failure."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            raise _map_error(e, "connect", retryable=True) from e
        except OSError as e:
            raise DatabaseError(str(e), "connect", retryable=True) from e

    async def create_schema(self) -> None:
        """create_all for local SQLite runs; deployed databases use Alembic."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        return await self.ping()

    async def close(self) -> None:
        await self.engine.dispose()


def _map_error(error: SQLAlchemyError, operation: str, retryable: bool) -> DatabaseError:
    source = getattr(error, "orig", None) or error
    codes = sorted(error_codes_of(source))
    detail = str(source)
    return DatabaseError(
        detail, operation, retryable=retryable, code=codes[0] if codes else None,
    )
