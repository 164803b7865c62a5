"""Resilient Store Client - runs store operations behind health checks and bounded reconnects.

Invariants:
    - Every execute() health-checks the connection before running the operation
    - Retryable failures trigger at most max_attempts reconnects per call, then the
      most recent underlying error is raised unchanged
    - Domain errors pass through untouched and never trigger a reconnect
    - Other permanent failures surface immediately as DatabaseError (unless already typed)
    - RetryState is reset after every successful operation

Design Decisions:
    - Explicit connection injected via constructor (no module global): tests pass a fake
    - Fixed backoff between disconnect and connect (retry_policy): predictable worst case
    - A failed health check is treated like a retryable error, so a dead connection is
      re-established before the first statement instead of after it fails
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from catalog_sync.core.errors import (
    CatalogSyncError, DatabaseError, DomainError, ErrorContext,
)
from catalog_sync.core.repository_protocols import StoreConnection
from catalog_sync.core.retry_policy import (
    MAX_RECONNECT_ATTEMPTS, RECONNECT_DELAY_MS, RetryState, is_retryable,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ResilientStoreClient:
    """Wraps the single store connection with retry, reconnect and error mapping."""

    def __init__(
        self,
        connection: StoreConnection,
        max_attempts: int = MAX_RECONNECT_ATTEMPTS,
        backoff_base_ms: int = RECONNECT_DELAY_MS,
    ):
        self.connection = connection
        self.max_attempts = max_attempts
        self.backoff_base_ms = backoff_base_ms

    def new_retry_state(self) -> RetryState:
        return RetryState(
            max_attempts=self.max_attempts, backoff_base_ms=self.backoff_base_ms,
        )

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        name: str,
        context: ErrorContext | None = None,
    ) -> T:
        """Run `operation` with health check and bounded reconnect-and-retry."""
        state = self.new_retry_state()
        while True:
            try:
                if not await self.health_check():
                    raise DatabaseError(
                        "health check failed", "health_check", retryable=True,
                        context=context,
                    )
                result = await operation()
                state.reset()
                return result
            except DomainError:
                raise
            except Exception as e:
                if not is_retryable(e):
                    if isinstance(e, CatalogSyncError):
                        raise
                    raise DatabaseError(
                        str(e), name, retryable=False, context=context,
                    ) from e
                logger.warning(
                    f"Store operation '{name}' failed: {e}",
                    extra={"operation": name, "attempt": state.attempt_count},
                )
                if not await self._reconnect_until_connected(state):
                    logger.error(
                        f"Store operation '{name}' gave up after "
                        f"{state.attempt_count} reconnect attempts",
                        extra={"operation": name, "attempt": state.attempt_count},
                    )
                    raise

    async def health_check(self) -> bool:
        return await self.connection.ping()

    async def reconnect(self, state: RetryState | None = None) -> bool:
        """One disconnect / wait / connect cycle. True when the store is back."""
        state = state or self.new_retry_state()
        attempt = state.record_attempt()
        logger.warning(
            f"Reconnecting to store (attempt {attempt}/{state.max_attempts})",
            extra={"operation": "reconnect", "attempt": attempt},
        )
        try:
            await self.connection.disconnect()
            await asyncio.sleep(state.backoff_base_ms / 1000)
            await self.connection.connect()
        except Exception as e:
            logger.error(
                f"Reconnect attempt {attempt} failed: {e}",
                extra={"operation": "reconnect", "attempt": attempt},
            )
            return False
        logger.info(
            "Store connection re-established",
            extra={"operation": "reconnect", "attempt": attempt},
        )
        return True

    async def _reconnect_until_connected(self, state: RetryState) -> bool:
        while not state.exhausted:
            if await self.reconnect(state):
                return True
        return False

