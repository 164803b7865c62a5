"""Retry Policy - retryable vs. permanent classification and reconnect bookkeeping.

Invariants:
    - Domain errors are never retryable
    - InfrastructureError.retryable is authoritative when the error carries it
    - RetryState.attempt_count never exceeds max_attempts
    - RetryState.reset() after any successful operation

Design Decisions:
    - Fixed backoff (not exponential): low-volume admin workload, predictable worst case
      of max_attempts * backoff_base_ms
    - Transient codes cover the original Prisma codes and PostgreSQL connection-class
      SQLSTATEs; message substrings catch drivers that expose neither
"""

from dataclasses import dataclass

from catalog_sync.core.errors import DomainError, InfrastructureError

MAX_RECONNECT_ATTEMPTS = 5
RECONNECT_DELAY_MS = 2000

TRANSIENT_ERROR_CODES: frozenset[str] = frozenset({
    # Prisma
    "P1001",  # can't reach database server
    "P1002",  # database server timed out
    "P1008",  # operation timed out
    "P1017",  # server closed the connection
    # PostgreSQL SQLSTATE class 08 + availability
    "08000", "08001", "08003", "08004", "08006",
    "57P01",  # admin_shutdown
    "57P03",  # cannot_connect_now
})

_CONNECTION_MARKERS: tuple[str, ...] = (
    "connection", "timeout", "timed out", "econnrefused", "econnreset",
)


@dataclass
class RetryState:
    """Consecutive reconnect attempts for one call chain."""
    max_attempts: int = MAX_RECONNECT_ATTEMPTS
    backoff_base_ms: int = RECONNECT_DELAY_MS
    attempt_count: int = 0

    @property
    def exhausted(self) -> bool:
        return self.attempt_count >= self.max_attempts

    def record_attempt(self) -> int:
        """Count one reconnect attempt. Caller checks `exhausted` first."""
        self.attempt_count = min(self.attempt_count + 1, self.max_attempts)
        return self.attempt_count

    def reset(self) -> None:
        self.attempt_count = 0


def error_codes_of(error: BaseException) -> set[str]:
    """Store-specific codes on the error and its driver-level causes."""
    codes = set()
    for candidate in (getattr(error, "orig", None), error.__cause__, error):
        if candidate is None:
            continue
        for attr in ("store_code", "sqlstate", "pgcode", "code"):
            value = getattr(candidate, attr, None)
            if isinstance(value, str) and value:
                codes.add(value)
    return codes


def is_retryable(error: BaseException) -> bool:
    """Classify a store failure. Pure; inspects type, code and message only."""
    if isinstance(error, DomainError):
        return False
    if isinstance(error, InfrastructureError):
        return error.retryable
    if isinstance(error, (ConnectionError, TimeoutError)):
        return True
    if error_codes_of(error) & TRANSIENT_ERROR_CODES:
        return True
    message = str(error).lower()
    return any(marker in message for marker in _CONNECTION_MARKERS)
