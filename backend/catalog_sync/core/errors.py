"""Error Hierarchy - typed, categorized exceptions for all catalog sync failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are expected and never retried
    - Infrastructure errors (500-level) carry a `retryable` flag read by the retry policy
    - to_response() produces the REST envelope; no internal details leaked

Design Decisions:
    - Single hierarchy with CatalogSyncError base: FastAPI global handler catches all
    - DomainError / InfrastructureError intermediate bases so callers can tell
      "record not found" apart from "store unreachable" with one isinstance check
    - ErrorContext as dataclass: rich observability without coupling to logging
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    DATABASE = "database"
    EXTERNAL_API = "external_api"
    AUTHENTICATION = "authentication"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    operation: str | None = None
    target: str | None = None
    record_name: str | None = None
    attempt: int | None = None
    debug_info: dict[str, Any] | None = None


class CatalogSyncError(Exception):
    """Base exception for all catalog sync errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "operation": self.context.operation,
                    "target": self.context.target,
                    "record_name": self.context.record_name,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class DomainError(CatalogSyncError):
    """Expected, non-retryable failure caused by the request itself."""


class RecordValidationError(DomainError):
    """Record rejected before any store call (blank name, malformed price)."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class ResourceNotFoundError(DomainError):
    """Requested record does not exist in the store."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class DuplicateNameError(DomainError):
    """A record with the same name already exists in the store."""
    def __init__(self, name: str, context: ErrorContext | None = None):
        super().__init__(
            f"Service named '{name}' already exists",
            "DUPLICATE_NAME", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )
        self.name = name


# ─── Infrastructure Errors (500-level) ──────────────────────────

class InfrastructureError(CatalogSyncError):
    """Store or transport failure. `retryable` drives the reconnect policy."""
    retryable: bool = False


class DatabaseError(InfrastructureError):
    """Database operation failed."""
    def __init__(
        self,
        message: str,
        operation: str,
        retryable: bool = False,
        code: str | None = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
        self.retryable = retryable
        self.store_code = code


class RemoteApiError(InfrastructureError):
    """Remote production API call failed."""
    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        retryable: bool = False,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Remote API error ({status_code or 'no response'}): {message}",
            "REMOTE_API_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, context, 502,
        )
        self.status_code = status_code
        self.retryable = retryable


class AuthenticationError(InfrastructureError):
    """Token acquisition against a target failed. Fatal for that target only."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Authentication failed: {message}",
            "AUTHENTICATION_FAILED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.CRITICAL, context, 502,
        )


class TargetUnavailableError(InfrastructureError):
    """A whole sync target could not be reached or prepared."""
    def __init__(self, target: str, message: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.target = target
        super().__init__(
            f"Target '{target}' unavailable: {message}",
            "TARGET_UNAVAILABLE", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, ctx, 503,
        )
        self.target = target
