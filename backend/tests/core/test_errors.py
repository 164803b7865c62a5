"""Error Hierarchy & Domain Types - verifies codes, statuses, REST envelope and enum order.

Tests:
    - Domain errors map to 4xx, infrastructure errors to 5xx
    - to_response() envelope carries code/category/context, no internals
    - TargetKind order is database, static file, remote API
"""

from catalog_sync.core.domain_types import SyncAction, TargetKind
from catalog_sync.core.errors import (
    AuthenticationError, DatabaseError, DomainError, DuplicateNameError,
    ErrorContext, InfrastructureError, RecordValidationError, RemoteApiError,
    ResourceNotFoundError, TargetUnavailableError,
)


def test_domain_errors_are_4xx():
    assert RecordValidationError("x", "name").http_status == 400
    assert ResourceNotFoundError("Service", "9").http_status == 404
    assert DuplicateNameError("A").http_status == 409
    assert isinstance(DuplicateNameError("A"), DomainError)


def test_infrastructure_errors_are_5xx():
    assert DatabaseError("x", "execute").http_status == 503
    assert RemoteApiError("x", 500).http_status == 502
    assert AuthenticationError("x").http_status == 502
    assert isinstance(TargetUnavailableError("remote_api", "x"), InfrastructureError)


def test_database_error_carries_operation_and_code():
    err = DatabaseError("gone", "execute", retryable=True, code="08006")
    assert err.operation == "execute"
    assert err.retryable is True
    assert err.store_code == "08006"
    assert err.message == "Database execute failed: gone"


def test_to_response_envelope():
    err = ResourceNotFoundError(
        "Service", "42", ErrorContext(operation="update", record_name="A"),
    )
    body = err.to_response()["error"]
    assert body["code"] == "RESOURCE_NOT_FOUND"
    assert body["category"] == "resource_not_found"
    assert body["message"] == "Service '42' not found"
    assert body["context"] == {"operation": "update", "target": None, "record_name": "A"}


def test_target_unavailable_sets_context_target():
    err = TargetUnavailableError("static_file", "disk full")
    assert err.context.target == "static_file"


def test_target_kind_order():
    assert [k.value for k in TargetKind] == ["database", "static_file", "remote_api"]


def test_sync_action_values_serialize_as_strings():
    assert SyncAction.CREATED == "created"
    assert SyncAction("deleted") is SyncAction.DELETED
