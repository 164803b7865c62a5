"""Boundary Protocols - contracts between the core and the store/transport shell.

Invariants:
    - Core NEVER imports from shell; dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by the shell via constructor injection

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - Async in Protocol: boundary methods are async because implementations do IO,
      while the pure rules in core/ that decide what to call are never async
"""

from typing import Any, Protocol

from catalog_sync.core.domain_types import ServiceId, TargetKind
from catalog_sync.core.service_record import ServiceRecord


class StoreConnection(Protocol):
    """The single store connection owned by ResilientStoreClient."""
    async def ping(self) -> bool: ...
    async def disconnect(self) -> None: ...
    async def connect(self) -> None: ...


class ServiceRecordStore(Protocol):
    """CRUD contract over service records (implemented by ServiceRecordRepository)."""
    async def find_all(self, filter: Any = None) -> list[ServiceRecord]: ...
    async def find_by_name(self, name: str) -> ServiceRecord | None: ...
    async def find_by_id(self, service_id: ServiceId) -> ServiceRecord | None: ...
    async def create(self, record: Any) -> ServiceRecord: ...
    async def update(self, service_id: ServiceId, partial: Any) -> ServiceRecord: ...
    async def delete(self, service_id: ServiceId) -> ServiceRecord: ...
    async def count(self, filter: Any = None) -> int: ...


class SyncTarget(Protocol):
    """One store the reconciliation engine converges on the source definitions.

    prepare() runs before listing (load file, acquire token) and finalize() after
    the last write (flush file). Both raise on target-level failure. close() releases
    transport resources and is called whether or not the run succeeded.
    """
    kind: TargetKind

    async def prepare(self) -> None: ...
    async def list_records(self) -> list[ServiceRecord]: ...
    async def create_record(self, record: ServiceRecord) -> ServiceRecord: ...
    async def update_record(
        self, existing: ServiceRecord, record: ServiceRecord,
    ) -> ServiceRecord: ...
    async def delete_record(self, existing: ServiceRecord) -> None: ...
    async def finalize(self) -> None: ...
    async def close(self) -> None: ...
