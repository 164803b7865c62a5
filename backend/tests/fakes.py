"""Test doubles shared across core and service tests.

FakeConnection stands in for DatabaseSessionManager at the StoreConnection seam.
InMemoryTarget is a SyncTarget backed by a list, with per-name failure injection.
"""

from catalog_sync.core.domain_types import ServiceId, TargetKind
from catalog_sync.core.service_record import ServiceRecord


class FakeConnection:
    """Scriptable StoreConnection: counts calls, optional failing connect()."""

    def __init__(self, healthy: bool = True, connect_error: Exception | None = None):
        self.healthy = healthy
        self.connect_error = connect_error
        self.pings = 0
        self.disconnects = 0
        self.connects = 0

    async def ping(self) -> bool:
        self.pings += 1
        return self.healthy

    async def disconnect(self) -> None:
        self.disconnects += 1

    async def connect(self) -> None:
        self.connects += 1
        if self.connect_error is not None:
            raise self.connect_error


class InMemoryTarget:
    """List-backed target; names in fail_on raise on create/update, close_error on close()."""

    def __init__(
        self,
        records: list[ServiceRecord] | None = None,
        kind: TargetKind = TargetKind.DATABASE,
        fail_on: set[str] | None = None,
        prepare_error: Exception | None = None,
        close_error: Exception | None = None,
    ):
        self.kind = kind
        self.records = list(records or [])
        self.fail_on = fail_on or set()
        self.prepare_error = prepare_error
        self.close_error = close_error
        self.writes: list[tuple[str, str]] = []
        self.finalized = False
        self.closed = False

    async def prepare(self) -> None:
        if self.prepare_error is not None:
            raise self.prepare_error

    async def list_records(self) -> list[ServiceRecord]:
        return list(self.records)

    async def create_record(self, record: ServiceRecord) -> ServiceRecord:
        self._maybe_fail(record.name)
        ids = [r.id for r in self.records if r.id is not None]
        created = record.with_id(ServiceId(max(ids, default=0) + 1))
        self.records.append(created)
        self.writes.append(("create", record.name))
        return created

    async def update_record(
        self, existing: ServiceRecord, record: ServiceRecord,
    ) -> ServiceRecord:
        self._maybe_fail(record.name)
        updated = record.with_id(existing.id)
        self.records = [updated if r.name == existing.name else r for r in self.records]
        self.writes.append(("update", record.name))
        return updated

    async def delete_record(self, existing: ServiceRecord) -> None:
        self.records = [r for r in self.records if r.name != existing.name]
        self.writes.append(("delete", existing.name))

    async def finalize(self) -> None:
        self.finalized = True

    async def close(self) -> None:
        self.closed = True
        if self.close_error is not None:
            raise self.close_error

    def _maybe_fail(self, name: str) -> None:
        if name in self.fail_on:
            raise RuntimeError(f"write rejected for {name}")
