"""Sync Targets - the relational store, the static snapshot and the remote API behind one contract.

Invariants:
    - Every target lists canonical ServiceRecords (via to_canonical), whatever it stores
    - ids are target-local; targets never reuse another target's ids
    - Static snapshot: mutations are in memory until finalize(), which writes once
    - Remote API: prepare() authenticates; an auth failure is fatal for this target only
    - Remote API: a listed entry without an integer id is never addressed; updating
      or deleting it is a per-record error

Design Decisions:
    - Thin adapters over the infrastructure clients: the engine stays IO-agnostic
    - Unreadable entries in the snapshot or the remote listing are skipped with a
      warning instead of failing the whole target (they have no usable identity)
"""

import logging
from collections.abc import Iterable

from catalog_sync.config import Settings
from catalog_sync.core.domain_types import ServiceId, TargetKind
from catalog_sync.core.errors import (
    ErrorContext, RecordValidationError, RemoteApiError, TargetUnavailableError,
)
from catalog_sync.core.record_normalizer import to_canonical
from catalog_sync.core.repository_protocols import ServiceRecordStore, SyncTarget
from catalog_sync.core.service_record import ServiceRecord
from catalog_sync.core.wire_format import record_to_api_payload, record_to_snapshot_entry
from catalog_sync.infrastructure.remote_api_client import RemoteCatalogClient
from catalog_sync.infrastructure.static_snapshot import StaticSnapshotFile
from catalog_sync.repositories.service_repository import ServiceRecordRepository

logger = logging.getLogger(__name__)


class DatabaseTarget:
    """Relational store, through the repository (and so the resilient store client)."""
    kind = TargetKind.DATABASE

    def __init__(self, repository: ServiceRecordStore):
        self.repository = repository

    async def prepare(self) -> None:
        return None

    async def list_records(self) -> list[ServiceRecord]:
        return await self.repository.find_all()

    async def create_record(self, record: ServiceRecord) -> ServiceRecord:
        return await self.repository.create(record)

    async def update_record(
        self, existing: ServiceRecord, record: ServiceRecord,
    ) -> ServiceRecord:
        return await self.repository.update(existing.id, record)

    async def delete_record(self, existing: ServiceRecord) -> None:
        await self.repository.delete(existing.id)

    async def finalize(self) -> None:
        return None

    async def close(self) -> None:
        return None


class StaticSnapshotTarget:
    """Frontend snapshot file, rewritten wholesale when anything changed."""
    kind = TargetKind.STATIC_FILE

    def __init__(self, snapshot: StaticSnapshotFile):
        self.snapshot = snapshot
        self._records: list[ServiceRecord] = []
        self._dirty = False

    async def prepare(self) -> None:
        try:
            entries = self.snapshot.read_entries()
        except OSError as e:
            raise TargetUnavailableError(
                self.kind.value, f"cannot read {self.snapshot.path}: {e}",
                ErrorContext(operation="prepare"),
            ) from e
        self._records = list(_readable(entries, TargetKind.STATIC_FILE))
        self._dirty = not self.snapshot.path.exists()

    async def list_records(self) -> list[ServiceRecord]:
        return list(self._records)

    async def create_record(self, record: ServiceRecord) -> ServiceRecord:
        created = record.with_id(self._next_id())
        self._records.append(created)
        self._dirty = True
        return created

    async def update_record(
        self, existing: ServiceRecord, record: ServiceRecord,
    ) -> ServiceRecord:
        updated = record.with_id(existing.id)
        self._records[self._position(existing)] = updated
        self._dirty = True
        return updated

    async def delete_record(self, existing: ServiceRecord) -> None:
        del self._records[self._position(existing)]
        self._dirty = True

    async def finalize(self) -> None:
        if not self._dirty:
            logger.info(
                f"Snapshot {self.snapshot.path} already current, not rewritten",
                extra={"target": self.kind.value},
            )
            return
        try:
            self.snapshot.write_entries(
                [record_to_snapshot_entry(record) for record in self._records],
            )
        except OSError as e:
            raise TargetUnavailableError(
                self.kind.value, f"cannot write {self.snapshot.path}: {e}",
                ErrorContext(operation="finalize"),
            ) from e
        self._dirty = False

    async def close(self) -> None:
        return None

    def _next_id(self) -> ServiceId:
        ids = [record.id for record in self._records if record.id is not None]
        return ServiceId(max(ids, default=0) + 1)

    def _position(self, existing: ServiceRecord) -> int:
        for index, record in enumerate(self._records):
            if record.name == existing.name:
                return index
        raise LookupError(f"'{existing.name}' is not in the snapshot")


class RemoteApiTarget:
    """Production pricing API, authenticated once per run."""
    kind = TargetKind.REMOTE_API

    def __init__(self, client: RemoteCatalogClient):
        self.client = client

    async def prepare(self) -> None:
        await self.client.login()

    async def list_records(self) -> list[ServiceRecord]:
        return list(_readable(await self.client.list_services(), TargetKind.REMOTE_API))

    async def create_record(self, record: ServiceRecord) -> ServiceRecord:
        body = await self.client.create_service(
            record_to_api_payload(record), record.name,
        )
        return _with_remote_id(record, body)

    async def update_record(
        self, existing: ServiceRecord, record: ServiceRecord,
    ) -> ServiceRecord:
        remote_id = _require_remote_id(existing, "update")
        await self.client.update_service(
            remote_id, record_to_api_payload(record), record.name,
        )
        return record.with_id(remote_id)

    async def delete_record(self, existing: ServiceRecord) -> None:
        await self.client.delete_service(
            _require_remote_id(existing, "delete"), existing.name,
        )

    async def finalize(self) -> None:
        return None

    async def close(self) -> None:
        await self.client.close()


def _readable(entries: Iterable[dict], kind: TargetKind) -> Iterable[ServiceRecord]:
    for entry in entries:
        try:
            yield to_canonical(entry)
        except RecordValidationError as e:
            logger.warning(
                f"Skipping unreadable {kind.value} entry: {e.message}",
                extra={"target": kind.value},
            )


def _require_remote_id(existing: ServiceRecord, operation: str) -> ServiceId:
    """The listed id to address; an entry without an integer id cannot be written."""
    if existing.id is None:
        raise RemoteApiError(
            f"'{existing.name}' is listed without a usable id",
            context=ErrorContext(
                operation=operation, target=TargetKind.REMOTE_API.value,
                record_name=existing.name,
            ),
        )
    return existing.id


def _with_remote_id(record: ServiceRecord, body: object) -> ServiceRecord:
    remote_id = body.get("id") if isinstance(body, dict) else None
    try:
        return record.with_id(ServiceId(int(remote_id)) if remote_id is not None else None)
    except (TypeError, ValueError):
        return record


def build_targets(
    settings: Settings,
    repository: ServiceRecordRepository,
    kinds: Iterable[TargetKind] | None = None,
) -> list[SyncTarget]:
    """Targets for the requested kinds (default: settings.sync_targets)."""
    selected = set(kinds or settings.sync_targets)
    targets: list[SyncTarget] = []
    if TargetKind.DATABASE in selected:
        targets.append(DatabaseTarget(repository))
    if TargetKind.STATIC_FILE in selected:
        targets.append(StaticSnapshotTarget(StaticSnapshotFile(settings.snapshot_path)))
    if TargetKind.REMOTE_API in selected:
        targets.append(RemoteApiTarget(RemoteCatalogClient(
            settings.remote_api_url,
            settings.remote_api_email,
            settings.remote_api_password,
            timeout_seconds=settings.remote_api_timeout_seconds,
            max_retries=settings.remote_api_max_retries,
            base_delay_ms=settings.remote_api_base_delay_ms,
        )))
    return targets
