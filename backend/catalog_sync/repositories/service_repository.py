"""Service Record Repository - CRUD over the services table, every call through the resilient store.

Invariants:
    - Every public operation runs inside ResilientStoreClient.execute (health check + retry)
    - Writes persist the flat columns AND the regenerated details blob together
    - Reads keep the stored blob as-is on the record, so a stale or malformed blob shows
      up as a diff and gets rewritten by the next sync
    - Validation (name, price) happens before any store call
    - Names are unique: create and rename check first, the unique index backs it up

Design Decisions:
    - Accepts raw mappings of either shape or canonical ServiceRecords: admin callers send
      raw payloads, the reconciliation engine sends canonical records
    - Hard delete: the catalog has no soft-delete column and prune is explicit
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from typing import Any

from sqlalchemy import func, select

from catalog_sync.core.domain_types import ServiceId
from catalog_sync.core.errors import (
    DuplicateNameError, ErrorContext, ResourceNotFoundError,
)
from catalog_sync.core.record_normalizer import (
    classify_raw, merge_partial, to_canonical, validate_price,
)
from catalog_sync.core.service_record import ServiceRecord
from catalog_sync.infrastructure.database import DatabaseSessionManager
from catalog_sync.infrastructure.resilient_store import ResilientStoreClient
from catalog_sync.models.service import Service

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceFilter:
    """Optional narrowing for find_all / count."""
    name_contains: str | None = None
    limit: int | None = None
    offset: int = 0


class ServiceRecordRepository:
    """Relational store for service records."""

    def __init__(self, store: ResilientStoreClient, db: DatabaseSessionManager):
        self.store = store
        self.db = db

    async def find_all(self, filter: ServiceFilter | None = None) -> list[ServiceRecord]:
        filter = filter or ServiceFilter()

        async def op() -> list[ServiceRecord]:
            async with self.db.session() as session:
                query = _filtered(select(Service), filter).order_by(Service.id)
                if filter.offset:
                    query = query.offset(filter.offset)
                if filter.limit is not None:
                    query = query.limit(filter.limit)
                result = await session.execute(query)
                return [_to_record(row) for row in result.scalars().all()]

        return await self.store.execute(op, "find_all")

    async def find_by_name(self, name: str) -> ServiceRecord | None:
        async def op() -> ServiceRecord | None:
            async with self.db.session() as session:
                row = await _row_by_name(session, name)
                return _to_record(row) if row else None

        return await self.store.execute(
            op, "find_by_name", ErrorContext(operation="find_by_name", record_name=name),
        )

    async def find_by_id(self, service_id: ServiceId) -> ServiceRecord | None:
        async def op() -> ServiceRecord | None:
            async with self.db.session() as session:
                row = await session.get(Service, service_id)
                return _to_record(row) if row else None

        return await self.store.execute(op, "find_by_id")

    async def create(self, record: Mapping[str, Any] | ServiceRecord) -> ServiceRecord:
        canonical = _validated(record, "create")
        context = ErrorContext(operation="create", record_name=canonical.name)

        async def op() -> ServiceRecord:
            async with self.db.session() as session:
                if await _row_by_name(session, canonical.name) is not None:
                    raise DuplicateNameError(canonical.name, context)
                row = Service()
                _apply(row, canonical)
                session.add(row)
                await session.commit()
                return canonical.with_id(ServiceId(row.id))

        created = await self.store.execute(op, "create", context)
        logger.info(
            f"Service created: {created.name} (id {created.id})",
            extra={"operation": "create", "record_name": created.name},
        )
        return created

    async def update(
        self, service_id: ServiceId, partial: Mapping[str, Any] | ServiceRecord,
    ) -> ServiceRecord:
        context = ErrorContext(operation="update", debug_info={"id": service_id})
        replacement = (
            _validated(partial, "update") if isinstance(partial, ServiceRecord) else None
        )
        if replacement is None:
            base_price = classify_raw(partial).header.base_price
            if base_price is not None:
                validate_price(base_price, context)

        async def op() -> ServiceRecord:
            async with self.db.session() as session:
                row = await session.get(Service, service_id)
                if row is None:
                    raise ResourceNotFoundError("Service", str(service_id), context)
                if replacement is not None:
                    merged = replacement
                else:
                    merged = merge_partial(_to_record(row), partial)
                if merged.name != row.name:
                    clash = await _row_by_name(session, merged.name)
                    if clash is not None and clash.id != row.id:
                        raise DuplicateNameError(merged.name, context)
                _apply(row, merged)
                await session.commit()
                return merged.with_id(ServiceId(row.id))

        updated = await self.store.execute(op, "update", context)
        logger.info(
            f"Service updated: {updated.name} (id {service_id})",
            extra={"operation": "update", "record_name": updated.name},
        )
        return updated

    async def delete(self, service_id: ServiceId) -> ServiceRecord:
        context = ErrorContext(operation="delete", debug_info={"id": service_id})

        async def op() -> ServiceRecord:
            async with self.db.session() as session:
                row = await session.get(Service, service_id)
                if row is None:
                    raise ResourceNotFoundError("Service", str(service_id), context)
                record = _to_record(row)
                await session.delete(row)
                await session.commit()
                return record

        deleted = await self.store.execute(op, "delete", context)
        logger.info(
            f"Service deleted: {deleted.name} (id {service_id})",
            extra={"operation": "delete", "record_name": deleted.name},
        )
        return deleted

    async def count(self, filter: ServiceFilter | None = None) -> int:
        filter = filter or ServiceFilter()

        async def op() -> int:
            async with self.db.session() as session:
                query = _filtered(select(func.count()).select_from(Service), filter)
                result = await session.execute(query)
                return int(result.scalar_one())

        return await self.store.execute(op, "count")


# ─── Row Mapping ─────────────────────────────────────────────────

def _filtered(query, filter: ServiceFilter):
    if filter.name_contains:
        query = query.where(Service.name.contains(filter.name_contains))
    return query


async def _row_by_name(session, name: str) -> Service | None:
    result = await session.execute(select(Service).where(Service.name == name))
    return result.scalar_one_or_none()


def _to_record(row: Service) -> ServiceRecord:
    record = to_canonical({
        "id": row.id,
        "name": row.name,
        "description": row.description,
        "base_price": row.base_price,
        "capture_duration": row.capture_duration,
        "treatment_duration": row.treatment_duration,
        "deliverables": row.deliverables,
        "possible_add_ons": row.possible_add_ons,
        "travel_fee": row.travel_fee,
        "details": row.details,
    })
    return replace(record, detail_blob=row.details or "")


def _apply(row: Service, record: ServiceRecord) -> None:
    row.name = record.name
    row.description = record.description
    row.base_price = record.base_price
    row.capture_duration = record.capture_duration
    row.treatment_duration = record.treatment_duration
    row.deliverables = record.deliverables
    row.possible_add_ons = record.possible_add_ons
    row.travel_fee = record.travel_fee
    row.details = record.detail_blob


def _validated(record: Mapping[str, Any] | ServiceRecord, operation: str) -> ServiceRecord:
    """Reject blank names and malformed prices, then normalize. No store call."""
    context = ErrorContext(operation=operation)
    if isinstance(record, ServiceRecord):
        record = {
            f.name: getattr(record, f.name)
            for f in fields(record) if f.name != "detail_blob"
        }
    variant = classify_raw(record)
    context.record_name = variant.header.name
    validate_price(variant.header.base_price, context)
    return to_canonical(variant)
