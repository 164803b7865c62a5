"""Service Record Repository - verifies CRUD against in-memory SQLite through the store client.

Invariants:
    - create persists flat columns and the details blob together
    - Validation failures never reach the store
    - Duplicate names and unknown ids raise typed domain errors
    - Reads survive a malformed stored blob
"""

import json
from decimal import Decimal

import pytest
from sqlalchemy import select, update

from catalog_sync.core.errors import (
    DuplicateNameError, RecordValidationError, ResourceNotFoundError,
)
from catalog_sync.core.record_normalizer import to_canonical, to_legacy_flat
from catalog_sync.core.service_record import ServiceRecord
from catalog_sync.models.service import Service
from catalog_sync.repositories.service_repository import ServiceFilter


async def test_create_persists_flat_and_blob(repository, test_db):
    created = await repository.create({
        "nome": "Ensaio", "preco_base": "350",
        "detalhes": {"captura": "1 a 2 horas"},
    })
    assert created.id is not None

    row = (await test_db.execute(select(Service))).scalar_one()
    assert row.name == "Ensaio"
    assert row.base_price == Decimal("350.00")
    assert row.capture_duration == "1 a 2 horas"
    assert json.loads(row.details)["capture"] == "1 a 2 horas"


async def test_create_rejects_missing_name(repository):
    with pytest.raises(RecordValidationError):
        await repository.create({"base_price": 10})
    assert await repository.count() == 0


async def test_create_rejects_malformed_price(repository):
    with pytest.raises(RecordValidationError) as exc_info:
        await repository.create({"name": "A", "base_price": "abc"})
    assert exc_info.value.field == "base_price"


async def test_create_duplicate_name(repository):
    await repository.create({"name": "A"})
    with pytest.raises(DuplicateNameError):
        await repository.create({"name": "A"})
    assert await repository.count() == 1


async def test_find_by_name_and_id(repository):
    created = await repository.create({"name": "A", "base_price": 100})
    assert (await repository.find_by_name("A")).id == created.id
    assert (await repository.find_by_id(created.id)).name == "A"
    assert await repository.find_by_name("missing") is None
    assert await repository.find_by_id(9999) is None


async def test_find_all_filter_and_paging(repository):
    for name in ("Ensaio Pessoal", "Ensaio Casal", "Drone"):
        await repository.create({"name": name})
    names = [r.name for r in await repository.find_all()]
    assert names == ["Ensaio Pessoal", "Ensaio Casal", "Drone"]

    ensaios = await repository.find_all(ServiceFilter(name_contains="Ensaio"))
    assert len(ensaios) == 2
    assert await repository.count(ServiceFilter(name_contains="Drone")) == 1

    page = await repository.find_all(ServiceFilter(limit=1, offset=1))
    assert [r.name for r in page] == ["Ensaio Casal"]


async def test_update_partial_keeps_other_fields(repository):
    created = await repository.create({
        "name": "A", "base_price": 100, "travel_fee": "R$ 10",
    })
    updated = await repository.update(created.id, {"base_price": 150})
    assert updated.base_price == Decimal("150.00")
    assert updated.travel_fee == "R$ 10"

    stored = await repository.find_by_id(created.id)
    assert stored.base_price == Decimal("150.00")
    assert json.loads(stored.detail_blob) == stored.details()


async def test_update_nested_partial(repository):
    created = await repository.create({"name": "A", "capture_duration": "1 hora"})
    updated = await repository.update(created.id, {"details": {"capture": "2 horas"}})
    assert updated.capture_duration == "2 horas"


async def test_update_with_canonical_record(repository):
    created = await repository.create({"name": "A", "base_price": 1})
    replacement = to_canonical({"name": "A", "base_price": 2, "deliverables": "10 fotos"})
    updated = await repository.update(created.id, replacement)
    assert updated.id == created.id
    assert (await repository.find_by_id(created.id)).deliverables == "10 fotos"


async def test_update_unknown_id(repository):
    with pytest.raises(ResourceNotFoundError):
        await repository.update(12345, {"base_price": 1})


async def test_update_rename_to_existing_name(repository):
    await repository.create({"name": "A"})
    b = await repository.create({"name": "B"})
    with pytest.raises(DuplicateNameError):
        await repository.update(b.id, {"name": "A"})


async def test_update_rejects_negative_price(repository):
    created = await repository.create({"name": "A"})
    with pytest.raises(RecordValidationError):
        await repository.update(created.id, {"base_price": -10})


async def test_delete_returns_record(repository):
    created = await repository.create({"name": "A"})
    deleted = await repository.delete(created.id)
    assert deleted.name == "A"
    assert await repository.count() == 0
    with pytest.raises(ResourceNotFoundError):
        await repository.delete(created.id)


async def test_malformed_stored_blob_is_readable(repository, test_db):
    created = await repository.create({"name": "A", "capture_duration": "2 horas"})
    await test_db.execute(
        update(Service).where(Service.id == created.id).values(details="{not json"),
    )
    await test_db.commit()

    stored = await repository.find_by_id(created.id)
    assert stored.detail_blob == "{not json"
    legacy = to_legacy_flat(stored)
    assert legacy["details"]["capture"] == "2 horas"


async def test_create_from_record_regenerates_blob(repository, test_db):
    await repository.create(ServiceRecord(name="X", capture_duration="2 dias"))

    row = (await test_db.execute(select(Service))).scalar_one()
    assert json.loads(row.details)["capture"] == "2 dias"
    assert json.loads(row.details)["travel"] == row.travel_fee


async def test_update_from_record_regenerates_blob(repository, test_db):
    created = await repository.create({"name": "X"})
    await repository.update(
        created.id, ServiceRecord(name="X", deliverables="30 fotos", detail_blob="stale"),
    )

    row = (await test_db.execute(select(Service))).scalar_one()
    assert json.loads(row.details)["deliverables"] == "30 fotos"


async def test_record_with_blank_name_rejected_before_store(repository):
    with pytest.raises(RecordValidationError):
        await repository.create(ServiceRecord(name="  "))
    assert await repository.count() == 0


async def test_create_rejects_price_beyond_column(repository):
    with pytest.raises(RecordValidationError) as exc_info:
        await repository.create({"name": "A", "base_price": "1e30"})
    assert exc_info.value.field == "base_price"
    with pytest.raises(RecordValidationError):
        await repository.create(ServiceRecord(name="B", base_price=Decimal("1e12")))
    assert await repository.count() == 0
