"""Service Catalog Read Routes - legacy flat view of the relational store.

Invariants:
    - Responses always carry both the flat fields and the nested details object
    - A malformed stored blob never fails a read (to_legacy_flat degrades to flat)
    - Unknown id -> 404 via ResourceNotFoundError (global handler)
"""

import logging

from fastapi import APIRouter, Query, Request

from catalog_sync.core.domain_types import ServiceId
from catalog_sync.core.errors import ResourceNotFoundError
from catalog_sync.core.record_normalizer import to_legacy_flat
from catalog_sync.repositories.service_repository import ServiceFilter
from catalog_sync.schemas.sync import ServiceResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/services", tags=["services"])


@router.get("", response_model=list[ServiceResponse])
async def list_services(
    request: Request,
    search: str | None = Query(None, max_length=200),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
):
    repository = request.app.state.repository
    records = await repository.find_all(
        ServiceFilter(name_contains=search, limit=limit, offset=offset),
    )
    return [to_legacy_flat(record) for record in records]


@router.get("/{service_id}", response_model=ServiceResponse)
async def get_service(service_id: int, request: Request):
    record = await request.app.state.repository.find_by_id(ServiceId(service_id))
    if record is None:
        raise ResourceNotFoundError("Service", str(service_id))
    return to_legacy_flat(record)
