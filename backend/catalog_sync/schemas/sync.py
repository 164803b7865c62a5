"""Sync Schemas - Pydantic models for the admin sync and catalog read endpoints.

Invariants:
    - SyncRequest.targets: None means "every configured target"; duplicates removed
    - Response models mirror SyncReport.to_dict() / summarize_reports() one to one

Design Decisions:
    - TargetKind reused directly as the field type: Pydantic validates the enum values
"""

from pydantic import BaseModel, Field, field_validator

from catalog_sync.core.domain_types import SyncAction, TargetKind, TargetStatus


class SyncRequest(BaseModel):
    """Admin-triggered sync run."""
    force_update: bool = False
    prune_missing: bool = False
    targets: list[TargetKind] | None = Field(None, min_length=1)

    @field_validator("targets")
    @classmethod
    def dedupe_targets(cls, v: list[TargetKind] | None) -> list[TargetKind] | None:
        if v is None:
            return v
        return list(dict.fromkeys(v))


class SyncOutcomeResponse(BaseModel):
    name: str
    action: SyncAction
    error: str | None = None
    id: int | str | None = None
    changed_fields: list[str] = []


class TargetReportResponse(BaseModel):
    target: TargetKind
    status: TargetStatus
    fatal_error: str | None = None
    created: int
    updated: int
    unchanged: int
    deleted: int
    errors: int
    entries: list[SyncOutcomeResponse]


class SyncResponse(BaseModel):
    """Aggregate result of one run across targets."""
    success: bool
    has_record_errors: bool
    targets: dict[str, TargetReportResponse]


class ServiceDetails(BaseModel):
    capture: str
    treatment: str
    deliverables: str
    addOns: str
    travel: str


class ServiceResponse(BaseModel):
    """Legacy flat view of a stored record, with the nested details object."""
    id: int | None
    name: str
    description: str
    base_price: float
    capture_duration: str
    treatment_duration: str
    deliverables: str
    possible_add_ons: str
    travel_fee: str
    details: ServiceDetails
