"""Reconciliation Rules - pure identity matching and record diffing.

Invariants:
    - Identity is the exact, case-sensitive name; no other key is consulted
    - diff_records() compares detail blobs structurally (parsed), never as raw strings
    - Prices compare as Decimals ("100" == 100.00)
    - Nothing here performs IO

Design Decisions:
    - match_by_name is a named function so the name-only identity rule is visible and
      unit-tested instead of buried in the engine loop
    - First record wins when a target already holds duplicate names; the duplicate is
      logged and left alone (prune never removes it by accident)
"""

import logging
from collections.abc import Iterable, Mapping

from catalog_sync.core.domain_types import ServiceName
from catalog_sync.core.record_normalizer import parse_detail_blob
from catalog_sync.core.service_record import ServiceRecord

logger = logging.getLogger(__name__)

COMPARED_FIELDS: tuple[str, ...] = (
    "name",
    "description",
    "base_price",
    "capture_duration",
    "treatment_duration",
    "deliverables",
    "possible_add_ons",
    "travel_fee",
)


def index_by_name(records: Iterable[ServiceRecord]) -> dict[ServiceName, ServiceRecord]:
    """Index target records by exact name. First occurrence wins."""
    index: dict[ServiceName, ServiceRecord] = {}
    for record in records:
        if record.name in index:
            logger.warning(
                f"Duplicate name '{record.name}' in target "
                f"(ids {index[record.name].id} and {record.id}), keeping first",
                extra={"record_name": record.name},
            )
            continue
        index[ServiceName(record.name)] = record
    return index


def match_by_name(
    existing: Mapping[ServiceName, ServiceRecord], incoming: ServiceRecord,
) -> ServiceRecord | None:
    """The existing record that is 'the same logical record' as incoming, if any."""
    return existing.get(incoming.name)


def diff_records(existing: ServiceRecord, incoming: ServiceRecord) -> list[str]:
    """Names of fields that differ. Empty list means the records are equivalent."""
    changed = [
        name for name in COMPARED_FIELDS
        if getattr(existing, name) != getattr(incoming, name)
    ]
    if parse_detail_blob(existing.detail_blob) != parse_detail_blob(incoming.detail_blob):
        changed.append("detail_blob")
    return changed


def records_to_prune(
    existing: Mapping[ServiceName, ServiceRecord], source_names: Iterable[str],
) -> list[ServiceRecord]:
    """Existing records whose names are absent from the canonical name list."""
    keep = set(source_names)
    return [record for name, record in existing.items() if name not in keep]
