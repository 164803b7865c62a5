"""Service Record - the canonical catalog entry shared by every sync target.

Invariants:
    - Frozen: a record is a value, updates produce a new record
    - `id` is store-local (database row id, snapshot index, remote id), never an identity key
    - details() is always derived from the flat fields, never from detail_blob

Design Decisions:
    - Decimal for base_price: prices compare exactly across stores (100 == "100.00")
    - Instances are built by record_normalizer.to_canonical; the constructor does not
      enforce the blob/flat invariant on its own
"""

from dataclasses import dataclass, replace
from decimal import Decimal

from catalog_sync.core.domain_types import ON_REQUEST, ServiceId


# Nested detail key -> flat field name
DETAIL_FIELD_MAP: dict[str, str] = {
    "capture": "capture_duration",
    "treatment": "treatment_duration",
    "deliverables": "deliverables",
    "addOns": "possible_add_ons",
    "travel": "travel_fee",
}


@dataclass(frozen=True)
class ServiceRecord:
    """Canonical, normalized service offering."""
    name: str
    description: str = ""
    base_price: Decimal = Decimal("0.00")
    capture_duration: str = ON_REQUEST
    treatment_duration: str = ON_REQUEST
    deliverables: str = ""
    possible_add_ons: str = ""
    travel_fee: str = ON_REQUEST
    detail_blob: str = ""
    id: ServiceId | None = None

    def details(self) -> dict[str, str]:
        """Nested detail view rebuilt from the flat fields."""
        return {
            key: getattr(self, field_name)
            for key, field_name in DETAIL_FIELD_MAP.items()
        }

    def with_id(self, service_id: ServiceId | None) -> "ServiceRecord":
        return replace(self, id=service_id)
