"""Domain Types - rich types that replace bare primitives across the catalog code.

Invariants:
    - ServiceId is store-local: never compared across targets (identity is the name)
    - All valid states encoded as Enums, no raw string matching
    - TargetKind declaration order is the coordinator's execution order

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

ServiceId = NewType("ServiceId", int)           # store-assigned surrogate key
ServiceName = NewType("ServiceName", str)       # cross-store identity key


# ─── Defaults ────────────────────────────────────────────────────

ON_REQUEST = "Sob consulta"

DETAIL_KEYS: tuple[str, ...] = (
    "capture", "treatment", "deliverables", "addOns", "travel",
)


# ─── Enums ───────────────────────────────────────────────────────

class TargetKind(str, Enum):
    """The three stores that converge on the source definitions."""
    DATABASE = "database"
    STATIC_FILE = "static_file"
    REMOTE_API = "remote_api"


class SyncAction(str, Enum):
    """Per-record outcome of a reconciliation run."""
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    DELETED = "deleted"
    ERROR = "error"


class TargetStatus(str, Enum):
    """Per-target outcome in the coordinator's aggregate result."""
    SUCCEEDED = "succeeded"
    FAILED = "failed"
