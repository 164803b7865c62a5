"""Sync Report - per-target result of one reconciliation run.

Invariants:
    - Counters always equal the number of entries with the matching action
    - Entries keep source-definition order (prune deletions appended last)
    - fatal_error set only for target-level failures; partial failures live in entries
    - Never persisted: built per run, returned to the caller, logged

Design Decisions:
    - record() is the only mutator, so counters cannot drift from entries
    - failed() builds the short-circuit report (every record an error, no per-record IO)
"""

from dataclasses import dataclass, field

from catalog_sync.core.domain_types import SyncAction, TargetKind, TargetStatus

_COUNTER_BY_ACTION: dict[SyncAction, str] = {
    SyncAction.CREATED: "created",
    SyncAction.UPDATED: "updated",
    SyncAction.UNCHANGED: "unchanged",
    SyncAction.DELETED: "deleted",
    SyncAction.ERROR: "errors",
}


@dataclass
class SyncOutcome:
    """What happened to one record in one run."""
    name: str
    action: SyncAction
    error: str | None = None
    service_id: int | str | None = None
    changed_fields: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "action": self.action.value,
            "error": self.error,
            "id": self.service_id,
            "changed_fields": list(self.changed_fields),
        }


@dataclass
class SyncReport:
    """Counts and ordered outcomes for one target."""
    target: TargetKind
    created: int = 0
    updated: int = 0
    unchanged: int = 0
    deleted: int = 0
    errors: int = 0
    entries: list[SyncOutcome] = field(default_factory=list)
    fatal_error: str | None = None

    def record(self, outcome: SyncOutcome) -> None:
        counter = _COUNTER_BY_ACTION[outcome.action]
        setattr(self, counter, getattr(self, counter) + 1)
        self.entries.append(outcome)

    @property
    def status(self) -> TargetStatus:
        return TargetStatus.FAILED if self.fatal_error else TargetStatus.SUCCEEDED

    def counts(self) -> dict[str, int]:
        return {
            "created": self.created,
            "updated": self.updated,
            "unchanged": self.unchanged,
            "deleted": self.deleted,
            "errors": self.errors,
        }

    def failed_entries(self) -> list[SyncOutcome]:
        return [e for e in self.entries if e.action == SyncAction.ERROR]

    def to_dict(self) -> dict:
        return {
            "target": self.target.value,
            "status": self.status.value,
            "fatal_error": self.fatal_error,
            **self.counts(),
            "entries": [e.to_dict() for e in self.entries],
        }

    @classmethod
    def failed(
        cls, target: TargetKind, names: list[str], message: str,
    ) -> "SyncReport":
        """Target-level failure: every source record reported as an error."""
        report = cls(target=target, fatal_error=message)
        for name in names:
            report.record(SyncOutcome(name, SyncAction.ERROR, error=message))
        return report


def summarize_reports(reports: dict[TargetKind, SyncReport]) -> dict:
    """Aggregate view for admin tooling: per-target reports plus overall flags."""
    return {
        "success": all(r.status == TargetStatus.SUCCEEDED for r in reports.values()),
        "has_record_errors": any(r.errors for r in reports.values()),
        "targets": {kind.value: r.to_dict() for kind, r in reports.items()},
    }
