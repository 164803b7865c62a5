"""Reconciliation Engine - converges one target on the source definitions, record by record.

Invariants:
    - Source definitions are processed in order; every one yields exactly one outcome
    - A failing record is reported as an error and never stops the remaining records
    - Identity is the exact name (match_by_name); ids never cross targets
    - Unchanged records cause no write unless force_update is set
    - Prune runs only with prune_missing, after every source record was processed
    - Target-level failures (prepare, list, finalize) propagate to the caller

Design Decisions:
    - The name index is updated after each write, so a name repeated in the source
      resolves against the record just written instead of creating a duplicate
    - Names of every canonicalizable source entry protect their match from prune,
      even when that entry's own write failed
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from catalog_sync.core.domain_types import SyncAction
from catalog_sync.core.errors import CatalogSyncError
from catalog_sync.core.reconciliation import (
    diff_records, index_by_name, match_by_name, records_to_prune,
)
from catalog_sync.core.record_normalizer import classify_raw, to_canonical
from catalog_sync.core.repository_protocols import SyncTarget
from catalog_sync.core.service_record import ServiceRecord
from catalog_sync.core.sync_report import SyncOutcome, SyncReport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncOptions:
    """Per-run switches."""
    force_update: bool = False
    prune_missing: bool = False


class ReconciliationEngine:
    """Stateless: one engine can reconcile any number of targets."""

    async def reconcile(
        self,
        source_definitions: Sequence[Mapping[str, Any]],
        target: SyncTarget,
        options: SyncOptions | None = None,
    ) -> SyncReport:
        options = options or SyncOptions()
        kind = target.kind.value
        report = SyncReport(target=target.kind)

        await target.prepare()
        existing = index_by_name(await target.list_records())
        logger.info(
            f"Reconciling {len(source_definitions)} definitions against "
            f"{len(existing)} existing records",
            extra={"target": kind},
        )

        source_names: list[str] = []
        for position, raw in enumerate(source_definitions):
            label = source_label(raw, position)
            try:
                record = to_canonical(raw)
                source_names.append(record.name)
                outcome = await self._converge(record, existing, target, options)
            except Exception as e:
                message = e.message if isinstance(e, CatalogSyncError) else str(e)
                logger.error(
                    f"Failed to sync '{label}': {message}",
                    extra={"target": kind, "record_name": label, "action": "error"},
                )
                outcome = SyncOutcome(label, SyncAction.ERROR, error=message)
            report.record(outcome)

        if options.prune_missing:
            for stale in records_to_prune(existing, source_names):
                report.record(await self._prune(stale, target))

        await target.finalize()
        logger.info(
            f"Target {kind} reconciled: {report.counts()}",
            extra={"target": kind},
        )
        return report

    async def _converge(
        self,
        record: ServiceRecord,
        existing: dict[str, ServiceRecord],
        target: SyncTarget,
        options: SyncOptions,
    ) -> SyncOutcome:
        kind = target.kind.value
        match = match_by_name(existing, record)
        if match is None:
            created = await target.create_record(record)
            existing[created.name] = created
            logger.info(
                f"Created '{record.name}'",
                extra={"target": kind, "record_name": record.name, "action": "created"},
            )
            return SyncOutcome(record.name, SyncAction.CREATED, service_id=created.id)

        changed = diff_records(match, record)
        if not changed and not options.force_update:
            return SyncOutcome(record.name, SyncAction.UNCHANGED, service_id=match.id)

        updated = await target.update_record(match, record)
        existing[record.name] = updated
        logger.info(
            f"Updated '{record.name}' ({', '.join(changed) or 'forced'})",
            extra={"target": kind, "record_name": record.name, "action": "updated"},
        )
        return SyncOutcome(
            record.name, SyncAction.UPDATED,
            service_id=updated.id, changed_fields=changed,
        )

    async def _prune(self, stale: ServiceRecord, target: SyncTarget) -> SyncOutcome:
        kind = target.kind.value
        try:
            await target.delete_record(stale)
        except Exception as e:
            message = e.message if isinstance(e, CatalogSyncError) else str(e)
            logger.error(
                f"Failed to prune '{stale.name}': {message}",
                extra={"target": kind, "record_name": stale.name, "action": "error"},
            )
            return SyncOutcome(
                stale.name, SyncAction.ERROR, error=message, service_id=stale.id,
            )
        logger.info(
            f"Pruned '{stale.name}'",
            extra={"target": kind, "record_name": stale.name, "action": "deleted"},
        )
        return SyncOutcome(stale.name, SyncAction.DELETED, service_id=stale.id)


def source_label(raw: Any, position: int) -> str:
    """Name used in reports, also for entries that never canonicalize."""
    if isinstance(raw, Mapping):
        name = classify_raw(raw).header.name
        if name:
            return name
    return f"definition #{position + 1}"
