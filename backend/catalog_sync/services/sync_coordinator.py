"""Multi-Target Sync Coordinator - runs the engine against every target and aggregates reports.

Invariants:
    - Targets run sequentially in TargetKind order: database, static file, remote API
    - A target-level failure (auth, unreachable store, unwritable file) yields a failed
      report for that target only; the remaining targets still run
    - Every target's close() runs, whatever happened to it; a failing close() is logged
      and neither loses finished reports nor skips later targets

Design Decisions:
    - Sequential over concurrent: targets are few, and a readable log of one target at a
      time matters more than wall-clock time for an admin-triggered run
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from catalog_sync.core.domain_types import TargetKind
from catalog_sync.core.errors import CatalogSyncError
from catalog_sync.core.repository_protocols import SyncTarget
from catalog_sync.core.sync_report import SyncReport
from catalog_sync.services.reconciliation_engine import (
    ReconciliationEngine, SyncOptions, source_label,
)

logger = logging.getLogger(__name__)

_EXECUTION_ORDER = {kind: position for position, kind in enumerate(TargetKind)}


class MultiTargetSyncCoordinator:
    """Fans one set of source definitions out to every configured target."""

    def __init__(self, engine: ReconciliationEngine | None = None):
        self.engine = engine or ReconciliationEngine()

    async def sync_all(
        self,
        source_definitions: Sequence[Mapping[str, Any]],
        targets: Iterable[SyncTarget],
        options: SyncOptions | None = None,
    ) -> dict[TargetKind, SyncReport]:
        reports: dict[TargetKind, SyncReport] = {}
        for target in sorted(targets, key=lambda t: _EXECUTION_ORDER[t.kind]):
            try:
                reports[target.kind] = await self.engine.reconcile(
                    source_definitions, target, options,
                )
            except Exception as e:
                message = e.message if isinstance(e, CatalogSyncError) else str(e)
                logger.error(
                    f"Target {target.kind.value} failed: {message}",
                    extra={
                        "target": target.kind.value,
                        "error_code": getattr(e, "code", None),
                    },
                    exc_info=not isinstance(e, CatalogSyncError),
                )
                names = [
                    source_label(raw, position)
                    for position, raw in enumerate(source_definitions)
                ]
                reports[target.kind] = SyncReport.failed(target.kind, names, message)
            finally:
                await _close_quietly(target)
        return reports


async def _close_quietly(target: SyncTarget) -> None:
    """Release a target's resources. A failing close never costs the other targets."""
    try:
        await target.close()
    except Exception as e:
        logger.warning(
            f"Closing target {target.kind.value} failed: {e}",
            extra={"target": target.kind.value, "operation": "close"},
        )
