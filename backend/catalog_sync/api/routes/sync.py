"""Sync Route - admin trigger for a reconciliation run across the configured targets.

Invariants:
    - Always answers 200 with the aggregate report once the run completes; per-target
      and per-record failures live in the body (success / has_record_errors flags)
    - Source definitions are the in-process catalog (core/service_definitions.py)

Design Decisions:
    - Targets are built per request: the remote client and the snapshot buffer live
      for one run only, the store client is shared from app.state
"""

import logging

from fastapi import APIRouter, Request

from catalog_sync.core.service_definitions import load_service_definitions
from catalog_sync.core.sync_report import summarize_reports
from catalog_sync.schemas.sync import SyncRequest, SyncResponse
from catalog_sync.services.reconciliation_engine import SyncOptions
from catalog_sync.services.sync_targets import build_targets

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/sync", tags=["sync"])


@router.post("", response_model=SyncResponse)
async def run_sync(body: SyncRequest, request: Request):
    """Reconcile every requested target against the service definitions."""
    state = request.app.state
    targets = build_targets(state.settings, state.repository, body.targets)
    logger.info(
        f"Sync requested for {[t.kind.value for t in targets]} "
        f"(force_update={body.force_update}, prune_missing={body.prune_missing})",
        extra={"operation": "sync"},
    )
    reports = await state.coordinator.sync_all(
        load_service_definitions(),
        targets,
        SyncOptions(force_update=body.force_update, prune_missing=body.prune_missing),
    )
    return summarize_reports(reports)
