"""Sync Report - verifies counters, status and the aggregate summary.

Tests:
    - record() keeps counters equal to entries per action
    - failed() marks every source record as an error
    - summarize_reports() success / has_record_errors flags
"""

from catalog_sync.core.domain_types import SyncAction, TargetKind, TargetStatus
from catalog_sync.core.sync_report import SyncOutcome, SyncReport, summarize_reports


def test_record_updates_matching_counter():
    report = SyncReport(target=TargetKind.DATABASE)
    report.record(SyncOutcome("A", SyncAction.CREATED, service_id=1))
    report.record(SyncOutcome("B", SyncAction.UNCHANGED, service_id=2))
    report.record(SyncOutcome("C", SyncAction.ERROR, error="boom"))
    assert report.counts() == {
        "created": 1, "updated": 0, "unchanged": 1, "deleted": 0, "errors": 1,
    }
    assert [e.name for e in report.entries] == ["A", "B", "C"]
    assert [e.name for e in report.failed_entries()] == ["C"]
    assert report.status == TargetStatus.SUCCEEDED


def test_failed_report():
    report = SyncReport.failed(TargetKind.REMOTE_API, ["A", "B"], "auth failed")
    assert report.status == TargetStatus.FAILED
    assert report.errors == 2
    assert all(e.error == "auth failed" for e in report.entries)


def test_to_dict_shape():
    report = SyncReport(target=TargetKind.STATIC_FILE)
    report.record(SyncOutcome("A", SyncAction.UPDATED, service_id=3, changed_fields=["base_price"]))
    data = report.to_dict()
    assert data["target"] == "static_file"
    assert data["status"] == "succeeded"
    assert data["updated"] == 1
    assert data["entries"][0] == {
        "name": "A", "action": "updated", "error": None, "id": 3,
        "changed_fields": ["base_price"],
    }


def test_summary_flags():
    ok = SyncReport(target=TargetKind.DATABASE)
    ok.record(SyncOutcome("A", SyncAction.CREATED))
    partial = SyncReport(target=TargetKind.STATIC_FILE)
    partial.record(SyncOutcome("A", SyncAction.ERROR, error="x"))

    summary = summarize_reports({TargetKind.DATABASE: ok, TargetKind.STATIC_FILE: partial})
    assert summary["success"] is True
    assert summary["has_record_errors"] is True
    assert set(summary["targets"]) == {"database", "static_file"}

    failed = SyncReport.failed(TargetKind.REMOTE_API, ["A"], "down")
    assert summarize_reports({TargetKind.REMOTE_API: failed})["success"] is False
