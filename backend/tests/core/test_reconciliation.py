"""Reconciliation Rules - verifies name identity, diffing and prune selection.

Tests:
    - Identity is the exact, case-sensitive name
    - Equivalent records diff empty (price representation, blob key order)
    - Duplicate names in a target keep the first record
    - records_to_prune returns only names absent from the source
"""

import json
from dataclasses import replace

from catalog_sync.core.reconciliation import (
    diff_records, index_by_name, match_by_name, records_to_prune,
)
from catalog_sync.core.record_normalizer import to_canonical


def test_match_by_name_exact():
    existing = index_by_name([to_canonical({"name": "Ensaio", "id": 1})])
    assert match_by_name(existing, to_canonical({"name": "Ensaio"})).id == 1


def test_match_by_name_is_case_sensitive():
    existing = index_by_name([to_canonical({"name": "Ensaio"})])
    assert match_by_name(existing, to_canonical({"name": "ensaio"})) is None


def test_match_ignores_ids():
    existing = index_by_name([to_canonical({"name": "A", "id": 7})])
    assert match_by_name(existing, to_canonical({"name": "B", "id": 7})) is None


def test_index_keeps_first_duplicate():
    first = to_canonical({"name": "A", "id": 1})
    second = to_canonical({"name": "A", "id": 2})
    assert index_by_name([first, second])["A"].id == 1


def test_equivalent_records_have_no_diff():
    a = to_canonical({"name": "A", "basePrice": "100"})
    b = to_canonical({"name": "A", "base_price": 100.0})
    assert diff_records(a, b) == []


def test_ids_do_not_count_as_changes():
    a = to_canonical({"name": "A", "id": 1})
    b = to_canonical({"name": "A", "id": 99})
    assert diff_records(a, b) == []


def test_price_change_detected():
    a = to_canonical({"name": "A", "base_price": 100})
    b = to_canonical({"name": "A", "base_price": 150})
    assert diff_records(a, b) == ["base_price"]


def test_detail_change_reports_field_and_blob():
    a = to_canonical({"name": "A", "travel_fee": "R$ 10"})
    b = to_canonical({"name": "A", "travel_fee": "R$ 20"})
    assert diff_records(a, b) == ["travel_fee", "detail_blob"]


def test_blob_compared_structurally():
    a = to_canonical({"name": "A", "capture_duration": "1h"})
    reordered = json.dumps(
        dict(reversed(list(json.loads(a.detail_blob).items()))),
    )
    assert diff_records(replace(a, detail_blob=reordered), a) == []


def test_stale_stored_blob_is_a_change():
    a = to_canonical({"name": "A", "capture_duration": "1h"})
    assert diff_records(replace(a, detail_blob="{not json"), a) == ["detail_blob"]


def test_records_to_prune():
    existing = index_by_name([
        to_canonical({"name": "Keep"}),
        to_canonical({"name": "Stale"}),
    ])
    stale = records_to_prune(existing, ["Keep", "New"])
    assert [r.name for r in stale] == ["Stale"]
