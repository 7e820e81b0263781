# tests/test_merge.py
from school_records.services.merge import safe_merge


def test_merge_keeps_unspecified_fields_and_overlays_updates():
    existing = {"id": "abc", "name": "Rahim", "roll": "12", "section": "A", "updated_at": "old"}
    merged = safe_merge(existing, {"section": "B", "village": "Kalia"}, now="2026-01-01T00:00:00+00:00")

    assert merged == {
        "name": "Rahim",
        "roll": "12",
        "section": "B",
        "village": "Kalia",
        "updated_at": "2026-01-01T00:00:00+00:00",
    }


def test_merge_never_carries_the_identifier():
    merged = safe_merge({"id": "abc", "name": "Rahim"}, {"id": "evil", "name": "Karim"})
    assert "id" not in merged
    assert merged["name"] == "Karim"


def test_merge_refreshes_timestamp():
    merged = safe_merge({"name": "Rahim", "updated_at": "2020-01-01T00:00:00+00:00"}, {})
    assert merged["updated_at"] != "2020-01-01T00:00:00+00:00"


def test_fields_absent_on_both_sides_stay_absent():
    merged = safe_merge({"name": "Rahim"}, {"section": "A"})
    assert "village" not in merged


def test_merge_does_not_mutate_inputs():
    existing = {"id": "abc", "name": "Rahim"}
    update = {"name": "Karim"}
    safe_merge(existing, update)
    assert existing == {"id": "abc", "name": "Rahim"}
    assert update == {"name": "Karim"}
