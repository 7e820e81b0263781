# tests/test_student_service.py
import asyncio
import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest

from school_records.core.exceptions import (
    DuplicateRecordError,
    InvalidInputError,
    RecordNotFoundError,
)
from school_records.store.predicates import Eq, MATCH_ALL


async def test_same_roll_and_class_is_rejected_but_other_class_is_fine(students, store):
    """Insert {12, 9} twice then {12, 10}: only the repeat is refused."""
    first = await students.create({"name": "Rahim", "roll": "12", "class_name": "9"})
    assert first["id"]

    with pytest.raises(DuplicateRecordError) as excinfo:
        await students.create({"name": "Karim", "roll": "12", "class_name": "9"})
    assert excinfo.value.kind == "duplicate"
    assert excinfo.value.details["key"] == {"roll": "12", "class_name": "9"}

    await students.create({"name": "Selina", "roll": "12", "class_name": "10"})

    collection = store.collection("students")
    assert await collection.count(Eq("class_name", "9")) == 1
    assert await collection.count(MATCH_ALL) == 2


async def test_numeric_roll_collides_with_string_roll(students):
    await students.create({"name": "Rahim", "roll": 7, "class_name": "6"})
    with pytest.raises(DuplicateRecordError):
        await students.create({"name": "Karim", "roll": "7", "class_name": "6"})


async def test_inactive_students_still_hold_their_key(students):
    await students.create({"name": "Rahim", "roll": "3", "class_name": "8", "status": "inactive"})
    with pytest.raises(DuplicateRecordError):
        await students.create({"name": "Karim", "roll": "3", "class_name": "8"})


async def test_create_requires_the_natural_key(students):
    with pytest.raises(InvalidInputError):
        await students.create({"name": "Rahim", "class_name": "8"})


async def test_create_defaults_status_and_stamps_timestamps(students):
    created = await students.create({"name": "Rahim", "roll": "1", "class_name": "5"})
    stored = await students.get(created["id"])
    assert stored["status"] == "active"
    assert stored["created_at"] == stored["updated_at"]


async def test_key_change_onto_taken_key_is_rejected_and_record_unchanged(students):
    target = await students.create({"name": "Rahim", "roll": "12", "class_name": "9"})
    await students.create({"name": "Karim", "roll": "13", "class_name": "9"})

    with pytest.raises(DuplicateRecordError):
        await students.update(target["id"], {"roll": "13", "section": "B"})

    unchanged = await students.get(target["id"])
    assert unchanged["roll"] == "12"
    assert "section" not in unchanged


async def test_key_change_onto_free_key_merges(students):
    created = await students.create({"name": "Rahim", "roll": "12", "class_name": "9", "village": "Kalia"})
    updated = await students.update(created["id"], {"class_name": "10"})

    assert updated["id"] == created["id"]
    assert updated["class_name"] == "10"
    assert updated["roll"] == "12"
    assert updated["village"] == "Kalia"


async def test_update_without_key_change_skips_the_recheck(students, guard):
    created = await students.create({"name": "Rahim", "roll": "12", "class_name": "9"})
    guard.ensure_unique = AsyncMock()

    # roll supplied with its current value counts as unchanged
    updated = await students.update(created["id"], {"name": "Rahim Uddin", "roll": 12})

    guard.ensure_unique.assert_not_awaited()
    assert updated["name"] == "Rahim Uddin"
    assert updated["updated_at"] >= created["updated_at"]


async def test_update_cannot_rewrite_the_identifier(students):
    created = await students.create({"name": "Rahim", "roll": "12", "class_name": "9"})
    updated = await students.update(created["id"], {"id": str(uuid.uuid4()), "name": "Karim"})
    assert updated["id"] == created["id"]
    assert (await students.get(created["id"]))["name"] == "Karim"


async def test_update_of_unknown_record_is_not_found(students):
    with pytest.raises(RecordNotFoundError):
        await students.update(str(uuid.uuid4()), {"name": "x"})


async def test_malformed_identifier_is_invalid_input(students):
    with pytest.raises(InvalidInputError):
        await students.get("not-an-id")


async def test_delete(students):
    created = await students.create({"name": "Rahim", "roll": "12", "class_name": "9"})
    await students.delete(created["id"])
    with pytest.raises(RecordNotFoundError):
        await students.delete(created["id"])


async def test_migrate_with_one_missing_id_changes_nothing(students, store):
    ids = []
    for roll in range(1, 5):
        created = await students.create({"name": f"S{roll}", "roll": roll, "class_name": "9"})
        ids.append(created["id"])
    missing = str(uuid.uuid4())

    with pytest.raises(RecordNotFoundError) as excinfo:
        await students.migrate(ids + [missing], "10", "2027")

    assert excinfo.value.details["missing_ids"] == [missing]
    collection = store.collection("students")
    assert await collection.count(Eq("class_name", "10")) == 0
    assert await collection.count(Eq("class_name", "9")) == 4


async def test_migrate_rewrites_class_and_year(students):
    first = await students.create({"name": "A", "roll": "1", "class_name": "9", "academic_year": "2026"})
    second = await students.create({"name": "B", "roll": "2", "class_name": "9", "academic_year": "2026"})

    result = await students.migrate([first["id"], second["id"], first["id"]], "10", "2027")

    assert result["matched"] == 2
    assert result["modified"] == 2
    moved = await students.get(second["id"])
    assert (moved["class_name"], moved["academic_year"], moved["name"]) == ("10", "2027", "B")
    assert moved["updated_at"] >= second["updated_at"]


@pytest.mark.parametrize("ids,class_name,academic_year", [
    (["x"], None, "2027"),
    (["x"], "10", ""),
    ([], "10", "2027"),
    (None, "10", "2027"),
    (["not-a-uuid"], "10", "2027"),
])
async def test_migrate_rejects_bad_input_before_touching_the_store(students, ids, class_name, academic_year):
    students.collection = MagicMock()
    students.guard = MagicMock()
    with pytest.raises(InvalidInputError):
        await students.migrate(ids, class_name, academic_year)
    assert students.collection.method_calls == []
    assert students.guard.method_calls == []


async def test_pagination_covers_every_record_once(students):
    for roll in range(1, 24):
        await students.create({"name": f"S{roll}", "roll": roll, "class_name": "9"})

    seen = []
    first = await students.get_paginated({}, page=1, limit=10)
    assert first["total"] == 23
    assert first["pages"] == 3
    for page in range(1, 4):
        result = await students.get_paginated({}, page=page, limit=10)
        seen.extend(item["id"] for item in result["items"])
    assert len(seen) == 23
    assert len(set(seen)) == 23

    beyond = await students.get_paginated({}, page=4, limit=10)
    assert beyond["items"] == []
    assert beyond["total"] == 23


async def test_default_sort_is_class_then_roll(students):
    for class_name, roll in [("9", "2"), ("10", "1"), ("9", "1"), ("10", "3")]:
        await students.create({"name": "x", "roll": roll, "class_name": class_name})

    result = await students.get_paginated({}, limit=10)
    keys = [(item["class_name"], item["roll"]) for item in result["items"]]
    assert keys == [("10", "1"), ("10", "3"), ("9", "1"), ("9", "2")]


async def test_listing_filters_and_sorts_descending(students):
    for roll, gender in [("1", "Male"), ("2", "Female"), ("3", "Female")]:
        await students.create({"name": "x", "roll": roll, "class_name": "9", "gender": gender})

    result = await students.get_paginated({"gender": "Female"}, sort="-roll")
    assert [item["roll"] for item in result["items"]] == ["3", "2"]
    assert result["total"] == 2


async def test_invalid_page_is_rejected_before_querying(students):
    students.collection = MagicMock()
    with pytest.raises(InvalidInputError):
        await students.get_paginated({}, page="0")
    assert students.collection.method_calls == []


async def test_concurrent_inserts_of_one_key_are_serialized(store, guard):
    collection = store.collection("students")
    original_find_one = collection.find_one

    async def slow_find_one(predicate):
        await asyncio.sleep(0.01)
        return await original_find_one(predicate)

    collection.find_one = slow_find_one
    record = {"name": "Rahim", "roll": "1", "class_name": "9"}
    results = await asyncio.gather(
        guard.insert_unique(collection, ("roll", "class_name"), record),
        guard.insert_unique(collection, ("roll", "class_name"), record),
        return_exceptions=True,
    )

    assert sum(isinstance(result, DuplicateRecordError) for result in results) == 1
    assert await collection.count(MATCH_ALL) == 1


async def test_migrate_reports_rolls_already_taken_in_target_class(students, caplog):
    settled = await students.create({"name": "Old", "roll": "1", "class_name": "10"})
    first = await students.create({"name": "A", "roll": "1", "class_name": "9"})
    second = await students.create({"name": "B", "roll": "2", "class_name": "9"})

    with caplog.at_level("WARNING", logger="school_records.services.conflict_guard"):
        result = await students.migrate([first["id"], second["id"]], "10", "2027")

    assert result["modified"] == 2
    assert result["key_conflicts"] == 1
    assert "shared keys" in caplog.text
    assert (await students.get(settled["id"]))["class_name"] == "10"


async def test_migrate_counts_clashes_within_the_batch(students):
    first = await students.create({"name": "A", "roll": "3", "class_name": "8"})
    second = await students.create({"name": "B", "roll": "3", "class_name": "9"})
    third = await students.create({"name": "C", "roll": "4", "class_name": "9"})

    result = await students.migrate([first["id"], second["id"], third["id"]], "10", "2027")

    assert result["key_conflicts"] == 1
    assert result["modified"] == 3


async def test_migrate_into_free_rolls_has_no_conflicts(students):
    first = await students.create({"name": "A", "roll": "1", "class_name": "9"})
    await students.create({"name": "Old", "roll": "2", "class_name": "10"})

    result = await students.migrate([first["id"]], "10", "2027")

    assert result["key_conflicts"] == 0
