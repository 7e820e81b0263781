# school_records/store/memory.py
"""In-process record store used for local runs and tests."""
import copy
import uuid
from collections import OrderedDict
from functools import cmp_to_key
from typing import Any, Dict, List, Optional

from .base import ID_FIELD, Record, RecordCollection, RecordStore
from .predicates import Count, CountWhere, Predicate, SortSpec, sort_value


def _compare(sort: SortSpec):
    def compare(left: Record, right: Record) -> int:
        for field_name, direction in sort:
            a, b = sort_value(left.get(field_name)), sort_value(right.get(field_name))
            if a != b:
                return direction if a > b else -direction
        return 0
    return compare


class InMemoryCollection(RecordCollection):
    def __init__(self, name: str, rows: "OrderedDict[str, Record]"):
        self.name = name
        self._rows = rows

    def _matching(self, predicate: Predicate) -> List[Record]:
        return [row for row in self._rows.values() if predicate.matches(row)]

    async def find(self, predicate, sort=None, skip=0, limit=None):
        rows = self._matching(predicate)
        if sort:
            rows.sort(key=cmp_to_key(_compare(sort)))
        end = None if limit is None else skip + limit
        return [copy.deepcopy(row) for row in rows[skip:end]]

    async def count(self, predicate):
        return len(self._matching(predicate))

    async def find_one(self, predicate):
        for row in self._rows.values():
            if predicate.matches(row):
                return copy.deepcopy(row)
        return None

    async def insert_one(self, record):
        record_id = str(uuid.uuid4())
        row = copy.deepcopy(dict(record))
        row[ID_FIELD] = record_id
        self._rows[record_id] = row
        return record_id

    async def update_one(self, record_id, fields):
        row = self._rows.get(record_id)
        if row is None:
            return 0
        row.update(copy.deepcopy({k: v for k, v in fields.items() if k != ID_FIELD}))
        return 1

    async def update_many(self, predicate, fields):
        rows = self._matching(predicate)
        changes = {k: v for k, v in fields.items() if k != ID_FIELD}
        for row in rows:
            row.update(copy.deepcopy(changes))
        return len(rows)

    async def delete_one(self, record_id):
        return 1 if self._rows.pop(record_id, None) is not None else 0

    async def aggregate_group(self, predicate, keys, accumulators):
        groups: Dict[tuple, Dict[str, Any]] = {}
        for row in self._matching(predicate):
            group_key = tuple(row.get(key) for key in keys)
            group = groups.get(group_key)
            if group is None:
                group = dict(zip(keys, group_key))
                group.update({name: 0 for name in accumulators})
                groups[group_key] = group
            for name, accumulator in accumulators.items():
                if isinstance(accumulator, Count):
                    group[name] += 1
                elif isinstance(accumulator, CountWhere):
                    if row.get(accumulator.field) == accumulator.value:
                        group[name] += 1
                else:
                    raise TypeError(f"Unsupported accumulator: {accumulator!r}")
        ordered = sorted(
            groups.items(),
            key=lambda item: tuple(sort_value(value) for value in item[0]),
        )
        return [group for _, group in ordered]


class InMemoryRecordStore(RecordStore):
    def __init__(self, timeout: Optional[float] = None):
        super().__init__(timeout)
        self._collections: Dict[str, "OrderedDict[str, Record]"] = {}

    def _collection(self, name: str) -> RecordCollection:
        rows = self._collections.setdefault(name, OrderedDict())
        return InMemoryCollection(name, rows)
