# school_records/services/base_service.py
"""Base service with common CRUD operations over one record collection."""
import logging
import uuid
from typing import Any, Dict, List, Mapping, Optional

from ..core.exceptions import InvalidInputError, RecordNotFoundError
from ..store.base import ID_FIELD, Record, RecordStore
from ..store.predicates import Eq
from ..utils.pagination import DEFAULT_LIMIT, Paginator, RawParam, parse_page_window, parse_sort
from .conflict_guard import ConflictGuard, NaturalKey
from .filter_builder import STRING_FIELDS, FilterBuilder, normalize_value
from .merge import CREATED_AT, UPDATED_AT, utc_now

logger = logging.getLogger(__name__)


def parse_record_id(value: Any) -> str:
    """Identifiers are UUID strings; anything else is rejected before touching the store."""
    try:
        return str(uuid.UUID(str(value).strip()))
    except (TypeError, ValueError, AttributeError):
        raise InvalidInputError(f"Malformed identifier: {value!r}", field=ID_FIELD)


def parse_record_ids(values: Any) -> List[str]:
    if not values or isinstance(values, (str, bytes)):
        raise InvalidInputError("At least one identifier is required", field="ids")
    return list(dict.fromkeys(parse_record_id(value) for value in values))


class RecordService:
    collection_name: str = ""
    natural_key: NaturalKey = ()
    filters: FilterBuilder = FilterBuilder(exact_fields=())
    default_sort: str = "-" + CREATED_AT

    def __init__(self, store: RecordStore, guard: ConflictGuard, default_limit: int = DEFAULT_LIMIT):
        self.store = store
        self.guard = guard
        self.default_limit = default_limit
        self.collection = store.collection(self.collection_name)

    def present(self, record: Record) -> Record:
        """Shape a stored record for callers."""
        return record

    def prepare(self, payload: Any) -> Dict[str, Any]:
        """Normalize a write payload: no identifier, string-typed string fields."""
        if not isinstance(payload, Mapping):
            raise InvalidInputError("Record body must be an object")
        prepared = {key: value for key, value in payload.items() if key != ID_FIELD}
        for field_name in STRING_FIELDS:
            if prepared.get(field_name) is not None:
                prepared[field_name] = normalize_value(field_name, prepared[field_name])
        return prepared

    async def fetch(self, record_id: Any) -> Record:
        """Stored form of one record, as written."""
        record_id = parse_record_id(record_id)
        record = await self.collection.find_one(Eq(ID_FIELD, record_id))
        if record is None:
            raise RecordNotFoundError(self.collection_name, [record_id])
        return record

    async def get(self, record_id: Any) -> Record:
        return self.present(await self.fetch(record_id))

    async def get_paginated(
        self,
        criteria: Optional[Mapping[str, Any]] = None,
        page: RawParam = None,
        limit: RawParam = None,
        sort: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Filtered, sorted page plus a total counted over the whole filter"""
        window = parse_page_window(page, limit, self.default_limit)
        sort_spec = parse_sort(sort, self.default_sort)
        predicate = self.filters.build(criteria)

        total = await self.collection.count(predicate)
        items = await self.collection.find(
            predicate, sort=sort_spec, skip=window.offset, limit=window.limit
        )
        return Paginator.create_response(
            [self.present(item) for item in items], window, total
        )

    async def create(self, payload: Any) -> Record:
        record = self.prepare(payload)
        now = utc_now()
        record[CREATED_AT] = now
        record[UPDATED_AT] = now
        record_id = await self.guard.insert_unique(self.collection, self.natural_key, record)
        logger.info(f"Created {self.collection_name} record {record_id}")
        return self.present({ID_FIELD: record_id, **record})

    async def update(self, record_id: Any, payload: Any) -> Record:
        changes = self.prepare(payload)
        existing = await self.fetch(record_id)
        merged = await self.guard.update_unique(
            self.collection, self.natural_key, existing, changes
        )
        return self.present(merged)

    async def delete(self, record_id: Any) -> None:
        record_id = parse_record_id(record_id)
        deleted = await self.collection.delete_one(record_id)
        if not deleted:
            raise RecordNotFoundError(self.collection_name, [record_id])
        logger.info(f"Deleted {self.collection_name} record {record_id}")
