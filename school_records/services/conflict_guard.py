# school_records/services/conflict_guard.py
"""Natural-key duplicate prevention for insert, update and bulk migrate.

Uniqueness is checked with a read before the write. Within one process the
check and the write for a given natural key run under the same lock, so two
requests racing on one key are serialized; writers in other processes are not.
"""
import asyncio
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..core.exceptions import DuplicateRecordError, InvalidInputError, RecordNotFoundError
from ..store.base import ID_FIELD, Record, RecordCollection
from ..store.predicates import Eq, In, Ne, all_of
from .filter_builder import is_present, normalize_value
from .merge import UPDATED_AT, safe_merge, utc_now

logger = logging.getLogger(__name__)

NaturalKey = Tuple[str, ...]


class KeyLocks:
    """Fixed pool of asyncio locks addressed by hash of (collection, key)."""

    def __init__(self, shards: int = 64):
        self._locks = [asyncio.Lock() for _ in range(max(1, shards))]

    def lock_for(self, collection: str, key: Mapping[str, Any]) -> asyncio.Lock:
        fingerprint = tuple((name, repr(value)) for name, value in key.items())
        return self._locks[hash((collection, fingerprint)) % len(self._locks)]


def extract_key(natural_key: NaturalKey, record: Mapping[str, Any]) -> Dict[str, Any]:
    key = {}
    for field_name in natural_key:
        value = record.get(field_name)
        if not is_present(value):
            raise InvalidInputError(
                f"{' and '.join(natural_key)} are required", field=field_name
            )
        key[field_name] = normalize_value(field_name, value)
    return key


def key_predicate(key: Mapping[str, Any], exclude_id: Optional[str] = None):
    clauses = [Eq(field_name, value) for field_name, value in key.items()]
    if exclude_id is not None:
        clauses.append(Ne(ID_FIELD, exclude_id))
    return all_of(*clauses)


def changed_key_fields(natural_key: NaturalKey, existing: Mapping[str, Any], update: Mapping[str, Any]) -> List[str]:
    """Key fields the update supplies with a value different from the stored one."""
    changed = []
    for field_name in natural_key:
        if field_name not in update:
            continue
        new_value = normalize_value(field_name, update[field_name])
        if new_value != normalize_value(field_name, existing.get(field_name)):
            changed.append(field_name)
    return changed


class ConflictGuard:
    def __init__(self, shards: int = 64):
        self.locks = KeyLocks(shards)

    async def ensure_unique(
        self,
        collection: RecordCollection,
        key: Mapping[str, Any],
        exclude_id: Optional[str] = None,
    ) -> None:
        holder = await collection.find_one(key_predicate(key, exclude_id))
        if holder is not None:
            logger.info(f"Duplicate {collection.name} key {dict(key)} held by {holder[ID_FIELD]}")
            raise DuplicateRecordError(collection.name, dict(key))

    async def insert_unique(
        self,
        collection: RecordCollection,
        natural_key: NaturalKey,
        record: Mapping[str, Any],
    ) -> str:
        """Insert ``record`` unless another record already holds its natural key."""
        record = dict(record)
        record.pop(ID_FIELD, None)
        if not natural_key:
            return await collection.insert_one(record)
        key = extract_key(natural_key, record)
        record.update(key)
        async with self.locks.lock_for(collection.name, key):
            await self.ensure_unique(collection, key)
            return await collection.insert_one(record)

    async def update_unique(
        self,
        collection: RecordCollection,
        natural_key: NaturalKey,
        existing: Record,
        update: Mapping[str, Any],
        now: Optional[str] = None,
    ) -> Record:
        """Merge ``update`` into ``existing`` and write it.

        The duplicate recheck only runs when the update changes a key field;
        the prospective key combines new values with unchanged stored ones.
        """
        record_id = existing[ID_FIELD]
        update = dict(update)
        for field_name in natural_key:
            if field_name in update:
                update[field_name] = normalize_value(field_name, update[field_name])
        merged = safe_merge(existing, update, now)

        changed = changed_key_fields(natural_key, existing, update)
        if not changed:
            await collection.update_one(record_id, merged)
            return {ID_FIELD: record_id, **merged}

        key = extract_key(natural_key, merged)
        async with self.locks.lock_for(collection.name, key):
            await self.ensure_unique(collection, key, exclude_id=record_id)
            await collection.update_one(record_id, merged)
        logger.info(f"{collection.name} {record_id} moved to key {key}")
        return {ID_FIELD: record_id, **merged}

    async def resolve_all(self, collection: RecordCollection, ids: Sequence[str]) -> List[Record]:
        """Fetch every record in ``ids`` or raise naming exactly the missing ones."""
        found = await collection.find(In(ID_FIELD, tuple(ids)))
        found_ids = {record[ID_FIELD] for record in found}
        missing = [record_id for record_id in ids if record_id not in found_ids]
        if missing:
            logger.warning(f"{collection.name}: {len(missing)} of {len(ids)} ids not found")
            raise RecordNotFoundError(collection.name, missing)
        return found

    async def bulk_rewrite(
        self,
        collection: RecordCollection,
        ids: Iterable[str],
        fields: Mapping[str, Any],
        now: Optional[str] = None,
        natural_key: NaturalKey = (),
    ) -> Dict[str, int]:
        """All-or-nothing rewrite of ``fields`` across ``ids``.

        Only existence is validated before the write. When ``natural_key`` is
        given, keys the rewrite would leave shared by two records are counted in
        ``key_conflicts`` and logged, but they do not stop the rewrite.
        """
        ids = list(dict.fromkeys(ids))
        records = await self.resolve_all(collection, ids)
        changes = dict(fields)
        changes.pop(ID_FIELD, None)
        changes[UPDATED_AT] = now or utc_now()

        result = {"matched": len(ids)}
        if natural_key:
            result["key_conflicts"] = await self.count_shared_keys(
                collection, natural_key, records, changes
            )
        result["modified"] = await collection.update_many(In(ID_FIELD, tuple(ids)), changes)
        return result

    async def count_shared_keys(
        self,
        collection: RecordCollection,
        natural_key: NaturalKey,
        records: Sequence[Record],
        changes: Mapping[str, Any],
    ) -> int:
        """Moved records whose rewritten key another record would also hold."""
        fixed = {name: normalize_value(name, changes[name]) for name in natural_key if name in changes}
        if not fixed:
            return 0
        moving = {record[ID_FIELD] for record in records}

        def key_of(record):
            values = {**record, **fixed}
            if not all(is_present(values.get(name)) for name in natural_key):
                return None
            return tuple(normalize_value(name, values.get(name)) for name in natural_key)

        holders = await collection.find(all_of(*(Eq(name, value) for name, value in fixed.items())))
        taken = {key_of(record) for record in holders if record[ID_FIELD] not in moving}
        seen = set()
        shared = []
        for record in records:
            key = key_of(record)
            if key is None:
                continue
            if key in taken or key in seen:
                shared.append(dict(zip(natural_key, key)))
            seen.add(key)
        if shared:
            logger.warning(
                f"{collection.name}: rewrite leaves {len(shared)} shared keys, e.g. {shared[0]}"
            )
        return len(shared)
