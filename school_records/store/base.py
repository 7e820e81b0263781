# school_records/store/base.py
"""Abstract record store interface."""
import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..core.exceptions import StoreUnavailableError
from .predicates import Predicate, SortSpec

logger = logging.getLogger(__name__)

Record = Dict[str, Any]

ID_FIELD = "id"


class RecordCollection(ABC):
    """One document collection.

    Records are plain dicts; the generated identifier is exposed under ``id``.
    """

    name: str

    @abstractmethod
    async def find(
        self,
        predicate: Predicate,
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Record]:
        ...

    @abstractmethod
    async def count(self, predicate: Predicate) -> int:
        ...

    @abstractmethod
    async def find_one(self, predicate: Predicate) -> Optional[Record]:
        ...

    @abstractmethod
    async def insert_one(self, record: Mapping[str, Any]) -> str:
        ...

    @abstractmethod
    async def update_one(self, record_id: str, fields: Mapping[str, Any]) -> int:
        ...

    @abstractmethod
    async def update_many(self, predicate: Predicate, fields: Mapping[str, Any]) -> int:
        ...

    @abstractmethod
    async def delete_one(self, record_id: str) -> int:
        ...

    @abstractmethod
    async def aggregate_group(
        self,
        predicate: Predicate,
        keys: Sequence[str],
        accumulators: Mapping[str, Any],
    ) -> List[Record]:
        """Group matching records by ``keys``; rows sorted ascending by the keys."""
        ...


class TimedCollection(RecordCollection):
    """Wraps a collection so every call fails with StoreUnavailableError after ``timeout``."""

    def __init__(self, inner: RecordCollection, timeout: float):
        self.inner = inner
        self.name = inner.name
        self.timeout = timeout

    async def _call(self, operation: str, coro):
        try:
            return await asyncio.wait_for(coro, timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error(f"{self.name}.{operation} timed out after {self.timeout}s")
            raise StoreUnavailableError(
                f"Record store did not answer {operation} on {self.name} within {self.timeout}s"
            )

    async def find(self, predicate, sort=None, skip=0, limit=None):
        return await self._call("find", self.inner.find(predicate, sort, skip, limit))

    async def count(self, predicate):
        return await self._call("count", self.inner.count(predicate))

    async def find_one(self, predicate):
        return await self._call("find_one", self.inner.find_one(predicate))

    async def insert_one(self, record):
        return await self._call("insert_one", self.inner.insert_one(record))

    async def update_one(self, record_id, fields):
        return await self._call("update_one", self.inner.update_one(record_id, fields))

    async def update_many(self, predicate, fields):
        return await self._call("update_many", self.inner.update_many(predicate, fields))

    async def delete_one(self, record_id):
        return await self._call("delete_one", self.inner.delete_one(record_id))

    async def aggregate_group(self, predicate, keys, accumulators):
        return await self._call(
            "aggregate_group", self.inner.aggregate_group(predicate, keys, accumulators)
        )


class RecordStore(ABC):
    """Factory for collections with an explicit open/close lifecycle."""

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout

    async def open(self) -> None:
        return None

    async def close(self) -> None:
        return None

    async def ping(self) -> bool:
        return True

    @abstractmethod
    def _collection(self, name: str) -> RecordCollection:
        ...

    def collection(self, name: str) -> RecordCollection:
        collection = self._collection(name)
        if self.timeout:
            return TimedCollection(collection, self.timeout)
        return collection
