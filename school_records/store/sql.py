# school_records/store/sql.py
"""Record store on async SQLAlchemy: every collection shares the ``records`` table."""
import logging
from contextlib import asynccontextmanager
from functools import singledispatch
from typing import Any, AsyncIterator, Dict, Optional

from sqlalchemy import and_, case, delete, false, func, literal_column, or_, select, text, true
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from ..core.exceptions import StoreUnavailableError
from ..models.base import Base
from ..models.record import RecordRow
from .base import ID_FIELD, Record, RecordCollection, RecordStore
from .predicates import (
    And, Contains, Count, CountWhere, DESCENDING, Eq, In, Ne, Or, Predicate,
)

logger = logging.getLogger(__name__)


def _text_value(field_name: str):
    if field_name == ID_FIELD:
        return RecordRow.id
    return RecordRow.data[field_name].as_string()


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _equals(field_name: str, value: Any):
    if field_name == ID_FIELD:
        return RecordRow.id == str(value) if value is not None else false()
    element = RecordRow.data[field_name]
    if value is None:
        return element.as_string().is_(None)
    if isinstance(value, bool):
        return element.as_boolean() == value
    if isinstance(value, int):
        return element.as_integer() == value
    if isinstance(value, float):
        return element.as_float() == value
    return element.as_string() == str(value)


@singledispatch
def compile_predicate(predicate: Predicate):
    raise TypeError(f"Unsupported predicate: {predicate!r}")


@compile_predicate.register(Eq)
def _compile_eq(predicate: Eq):
    return _equals(predicate.field, predicate.value)


@compile_predicate.register(Ne)
def _compile_ne(predicate: Ne):
    if predicate.field == ID_FIELD:
        return RecordRow.id != str(predicate.value)
    if predicate.value is None:
        return _text_value(predicate.field).is_not(None)
    # a missing field differs from any concrete value
    return or_(
        _text_value(predicate.field).is_(None),
        ~_equals(predicate.field, predicate.value),
    )


@compile_predicate.register(In)
def _compile_in(predicate: In):
    if not predicate.values:
        return false()
    return _text_value(predicate.field).in_([str(value) for value in predicate.values])


@compile_predicate.register(Contains)
def _compile_contains(predicate: Contains):
    pattern = f"%{_escape_like(predicate.text)}%"
    return _text_value(predicate.field).ilike(pattern, escape="\\")


@compile_predicate.register(And)
def _compile_and(predicate: And):
    if not predicate.clauses:
        return true()
    return and_(*(compile_predicate(clause) for clause in predicate.clauses))


@compile_predicate.register(Or)
def _compile_or(predicate: Or):
    if not predicate.clauses:
        return false()
    return or_(*(compile_predicate(clause) for clause in predicate.clauses))


def _order_by(sort):
    clauses = []
    for field_name, direction in sort or ():
        column = _text_value(field_name)
        if direction == DESCENDING:
            clauses.append(column.desc().nulls_last())
        else:
            clauses.append(column.asc().nulls_first())
    clauses.append(RecordRow.id.asc())
    return clauses


def _hit(accumulator):
    """Per-row contribution of an accumulator, summed per group."""
    if isinstance(accumulator, Count):
        return literal_column("1")
    if isinstance(accumulator, CountWhere):
        return case(
            (_equals(accumulator.field, accumulator.value), literal_column("1")),
            else_=literal_column("0"),
        )
    raise TypeError(f"Unsupported accumulator: {accumulator!r}")


def _to_record(row: RecordRow) -> Record:
    return {ID_FIELD: row.id, **(row.data or {})}


def _body(fields) -> Dict[str, Any]:
    return {key: value for key, value in fields.items() if key != ID_FIELD}


class SqlRecordCollection(RecordCollection):
    def __init__(self, name: str, sessions: async_sessionmaker):
        self.name = name
        self._sessions = sessions

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        try:
            async with self._sessions() as session:
                async with session.begin():
                    yield session
        except (SQLAlchemyError, OSError) as exc:
            logger.error(f"{self.name}.{operation} failed: {exc}")
            raise StoreUnavailableError(f"Record store failed during {operation} on {self.name}") from exc

    def _where(self, predicate: Predicate):
        return and_(RecordRow.collection == self.name, compile_predicate(predicate))

    async def find(self, predicate, sort=None, skip=0, limit=None):
        stmt = select(RecordRow).where(self._where(predicate)).order_by(*_order_by(sort))
        if skip:
            stmt = stmt.offset(skip)
        if limit is not None:
            stmt = stmt.limit(limit)
        async with self._session("find") as session:
            result = await session.execute(stmt)
            return [_to_record(row) for row in result.scalars().all()]

    async def count(self, predicate):
        stmt = select(func.count()).select_from(RecordRow).where(self._where(predicate))
        async with self._session("count") as session:
            result = await session.execute(stmt)
            return result.scalar() or 0

    async def find_one(self, predicate):
        stmt = select(RecordRow).where(self._where(predicate)).limit(1)
        async with self._session("find_one") as session:
            result = await session.execute(stmt)
            row = result.scalars().first()
            return _to_record(row) if row is not None else None

    async def insert_one(self, record):
        row = RecordRow(collection=self.name, data=_body(record))
        async with self._session("insert_one") as session:
            session.add(row)
            await session.flush()
            return row.id

    async def update_one(self, record_id, fields):
        async with self._session("update_one") as session:
            row = await session.get(RecordRow, record_id)
            if row is None or row.collection != self.name:
                return 0
            # reassign so the JSON column is flagged dirty
            row.data = {**(row.data or {}), **_body(fields)}
            return 1

    async def update_many(self, predicate, fields):
        changes = _body(fields)
        stmt = select(RecordRow).where(self._where(predicate))
        async with self._session("update_many") as session:
            result = await session.execute(stmt)
            rows = result.scalars().all()
            for row in rows:
                row.data = {**(row.data or {}), **changes}
            return len(rows)

    async def delete_one(self, record_id):
        stmt = delete(RecordRow).where(
            RecordRow.collection == self.name,
            RecordRow.id == record_id,
        )
        async with self._session("delete_one") as session:
            result = await session.execute(stmt)
            return result.rowcount

    async def aggregate_group(self, predicate, keys, accumulators):
        # extract keys and conditions in a subquery so GROUP BY sees plain columns
        inner_columns = [_text_value(key).label(f"k{index}") for index, key in enumerate(keys)]
        for index, accumulator in enumerate(accumulators.values()):
            inner_columns.append(_hit(accumulator).label(f"a{index}"))
        inner = select(*inner_columns).where(self._where(predicate)).subquery()

        group_columns = [inner.c[f"k{index}"] for index in range(len(keys))]
        stmt = (
            select(
                *(column.label(f"k{index}") for index, column in enumerate(group_columns)),
                *(func.sum(inner.c[f"a{index}"]).label(f"a{index}") for index in range(len(accumulators))),
            )
            .group_by(*group_columns)
            .order_by(*(column.asc().nulls_first() for column in group_columns))
        )
        async with self._session("aggregate_group") as session:
            result = await session.execute(stmt)
            groups = []
            for row in result.mappings().all():
                group = {key: row[f"k{index}"] for index, key in enumerate(keys)}
                group.update({
                    name: int(row[f"a{index}"] or 0)
                    for index, name in enumerate(accumulators)
                })
                groups.append(group)
            return groups


class SqlRecordStore(RecordStore):
    def __init__(self, engine: AsyncEngine, timeout: Optional[float] = None, create_tables: bool = False):
        super().__init__(timeout)
        self.engine = engine
        self.create_tables = create_tables
        self.sessions = async_sessionmaker(
            engine,
            expire_on_commit=False,
            class_=AsyncSession,
            autoflush=False,
        )

    async def open(self) -> None:
        if self.create_tables:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Record tables ensured")

    async def close(self) -> None:
        await self.engine.dispose()
        logger.info("Database connections closed")

    async def ping(self) -> bool:
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Database health check failed: {e}")
            return False

    def _collection(self, name: str) -> RecordCollection:
        return SqlRecordCollection(name, self.sessions)
