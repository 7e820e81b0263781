# school_records/store/predicates.py
"""Store-neutral predicates, sort keys and group accumulators.

Filter builders produce these objects; each store adapter decides how to run
them. ``matches`` gives the reference semantics used by the in-memory store.
"""
from dataclasses import dataclass
from typing import Any, Dict, Sequence, Tuple

ASCENDING = 1
DESCENDING = -1

SortSpec = Sequence[Tuple[str, int]]


class Predicate:
    def matches(self, record: Dict[str, Any]) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class Eq(Predicate):
    field: str
    value: Any

    def matches(self, record):
        return record.get(self.field) == self.value


@dataclass(frozen=True)
class Ne(Predicate):
    """Matches records whose field differs from ``value``, including missing fields."""
    field: str
    value: Any

    def matches(self, record):
        return record.get(self.field) != self.value


@dataclass(frozen=True)
class In(Predicate):
    field: str
    values: Tuple[Any, ...]

    def matches(self, record):
        return record.get(self.field) in self.values


@dataclass(frozen=True)
class Contains(Predicate):
    """Case-insensitive, unanchored substring match on a field's text form.

    Numbers match on their decimal text, so a mobile stored as ``1711000000``
    is found by ``"1711"``.
    """
    field: str
    text: str

    def matches(self, record):
        value = record.get(self.field)
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            return False
        return self.text.casefold() in str(value).casefold()


@dataclass(frozen=True)
class And(Predicate):
    clauses: Tuple[Predicate, ...] = ()

    def matches(self, record):
        return all(clause.matches(record) for clause in self.clauses)


@dataclass(frozen=True)
class Or(Predicate):
    clauses: Tuple[Predicate, ...] = ()

    def matches(self, record):
        return any(clause.matches(record) for clause in self.clauses)


MATCH_ALL = And()


def all_of(*clauses: Predicate) -> Predicate:
    """AND the given clauses, flattening nested conjunctions."""
    flat = []
    for clause in clauses:
        if isinstance(clause, And):
            flat.extend(clause.clauses)
        else:
            flat.append(clause)
    if len(flat) == 1:
        return flat[0]
    return And(tuple(flat))


# Accumulators for aggregate_group

@dataclass(frozen=True)
class Count:
    pass


@dataclass(frozen=True)
class CountWhere:
    """Conditional sum: 1 for every grouped record whose field equals value."""
    field: str
    value: Any = None


def sort_value(value: Any) -> Tuple[int, Any]:
    """Total ordering across mixed field types: missing < numbers < strings < other."""
    if value is None:
        return (0, 0)
    if isinstance(value, bool):
        return (3, int(value))
    if isinstance(value, (int, float)):
        return (1, value)
    if isinstance(value, str):
        return (2, value)
    return (4, str(value))
