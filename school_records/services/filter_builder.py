# school_records/services/filter_builder.py
"""Translate flat query criteria into store predicates."""
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

from ..store.predicates import MATCH_ALL, Contains, Eq, Or, Predicate, all_of

SEARCH_PARAM = "search"

# fields that must always compare as strings
STRING_FIELDS = frozenset({"roll"})


def is_present(value: Any) -> bool:
    """Absent criteria are ``None`` or blank strings; they add no constraint."""
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


def normalize_value(field_name: str, value: Any) -> Any:
    if field_name in STRING_FIELDS and value is not None:
        return str(value).strip()
    return value


class FilterBuilder:
    """Builds an AND of exact-match clauses plus an optional OR-of-substrings search.

    ``derived`` maps a criterion name to a function producing its predicate,
    for criteria that do not correspond to a stored field.
    """

    def __init__(
        self,
        exact_fields: Sequence[str],
        search_fields: Sequence[str] = (),
        derived: Optional[Dict[str, Callable[[Any], Predicate]]] = None,
    ):
        self.exact_fields = tuple(exact_fields)
        self.search_fields = tuple(search_fields)
        self.derived = dict(derived or {})

    def search_clause(self, text: str) -> Predicate:
        text = str(text).strip()
        return Or(tuple(Contains(field_name, text) for field_name in self.search_fields))

    def build(self, criteria: Optional[Mapping[str, Any]] = None) -> Predicate:
        criteria = criteria or {}
        clauses = []
        for field_name in self.exact_fields:
            value = criteria.get(field_name)
            if is_present(value):
                clauses.append(Eq(field_name, normalize_value(field_name, value)))
        for name, make_clause in self.derived.items():
            value = criteria.get(name)
            if is_present(value):
                clauses.append(make_clause(value))
        search = criteria.get(SEARCH_PARAM)
        if self.search_fields and is_present(search):
            clauses.append(self.search_clause(search))
        if not clauses:
            return MATCH_ALL
        return all_of(*clauses)


STUDENT_FILTERS = FilterBuilder(
    exact_fields=(
        "class_name", "section", "roll", "status", "gender",
        "religion", "blood_group", "academic_year",
    ),
    search_fields=(
        "name", "roll", "father_name", "mother_name",
        "village", "sub_district", "district",
    ),
)

ADMISSION_FILTERS = FilterBuilder(
    exact_fields=("status", "class_name", "gender"),
    search_fields=("name", "father_name", "mother_name", "mobile"),
)

MARKS_FILTERS = FilterBuilder(
    exact_fields=("exam_type", "class_name", "roll", "exam_year", "section"),
    search_fields=("name", "roll"),
)

CLASS_FILTERS = FilterBuilder(
    exact_fields=("class_name", "section", "academic_year"),
    search_fields=("class_name", "section"),
)
