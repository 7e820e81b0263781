# school_records/services/report_service.py
"""Statistics reports built from declarative group queries.

Each named report is a GroupQuery: a collection, a pre-filter, the group
keys and the accumulators to compute per group. Adding a report means adding
an entry to REPORTS.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ..core.config import settings
from ..core.exceptions import InvalidInputError
from ..schemas.staff import StaffRole, role_predicate
from ..store.base import Record, RecordStore
from ..store.predicates import MATCH_ALL, Count, CountWhere, Eq, Predicate, all_of

logger = logging.getLogger(__name__)

MALE = "Male"
FEMALE = "Female"

ACTIVE_STUDENTS = Eq("status", "active")
TEACHERS = role_predicate(StaffRole.TEACHER)
SUPPORT_STAFF = role_predicate(StaffRole.SUPPORT_STAFF)

COUNT = {"count": Count()}
GENDER_COUNTS = {
    "total": Count(),
    "male": CountWhere("gender", MALE),
    "female": CountWhere("gender", FEMALE),
}


@dataclass
class GroupQuery:
    collection: str
    keys: Tuple[str, ...]
    where: Predicate = MATCH_ALL
    accumulators: Mapping[str, Any] = field(default_factory=lambda: dict(COUNT))


REPORTS: Dict[str, GroupQuery] = {
    "teacher-subjects": GroupQuery("staff", ("subject",), TEACHERS),
    "staff-designations": GroupQuery("staff", ("designation",)),
    "student-religions": GroupQuery("students", ("religion",), ACTIVE_STUDENTS),
    "student-genders": GroupQuery("students", ("gender",), ACTIVE_STUDENTS),
    "student-classes": GroupQuery("students", ("class_name",), ACTIVE_STUDENTS, GENDER_COUNTS),
    "class-sections": GroupQuery("students", ("class_name", "section"), ACTIVE_STUDENTS, GENDER_COUNTS),
    "class-religions": GroupQuery("students", ("class_name", "religion"), ACTIVE_STUDENTS),
}


class ReportService:
    def __init__(self, store: RecordStore, religions: Optional[Sequence[str]] = None):
        self.store = store
        self.religions = list(religions if religions is not None else settings.overview_religions)

    async def run(self, query: GroupQuery, extra: Optional[Predicate] = None) -> List[Record]:
        where = query.where if extra is None else all_of(query.where, extra)
        collection = self.store.collection(query.collection)
        return await collection.aggregate_group(where, query.keys, query.accumulators)

    async def report(self, name: str) -> Dict[str, Any]:
        query = REPORTS.get(name)
        if query is None:
            raise InvalidInputError(
                f"Unknown report '{name}'. Available: {', '.join(sorted(REPORTS))}",
                field="name",
            )
        groups = await self.run(query)
        return {"report": name, "group_by": list(query.keys), "groups": groups}

    async def _gender_counts(self, collection: str, where: Predicate) -> Dict[str, int]:
        records = self.store.collection(collection)
        total, male, female = await asyncio.gather(
            records.count(where),
            records.count(all_of(where, Eq("gender", MALE))),
            records.count(all_of(where, Eq("gender", FEMALE))),
        )
        return {"total": total, "male": male, "female": female}

    async def overview(self) -> Dict[str, Any]:
        """Headline counts for teachers, support staff and active students."""
        students = self.store.collection("students")
        teachers, support_staff, student_counts, *religion_counts = await asyncio.gather(
            self._gender_counts("staff", TEACHERS),
            self._gender_counts("staff", SUPPORT_STAFF),
            self._gender_counts("students", ACTIVE_STUDENTS),
            *(students.count(all_of(ACTIVE_STUDENTS, Eq("religion", religion)))
              for religion in self.religions),
        )
        return {
            "teachers": teachers,
            "support_staff": support_staff,
            "students": student_counts,
            "religions": dict(zip(self.religions, religion_counts)),
        }
