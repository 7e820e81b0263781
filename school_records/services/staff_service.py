# school_records/services/staff_service.py
from typing import Any, Dict, Mapping, Optional

from ..schemas.staff import ROLE_FIELD, StaffRole, classify, role_predicate
from ..store.base import Record
from ..utils.pagination import RawParam
from .base_service import RecordService
from .filter_builder import FilterBuilder

STAFF_FILTERS = FilterBuilder(
    exact_fields=(
        "designation", "subject", "gender", "religion",
        "blood_group", "status", "index_number",
    ),
    search_fields=("name", "index_number", "designation", "subject", "mobile"),
    derived={ROLE_FIELD: role_predicate},
)


class StaffService(RecordService):
    """Teachers and support staff share one collection, keyed by index_number."""
    collection_name = "staff"
    natural_key = ("index_number",)
    filters = STAFF_FILTERS
    default_sort = "index_number"

    def present(self, record: Record) -> Record:
        return {**record, ROLE_FIELD: classify(record).value}

    def prepare(self, payload: Any) -> Dict[str, Any]:
        prepared = super().prepare(payload)
        # the role is derived from subject and never stored
        prepared.pop(ROLE_FIELD, None)
        return prepared

    async def get_by_role(
        self,
        role: StaffRole,
        criteria: Optional[Mapping[str, Any]] = None,
        page: RawParam = None,
        limit: RawParam = None,
        sort: Optional[str] = None,
    ) -> Dict[str, Any]:
        criteria = {**(criteria or {}), ROLE_FIELD: role.value}
        return await self.get_paginated(criteria, page=page, limit=limit, sort=sort)
