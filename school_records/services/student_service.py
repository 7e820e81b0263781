# school_records/services/student_service.py
import logging
from typing import Any, Dict, Optional, Sequence

from ..core.exceptions import InvalidInputError
from .base_service import RecordService, parse_record_ids
from .filter_builder import STUDENT_FILTERS, is_present

logger = logging.getLogger(__name__)

DEFAULT_STATUS = "active"


class StudentService(RecordService):
    """Students are unique per (roll, class_name), whatever their status."""
    collection_name = "students"
    natural_key = ("roll", "class_name")
    filters = STUDENT_FILTERS
    default_sort = "class_name,roll"

    async def create(self, payload: Any) -> Dict[str, Any]:
        record = self.prepare(payload)
        if not is_present(record.get("status")):
            record["status"] = DEFAULT_STATUS
        return await super().create(record)

    async def migrate(
        self,
        ids: Optional[Sequence[Any]],
        class_name: Optional[str],
        academic_year: Optional[str],
    ) -> Dict[str, Any]:
        """Move a set of students to a new class and academic year.

        Every id must resolve before anything is written; one unknown id
        aborts the whole batch. The (roll, class_name) key is not enforced
        here: students whose roll is already taken in the target class are
        still moved, counted in ``key_conflicts`` and logged as a warning.
        """
        if not is_present(class_name):
            raise InvalidInputError("class_name is required for migration", field="class_name")
        if not is_present(academic_year):
            raise InvalidInputError("academic_year is required for migration", field="academic_year")
        record_ids = parse_record_ids(ids)

        result = await self.guard.bulk_rewrite(
            self.collection,
            record_ids,
            {"class_name": str(class_name).strip(), "academic_year": str(academic_year).strip()},
            natural_key=self.natural_key,
        )
        logger.info(
            f"Migrated {result['modified']} students to class {class_name} ({academic_year})"
        )
        return {
            **result,
            "class_name": str(class_name).strip(),
            "academic_year": str(academic_year).strip(),
        }
