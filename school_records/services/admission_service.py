# school_records/services/admission_service.py
from typing import Any, Dict

from ..core.exceptions import InvalidInputError
from .base_service import RecordService
from .filter_builder import ADMISSION_FILTERS, is_present


class AdmissionService(RecordService):
    collection_name = "admissions"
    filters = ADMISSION_FILTERS
    default_sort = "-created_at"

    async def update_status(self, record_id: Any, status: Any) -> Dict[str, Any]:
        """Patch only the application status; everything else is kept."""
        if not is_present(status):
            raise InvalidInputError("status is required", field="status")
        return await self.update(record_id, {"status": str(status).strip()})
