# school_records/services/marks_service.py
from .base_service import RecordService
from .filter_builder import MARKS_FILTERS


class MarksService(RecordService):
    """One marks record per student (class_name, roll) per exam_type per exam_year."""
    collection_name = "marks"
    natural_key = ("exam_type", "class_name", "roll", "exam_year")
    filters = MARKS_FILTERS
    default_sort = "class_name,roll"
