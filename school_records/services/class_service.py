# school_records/services/class_service.py
from .base_service import RecordService
from .filter_builder import CLASS_FILTERS


class ClassService(RecordService):
    collection_name = "classes"
    filters = CLASS_FILTERS
    default_sort = "class_name,section"
