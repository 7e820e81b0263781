from . import health, students, admissions, staff, marks, classes, reports

__all__ = [
    "health",
    "students",
    "admissions",
    "staff",
    "marks",
    "classes",
    "reports",
]
