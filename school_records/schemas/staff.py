# school_records/schemas/staff.py
"""Teacher / support-staff classification.

Staff records carry no role tag. A record whose ``subject`` is the "N/A"
sentinel is support staff; any other subject makes it a teacher. The role is
computed here once, on read, and never written back.
"""
import enum
from typing import Any, Mapping

from ..core.exceptions import InvalidInputError
from ..store.predicates import Eq, Ne, Predicate

NON_TEACHING_SUBJECT = "N/A"
ROLE_FIELD = "role"


class StaffRole(str, enum.Enum):
    TEACHER = "teacher"
    SUPPORT_STAFF = "support_staff"


def classify(record: Mapping[str, Any]) -> StaffRole:
    if record.get("subject") == NON_TEACHING_SUBJECT:
        return StaffRole.SUPPORT_STAFF
    return StaffRole.TEACHER


def role_predicate(role: Any) -> Predicate:
    try:
        role = StaffRole(role)
    except ValueError:
        choices = ", ".join(member.value for member in StaffRole)
        raise InvalidInputError(f"role must be one of: {choices}", field=ROLE_FIELD)
    if role is StaffRole.SUPPORT_STAFF:
        return Eq("subject", NON_TEACHING_SUBJECT)
    return Ne("subject", NON_TEACHING_SUBJECT)
