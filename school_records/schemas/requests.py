# school_records/schemas/requests.py
"""Request bodies with a fixed shape.

Fields stay optional so missing values reach the services, which report them
as invalid input.
"""
from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class StudentMigration(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    ids: Optional[List[Any]] = Field(None, description="Identifiers of the students to move")
    class_name: Optional[str] = None
    academic_year: Optional[str] = None

    @field_validator('class_name', 'academic_year', mode='before')
    @classmethod
    def numbers_as_text(cls, v):
        # class 10 and year 2027 arrive as JSON numbers from most clients
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class AdmissionStatusUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    status: Optional[str] = None
