# school_records/core/exceptions.py
"""Typed failures raised by the record services."""
from typing import Any, Dict, Iterable, Optional


class SchoolRecordsException(Exception):
    """Base exception for the records core.

    Every failure carries a ``kind`` so callers can tell invalid input,
    duplicates, missing records and store outages apart without parsing
    the message.
    """
    kind = "error"
    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        payload = {"error": self.kind, "message": self.message, "type": self.__class__.__name__}
        if self.details:
            payload["details"] = self.details
        return payload


class InvalidInputError(SchoolRecordsException):
    """Raised before any store access when request parameters are unusable."""
    kind = "invalid_input"
    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, {"field": field} if field else None)


class DuplicateRecordError(SchoolRecordsException):
    """Raised when a natural key is already held by another record."""
    kind = "duplicate"
    status_code = 409

    def __init__(self, collection: str, key: Dict[str, Any]):
        fields = ", ".join(f"{name}={value}" for name, value in key.items())
        super().__init__(
            f"A record in {collection} with {fields} already exists",
            {"collection": collection, "key": key},
        )


class RecordNotFoundError(SchoolRecordsException):
    """Raised when one or more identifiers do not resolve."""
    kind = "not_found"
    status_code = 404

    def __init__(self, collection: str, ids: Iterable[str]):
        missing = list(ids)
        message = f"{collection} record not found"
        if len(missing) == 1:
            message += f" with id: {missing[0]}"
        elif missing:
            message = f"{len(missing)} {collection} records not found"
        super().__init__(message, {"collection": collection, "missing_ids": missing})


class StoreUnavailableError(SchoolRecordsException):
    """Raised when the record store errors out or does not answer in time."""
    kind = "store_unavailable"
    status_code = 503
