# school_records/services/merge.py
"""Merge-update of stored records."""
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from ..store.base import ID_FIELD

CREATED_AT = "created_at"
UPDATED_AT = "updated_at"


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def safe_merge(
    existing: Mapping[str, Any],
    update: Mapping[str, Any],
    now: Optional[str] = None,
) -> Dict[str, Any]:
    """Overlay ``update`` on ``existing`` and stamp ``updated_at``.

    Fields missing from the update survive unchanged. The result is a write
    payload: it never carries the identifier, whatever either side holds.
    """
    merged = {key: value for key, value in existing.items() if key != ID_FIELD}
    merged.update({key: value for key, value in update.items() if key != ID_FIELD})
    merged[UPDATED_AT] = now or utc_now()
    return merged
