# school_records/utils/pagination.py
"""Sort and pagination utilities for consistent list responses."""
from typing import Any, Dict, List, Optional, Tuple, Union
from pydantic import BaseModel
from math import ceil

from ..core.exceptions import InvalidInputError
from ..store.predicates import ASCENDING, DESCENDING

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10

RawParam = Union[str, int, None]


class PageWindow(BaseModel):
    """Validated page/limit pair with the derived offset."""
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class PaginationMeta(BaseModel):
    """Pagination metadata."""
    page: int
    limit: int
    total: int
    pages: int
    has_next: bool
    has_previous: bool


def parse_sort(spec: Optional[str], default: str) -> List[Tuple[str, int]]:
    """Parse ``"class_name,-roll"`` into ``[("class_name", 1), ("roll", -1)]``.

    A blank spec falls back to ``default``. Blank entries between commas are
    skipped; a bare ``-`` is rejected.
    """
    if spec is None or not spec.strip():
        spec = default
    pairs = []
    for part in spec.split(","):
        part = part.strip()
        if not part:
            continue
        direction = ASCENDING
        if part.startswith("-"):
            direction = DESCENDING
            part = part[1:].strip()
        elif part.startswith("+"):
            part = part[1:].strip()
        if not part:
            raise InvalidInputError(f"Invalid sort specification: {spec!r}", field="sort")
        pairs.append((part, direction))
    if not pairs:
        raise InvalidInputError(f"Invalid sort specification: {spec!r}", field="sort")
    return pairs


def _parse_positive(value: RawParam, name: str, default: int) -> int:
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    if isinstance(value, bool):
        raise InvalidInputError(f"{name} must be a positive integer", field=name)
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f"{name} must be a positive integer", field=name)
    if number < 1:
        raise InvalidInputError(f"{name} must be a positive integer", field=name)
    return number


def parse_page_window(page: RawParam = None, limit: RawParam = None, default_limit: int = DEFAULT_LIMIT) -> PageWindow:
    """Parse raw page/limit query values; page < 1 or limit <= 0 is invalid input."""
    return PageWindow(
        page=_parse_positive(page, "page", DEFAULT_PAGE),
        limit=_parse_positive(limit, "limit", default_limit),
    )


class Paginator:
    """Pagination utility class."""

    @staticmethod
    def create_meta(window: PageWindow, total: int) -> PaginationMeta:
        """Create pagination metadata."""
        pages = ceil(total / window.limit) if window.limit > 0 else 0
        return PaginationMeta(
            page=window.page,
            limit=window.limit,
            total=total,
            pages=pages,
            has_next=window.page < pages,
            has_previous=window.page > 1
        )

    @staticmethod
    def create_response(
        items: List[Any],
        window: PageWindow,
        total: int,
        additional_info: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Create standardized paginated response."""
        meta = Paginator.create_meta(window, total)
        response = {"items": items, **meta.model_dump()}
        if additional_info:
            response.update(additional_info)
        return response
