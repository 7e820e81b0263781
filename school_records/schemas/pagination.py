from typing import Any, Dict, List
from pydantic import BaseModel

class PaginatedResponse(BaseModel):
    items: List[Dict[str, Any]]
    total: int
    page: int
    limit: int
    pages: int
    has_next: bool
    has_previous: bool
