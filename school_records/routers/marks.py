from typing import Optional
from fastapi import APIRouter, Depends, Query, Request

from ..core.config import settings
from ..core.database import get_guard, get_store
from ..schemas.pagination import PaginatedResponse
from ..services.conflict_guard import ConflictGuard
from ..services.marks_service import MarksService
from ..store.base import RecordStore

router = APIRouter(prefix="/api/v1/marks", tags=["Marks"])

def get_service(
    store: RecordStore = Depends(get_store),
    guard: ConflictGuard = Depends(get_guard),
) -> MarksService:
    return MarksService(store, guard, settings.default_page_size)

@router.get("/", response_model=PaginatedResponse)
async def get_marks(
    request: Request,
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    sort: Optional[str] = Query(None),
    service: MarksService = Depends(get_service),
):
    """Paginated marks filtered by exam_type, class_name, roll, exam_year, section"""
    return await service.get_paginated(
        request.query_params, page=page, limit=limit, sort=sort
    )

@router.post("/", response_model=dict, status_code=201)
async def create_marks(marks_data: dict, service: MarksService = Depends(get_service)):
    """Record marks; one entry per exam_type, class_name, roll and exam_year"""
    marks = await service.create(marks_data)
    return {"id": marks["id"], "message": "Marks added successfully"}

@router.get("/{marks_id}", response_model=dict)
async def get_marks_entry(marks_id: str, service: MarksService = Depends(get_service)):
    return await service.get(marks_id)

@router.put("/{marks_id}", response_model=dict)
async def update_marks(marks_id: str, marks_data: dict, service: MarksService = Depends(get_service)):
    marks = await service.update(marks_id, marks_data)
    return {"id": marks["id"], "message": "Marks updated successfully", "marks": marks}

@router.delete("/{marks_id}")
async def delete_marks(marks_id: str, service: MarksService = Depends(get_service)):
    await service.delete(marks_id)
    return {"message": "Marks deleted successfully"}
