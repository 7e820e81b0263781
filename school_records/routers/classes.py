from typing import Optional
from fastapi import APIRouter, Depends, Query, Request

from ..core.config import settings
from ..core.database import get_guard, get_store
from ..schemas.pagination import PaginatedResponse
from ..services.class_service import ClassService
from ..services.conflict_guard import ConflictGuard
from ..store.base import RecordStore

router = APIRouter(prefix="/api/v1/classes", tags=["Classes"])

def get_service(
    store: RecordStore = Depends(get_store),
    guard: ConflictGuard = Depends(get_guard),
) -> ClassService:
    return ClassService(store, guard, settings.default_page_size)

@router.get("/", response_model=PaginatedResponse)
async def get_classes(
    request: Request,
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    sort: Optional[str] = Query(None),
    service: ClassService = Depends(get_service),
):
    return await service.get_paginated(
        request.query_params, page=page, limit=limit, sort=sort
    )

@router.post("/", response_model=dict, status_code=201)
async def create_class(class_data: dict, service: ClassService = Depends(get_service)):
    class_record = await service.create(class_data)
    return {"id": class_record["id"], "message": "Class created successfully"}

@router.get("/{class_id}", response_model=dict)
async def get_class(class_id: str, service: ClassService = Depends(get_service)):
    return await service.get(class_id)

@router.put("/{class_id}", response_model=dict)
async def update_class(class_id: str, class_data: dict, service: ClassService = Depends(get_service)):
    class_record = await service.update(class_id, class_data)
    return {"id": class_record["id"], "message": "Class updated successfully", "class": class_record}

@router.delete("/{class_id}")
async def delete_class(class_id: str, service: ClassService = Depends(get_service)):
    await service.delete(class_id)
    return {"message": "Class deleted successfully"}
