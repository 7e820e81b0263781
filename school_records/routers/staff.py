from typing import Optional
from fastapi import APIRouter, Depends, Query, Request

from ..core.config import settings
from ..core.database import get_guard, get_store
from ..schemas.pagination import PaginatedResponse
from ..schemas.staff import StaffRole
from ..services.conflict_guard import ConflictGuard
from ..services.staff_service import StaffService
from ..store.base import RecordStore

router = APIRouter(prefix="/api/v1/staff", tags=["Staff"])

def get_service(
    store: RecordStore = Depends(get_store),
    guard: ConflictGuard = Depends(get_guard),
) -> StaffService:
    return StaffService(store, guard, settings.default_page_size)

@router.get("/", response_model=PaginatedResponse)
async def get_staff(
    request: Request,
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    sort: Optional[str] = Query(None),
    service: StaffService = Depends(get_service),
):
    """All staff; filter with role=teacher or role=support_staff"""
    return await service.get_paginated(
        request.query_params, page=page, limit=limit, sort=sort
    )

@router.get("/teachers", response_model=PaginatedResponse)
async def get_teachers(
    request: Request,
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    sort: Optional[str] = Query(None),
    service: StaffService = Depends(get_service),
):
    return await service.get_by_role(
        StaffRole.TEACHER, request.query_params, page=page, limit=limit, sort=sort
    )

@router.get("/support-staff", response_model=PaginatedResponse)
async def get_support_staff(
    request: Request,
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    sort: Optional[str] = Query(None),
    service: StaffService = Depends(get_service),
):
    return await service.get_by_role(
        StaffRole.SUPPORT_STAFF, request.query_params, page=page, limit=limit, sort=sort
    )

@router.post("/", response_model=dict, status_code=201)
async def create_staff(staff_data: dict, service: StaffService = Depends(get_service)):
    """Create a staff record; index_number must be unused"""
    member = await service.create(staff_data)
    return {"id": member["id"], "role": member["role"], "message": "Staff created successfully"}

@router.get("/{staff_id}", response_model=dict)
async def get_staff_member(staff_id: str, service: StaffService = Depends(get_service)):
    return await service.get(staff_id)

@router.put("/{staff_id}", response_model=dict)
async def update_staff(staff_id: str, staff_data: dict, service: StaffService = Depends(get_service)):
    member = await service.update(staff_id, staff_data)
    return {"id": member["id"], "message": "Staff updated successfully", "staff": member}

@router.delete("/{staff_id}")
async def delete_staff(staff_id: str, service: StaffService = Depends(get_service)):
    await service.delete(staff_id)
    return {"message": "Staff deleted successfully"}
