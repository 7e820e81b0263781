from typing import Optional
from fastapi import APIRouter, Depends, Query, Request

from ..core.config import settings
from ..core.database import get_guard, get_store
from ..schemas.pagination import PaginatedResponse
from ..schemas.requests import AdmissionStatusUpdate
from ..services.admission_service import AdmissionService
from ..services.conflict_guard import ConflictGuard
from ..store.base import RecordStore

router = APIRouter(prefix="/api/v1/admissions", tags=["Admissions"])

def get_service(
    store: RecordStore = Depends(get_store),
    guard: ConflictGuard = Depends(get_guard),
) -> AdmissionService:
    return AdmissionService(store, guard, settings.default_page_size)

@router.get("/", response_model=PaginatedResponse)
async def get_admissions(
    request: Request,
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    sort: Optional[str] = Query(None),
    service: AdmissionService = Depends(get_service),
):
    """Paginated admission applications, newest first by default"""
    return await service.get_paginated(
        request.query_params, page=page, limit=limit, sort=sort
    )

@router.post("/", response_model=dict, status_code=201)
async def create_admission(admission_data: dict, service: AdmissionService = Depends(get_service)):
    admission = await service.create(admission_data)
    return {"id": admission["id"], "message": "Admission submitted successfully"}

@router.get("/{admission_id}", response_model=dict)
async def get_admission(admission_id: str, service: AdmissionService = Depends(get_service)):
    return await service.get(admission_id)

@router.patch("/{admission_id}/status", response_model=dict)
async def update_admission_status(
    admission_id: str,
    status_update: AdmissionStatusUpdate,
    service: AdmissionService = Depends(get_service),
):
    admission = await service.update_status(admission_id, status_update.status)
    return {"id": admission["id"], "status": admission["status"]}

@router.delete("/{admission_id}")
async def delete_admission(admission_id: str, service: AdmissionService = Depends(get_service)):
    await service.delete(admission_id)
    return {"message": "Admission deleted successfully"}
