from typing import Optional
from fastapi import APIRouter, Depends, Query, Request

from ..core.config import settings
from ..core.database import get_guard, get_store
from ..schemas.pagination import PaginatedResponse
from ..schemas.requests import StudentMigration
from ..services.conflict_guard import ConflictGuard
from ..services.student_service import StudentService
from ..store.base import RecordStore

router = APIRouter(prefix="/api/v1/students", tags=["Students"])

def get_service(
    store: RecordStore = Depends(get_store),
    guard: ConflictGuard = Depends(get_guard),
) -> StudentService:
    return StudentService(store, guard, settings.default_page_size)

@router.get("/", response_model=PaginatedResponse)
async def get_students(
    request: Request,
    page: Optional[str] = Query(None, description="Page number (starts from 1)"),
    limit: Optional[str] = Query(None, description="Items per page"),
    sort: Optional[str] = Query(None, description="e.g. class_name,-roll"),
    service: StudentService = Depends(get_service),
):
    """Paginated students filtered by class_name, section, roll, status, gender,
    religion, blood_group, academic_year and free-text search"""
    return await service.get_paginated(
        request.query_params, page=page, limit=limit, sort=sort
    )

@router.post("/", response_model=dict, status_code=201)
async def create_student(student_data: dict, service: StudentService = Depends(get_service)):
    """Create new student; (roll, class_name) must be unused"""
    student = await service.create(student_data)
    return {"id": student["id"], "message": "Student created successfully"}

@router.post("/migrate", response_model=dict)
async def migrate_students(migration: StudentMigration, service: StudentService = Depends(get_service)):
    """Move students to a new class and academic year, all or nothing"""
    return await service.migrate(migration.ids, migration.class_name, migration.academic_year)

@router.get("/{student_id}", response_model=dict)
async def get_student(student_id: str, service: StudentService = Depends(get_service)):
    return await service.get(student_id)

@router.put("/{student_id}", response_model=dict)
async def update_student(student_id: str, student_data: dict, service: StudentService = Depends(get_service)):
    """Merge-update student information"""
    student = await service.update(student_id, student_data)
    return {"id": student["id"], "message": "Student updated successfully", "student": student}

@router.delete("/{student_id}")
async def delete_student(student_id: str, service: StudentService = Depends(get_service)):
    await service.delete(student_id)
    return {"message": "Student deleted successfully"}
