from fastapi import APIRouter, Depends

from ..core.database import get_store
from ..services.report_service import REPORTS, ReportService
from ..store.base import RecordStore

router = APIRouter(prefix="/api/v1/reports", tags=["Reports"])

def get_service(store: RecordStore = Depends(get_store)) -> ReportService:
    return ReportService(store)

@router.get("/")
async def list_reports():
    return {"reports": ["overview", *sorted(REPORTS)]}

@router.get("/overview", response_model=dict)
async def get_overview(service: ReportService = Depends(get_service)):
    """Teacher, support staff and student headcounts with gender and religion splits"""
    return await service.overview()

@router.get("/{name}", response_model=dict)
async def get_report(name: str, service: ReportService = Depends(get_service)):
    """Grouped counts, e.g. teacher-subjects, class-sections, class-religions"""
    return await service.report(name)
