"""Health check endpoints."""
from fastapi import APIRouter, Depends
import logging

from ..core.config import settings
from ..core.database import get_store
from ..store.base import RecordStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/health", tags=["Health"])

@router.get("/")
async def health_check():
    """Basic health check"""
    return {
        "status": "healthy",
        "service": "School Records API",
        "version": settings.app_version,
    }

@router.get("/store")
async def store_health(store: RecordStore = Depends(get_store)):
    """Record store reachability"""
    reachable = await store.ping()
    if not reachable:
        logger.error("Record store health check failed")
    return {
        "status": "healthy" if reachable else "unhealthy",
        "store": type(store).__name__,
    }
