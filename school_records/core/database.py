# school_records/core/database.py
"""Database engine construction and record-store dependencies."""
from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
import logging

from .config import Settings
from ..store.base import RecordStore
from ..store.sql import SqlRecordStore

logger = logging.getLogger(__name__)

def create_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine; pool tuning only applies to PostgreSQL"""
    url = settings.database_url
    if url.startswith("postgresql"):
        return create_async_engine(
            url,
            pool_size=15,
            max_overflow=25,
            pool_timeout=60,
            pool_recycle=1800,
            pool_pre_ping=True,
            echo=(settings.environment == 'development'),
            connect_args={
                "command_timeout": settings.store_timeout_seconds,
                "server_settings": {
                    "jit": "off",
                    "application_name": "school_records_api",
                    "idle_in_transaction_session_timeout": "60s",
                    "lock_timeout": "30s",
                }
            }
        )
    return create_async_engine(url, echo=False)

def create_store(settings: Settings) -> RecordStore:
    """Build the SQL record store described by settings"""
    engine = create_engine(settings)
    logger.info(f"Record store configured for {engine.url.get_backend_name()}")
    return SqlRecordStore(
        engine,
        timeout=settings.store_timeout_seconds,
        create_tables=settings.auto_create_tables,
    )

def get_store(request: Request) -> RecordStore:
    """FastAPI dependency returning the store opened by the application lifespan"""
    return request.app.state.store

def get_guard(request: Request):
    """FastAPI dependency returning the process-wide conflict guard"""
    return request.app.state.guard
