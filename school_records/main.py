from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from typing import Optional
import logging
import time

from .core.config import settings
from .core.database import create_store
from .core.error_handlers import (
    general_exception_handler,
    records_exception_handler,
    validation_exception_handler,
)
from .core.exceptions import SchoolRecordsException
from .core.logging import setup_logging
from .services.conflict_guard import ConflictGuard
from .store.base import RecordStore

from .routers import health, students, admissions, staff, marks, classes, reports

setup_logging()
logger = logging.getLogger(__name__)

def create_app(store: Optional[RecordStore] = None) -> FastAPI:
    """Build the application; ``store`` overrides the configured SQL store"""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting School Records API")
        app.state.store = store if store is not None else create_store(settings)
        app.state.guard = ConflictGuard(settings.key_lock_shards)
        await app.state.store.open()
        logger.info("Record store opened")

        yield

        logger.info("Shutting down School Records API")
        await app.state.store.close()
        logger.info("Shutdown complete")

    app = FastAPI(
        title="School Records API",
        description="Students, admissions, staff, marks and classes with filtered listings and statistics",
        version=settings.app_version,
        lifespan=lifespan
    )

    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)
        logger.info(f"{request.method} {request.url.path} - {process_time:.3f}s")
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=3600,
    )

    app.add_exception_handler(SchoolRecordsException, records_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(health.router)
    app.include_router(students.router)
    app.include_router(admissions.router)
    app.include_router(staff.router)
    app.include_router(marks.router)
    app.include_router(classes.router)
    app.include_router(reports.router)

    @app.get("/")
    async def root():
        return {
            "message": "School Records API is running",
            "version": settings.app_version,
            "status": "active"
        }

    return app

app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
