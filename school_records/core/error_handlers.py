from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import logging

from .exceptions import InvalidInputError, SchoolRecordsException, StoreUnavailableError

logger = logging.getLogger(__name__)

async def records_exception_handler(request: Request, exc: SchoolRecordsException):
    """Handle typed record failures"""
    if isinstance(exc, StoreUnavailableError):
        logger.error(f"Store error: {exc.message} - Path: {request.url.path}")
    else:
        logger.info(f"{exc.kind}: {exc.message} - Path: {request.url.path}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Render unparseable request bodies and parameters as invalid input"""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    if location:
        message = f"{location}: {message}"
    logger.info(f"invalid_input: {message} - Path: {request.url.path}")
    error = InvalidInputError(message, field=location or None)
    return JSONResponse(status_code=error.status_code, content=error.to_dict())

async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions"""
    logger.error(f"Unexpected error: {str(exc)} - Path: {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"error": "internal", "message": "Internal server error", "type": "InternalError"}
    )
