"""
Maps every error raised while serving a request to one JSON shape:
{"error": {"message": ...}}
"""

import logging
from typing import Any

from fastapi import Request, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"error": {"message": message, **extra}}
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler for application, HTTP and validation errors."""
    path = request.url.path

    if isinstance(exc, HTTPException):
        # Application errors subclass HTTPException
        if exc.status_code >= 500:
            logger.error(f"{path}: {exc.detail}")
        else:
            logger.warning(f"{path}: {exc.detail}")
        return error_response(exc.status_code, str(exc.detail))

    if isinstance(exc, RequestValidationError):
        logger.warning(f"{path}: validation failed: {exc.errors()}")
        return error_response(422, "Validation failed", details=jsonable_encoder(exc.errors()))

    if isinstance(exc, SQLAlchemyError):
        logger.error(f"{path}: database error: {str(exc)}")
        return error_response(500, "Database operation failed")

    logger.error(f"{path}: unexpected error: {str(exc)}", exc_info=True)
    return error_response(500, "An unexpected error occurred")
