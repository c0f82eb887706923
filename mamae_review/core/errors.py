"""
Error handling utilities and the application error taxonomy
"""

import math
import traceback
from typing import Optional

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from mamae_review.core.config import config
from mamae_review.core.logger import logger


class ErrorResponse(Exception):
    """Custom exception for application errors"""

    def __init__(self, message: str, status_code: int = 400, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class BackendUnavailableError(ErrorResponse):
    """The document store is not configured or not connected"""

    def __init__(self, message: str = "Document store is not configured", details: dict = None):
        super().__init__(message, status_code=503, details=details)


class NotFoundError(ErrorResponse):
    def __init__(self, message: str = "Resource not found", details: dict = None):
        super().__init__(message, status_code=404, details=details)


class WriteRejectedError(ErrorResponse):
    """The operation was refused by an access policy"""

    def __init__(self, message: str = "Operation not permitted", details: dict = None):
        super().__init__(message, status_code=403, details=details)


class DuplicateDocumentError(ErrorResponse):
    def __init__(self, message: str = "Document already exists", details: dict = None):
        super().__init__(message, status_code=409, details=details)


class DuplicateReviewError(DuplicateDocumentError):
    def __init__(
        self,
        product_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ):
        super().__init__(
            "User has already reviewed this product",
            details={"product_id": product_id, "user_id": user_id},
        )


class ErrorResponseModel(BaseModel):
    """Pydantic model for error responses"""
    error: str
    details: Optional[dict] = None


async def error_response_handler(request: Request, exc: ErrorResponse):
    """Handler for ErrorResponse exceptions"""
    metadata = {
        "event": "error_response",
        "status_code": exc.status_code,
        "url": str(request.url),
        "method": request.method,
        **exc.details,
    }

    if config.environment == "development":
        metadata["traceback"] = traceback.format_exception(exc)

    logger.error(f"Error: {exc.message}", metadata=metadata)

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "details": exc.details},
    )


async def http_exception_handler(request: Request, exc: HTTPException):
    """Handler for FastAPI HTTPException"""
    logger.error(
        f"HTTPException: {exc.detail}",
        metadata={
            "event": "http_exception",
            "status_code": exc.status_code,
            "url": str(request.url),
            "method": request.method,
        },
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handler for request validation errors"""
    logger.warning(
        f"Validation error: {exc.errors()}",
        metadata={"event": "validation_error", "url": str(request.url)},
    )
    return JSONResponse(
        status_code=422,
        content={"error": "Validation error", "details": jsonable_errors(exc)},
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    # ctx may hold the raw exception raised by a validator
    errors = []
    for err in exc.errors():
        err = dict(err)
        if "ctx" in err:
            err["ctx"] = {k: str(v) for k, v in err["ctx"].items()}
        if "input" in err:
            err["input"] = _json_safe(err["input"])
        errors.append(err)
    return errors


def _json_safe(value):
    """Replace NaN and infinities, which JSONResponse refuses to encode"""
    if isinstance(value, float) and not math.isfinite(value):
        return str(value)
    if isinstance(value, dict):
        return {k: _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    return value
