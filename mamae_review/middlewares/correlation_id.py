from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from mamae_review.core.config import config
from mamae_review.core.logger import logger
from mamae_review.utils.correlation_id import (
    extract_correlation_id_from_headers,
    set_correlation_id,
)


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """
    Middleware to handle correlation IDs for request tracing
    """

    async def dispatch(self, request: Request, call_next):
        correlation_id = extract_correlation_id_from_headers(dict(request.headers))
        set_correlation_id(correlation_id)
        request.state.correlation_id = correlation_id

        logger.debug(
            f"{request.method} {request.url.path} - Processing request",
            correlation_id=correlation_id,
            metadata={"request": {"method": request.method, "path": request.url.path}}
        )

        response = await call_next(request)
        response.headers[config.correlation_id_header] = correlation_id

        return response
