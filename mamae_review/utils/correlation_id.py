"""
Correlation ID utilities for request tracing
"""

import uuid
from contextvars import ContextVar
from typing import Mapping, Optional

from mamae_review.core.config import config

# Set per request by CorrelationIdMiddleware, read by the logger
correlation_id_context: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


def create_correlation_id() -> str:
    return str(uuid.uuid4())


def get_correlation_id() -> str:
    """Correlation ID of the current context, created on first use"""
    correlation_id = correlation_id_context.get()
    if correlation_id is None:
        correlation_id = create_correlation_id()
        correlation_id_context.set(correlation_id)
    return correlation_id


def set_correlation_id(correlation_id: str) -> None:
    correlation_id_context.set(correlation_id)


def extract_correlation_id_from_headers(headers: Mapping[str, str], header_name: str = None) -> str:
    """
    Read the correlation ID header (case-insensitive), or mint a new ID when
    the caller sent none.
    """
    wanted = (header_name or config.correlation_id_header).lower()
    for name, value in headers.items():
        if name.lower() == wanted and value.strip():
            return value.strip()
    return create_correlation_id()
