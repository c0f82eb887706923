"""
FastAPI dependency injection functions.
"""

from mamae_review.db.database import get_store
from mamae_review.dependencies.services import (
    get_product_repository,
    get_product_service,
    get_rating_aggregator,
    get_review_repository,
    get_review_service,
)
from mamae_review.security import get_current_user, get_optional_user

__all__ = [
    "get_store",
    "get_product_repository",
    "get_product_service",
    "get_rating_aggregator",
    "get_review_repository",
    "get_review_service",
    "get_current_user",
    "get_optional_user",
]
