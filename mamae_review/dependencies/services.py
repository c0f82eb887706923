"""
Service layer dependency injection for FastAPI.

Provides repository and service instances bound to the active document store.
"""

from fastapi import Depends

from mamae_review.db.database import get_store
from mamae_review.db.document_store import DocumentStore
from mamae_review.repositories.product_repository import ProductRepository
from mamae_review.repositories.review_repository import ReviewRepository
from mamae_review.services.product_service import ProductService
from mamae_review.services.rating_aggregator import RatingAggregator
from mamae_review.services.review_service import ReviewService


def get_product_repository(store: DocumentStore = Depends(get_store)) -> ProductRepository:
    return ProductRepository(store)


def get_review_repository(store: DocumentStore = Depends(get_store)) -> ReviewRepository:
    return ReviewRepository(store)


def get_rating_aggregator(
    reviews: ReviewRepository = Depends(get_review_repository),
    products: ProductRepository = Depends(get_product_repository),
) -> RatingAggregator:
    return RatingAggregator(reviews, products)


def get_product_service(repo: ProductRepository = Depends(get_product_repository)) -> ProductService:
    """
    FastAPI dependency to get ProductService instance.

    Usage:
        @router.get("/top-rated")
        async def top_rated(service: ProductService = Depends(get_product_service)):
            ...
    """
    return ProductService(repo)


def get_review_service(
    reviews: ReviewRepository = Depends(get_review_repository),
    products: ProductRepository = Depends(get_product_repository),
    aggregator: RatingAggregator = Depends(get_rating_aggregator),
) -> ReviewService:
    return ReviewService(reviews, products, aggregator)
