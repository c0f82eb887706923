from mamae_review.repositories.base_repository import BaseRepository
from mamae_review.repositories.product_repository import ProductRepository
from mamae_review.repositories.review_repository import ReviewRepository

__all__ = ["BaseRepository", "ProductRepository", "ReviewRepository"]
