"""
Review repository: data access for the reviews collection.
"""

from typing import Callable, List, Optional, Union, Awaitable

from mamae_review.core.config import config
from mamae_review.core.errors import DuplicateDocumentError, DuplicateReviewError
from mamae_review.db.document_store import DESCENDING, DocumentStore, Subscription, deliver
from mamae_review.models.review import Review, ReviewCreate, ReviewSortBy
from mamae_review.repositories.base_repository import BaseRepository

ReviewsCallback = Callable[[List[Review]], Union[None, Awaitable[None]]]


class ReviewRepository(BaseRepository):
    """Repository for review documents"""

    def __init__(self, store: DocumentStore, collection_name: str = config.reviews_collection):
        super().__init__(store, collection_name)

    async def has_reviewed(
        self,
        product_id: str,
        user_id: str,
        correlation_id: Optional[str] = None
    ) -> bool:
        """True iff a review by user_id exists for product_id"""
        return await self.exists(
            [("product_id", "==", product_id), ("author_id", "==", user_id)],
            correlation_id=correlation_id,
        )

    async def insert_review(self, review: ReviewCreate, correlation_id: Optional[str] = None) -> str:
        """Insert a review; created_at is assigned by the store"""
        try:
            return await self.create(review.model_dump(), correlation_id=correlation_id)
        except DuplicateDocumentError as e:
            raise DuplicateReviewError(review.product_id, review.author_id) from e

    async def get_reviews(
        self,
        product_id: str,
        sort_by: ReviewSortBy = ReviewSortBy.RECENT,
        correlation_id: Optional[str] = None
    ) -> List[Review]:
        """Reviews of a product, newest first or highest rated first"""
        documents = await self.find_many(
            [("product_id", "==", product_id)],
            order_by=(sort_by.sort_field, DESCENDING),
            correlation_id=correlation_id,
        )
        return [Review(**doc) for doc in documents]

    async def get_review(self, review_id: str, correlation_id: Optional[str] = None) -> Optional[Review]:
        document = await self.find_by_id(review_id, correlation_id=correlation_id)
        return Review(**document) if document else None

    async def subscribe_reviews(
        self,
        product_id: str,
        sort_by: ReviewSortBy,
        on_change: ReviewsCallback,
    ) -> Subscription:
        """Live query equivalent to get_reviews"""

        async def _on_snapshot(documents):
            await deliver(on_change, [Review(**doc) for doc in documents])

        return await self.subscribe(
            [("product_id", "==", product_id)],
            (sort_by.sort_field, DESCENDING),
            _on_snapshot,
        )
