"""
Review service: the review store adapter plus the submission rules that
sit in front of it.
"""

from typing import List, Optional

from mamae_review.core.errors import DuplicateReviewError, NotFoundError, WriteRejectedError
from mamae_review.core.logger import logger
from mamae_review.db.document_store import Subscription
from mamae_review.models.review import (
    Review,
    ReviewCreate,
    ReviewSortBy,
    ReviewSubmission,
    ReviewSummary,
)
from mamae_review.models.user import CurrentUser
from mamae_review.repositories.product_repository import ProductRepository
from mamae_review.repositories.review_repository import ReviewRepository, ReviewsCallback
from mamae_review.services.rating_aggregator import RatingAggregator
from mamae_review.services.review_stats import compute_stats


class ReviewService:
    """Service layer for review business logic"""

    def __init__(
        self,
        reviews: ReviewRepository,
        products: ProductRepository,
        aggregator: Optional[RatingAggregator] = None,
    ):
        self.reviews = reviews
        self.products = products
        self.aggregator = aggregator or RatingAggregator(reviews, products)

    async def has_reviewed(self, product_id: str, user_id: str, correlation_id: Optional[str] = None) -> bool:
        """Whether user_id already reviewed product_id. Not atomic with a later insert."""
        return await self.reviews.has_reviewed(product_id, user_id, correlation_id)

    async def create_review(self, review: ReviewCreate, correlation_id: Optional[str] = None) -> str:
        """
        Insert a review and recompute the product rating before returning.

        Does not check for an existing review by the same author; callers
        go through has_reviewed first (see submit_review).

        If the rating cannot be recomputed the inserted review is removed
        again, so a failed call leaves no review behind.
        """
        review_id = await self.reviews.insert_review(review, correlation_id)

        try:
            await self.aggregator.recompute(review.product_id, correlation_id=correlation_id)
        except Exception:
            await self._discard_review(review_id, review.product_id, correlation_id)
            raise

        logger.info(
            f"Added review for product {review.product_id} by user {review.author_id}",
            correlation_id=correlation_id,
            user_id=review.author_id,
            metadata={
                "event": "review_created",
                "productId": review.product_id,
                "reviewId": review_id,
                "rating": review.rating,
            },
        )
        return review_id

    async def _discard_review(self, review_id: str, product_id: str, correlation_id: Optional[str]) -> None:
        try:
            await self.reviews.delete(review_id, correlation_id)
        except Exception as e:
            logger.error(
                "Could not remove review after failed rating update",
                correlation_id=correlation_id,
                error=e,
                metadata={"event": "review_rollback_failed", "productId": product_id, "reviewId": review_id},
            )

    async def get_reviews(
        self,
        product_id: str,
        sort_by: ReviewSortBy = ReviewSortBy.RECENT,
        correlation_id: Optional[str] = None,
    ) -> List[Review]:
        return await self.reviews.get_reviews(product_id, sort_by, correlation_id)

    async def subscribe(
        self,
        product_id: str,
        sort_by: ReviewSortBy,
        on_change: ReviewsCallback,
    ) -> Subscription:
        """
        Live review list for a product.

        on_change receives the full list on initial load and after every
        change. The caller owns the returned handle and must unsubscribe.
        """
        subscription = await self.reviews.subscribe_reviews(product_id, sort_by, on_change)
        logger.debug(
            f"Subscribed to reviews of product {product_id}",
            metadata={"event": "reviews_subscribed", "productId": product_id, "sortBy": sort_by.value},
        )
        return subscription

    async def get_review_summary(
        self,
        product_id: str,
        sort_by: ReviewSortBy = ReviewSortBy.RECENT,
        correlation_id: Optional[str] = None,
    ) -> ReviewSummary:
        reviews = await self.get_reviews(product_id, sort_by, correlation_id)
        return ReviewSummary(
            product_id=product_id,
            sort_by=sort_by,
            reviews=reviews,
            stats=compute_stats(reviews),
        )

    async def submit_review(
        self,
        product_id: str,
        submission: ReviewSubmission,
        user: CurrentUser,
        correlation_id: Optional[str] = None,
    ) -> Review:
        """
        Submit a review on behalf of user.

        Raises:
            NotFoundError: If the product does not exist
            DuplicateReviewError: If the user already reviewed the product
        """
        if await self.products.get_product(product_id, correlation_id) is None:
            raise NotFoundError("Product not found", details={"product_id": product_id})

        if await self.has_reviewed(product_id, user.user_id, correlation_id):
            logger.warning(
                "Duplicate review rejected",
                correlation_id=correlation_id,
                user_id=user.user_id,
                metadata={"event": "review_duplicate", "productId": product_id},
            )
            raise DuplicateReviewError(product_id, user.user_id)

        review = ReviewCreate(
            product_id=product_id,
            rating=submission.rating,
            comment=submission.comment,
            author_id=user.user_id,
            author_name=user.name,
        )
        review_id = await self.create_review(review, correlation_id)
        return await self.reviews.get_review(review_id, correlation_id)

    async def delete_review(
        self,
        product_id: str,
        review_id: str,
        user: CurrentUser,
        correlation_id: Optional[str] = None,
    ) -> None:
        """
        Delete a review. Only its author may delete it.

        The product rating is recomputed afterwards; removing the last
        review resets it to 0.
        """
        review = await self.reviews.get_review(review_id, correlation_id)
        if review is None or review.product_id != product_id:
            raise NotFoundError("Review not found", details={"product_id": product_id, "review_id": review_id})

        if review.author_id != user.user_id:
            raise WriteRejectedError(
                "You can only delete your own review.",
                details={"review_id": review_id},
            )

        await self.reviews.delete(review_id, correlation_id)
        await self.aggregator.recompute(product_id, reset_if_empty=True, correlation_id=correlation_id)

        logger.info(
            f"Deleted review for product {product_id} by user {user.user_id}",
            correlation_id=correlation_id,
            user_id=user.user_id,
            metadata={"event": "review_deleted", "productId": product_id, "reviewId": review_id},
        )
