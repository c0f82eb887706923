"""
Rating Aggregator
Keeps a product's stored rating equal to the rounded mean of its reviews.
"""

from typing import Optional

from mamae_review.core.logger import logger
from mamae_review.repositories.product_repository import ProductRepository
from mamae_review.repositories.review_repository import ReviewRepository
from mamae_review.services.review_stats import mean_rating


class RatingAggregator:
    """Recomputes and persists product ratings from the review collection"""

    def __init__(self, reviews: ReviewRepository, products: ProductRepository):
        self.reviews = reviews
        self.products = products

    async def recompute(
        self,
        product_id: str,
        reset_if_empty: bool = False,
        correlation_id: Optional[str] = None
    ) -> Optional[float]:
        """
        Recompute the product's rating from its full current review set.

        Args:
            product_id: Product whose rating is recomputed
            reset_if_empty: Write 0 when no reviews remain instead of keeping
                the last value (used after a deletion)
            correlation_id: Correlation ID for tracing

        Returns:
            The rating written, or None when nothing was written.

        The write is a plain overwrite: concurrent recomputations race and
        the last one wins.
        """
        try:
            reviews = await self.reviews.get_reviews(product_id, correlation_id=correlation_id)

            if not reviews and not reset_if_empty:
                logger.debug(
                    f"No reviews for product {product_id}, rating left unchanged",
                    correlation_id=correlation_id,
                    metadata={'event': 'product_rating_skipped', 'productId': product_id}
                )
                return None

            rating = mean_rating([review.rating for review in reviews])
            await self.products.set_rating(product_id, rating, correlation_id=correlation_id)

        except Exception as e:
            logger.error(
                f"Failed to update product rating: {str(e)}",
                correlation_id=correlation_id,
                error=e,
                metadata={'event': 'product_rating_error', 'productId': product_id}
            )
            raise

        logger.info(
            f"Updated rating for product {product_id}",
            correlation_id=correlation_id,
            metadata={
                'event': 'product_rating_updated',
                'productId': product_id,
                'newAverage': rating,
                'totalReviews': len(reviews),
            }
        )
        return rating
