"""Tests for the rating aggregator"""
from unittest.mock import AsyncMock, patch

import pytest

from mamae_review.repositories.product_repository import ProductRepository
from mamae_review.repositories.review_repository import ReviewRepository
from mamae_review.services.rating_aggregator import RatingAggregator


class TestRecompute:
    """Test RatingAggregator.recompute"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("ratings,expected", [
        ([5, 4, 3], 4.0),
        ([5, 5, 4, 4, 4], 4.4),
        ([5, 4, 4, 4], 4.3),
        ([2.5], 2.5),
        ([1, 2, 2], 1.7),
    ])
    async def test_rating_is_rounded_mean(
        self, aggregator, review_repository, product_repository, product_id, make_review, ratings, expected
    ):
        for i, rating in enumerate(ratings):
            await review_repository.insert_review(make_review(product_id, rating, author_id=f"u{i}"))

        result = await aggregator.recompute(product_id)

        product = await product_repository.get_product(product_id)
        assert result == expected
        assert product.rating == expected

    @pytest.mark.asyncio
    async def test_no_reviews_leaves_rating_unchanged(self, aggregator, product_repository, product_id):
        await product_repository.set_rating(product_id, 3.7)

        result = await aggregator.recompute(product_id)

        product = await product_repository.get_product(product_id)
        assert result is None
        assert product.rating == 3.7

    @pytest.mark.asyncio
    async def test_no_reviews_does_not_write(self):
        reviews = AsyncMock(spec=ReviewRepository)
        reviews.get_reviews.return_value = []
        products = AsyncMock(spec=ProductRepository)

        await RatingAggregator(reviews, products).recompute("p1")

        products.set_rating.assert_not_called()

    @pytest.mark.asyncio
    async def test_reset_if_empty_writes_zero(self, aggregator, product_repository, product_id):
        await product_repository.set_rating(product_id, 3.7)

        result = await aggregator.recompute(product_id, reset_if_empty=True)

        product = await product_repository.get_product(product_id)
        assert result == 0.0
        assert product.rating == 0.0

    @pytest.mark.asyncio
    async def test_recompute_is_repeatable(self, aggregator, review_repository, product_repository, product_id, make_review):
        await review_repository.insert_review(make_review(product_id, 4, author_id="a"))
        await review_repository.insert_review(make_review(product_id, 3, author_id="b"))

        first = await aggregator.recompute(product_id)
        second = await aggregator.recompute(product_id)

        assert first == second == 3.5

    @pytest.mark.asyncio
    async def test_store_failure_propagates(self):
        reviews = AsyncMock(spec=ReviewRepository)
        reviews.get_reviews.side_effect = RuntimeError("connection reset")
        products = AsyncMock(spec=ProductRepository)

        with patch('mamae_review.services.rating_aggregator.logger') as mock_logger:
            with pytest.raises(RuntimeError, match="connection reset"):
                await RatingAggregator(reviews, products).recompute("p1")

        mock_logger.error.assert_called_once()
        products.set_rating.assert_not_called()

    @pytest.mark.asyncio
    async def test_write_failure_propagates(self, make_review):
        reviews = AsyncMock(spec=ReviewRepository)
        reviews.get_reviews.return_value = []
        products = AsyncMock(spec=ProductRepository)
        products.set_rating.side_effect = RuntimeError("write failed")

        with pytest.raises(RuntimeError):
            await RatingAggregator(reviews, products).recompute("p1", reset_if_empty=True)
