"""Tests for review validators"""
import pytest
from pydantic import ValidationError

from mamae_review.models.review import ReviewCreate, ReviewSubmission


class TestRatingValidation:

    @pytest.mark.parametrize("rating", [1, 3, 5, 2.5])
    def test_valid_ratings(self, rating):
        assert ReviewSubmission(rating=rating, comment="Comentário válido").rating == rating

    @pytest.mark.parametrize("rating", [0, 6, -1, 5.5])
    def test_out_of_range(self, rating):
        with pytest.raises(ValidationError) as exc_info:
            ReviewSubmission(rating=rating, comment="Comentário válido")

        assert "Rating must be between 1 and 5" in str(exc_info.value)


class TestCommentValidation:

    def test_too_short(self):
        with pytest.raises(ValidationError) as exc_info:
            ReviewSubmission(rating=5, comment="curto")

        assert "at least 10 characters" in str(exc_info.value)

    def test_whitespace_does_not_count(self):
        with pytest.raises(ValidationError):
            ReviewSubmission(rating=5, comment="   abc      ")

    def test_exactly_minimum(self):
        assert ReviewSubmission(rating=5, comment="a" * 10).comment == "a" * 10

    def test_too_long(self):
        with pytest.raises(ValidationError) as exc_info:
            ReviewSubmission(rating=5, comment="a" * 501)

        assert "up to 500 characters" in str(exc_info.value)

    def test_maximum(self):
        assert len(ReviewSubmission(rating=5, comment="a" * 500).comment) == 500


class TestNonFiniteRating:

    @pytest.mark.parametrize("rating", [float("nan"), float("inf"), float("-inf")])
    def test_rejected(self, rating):
        with pytest.raises(ValidationError):
            ReviewSubmission(rating=rating, comment="Comentário válido")

    def test_rejected_on_insert_model(self):
        with pytest.raises(ValidationError):
            ReviewCreate(
                product_id="p1",
                rating=float("nan"),
                comment="Comentário válido",
                author_id="u1",
                author_name="Ana",
            )
