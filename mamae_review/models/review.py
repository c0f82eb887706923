from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from mamae_review.validators.review_validators import (
    ReviewAuthorValidatorMixin,
    ReviewContentValidatorMixin,
)

Rating = Union[int, float]


class ReviewSortBy(str, Enum):
    RECENT = "recent"
    RATING = "rating"

    @property
    def sort_field(self) -> str:
        return "created_at" if self is ReviewSortBy.RECENT else "rating"


class ReviewSubmission(ReviewContentValidatorMixin, BaseModel):
    """Request body for submitting a review"""
    model_config = ConfigDict(allow_inf_nan=False)

    rating: Rating
    comment: str


class ReviewCreate(ReviewContentValidatorMixin, ReviewAuthorValidatorMixin, BaseModel):
    """Validated input for inserting a review"""
    model_config = ConfigDict(allow_inf_nan=False)

    product_id: str
    rating: Rating
    comment: str
    author_id: str
    author_name: str


class Review(BaseModel):
    id: str
    product_id: str
    rating: Rating
    comment: str
    author_id: str
    author_name: str
    created_at: Optional[datetime] = None


class ReviewStats(BaseModel):
    average: float = 0.0
    total: int = 0
    distribution: Dict[int, int] = Field(
        default_factory=lambda: {1: 0, 2: 0, 3: 0, 4: 0, 5: 0}
    )


class ReviewSummary(BaseModel):
    product_id: str
    sort_by: ReviewSortBy
    reviews: List[Review]
    stats: ReviewStats
