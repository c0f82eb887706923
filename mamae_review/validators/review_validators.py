import math

from pydantic import field_validator

MIN_RATING = 1
MAX_RATING = 5
MIN_COMMENT_LENGTH = 10
MAX_COMMENT_LENGTH = 500


class ReviewContentValidatorMixin:
    @field_validator('rating')
    @classmethod
    def rating_valid(cls, v):
        if v is None:
            return v
        if not math.isfinite(v) or v < MIN_RATING or v > MAX_RATING:
            raise ValueError('Rating must be between 1 and 5')
        return v

    @field_validator('comment')
    @classmethod
    def comment_valid(cls, v):
        if v is None:
            return v
        v = v.strip()
        if len(v) < MIN_COMMENT_LENGTH:
            raise ValueError('Comment must have at least 10 characters')
        if len(v) > MAX_COMMENT_LENGTH:
            raise ValueError('Comment can be up to 500 characters')
        return v


class ReviewAuthorValidatorMixin:
    @field_validator('product_id')
    @classmethod
    def product_id_required(cls, v):
        if not v or not v.strip():
            raise ValueError('Product ID is required for a review')
        return v

    @field_validator('author_id')
    @classmethod
    def author_id_required(cls, v):
        if not v or not v.strip():
            raise ValueError('Author ID is required for a review (anonymous reviews are not allowed)')
        return v

    @field_validator('author_name')
    @classmethod
    def author_name_required(cls, v):
        if not v or not v.strip():
            raise ValueError('Author name is required for a review')
        return v
