from mamae_review.models.product import (
    PRODUCT_CATEGORIES,
    Product,
    ProductCategory,
    ProductCreate,
    ProductUpdate,
)
from mamae_review.models.user import CurrentUser
from mamae_review.models.review import (
    Review,
    ReviewCreate,
    ReviewSortBy,
    ReviewStats,
    ReviewSubmission,
    ReviewSummary,
)

__all__ = [
    "CurrentUser",
    "PRODUCT_CATEGORIES",
    "Product",
    "ProductCategory",
    "ProductCreate",
    "ProductUpdate",
    "Review",
    "ReviewCreate",
    "ReviewSortBy",
    "ReviewStats",
    "ReviewSubmission",
    "ReviewSummary",
]
