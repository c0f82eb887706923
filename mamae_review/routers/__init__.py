from mamae_review.routers.product_router import router as product_router
from mamae_review.routers.review_router import router as review_router

__all__ = ["product_router", "review_router"]
