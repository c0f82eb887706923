from typing import Optional

from fastapi import APIRouter, Depends, Request, Response, WebSocket, WebSocketDisconnect, status
from pydantic import BaseModel
from slowapi import Limiter
from slowapi.util import get_remote_address

from mamae_review.core.config import config
from mamae_review.core.errors import ErrorResponseModel
from mamae_review.core.logger import logger
from mamae_review.dependencies.services import get_review_service
from mamae_review.models.review import Review, ReviewSortBy, ReviewSubmission, ReviewSummary
from mamae_review.models.user import CurrentUser
from mamae_review.security import get_current_user, get_optional_user
from mamae_review.services.review_service import ReviewService
from mamae_review.services.review_stats import compute_stats

limiter = Limiter(key_func=get_remote_address)

router = APIRouter()


class ReviewStatusResponse(BaseModel):
    product_id: str
    has_reviewed: bool


@router.get("/{product_id}/reviews", response_model=ReviewSummary)
async def list_reviews(
    product_id: str,
    sort_by: ReviewSortBy = ReviewSortBy.RECENT,
    service: ReviewService = Depends(get_review_service),
):
    """
    Reviews of a product with average, total and star distribution.
    """
    return await service.get_review_summary(product_id, sort_by)


@router.get("/{product_id}/reviews/me", response_model=ReviewStatusResponse)
async def my_review_status(
    product_id: str,
    user: Optional[CurrentUser] = Depends(get_optional_user),
    service: ReviewService = Depends(get_review_service),
):
    """
    Whether the caller already reviewed this product. Always false for
    anonymous callers, who cannot review.
    """
    reviewed = user is not None and await service.has_reviewed(product_id, user.user_id)
    return ReviewStatusResponse(product_id=product_id, has_reviewed=reviewed)


@router.post(
    "/{product_id}/reviews",
    response_model=Review,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"model": ErrorResponseModel},
        409: {"model": ErrorResponseModel},
        429: {"description": "Rate limit exceeded"},
    },
)
@limiter.limit(config.review_rate_limit)
async def submit_review(
    request: Request,
    product_id: str,
    review: ReviewSubmission,
    user: CurrentUser = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    """
    Review a product. One review per user per product. Rate limited.
    """
    return await service.submit_review(product_id, review, user)


@router.delete(
    "/{product_id}/reviews/{review_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={403: {"model": ErrorResponseModel}, 404: {"model": ErrorResponseModel}},
)
async def delete_review(
    product_id: str,
    review_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    """
    Delete a review. Only its author can delete it.
    """
    await service.delete_review(product_id, review_id, user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.websocket("/{product_id}/reviews/live")
async def live_reviews(
    websocket: WebSocket,
    product_id: str,
    sort_by: ReviewSortBy = ReviewSortBy.RECENT,
    service: ReviewService = Depends(get_review_service),
):
    """
    Push the product's review summary on connect and after every change.
    """
    await websocket.accept()

    async def push(reviews):
        summary = ReviewSummary(
            product_id=product_id,
            sort_by=sort_by,
            reviews=reviews,
            stats=compute_stats(reviews),
        )
        await websocket.send_json(summary.model_dump(mode="json"))

    subscription = await service.subscribe(product_id, sort_by, push)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.debug(
            "Live review viewer disconnected",
            metadata={"event": "reviews_unsubscribed", "productId": product_id}
        )
    finally:
        subscription.unsubscribe()
