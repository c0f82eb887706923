from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel

from mamae_review.core.errors import ErrorResponse, ErrorResponseModel
from mamae_review.dependencies.services import get_product_service
from mamae_review.models.product import PRODUCT_CATEGORIES, Product, ProductCreate, ProductUpdate
from mamae_review.models.user import CurrentUser
from mamae_review.security import get_current_user
from mamae_review.services.product_service import ALL_CATEGORIES, ProductService

router = APIRouter()


class ProductCreatedResponse(BaseModel):
    id: str


@router.get("", response_model=List[Product])
async def list_products(
    limit: int = Query(10, ge=1, le=100),
    skip: int = Query(0, ge=0),
    service: ProductService = Depends(get_product_service),
):
    """
    Public product listing, newest first.
    """
    return await service.list_products(limit=limit, skip=skip)


@router.get("/top-rated", response_model=List[Product])
async def top_rated_products(
    limit: int = Query(10, ge=1, le=100),
    service: ProductService = Depends(get_product_service),
):
    """
    Public feed of the highest-rated products.
    """
    return await service.get_top_rated_products(limit=limit)


@router.get("/search", response_model=List[Product])
async def search_products(
    q: Optional[str] = Query(None, max_length=200),
    category: Optional[str] = Query(ALL_CATEGORIES),
    limit: int = Query(20, ge=1, le=100),
    service: ProductService = Depends(get_product_service),
):
    """
    Search by free text and category over the rating-ordered feed.
    """
    if category and category != ALL_CATEGORIES and category not in PRODUCT_CATEGORIES:
        raise ErrorResponse("Unknown category", status_code=400, details={"category": category})
    return await service.search_products(q, category, limit=limit)


@router.get("/mine", response_model=List[Product])
async def my_products(
    limit: int = Query(10, ge=1, le=100),
    skip: int = Query(0, ge=0),
    user: CurrentUser = Depends(get_current_user),
    service: ProductService = Depends(get_product_service),
):
    """
    Products created by the authenticated user, newest first.
    """
    return await service.list_user_products(user.user_id, limit=limit, skip=skip)


@router.post(
    "",
    response_model=ProductCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_product(
    product: ProductCreate,
    user: CurrentUser = Depends(get_current_user),
    service: ProductService = Depends(get_product_service),
):
    product_id = await service.create_product(product, user)
    return ProductCreatedResponse(id=product_id)


@router.get(
    "/{product_id}",
    response_model=Product,
    responses={404: {"model": ErrorResponseModel}},
)
async def get_product(product_id: str, service: ProductService = Depends(get_product_service)):
    return await service.get_product(product_id)


@router.get(
    "/{product_id}/related",
    response_model=List[Product],
    responses={404: {"model": ErrorResponseModel}},
)
async def related_products(
    product_id: str,
    limit: int = Query(4, ge=1, le=20),
    service: ProductService = Depends(get_product_service),
):
    """
    Top-rated products from the same category.
    """
    product = await service.get_product(product_id)
    return await service.get_related_products(product.category, product.id, limit=limit)


@router.patch(
    "/{product_id}",
    response_model=Product,
    responses={403: {"model": ErrorResponseModel}, 404: {"model": ErrorResponseModel}},
)
async def update_product(
    product_id: str,
    product: ProductUpdate,
    user: CurrentUser = Depends(get_current_user),
    service: ProductService = Depends(get_product_service),
):
    """
    Update a product. Only its creator can update it.
    """
    return await service.update_product(product_id, product, user)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={403: {"model": ErrorResponseModel}, 404: {"model": ErrorResponseModel}},
)
async def delete_product(
    product_id: str,
    user: CurrentUser = Depends(get_current_user),
    service: ProductService = Depends(get_product_service),
):
    """
    Delete a product. Only its creator can delete it.
    """
    await service.delete_product(product_id, user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
