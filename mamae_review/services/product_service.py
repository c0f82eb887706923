"""
Product service containing catalogue business logic
"""

from typing import List, Optional

from mamae_review.core.errors import ErrorResponse, NotFoundError, WriteRejectedError
from mamae_review.core.logger import logger
from mamae_review.models.product import Product, ProductCreate, ProductUpdate
from mamae_review.models.user import CurrentUser
from mamae_review.repositories.product_repository import ProductRepository

ALL_CATEGORIES = "all"
SEARCH_FIELDS = ("name", "store_name", "category", "description")


def matches_search_term(product: Product, search_term: str) -> bool:
    """Case-insensitive substring match over the searchable text fields"""
    needle = search_term.strip().lower()
    return any(needle in (getattr(product, field) or "").lower() for field in SEARCH_FIELDS)


class ProductService:
    """Service layer for product business logic"""

    def __init__(self, repository: ProductRepository):
        self.repository = repository

    async def create_product(
        self,
        product_data: ProductCreate,
        user: CurrentUser,
        correlation_id: Optional[str] = None,
    ) -> str:
        """Create a product owned by user; its rating starts at 0"""
        document = product_data.model_dump(mode="json")
        document["rating"] = 0.0
        document["created_by"] = user.user_id

        product_id = await self.repository.create(document, correlation_id)

        logger.info(
            f"Created product {product_id}",
            correlation_id=correlation_id,
            user_id=user.user_id,
            metadata={"event": "product_created", "productId": product_id, "category": document["category"]},
        )
        return product_id

    async def get_product(self, product_id: str, correlation_id: Optional[str] = None) -> Product:
        """Get product by ID"""
        product = await self.repository.get_product(product_id, correlation_id)
        if not product:
            raise NotFoundError("Product not found", details={"product_id": product_id})
        return product

    async def _get_owned_product(self, product_id: str, user: CurrentUser, correlation_id: Optional[str]) -> Product:
        product = await self.get_product(product_id, correlation_id)
        if product.created_by != user.user_id:
            logger.warning(
                "Product modification denied",
                correlation_id=correlation_id,
                user_id=user.user_id,
                metadata={"event": "product_permission_denied", "productId": product_id},
            )
            raise WriteRejectedError(
                "You can only modify your own products.",
                details={"product_id": product_id},
            )
        return product

    async def update_product(
        self,
        product_id: str,
        product_data: ProductUpdate,
        user: CurrentUser,
        correlation_id: Optional[str] = None,
    ) -> Product:
        """Update owner-editable fields of a product"""
        product = await self._get_owned_product(product_id, user, correlation_id)

        changes = product_data.model_dump(mode="json", exclude_unset=True)
        if not changes:
            raise ErrorResponse("No fields to update", status_code=400)

        await self.repository.update(product_id, changes, correlation_id)

        logger.info(
            f"Updated product {product_id}",
            correlation_id=correlation_id,
            user_id=user.user_id,
            metadata={"event": "product_updated", "productId": product_id, "fields": sorted(changes)},
        )
        return product.model_copy(update=changes)

    async def delete_product(
        self,
        product_id: str,
        user: CurrentUser,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Delete a product. Its reviews are left in place."""
        await self._get_owned_product(product_id, user, correlation_id)
        await self.repository.delete(product_id, correlation_id)

        logger.info(
            f"Deleted product {product_id}",
            correlation_id=correlation_id,
            user_id=user.user_id,
            metadata={"event": "product_deleted", "productId": product_id},
        )

    async def list_user_products(
        self,
        user_id: str,
        limit: int = 10,
        skip: int = 0,
        correlation_id: Optional[str] = None,
    ) -> List[Product]:
        return await self.repository.list_recent(user_id, limit=limit, skip=skip, correlation_id=correlation_id)

    async def list_products(self, limit: int = 10, skip: int = 0, correlation_id: Optional[str] = None) -> List[Product]:
        return await self.repository.list_recent(limit=limit, skip=skip, correlation_id=correlation_id)

    async def get_top_rated_products(self, limit: int = 10, correlation_id: Optional[str] = None) -> List[Product]:
        return await self.repository.list_by_rating(limit=limit, correlation_id=correlation_id)

    async def search_products(
        self,
        search_term: Optional[str] = None,
        category: Optional[str] = None,
        limit: int = 20,
        correlation_id: Optional[str] = None,
    ) -> List[Product]:
        """
        Search the rating-ordered feed.

        The category filter runs in the store; the text filter runs over the
        fetched page, so at most `limit` products are considered.
        """
        if category == ALL_CATEGORIES:
            category = None

        products = await self.repository.list_by_rating(category, limit=limit, correlation_id=correlation_id)

        if search_term and search_term.strip():
            products = [p for p in products if matches_search_term(p, search_term)]

        logger.debug(
            "Searched products",
            correlation_id=correlation_id,
            metadata={
                "event": "product_search",
                "searchTerm": search_term,
                "category": category or ALL_CATEGORIES,
                "resultsCount": len(products),
            },
        )
        return products

    async def get_related_products(
        self,
        category: str,
        exclude_product_id: str,
        limit: int = 4,
        correlation_id: Optional[str] = None,
    ) -> List[Product]:
        """Top-rated products of the same category, excluding the current one"""
        # One extra so the excluded product does not shrink the result
        candidates = await self.repository.list_by_rating(category, limit=limit + 1, correlation_id=correlation_id)
        return [p for p in candidates if p.id != exclude_product_id][:limit]
