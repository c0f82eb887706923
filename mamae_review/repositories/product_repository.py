"""
Product repository for domain-specific data access operations.

Extends BaseRepository with:
- Owner listings
- Top-rated and category queries
- Rating writes from the aggregator
"""

from typing import List, Optional

from mamae_review.core.config import config
from mamae_review.db.document_store import DESCENDING, DocumentStore
from mamae_review.models.product import Product
from mamae_review.repositories.base_repository import BaseRepository


class ProductRepository(BaseRepository):
    """Repository for product documents"""

    def __init__(self, store: DocumentStore, collection_name: str = config.products_collection):
        super().__init__(store, collection_name)

    async def get_product(self, product_id: str, correlation_id: Optional[str] = None) -> Optional[Product]:
        document = await self.find_by_id(product_id, correlation_id=correlation_id)
        return Product(**document) if document else None

    async def list_recent(
        self,
        created_by: Optional[str] = None,
        limit: int = 10,
        skip: int = 0,
        correlation_id: Optional[str] = None
    ) -> List[Product]:
        """Products newest first, optionally restricted to one owner"""
        filters = [("created_by", "==", created_by)] if created_by else []
        documents = await self.find_many(
            filters,
            order_by=("created_at", DESCENDING),
            limit=limit,
            skip=skip,
            correlation_id=correlation_id,
        )
        return [Product(**doc) for doc in documents]

    async def list_by_rating(
        self,
        category: Optional[str] = None,
        limit: Optional[int] = 10,
        correlation_id: Optional[str] = None
    ) -> List[Product]:
        """Products highest rated first, optionally restricted to one category"""
        filters = [("category", "==", category)] if category else []
        documents = await self.find_many(
            filters,
            order_by=("rating", DESCENDING),
            limit=limit,
            correlation_id=correlation_id,
        )
        return [Product(**doc) for doc in documents]

    async def set_rating(self, product_id: str, rating: float, correlation_id: Optional[str] = None) -> bool:
        """Overwrite the derived rating field (last writer wins)"""
        return await self.update(product_id, {"rating": rating}, correlation_id=correlation_id)
