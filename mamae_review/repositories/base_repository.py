"""
Base repository pattern over the document store.

Provides logged operations for one collection. Domain repositories
inherit from BaseRepository and add their own queries.
"""

from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Sequence

from mamae_review.core.logger import logger
from mamae_review.db.document_store import (
    Document,
    DocumentStore,
    Filter,
    OrderBy,
    SnapshotCallback,
    Subscription,
)


class BaseRepository:
    """
    Base repository bound to one collection of a DocumentStore.

    Usage:
        class ReviewRepository(BaseRepository):
            def __init__(self, store: DocumentStore):
                super().__init__(store, "reviews")

    Store errors are logged with the collection name and re-raised
    unchanged; callers decide how to map them.
    """

    def __init__(self, store: DocumentStore, collection_name: str):
        self.store = store
        self.collection_name = collection_name

    @contextmanager
    def _logged_failure(self, action: str, correlation_id: Optional[str], **metadata):
        try:
            yield
        except Exception as e:
            logger.error(
                f"Failed to {action} in {self.collection_name}",
                correlation_id=correlation_id,
                error=e,
                metadata={"collection": self.collection_name, **metadata}
            )
            raise

    async def create(self, document: Dict[str, Any], correlation_id: Optional[str] = None) -> str:
        """
        Insert a document.

        Args:
            document: Fields to store; "id" and "created_at" are assigned by the store
            correlation_id: Optional correlation ID for logging

        Returns:
            str: ID of the new document
        """
        with self._logged_failure("create document", correlation_id):
            document_id = await self.store.insert(self.collection_name, document)

        logger.debug(
            f"Document created in {self.collection_name}",
            correlation_id=correlation_id,
            metadata={"collection": self.collection_name, "documentId": document_id}
        )
        return document_id

    async def find_by_id(self, document_id: str, correlation_id: Optional[str] = None) -> Optional[Document]:
        with self._logged_failure("read document", correlation_id, documentId=document_id):
            return await self.store.get(self.collection_name, document_id)

    async def find_many(
        self,
        filters: Optional[Sequence[Filter]] = None,
        order_by: Optional[OrderBy] = None,
        limit: Optional[int] = None,
        skip: int = 0,
        correlation_id: Optional[str] = None
    ) -> List[Document]:
        """
        Documents matching all filters.

        Args:
            filters: (field, op, value) triples, combined with AND
            order_by: (field, "asc" | "desc")
            limit: Maximum number of documents, None for all
            skip: Number of leading documents to drop
        """
        with self._logged_failure("query documents", correlation_id, filters=repr(filters)):
            documents = await self.store.query(
                self.collection_name, filters, order_by, limit=limit, skip=skip
            )

        logger.debug(
            f"Found {len(documents)} documents in {self.collection_name}",
            correlation_id=correlation_id,
            metadata={"collection": self.collection_name, "count": len(documents)}
        )
        return documents

    async def update(
        self,
        document_id: str,
        changes: Dict[str, Any],
        correlation_id: Optional[str] = None
    ) -> bool:
        """Merge changes into a document. Returns False if it does not exist."""
        with self._logged_failure("update document", correlation_id, documentId=document_id):
            found = await self.store.update(self.collection_name, document_id, changes)

        if not found:
            logger.warning(
                f"Update of missing document in {self.collection_name}",
                correlation_id=correlation_id,
                metadata={"collection": self.collection_name, "documentId": document_id}
            )
        return found

    async def delete(self, document_id: str, correlation_id: Optional[str] = None) -> bool:
        with self._logged_failure("delete document", correlation_id, documentId=document_id):
            deleted = await self.store.delete(self.collection_name, document_id)

        if not deleted:
            logger.warning(
                f"Delete of missing document in {self.collection_name}",
                correlation_id=correlation_id,
                metadata={"collection": self.collection_name, "documentId": document_id}
            )
        return deleted

    async def exists(self, filters: Sequence[Filter], correlation_id: Optional[str] = None) -> bool:
        """True if at least one document matches the filters"""
        documents = await self.find_many(filters, limit=1, correlation_id=correlation_id)
        return len(documents) > 0

    async def subscribe(
        self,
        filters: Optional[Sequence[Filter]],
        order_by: Optional[OrderBy],
        callback: SnapshotCallback,
    ) -> Subscription:
        """Live query over this collection; see DocumentStore.subscribe"""
        return await self.store.subscribe(self.collection_name, filters, order_by, callback)
