"""
MongoDB implementation of the document store, built on Motor.
"""

import asyncio
import functools
from typing import Any, Dict, List, Optional, Sequence

import pymongo
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError, OperationFailure, PyMongoError

from mamae_review.core.config import Config
from mamae_review.core.errors import (
    BackendUnavailableError,
    DuplicateDocumentError,
    WriteRejectedError,
)
from mamae_review.core.logger import logger
from mamae_review.db.document_store import (
    ASCENDING,
    Document,
    DocumentStore,
    Filter,
    OrderBy,
    SnapshotCallback,
    Subscription,
    deliver,
    utc_now,
    validate_filters,
    validate_order_by,
)

_MONGO_OPERATORS = {
    "!=": "$ne",
    "<": "$lt",
    "<=": "$lte",
    ">": "$gt",
    ">=": "$gte",
}

# MongoDB "Unauthorized" server error code
UNAUTHORIZED_CODE = 13


def _object_id(document_id: str) -> Optional[ObjectId]:
    return ObjectId(document_id) if ObjectId.is_valid(document_id) else None


def build_mongo_query(filters: Sequence[Filter]) -> Dict[str, Any]:
    """Translate (field, op, value) filters into a MongoDB query document."""
    query: Dict[str, Any] = {}
    for field, op, value in filters:
        if field == "id":
            field, value = "_id", _object_id(value) if isinstance(value, str) else value
        if op == "==":
            query[field] = value
        else:
            condition = query.setdefault(field, {})
            if not isinstance(condition, dict):
                condition = query[field] = {"$eq": condition}
            condition[_MONGO_OPERATORS[op]] = value
    return query


def build_change_stream_pipeline(filters: Sequence[Filter]) -> List[Dict[str, Any]]:
    """
    Change stream pipeline for a live query.

    Inserts, updates and replaces are matched on the equality filters of
    their fullDocument; the stream must be opened with
    full_document="updateLookup" so update events carry one. Deletes carry
    no fullDocument, so they always trigger a re-query.
    """
    equality = {
        f"fullDocument.{field}": value
        for field, op, value in filters
        if op == "==" and field != "id"
    }
    return [{"$match": {"$or": [{"operationType": "delete"}, equality]}}]


def to_document(raw: Dict[str, Any]) -> Document:
    document = dict(raw)
    document["id"] = str(document.pop("_id"))
    return document


class MongoDocumentStore(DocumentStore):
    """DocumentStore backed by a MongoDB database."""

    def __init__(self, database: Optional[AsyncIOMotorDatabase] = None, client: Optional[AsyncIOMotorClient] = None):
        self.client = client
        self.database = database
        self._watchers: set = set()

    @classmethod
    async def connect(cls, settings: Config) -> "MongoDocumentStore":
        """Create a connected store from configuration"""
        logger.info("Connecting to MongoDB...")

        try:
            client = AsyncIOMotorClient(settings.mongodb_url)
            database = client[settings.mongodb_database]
            await client.admin.command("ping")
        except PyMongoError as e:
            logger.error(
                f"Could not connect to MongoDB: {e}",
                metadata={"event": "mongodb_connection_error", "error": str(e)}
            )
            raise BackendUnavailableError(
                f"Could not connect to MongoDB: {e}",
                details={"host": settings.mongodb_host, "port": settings.mongodb_port},
            ) from e

        logger.info(
            f"Successfully connected to MongoDB database '{settings.mongodb_database}'",
            metadata={
                "event": "mongodb_connected",
                "database": settings.mongodb_database,
                "host": settings.mongodb_host,
                "port": settings.mongodb_port
            }
        )
        return cls(database=database, client=client)

    @property
    def is_connected(self) -> bool:
        return self.database is not None

    async def ensure_indexes(self, settings: Config) -> None:
        """Create the indexes used by review and product queries."""
        self.ensure_available()
        reviews = self.database[settings.reviews_collection]
        products = self.database[settings.products_collection]

        await reviews.create_index(
            [("product_id", pymongo.ASCENDING), ("author_id", pymongo.ASCENDING)],
            unique=settings.mongodb_unique_reviews,
            name="product_author",
        )
        await reviews.create_index(
            [("product_id", pymongo.ASCENDING), ("created_at", pymongo.DESCENDING)],
            name="product_recent",
        )
        await reviews.create_index(
            [("product_id", pymongo.ASCENDING), ("rating", pymongo.DESCENDING)],
            name="product_rating",
        )
        await products.create_index([("rating", pymongo.DESCENDING)], name="rating")
        await products.create_index(
            [("category", pymongo.ASCENDING), ("rating", pymongo.DESCENDING)],
            name="category_rating",
        )
        await products.create_index(
            [("created_by", pymongo.ASCENDING), ("created_at", pymongo.DESCENDING)],
            name="owner_recent",
        )

        logger.info(
            "MongoDB indexes ensured",
            metadata={"event": "mongodb_indexes_ensured", "uniqueReviews": settings.mongodb_unique_reviews}
        )

    async def insert(self, collection: str, document: Document) -> str:
        self.ensure_available()
        stored = {k: v for k, v in document.items() if k != "id"}
        stored["created_at"] = utc_now()
        try:
            result = await self.database[collection].insert_one(stored)
        except DuplicateKeyError as e:
            raise DuplicateDocumentError(
                f"Duplicate document in {collection}",
                details={"collection": collection},
            ) from e
        except OperationFailure as e:
            _raise_if_unauthorized(e, collection)
            raise
        return str(result.inserted_id)

    async def get(self, collection: str, document_id: str) -> Optional[Document]:
        self.ensure_available()
        object_id = _object_id(document_id)
        if object_id is None:
            return None
        raw = await self.database[collection].find_one({"_id": object_id})
        return to_document(raw) if raw else None

    async def query(
        self,
        collection: str,
        filters: Optional[Sequence[Filter]] = None,
        order_by: Optional[OrderBy] = None,
        limit: Optional[int] = None,
        skip: int = 0,
    ) -> List[Document]:
        self.ensure_available()
        filters = validate_filters(filters)
        order_by = validate_order_by(order_by)

        cursor = self.database[collection].find(build_mongo_query(filters))
        if order_by is not None:
            field, direction = order_by
            cursor = cursor.sort(field, pymongo.ASCENDING if direction == ASCENDING else pymongo.DESCENDING)
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)

        return [to_document(raw) for raw in await cursor.to_list(length=limit)]

    async def update(self, collection: str, document_id: str, partial: Document) -> bool:
        self.ensure_available()
        object_id = _object_id(document_id)
        if object_id is None:
            return False
        changes = {k: v for k, v in partial.items() if k not in ("id", "_id", "created_at")}
        try:
            result = await self.database[collection].update_one({"_id": object_id}, {"$set": changes})
        except OperationFailure as e:
            _raise_if_unauthorized(e, collection)
            raise
        return result.matched_count > 0

    async def delete(self, collection: str, document_id: str) -> bool:
        self.ensure_available()
        object_id = _object_id(document_id)
        if object_id is None:
            return False
        try:
            result = await self.database[collection].delete_one({"_id": object_id})
        except OperationFailure as e:
            _raise_if_unauthorized(e, collection)
            raise
        return result.deleted_count > 0

    async def subscribe(
        self,
        collection: str,
        filters: Optional[Sequence[Filter]],
        order_by: Optional[OrderBy],
        callback: SnapshotCallback,
    ) -> Subscription:
        self.ensure_available()
        filters = validate_filters(filters)
        order_by = validate_order_by(order_by)

        stream = self.database[collection].watch(
            build_change_stream_pipeline(filters), full_document="updateLookup"
        )
        try:
            # try_next opens the server cursor, so every write after this
            # point reaches the stream; earlier ones are in the snapshot below
            await stream.try_next()
            snapshot = await self.query(collection, filters, order_by)
            await deliver(callback, snapshot)
        except BaseException:
            await stream.close()
            raise

        task = asyncio.create_task(self._watch(stream, collection, filters, order_by, callback, snapshot))
        self._watchers.add(task)
        task.add_done_callback(functools.partial(self._watch_finished, collection))
        return Subscription(task.cancel)

    async def _watch(self, stream, collection, filters, order_by, callback, last_snapshot) -> None:
        try:
            async for _change in stream:
                snapshot = await self.query(collection, filters, order_by)
                if snapshot == last_snapshot:
                    continue
                last_snapshot = snapshot
                await deliver(callback, snapshot)
        finally:
            await stream.close()

    def _watch_finished(self, collection: str, task: asyncio.Task) -> None:
        self._watchers.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(
                f"Live query on {collection} stopped",
                error=error,
                metadata={"event": "subscription_error", "collection": collection}
            )

    @property
    def listener_count(self) -> int:
        return len(self._watchers)

    async def close(self) -> None:
        logger.info("Closing connection to MongoDB...")
        for task in list(self._watchers):
            task.cancel()
        if self.client is not None:
            self.client.close()
        self.database = None


def _raise_if_unauthorized(error: OperationFailure, collection: str) -> None:
    if error.code == UNAUTHORIZED_CODE:
        raise WriteRejectedError(
            f"Write to {collection} rejected by the database",
            details={"collection": collection, "code": error.code},
        ) from error
