"""
In-memory document store.

Dict-backed implementation of the DocumentStore contract, used by the
test-suite and for local development (STORE_BACKEND=memory). Live queries
are re-evaluated after every write to their collection and delivered on
the event loop before the write returns.
"""

import copy
import operator
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence

from mamae_review.core.logger import logger
from mamae_review.db.document_store import (
    DESCENDING,
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

_OPERATORS = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


@dataclass
class _Listener:
    collection: str
    filters: List[Filter]
    order_by: Optional[OrderBy]
    callback: SnapshotCallback
    subscription: Subscription
    last_snapshot: Optional[List[Document]] = field(default=None)


def _matches(document: Document, filters: List[Filter]) -> bool:
    for field_name, op, value in filters:
        if field_name not in document:
            return False
        try:
            if not _OPERATORS[op](document[field_name], value):
                return False
        except TypeError:
            return False
    return True


class InMemoryDocumentStore(DocumentStore):
    """In-process DocumentStore keeping each collection in insertion order."""

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self._collections: Dict[str, Dict[str, Document]] = {}
        self._listeners: List[_Listener] = []
        self._clock = clock
        self._connected = True

    @property
    def is_connected(self) -> bool:
        return self._connected

    def _collection(self, name: str) -> Dict[str, Document]:
        return self._collections.setdefault(name, {})

    async def insert(self, collection: str, document: Document) -> str:
        self.ensure_available()
        document_id = uuid.uuid4().hex
        stored = copy.deepcopy(document)
        stored["id"] = document_id
        stored["created_at"] = self._clock()
        self._collection(collection)[document_id] = stored
        await self._notify(collection)
        return document_id

    async def get(self, collection: str, document_id: str) -> Optional[Document]:
        self.ensure_available()
        document = self._collection(collection).get(document_id)
        return copy.deepcopy(document) if document is not None else None

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

        documents = [
            doc for doc in self._collection(collection).values() if _matches(doc, filters)
        ]

        if order_by is not None:
            field_name, direction = order_by
            # Documents lacking the sort field are excluded, as in most document stores
            documents = [doc for doc in documents if doc.get(field_name) is not None]
            documents.sort(key=lambda doc: doc[field_name], reverse=direction == DESCENDING)

        documents = documents[skip:]
        if limit:
            documents = documents[:limit]

        return copy.deepcopy(documents)

    async def update(self, collection: str, document_id: str, partial: Document) -> bool:
        self.ensure_available()
        document = self._collection(collection).get(document_id)
        if document is None:
            return False
        changes = {k: copy.deepcopy(v) for k, v in partial.items() if k not in ("id", "created_at")}
        document.update(changes)
        await self._notify(collection)
        return True

    async def delete(self, collection: str, document_id: str) -> bool:
        self.ensure_available()
        removed = self._collection(collection).pop(document_id, None)
        if removed is None:
            return False
        await self._notify(collection)
        return True

    async def subscribe(
        self,
        collection: str,
        filters: Optional[Sequence[Filter]],
        order_by: Optional[OrderBy],
        callback: SnapshotCallback,
    ) -> Subscription:
        self.ensure_available()
        subscription = Subscription()
        listener = _Listener(
            collection=collection,
            filters=validate_filters(filters),
            order_by=validate_order_by(order_by),
            callback=callback,
            subscription=subscription,
        )
        subscription.bind(lambda: self._remove_listener(listener))
        self._listeners.append(listener)

        await self._refresh(listener)
        return subscription

    def _remove_listener(self, listener: _Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def _notify(self, collection: str) -> None:
        for listener in list(self._listeners):
            if listener.collection == collection and listener.subscription.active:
                await self._refresh(listener)

    async def _refresh(self, listener: _Listener) -> None:
        snapshot = await self.query(listener.collection, listener.filters, listener.order_by)
        if snapshot == listener.last_snapshot:
            return
        listener.last_snapshot = snapshot
        try:
            await deliver(listener.callback, copy.deepcopy(snapshot))
        except Exception as e:
            # A failing listener must not fail the write that triggered it
            logger.error(
                "Live query listener failed",
                error=e,
                metadata={"event": "subscription_callback_error", "collection": listener.collection},
            )

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    async def close(self) -> None:
        for listener in list(self._listeners):
            listener.subscription.unsubscribe()
        self._connected = False
