"""
Document store collaborator contract.

Every persistence operation of the service goes through a DocumentStore:
collection-based documents, equality/range filters, server-assigned
creation timestamps and live-query subscriptions that push the full
current result set to a callback.
"""

import inspect
from abc import ABC, abstractmethod
from datetime import datetime, UTC
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple, Union

from mamae_review.core.errors import BackendUnavailableError

ASCENDING = "asc"
DESCENDING = "desc"

FILTER_OPERATORS = ("==", "!=", "<", "<=", ">", ">=")

Filter = Tuple[str, str, Any]
OrderBy = Tuple[str, str]
Document = Dict[str, Any]
SnapshotCallback = Callable[[List[Document]], Union[None, Awaitable[None]]]


def utc_now() -> datetime:
    return datetime.now(UTC)


def validate_filters(filters: Optional[Sequence[Filter]]) -> List[Filter]:
    filters = list(filters or [])
    for field, op, _ in filters:
        if op not in FILTER_OPERATORS:
            raise ValueError(f"Unsupported filter operator '{op}' on field '{field}'")
    return filters


def validate_order_by(order_by: Optional[OrderBy]) -> Optional[OrderBy]:
    if order_by is not None and order_by[1] not in (ASCENDING, DESCENDING):
        raise ValueError(f"Unsupported sort direction '{order_by[1]}'")
    return order_by


async def deliver(callback: SnapshotCallback, snapshot: List[Document]) -> None:
    """Invoke a snapshot callback, awaiting it when it is a coroutine function."""
    result = callback(snapshot)
    if inspect.isawaitable(result):
        await result


class Subscription:
    """
    Cancellation handle for a live query.

    The owner calls unsubscribe() when the listener goes away; later calls
    are no-ops.
    """

    def __init__(self, cancel: Optional[Callable[[], None]] = None):
        self._cancel = cancel
        self.active = True

    def bind(self, cancel: Callable[[], None]) -> None:
        self._cancel = cancel

    def unsubscribe(self) -> None:
        if not self.active:
            return
        self.active = False
        if self._cancel is not None:
            self._cancel()


class DocumentStore(ABC):
    """
    Abstract document store.

    Documents are plain dicts; every returned document carries its
    store-assigned identifier under "id" and its creation timestamp under
    "created_at".
    """

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        ...

    def ensure_available(self) -> None:
        """Fail fast when the store has not been initialised."""
        if not self.is_connected:
            raise BackendUnavailableError(
                f"{type(self).__name__} is not connected",
                details={"store": type(self).__name__},
            )

    @abstractmethod
    async def insert(self, collection: str, document: Document) -> str:
        """Insert a document and return its identifier. Sets created_at."""

    @abstractmethod
    async def get(self, collection: str, document_id: str) -> Optional[Document]:
        """Return a document by identifier, or None."""

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: Optional[Sequence[Filter]] = None,
        order_by: Optional[OrderBy] = None,
        limit: Optional[int] = None,
        skip: int = 0,
    ) -> List[Document]:
        """Return the documents matching all filters, in order."""

    @abstractmethod
    async def update(self, collection: str, document_id: str, partial: Document) -> bool:
        """Merge fields into a document. Returns False if it does not exist."""

    @abstractmethod
    async def delete(self, collection: str, document_id: str) -> bool:
        """Delete a document. Returns False if it does not exist."""

    @abstractmethod
    async def subscribe(
        self,
        collection: str,
        filters: Optional[Sequence[Filter]],
        order_by: Optional[OrderBy],
        callback: SnapshotCallback,
    ) -> Subscription:
        """
        Start a live query.

        The callback receives the full current result set on initial load
        and again every time that result set changes.
        """

    @property
    def listener_count(self) -> int:
        """Number of live queries currently running."""
        return 0

    async def close(self) -> None:
        """Release connections held by the store."""
