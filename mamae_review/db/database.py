"""
Document store lifecycle: connect on startup, close on shutdown,
hand the active store to request dependencies.
"""

from typing import Optional

from mamae_review.core.config import Config, config
from mamae_review.core.errors import BackendUnavailableError
from mamae_review.core.logger import logger
from mamae_review.db.document_store import DocumentStore
from mamae_review.db.memory_store import InMemoryDocumentStore
from mamae_review.db.mongodb import MongoDocumentStore


class Database:
    """Holds the process-wide document store"""

    store: Optional[DocumentStore] = None


db = Database()


async def connect_store(settings: Config = config) -> DocumentStore:
    """Create the configured document store"""
    backend = settings.store_backend.lower()

    if backend == "memory":
        store = InMemoryDocumentStore()
    elif backend == "mongodb":
        store = await MongoDocumentStore.connect(settings)
        await store.ensure_indexes(settings)
    else:
        raise BackendUnavailableError(
            f"Unknown store backend '{settings.store_backend}'",
            details={"store_backend": settings.store_backend},
        )

    db.store = store
    logger.info(
        "Document store ready",
        metadata={"event": "store_ready", "backend": backend}
    )
    return store


async def close_store() -> None:
    """Close the active document store"""
    if db.store is not None:
        await db.store.close()
        db.store = None


def get_store() -> DocumentStore:
    """Get the active document store, failing fast when none is configured"""
    if db.store is None:
        raise BackendUnavailableError("Document store is not configured")
    return db.store
