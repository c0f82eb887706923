"""Shared test fixtures"""
from datetime import datetime, timedelta, UTC

import jwt
import pytest
import pytest_asyncio

from mamae_review.core.config import config
from mamae_review.db.memory_store import InMemoryDocumentStore
from mamae_review.models.product import ProductCategory, ProductCreate
from mamae_review.models.review import ReviewCreate
from mamae_review.models.user import CurrentUser
from mamae_review.repositories.product_repository import ProductRepository
from mamae_review.repositories.review_repository import ReviewRepository
from mamae_review.services.product_service import ProductService
from mamae_review.services.rating_aggregator import RatingAggregator
from mamae_review.services.review_service import ReviewService


class TickingClock:
    """Server clock that advances one second per reading"""

    def __init__(self):
        self.current = datetime(2024, 1, 1, tzinfo=UTC)

    def __call__(self):
        self.current += timedelta(seconds=1)
        return self.current


@pytest.fixture
def store():
    """In-memory document store with a deterministic clock"""
    return InMemoryDocumentStore(clock=TickingClock())


@pytest.fixture
def product_repository(store):
    return ProductRepository(store)


@pytest.fixture
def review_repository(store):
    return ReviewRepository(store)


@pytest.fixture
def aggregator(review_repository, product_repository):
    return RatingAggregator(review_repository, product_repository)


@pytest.fixture
def review_service(review_repository, product_repository, aggregator):
    return ReviewService(review_repository, product_repository, aggregator)


@pytest.fixture
def product_service(product_repository):
    return ProductService(product_repository)


@pytest.fixture
def owner():
    """User who creates products"""
    return CurrentUser(user_id="owner123", name="Ana")


@pytest.fixture
def reviewer():
    """User who reviews products"""
    return CurrentUser(user_id="user123", name="Beatriz")


@pytest.fixture
def sample_product():
    return ProductCreate(
        name="Fralda Premium",
        category=ProductCategory.HIGIENE_E_CUIDADOS,
        description="Fralda descartável com gel absorvente",
        price=59.9,
        store_name="Loja da Mamãe",
        store_link="https://example.com/fralda",
    )


@pytest_asyncio.fixture
async def product_id(product_service, sample_product, owner):
    """ID of a freshly created product"""
    return await product_service.create_product(sample_product, owner)


@pytest.fixture
def make_review():
    """Factory for validated review input"""
    def _make(product_id, rating, author_id="user123", author_name="Beatriz",
              comment="Produto muito bom mesmo"):
        return ReviewCreate(
            product_id=product_id,
            rating=rating,
            comment=comment,
            author_id=author_id,
            author_name=author_name,
        )
    return _make


@pytest.fixture
def auth_headers():
    """Factory for bearer headers signed with the configured secret"""
    def _headers(user_id="user123", name="Beatriz"):
        token = jwt.encode(
            {"sub": user_id, "name": name},
            config.jwt_secret,
            algorithm=config.jwt_algorithm,
        )
        return {"Authorization": f"Bearer {token}"}
    return _headers
