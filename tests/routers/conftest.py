"""Fixtures for router tests"""
import pytest
from fastapi.testclient import TestClient

from mamae_review.db.database import get_store
from mamae_review.main import app
from mamae_review.routers.review_router import limiter


@pytest.fixture
def client(store):
    """Test client bound to the in-memory store; lifespan is not run"""
    app.dependency_overrides[get_store] = lambda: store
    limiter.reset()
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def product_payload():
    return {
        "name": "Fralda Premium",
        "category": "Higiene e Cuidados",
        "description": "Fralda descartável",
        "price": 59.9,
        "store_name": "Loja da Mamãe",
        "store_link": "https://example.com/fralda",
    }


@pytest.fixture
def created_product(client, auth_headers, product_payload):
    """Create a product as owner123 and return its id"""
    response = client.post(
        "/api/products", json=product_payload, headers=auth_headers("owner123", "Ana")
    )
    assert response.status_code == 201
    return response.json()["id"]
