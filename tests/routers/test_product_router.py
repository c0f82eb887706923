"""Tests for product endpoints"""
from fastapi.testclient import TestClient

from mamae_review.db.database import db
from mamae_review.main import app


def _create(client, headers, **overrides):
    payload = {
        "name": "Produto",
        "category": "Brinquedos",
        "price": 10.0,
        "store_name": "Loja",
    }
    payload.update(overrides)
    response = client.post("/api/products", json=payload, headers=headers)
    assert response.status_code == 201
    return response.json()["id"]


def _review(client, product_id, headers, rating):
    response = client.post(
        f"/api/products/{product_id}/reviews",
        json={"rating": rating, "comment": "Comentário de teste"},
        headers=headers,
    )
    assert response.status_code == 201


class TestCreateProduct:

    def test_create_and_get(self, client, created_product):
        response = client.get(f"/api/products/{created_product}")

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == created_product
        assert body["created_by"] == "owner123"
        assert body["rating"] == 0.0

    def test_requires_authentication(self, client, product_payload):
        response = client.post("/api/products", json=product_payload)

        assert response.status_code == 401

    def test_rejects_unknown_category(self, client, auth_headers, product_payload):
        product_payload["category"] = "Eletrônicos"

        response = client.post("/api/products", json=product_payload, headers=auth_headers())

        assert response.status_code == 422

    def test_rejects_client_rating(self, client, auth_headers, product_payload):
        product_payload["rating"] = 5.0

        response = client.post("/api/products", json=product_payload, headers=auth_headers())

        assert response.status_code == 422

    def test_get_missing(self, client):
        response = client.get("/api/products/missing")

        assert response.status_code == 404
        assert response.json()["error"] == "Product not found"


class TestUpdateDelete:

    def test_owner_updates(self, client, created_product, auth_headers):
        response = client.patch(
            f"/api/products/{created_product}",
            json={"price": 45.0},
            headers=auth_headers("owner123"),
        )

        assert response.status_code == 200
        assert response.json()["price"] == 45.0

    def test_rating_not_editable(self, client, created_product, auth_headers):
        response = client.patch(
            f"/api/products/{created_product}",
            json={"rating": 5.0},
            headers=auth_headers("owner123"),
        )

        assert response.status_code == 422

    def test_required_field_cannot_be_nulled(self, client, created_product, auth_headers):
        response = client.patch(
            f"/api/products/{created_product}", json={"name": None}, headers=auth_headers("owner123")
        )

        assert response.status_code == 422
        product = client.get(f"/api/products/{created_product}")
        assert product.status_code == 200
        assert product.json()["name"] == "Fralda Premium"

    def test_link_can_be_cleared(self, client, created_product, auth_headers):
        response = client.patch(
            f"/api/products/{created_product}", json={"store_link": None}, headers=auth_headers("owner123")
        )

        assert response.status_code == 200
        assert client.get(f"/api/products/{created_product}").json()["store_link"] is None

    def test_nan_price_rejected(self, client, auth_headers):
        response = client.post(
            "/api/products",
            content='{"name": "X", "category": "Outros", "price": NaN, "store_name": "Loja"}',
            headers={**auth_headers(), "Content-Type": "application/json"},
        )

        assert response.status_code == 422

    def test_empty_update(self, client, created_product, auth_headers):
        response = client.patch(f"/api/products/{created_product}", json={}, headers=auth_headers("owner123"))

        assert response.status_code == 400

    def test_non_owner_forbidden(self, client, created_product, auth_headers):
        response = client.patch(
            f"/api/products/{created_product}", json={"price": 1.0}, headers=auth_headers("user123")
        )

        assert response.status_code == 403

    def test_owner_deletes(self, client, created_product, auth_headers):
        response = client.delete(f"/api/products/{created_product}", headers=auth_headers("owner123"))

        assert response.status_code == 204
        assert client.get(f"/api/products/{created_product}").status_code == 404


class TestListings:

    def test_top_rated_follows_reviews(self, client, auth_headers):
        owner = auth_headers("owner123")
        low = _create(client, owner, name="Baixo")
        high = _create(client, owner, name="Alto")
        _review(client, low, auth_headers("u1"), 2)
        _review(client, high, auth_headers("u1"), 5)
        _review(client, high, auth_headers("u2"), 4)

        response = client.get("/api/products/top-rated")

        assert response.status_code == 200
        assert [(p["id"], p["rating"]) for p in response.json()] == [(high, 4.5), (low, 2.0)]

    def test_list_newest_first(self, client, auth_headers):
        owner = auth_headers("owner123")
        first = _create(client, owner, name="Primeiro")
        second = _create(client, owner, name="Segundo")

        response = client.get("/api/products")

        assert [p["id"] for p in response.json()] == [second, first]

    def test_mine(self, client, auth_headers):
        mine = _create(client, auth_headers("owner123"), name="Meu")
        _create(client, auth_headers("user123"), name="Outro")

        response = client.get("/api/products/mine", headers=auth_headers("owner123"))

        assert [p["id"] for p in response.json()] == [mine]

    def test_search(self, client, auth_headers):
        owner = auth_headers("owner123")
        _create(client, owner, name="Carrinho de bebê", category="Transporte")
        _create(client, owner, name="Chocalho")

        response = client.get("/api/products/search", params={"q": "carrinho", "category": "all"})

        assert [p["name"] for p in response.json()] == ["Carrinho de bebê"]

    def test_search_unknown_category(self, client):
        response = client.get("/api/products/search", params={"category": "Eletrônicos"})

        assert response.status_code == 400

    def test_related(self, client, auth_headers):
        owner = auth_headers("owner123")
        current = _create(client, owner, name="Atual")
        other = _create(client, owner, name="Outro")
        _create(client, owner, name="Carrinho", category="Transporte")

        response = client.get(f"/api/products/{current}/related")

        assert [p["id"] for p in response.json()] == [other]


class TestOperational:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_liveness(self, client):
        assert client.get("/health/live").json()["status"] == "alive"

    def test_metrics(self, client):
        body = client.get("/metrics").json()

        assert body["metrics"]["pid"] > 0
        assert "store" in body["metrics"]

    def test_readiness(self, client, store):
        db.store = None
        assert client.get("/health/ready").status_code == 503

        db.store = store
        try:
            assert client.get("/health/ready").status_code == 200
        finally:
            db.store = None

    def test_correlation_id_echoed(self, client):
        response = client.get("/health", headers={"X-Correlation-ID": "abc-123"})

        assert response.headers["X-Correlation-ID"] == "abc-123"

    def test_store_not_configured(self):
        app.dependency_overrides.clear()
        db.store = None

        response = TestClient(app).get("/api/products")

        assert response.status_code == 503
