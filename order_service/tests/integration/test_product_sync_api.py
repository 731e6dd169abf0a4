"""
HTTP tests for the product replica status endpoint.

The lifespan is not entered, so neither Kafka nor the real database is used;
the replica store and consumer come from dependency overrides.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, Mock

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from order_service.app.api.deps import (
    get_product_sync_consumer_dep,
    get_replica_store_dep,
)
from order_service.app.core.setting import get_settings
from order_service.app.main import create_app


def bearer(roles):
    settings = get_settings()
    token = jwt.encode(
        {
            "user_id": "1",
            "roles": roles,
            "type": "access",
            "exp": datetime.now(timezone.utc) + timedelta(minutes=5),
        },
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def replica_store():
    store = Mock()
    store.count = AsyncMock(return_value=3)
    store.is_synchronized = AsyncMock(return_value=True)
    store.has_sufficient_stock = AsyncMock(return_value=True)
    return store


@pytest.fixture
def sync_consumer():
    consumer = Mock()
    consumer.status.return_value = {
        "running": True,
        "topic": "product",
        "group_id": "order-service-product-sync",
        "outcomes": {"applied": 5, "skipped": 1, "rejected": 0},
    }
    return consumer


@pytest.fixture
def client(replica_store, sync_consumer):
    app = create_app()
    app.dependency_overrides[get_replica_store_dep] = lambda: replica_store
    app.dependency_overrides[get_product_sync_consumer_dep] = lambda: sync_consumer
    return TestClient(app)


def test_status_requires_authentication(client):
    response = client.get("/api/v1/product-sync/status")

    assert response.status_code == 401
    assert response.json()["error"]["type"] == "http_error"


def test_status_requires_admin_role(client):
    response = client.get("/api/v1/product-sync/status", headers=bearer(["user"]))

    assert response.status_code == 403


def test_status_reports_replica_count_and_consumer_state(client):
    response = client.get("/api/v1/product-sync/status", headers=bearer(["admin"]))

    assert response.status_code == 200
    body = response.json()
    assert body["total_products"] == 3
    assert body["details"] == "Total products in replica: 3"
    assert body["synchronized"] is True
    assert body["consumer"]["running"] is True
    assert body["consumer"]["outcomes"]["applied"] == 5


def test_status_unavailable_before_startup(sync_consumer):
    app = create_app()
    app.dependency_overrides[get_replica_store_dep] = lambda: None
    app.dependency_overrides[get_product_sync_consumer_dep] = lambda: sync_consumer

    response = TestClient(app).get(
        "/api/v1/product-sync/status", headers=bearer(["admin"])
    )

    assert response.status_code == 503


def test_status_flags_empty_replica_as_not_synchronized(client, replica_store):
    replica_store.count.return_value = 0
    replica_store.is_synchronized.return_value = False

    response = client.get("/api/v1/product-sync/status", headers=bearer(["admin"]))

    assert response.status_code == 200
    assert response.json()["total_products"] == 0
    assert response.json()["synchronized"] is False


def test_stock_check_is_open_to_any_authenticated_user(client, replica_store):
    response = client.get(
        "/api/v1/product-sync/products/10/stock",
        params={"quantity": 3},
        headers=bearer(["user"]),
    )

    assert response.status_code == 200
    assert response.json() == {"product_id": 10, "quantity": 3, "sufficient": True}
    replica_store.has_sufficient_stock.assert_awaited_once_with(10, 3)


def test_stock_check_reports_insufficient_stock(client, replica_store):
    replica_store.has_sufficient_stock.return_value = False

    response = client.get(
        "/api/v1/product-sync/products/10/stock", headers=bearer(["user"])
    )

    assert response.status_code == 200
    assert response.json()["sufficient"] is False
    replica_store.has_sufficient_stock.assert_awaited_once_with(10, 1)


def test_stock_check_rejects_non_positive_quantity(client):
    response = client.get(
        "/api/v1/product-sync/products/10/stock",
        params={"quantity": 0},
        headers=bearer(["user"]),
    )

    assert response.status_code == 422


def test_stock_check_requires_authentication(client):
    response = client.get("/api/v1/product-sync/products/10/stock")

    assert response.status_code == 401
