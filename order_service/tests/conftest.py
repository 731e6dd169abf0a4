"""
Pytest configuration and fixtures for Order Service tests.
"""

import json
import os
from typing import Any, Callable, Optional

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

os.environ.setdefault("ENVIRONMENT", "test")

from order_service.app.models.base import OrderServiceBase
from order_service.app.repository.product_replica_repository import (
    SqlAlchemyReplicaStore,
)


@pytest.fixture
async def replica_session_maker(tmp_path):
    """Session factory over a throwaway SQLite replica database."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'replica.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(OrderServiceBase.metadata.create_all)

    yield async_sessionmaker(engine, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def replica_store(replica_session_maker):
    return SqlAlchemyReplicaStore(replica_session_maker)


@pytest.fixture
def product_record() -> Callable[..., bytes]:
    """Build a product change record exactly as the catalog service emits it."""

    def build(
        event_type: str,
        product_id: int = 10,
        stock: Optional[int] = 5,
        **overrides: Any,
    ) -> bytes:
        payload: dict[str, Any] = {
            "id": product_id,
            "name": None,
            "price": None,
            "category": None,
            "imageUrl": None,
            "stock": None,
            "brand": None,
            "eventType": event_type,
            "timestamp": "2026-10-19T08:30:00Z",
        }
        if event_type != "PRODUCT_DELETED":
            payload.update(
                {
                    "name": "Trail Runner",
                    "price": 89.9,
                    "category": "clothes",
                    "imageUrl": "https://cdn.example.com/trail-runner.png",
                    "stock": stock,
                    "brand": "Northwind",
                }
            )
        payload.update(overrides)
        return json.dumps(payload).encode("utf-8")

    return build
