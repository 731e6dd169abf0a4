"""
Pytest configuration and fixtures for Product Service tests.
"""

import asyncio
from decimal import Decimal
from itertools import count
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from product_service.app.events.base import EventPublisher
from product_service.app.models import Clothes, Product, Smartphone
from product_service.app.models.base import ProductServiceBase


@pytest.fixture
async def catalog_session_maker(tmp_path):
    """Session factory over a throwaway SQLite catalog."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(ProductServiceBase.metadata.create_all)

    yield async_sessionmaker(engine, expire_on_commit=False, autoflush=False)

    await engine.dispose()


@pytest.fixture
async def catalog_session(catalog_session_maker):
    async with catalog_session_maker() as session:
        yield session


@pytest.fixture
def publisher():
    """EventPublisher whose sends resolve immediately with record metadata."""
    offsets = count()

    def delivered(topic, key, value):
        future = asyncio.get_running_loop().create_future()
        future.set_result(SimpleNamespace(partition=0, offset=next(offsets)))
        return future

    publisher = Mock(spec=EventPublisher)
    publisher.send = AsyncMock(side_effect=delivered)
    publisher.flush = AsyncMock()
    return publisher


@pytest.fixture
def sample_products():
    """One in-memory product per variant, as loaded from the catalog."""
    return [
        Product(
            id=1,
            name="Gift Card",
            price=Decimal("25.00"),
            category="general",
            stock=100,
        ),
        Clothes(
            id=2,
            name="Linen Shirt",
            price=Decimal("39.50"),
            category="clothes",
            image_url="https://cdn.example.com/linen-shirt.png",
            stock=12,
            brand="Fjord",
            size="M",
        ),
        Smartphone(
            id=3,
            name="Pixel 9",
            price=Decimal("799.00"),
            category="smartphone",
            stock=4,
            brand="Google",
            operating_system="Android",
        ),
    ]
