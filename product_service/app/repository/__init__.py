"""Repository layer for Product Service"""

from .product_repository import (
    AuthoritativeProductStore,
    ProductRepository,
    SessionProductStore,
)

__all__ = [
    "AuthoritativeProductStore",
    "ProductRepository",
    "SessionProductStore",
]
