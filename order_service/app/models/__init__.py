from .base import OrderServiceBase
from .product_replica import ProductReplica

__all__ = ["OrderServiceBase", "ProductReplica"]
