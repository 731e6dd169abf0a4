"""Product Service Models"""

from .base import ProductServiceBase, ProductServiceBaseModel
from .product import (
    PRODUCT_MODELS,
    Clothes,
    Electronics,
    Product,
    ProductCategory,
    Smartphone,
)

__all__ = [
    "ProductServiceBase",
    "ProductServiceBaseModel",
    "ProductCategory",
    "Product",
    "Clothes",
    "Electronics",
    "Smartphone",
    "PRODUCT_MODELS",
]
