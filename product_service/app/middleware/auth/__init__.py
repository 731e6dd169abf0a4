"""
Authentication middleware for Product Service.
"""

from .auth_middleware import (
    AuthenticatedUser,
    ProductServiceAuthMiddleware,
    admin_user,
    authenticated_user,
    setup_product_auth_middleware,
)

__all__ = [
    "ProductServiceAuthMiddleware",
    "AuthenticatedUser",
    "setup_product_auth_middleware",
    "authenticated_user",
    "admin_user",
]
