"""
FastAPI dependency injection for Product Service

Provides database sessions, the catalog service wired to the change
dispatcher, authentication aliases and correlation ID extraction.
"""

from typing import AsyncGenerator, Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db_session
from ..core.event_management import get_change_dispatcher
from ..events.change_dispatcher import ProductChangeDispatcher
from ..middleware.auth.auth_middleware import admin_user, authenticated_user
from ..services.product_service import ProductService

# =====================================================
# DATABASE DEPENDENCIES
# =====================================================


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide async database session"""
    async for session in get_db_session():
        yield session


# =====================================================
# EVENT DEPENDENCIES
# =====================================================


def get_product_change_dispatcher() -> Optional[ProductChangeDispatcher]:
    """Provide the process-wide change dispatcher (None before startup)"""
    return get_change_dispatcher()


# =====================================================
# SERVICE DEPENDENCIES
# =====================================================


def get_product_service(
    session: AsyncSession = Depends(get_async_session),
    dispatcher: Optional[ProductChangeDispatcher] = Depends(
        get_product_change_dispatcher
    ),
) -> ProductService:
    return ProductService(session, dispatcher)


# =====================================================
# REQUEST CONTEXT DEPENDENCIES
# =====================================================


def get_correlation_id(request: Request) -> Optional[str]:
    """Extract correlation ID from request headers or state"""
    correlation_id = (
        request.headers.get("X-Correlation-ID")
        or request.headers.get("correlation-id")
        or request.headers.get("x-request-id")
    )
    if not correlation_id:
        correlation_id = getattr(request.state, "correlation_id", None)
    return correlation_id


CorrelationIdDep = Depends(get_correlation_id)
DatabaseDep = Depends(get_async_session)
AuthenticatedUserDep = Depends(authenticated_user)
AdminUserDep = Depends(admin_user)

ProductServiceDep = Depends(get_product_service)
ChangeDispatcherDep = Depends(get_product_change_dispatcher)
