"""Admin endpoints for catalog synchronization to Kafka"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import JSONResponse

from ...events.change_dispatcher import ProductChangeDispatcher
from ...utils.logging import setup_product_logging as setup_logging
from ..dependencies import AdminUserDep, ChangeDispatcherDep, CorrelationIdDep

logger = setup_logging("product_service.kafka_sync_api")
router = APIRouter(prefix="/products/kafka/sync")


def _require_dispatcher(
    dispatcher: Optional[ProductChangeDispatcher],
) -> ProductChangeDispatcher:
    if dispatcher is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Event pipeline is not initialized",
        )
    return dispatcher


@router.post("/force-full-sync")
async def force_full_sync(
    correlation_id: Optional[str] = CorrelationIdDep,
    dispatcher: Optional[ProductChangeDispatcher] = ChangeDispatcherDep,
    user_id: str = AdminUserDep,
):
    """
    Re-publish every product as an INITIAL_LOAD record (admin only).

    Returns 200 with ``{"message", "details"}`` on success and 500 with the
    same shape when the catalog could not be read or published.
    """
    dispatcher = _require_dispatcher(dispatcher)
    logger.info(
        "Force full sync requested",
        extra={"user_id": user_id, "correlation_id": correlation_id},
    )

    result = await dispatcher.on_force_resync()
    body = {"message": result.message, "details": result.details}
    if not result.success:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body
        )
    return body


@router.get("/status")
async def sync_status(
    dispatcher: Optional[ProductChangeDispatcher] = ChangeDispatcherDep,
    user_id: str = AdminUserDep,
) -> Dict[str, Any]:
    """Summarize what a full sync would publish (admin only)"""
    dispatcher = _require_dispatcher(dispatcher)
    summary = await dispatcher.sync_status()
    return {
        "message": "Kafka sync status",
        "details": f"Total products in database: {summary['total_products']}",
        **summary,
    }
