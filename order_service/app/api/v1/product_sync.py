"""Product replica sync status and stock lookups"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Query, status

from ...events.consumers import ProductSyncConsumer
from ...repository.product_replica_repository import ReplicaStore
from ..deps import AdminUserDep, CurrentUserDep, ProductSyncConsumerDep, ReplicaStoreDep

router = APIRouter(prefix="/product-sync")


def _require_store(replica_store: Optional[ReplicaStore]) -> ReplicaStore:
    if replica_store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Product replica is not initialized",
        )
    return replica_store


@router.get("/status")
async def product_sync_status(
    replica_store: Optional[ReplicaStore] = ReplicaStoreDep,
    consumer: Optional[ProductSyncConsumer] = ProductSyncConsumerDep,
    user_id: str = AdminUserDep,
) -> Dict[str, Any]:
    """Replica size and consumer state (admin only)"""
    store = _require_store(replica_store)

    total = await store.count()
    consumer_status = (
        consumer.status()
        if consumer is not None
        else {"running": False, "outcomes": {}}
    )
    return {
        "message": "Product replica sync status",
        "details": f"Total products in replica: {total}",
        "total_products": total,
        "synchronized": await store.is_synchronized(),
        "consumer": consumer_status,
    }


@router.get("/products/{product_id}/stock")
async def product_stock_check(
    product_id: int,
    quantity: int = Query(1, ge=1),
    replica_store: Optional[ReplicaStore] = ReplicaStoreDep,
    user_id: str = CurrentUserDep,
) -> Dict[str, Any]:
    """Whether the replica can cover ``quantity`` units; never changes stock"""
    store = _require_store(replica_store)
    return {
        "product_id": product_id,
        "quantity": quantity,
        "sufficient": await store.has_sufficient_stock(product_id, quantity),
    }
