"""
FastAPI dependency injection for Order Service
"""

from typing import Optional

from fastapi import Depends

from ..core.events import get_product_sync_consumer, get_replica_store
from ..events.consumers import ProductSyncConsumer
from ..middleware.auth import admin_user, authenticated_user
from ..repository.product_replica_repository import ReplicaStore


def get_replica_store_dep() -> Optional[ReplicaStore]:
    return get_replica_store()


def get_product_sync_consumer_dep() -> Optional[ProductSyncConsumer]:
    return get_product_sync_consumer()


AdminUserDep = Depends(admin_user)
CurrentUserDep = Depends(authenticated_user)
ReplicaStoreDep = Depends(get_replica_store_dep)
ProductSyncConsumerDep = Depends(get_product_sync_consumer_dep)
