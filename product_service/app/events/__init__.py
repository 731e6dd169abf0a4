"""
Events module for the Product Service.

Publishes product change envelopes to the product topic so that downstream
services can keep a local replica of the catalog.

Producers:
    - ProductEventProducer: envelope construction and keyed, fire-and-forget publishing
    - ProductChangeDispatcher: CRUD hooks, startup sync and on-demand full resync

Event Types:
    PRODUCT_CREATED, PRODUCT_UPDATED, PRODUCT_DELETED, INITIAL_LOAD
"""

from .change_dispatcher import ProductChangeDispatcher, SyncResult
from .event_producers import ProductEventProducer

__all__ = [
    "ProductEventProducer",
    "ProductChangeDispatcher",
    "SyncResult",
]
