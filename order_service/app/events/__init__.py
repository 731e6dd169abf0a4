"""
Events module for the Order Service.

Consumes product change events from the catalog service and keeps the
local product replica in step with them.

    - consumers.ProductEventReconciler: applies one envelope to the replica store
    - consumers.ProductSyncConsumer: single-task Kafka consumer driving the reconciler
    - consumers.TransportRetryPolicy: bounded fixed-backoff retry for transient faults

Only the envelope and error types are exported here. The consumers depend
on the replica repository, which itself imports the envelope, so they are
imported from ``events.consumers`` directly.
"""

from .base import MalformedMessageError, ReconcileOutcome, TransientTransportError
from .schemas import ProductEventType, ProductMessage

__all__ = [
    "ProductEventType",
    "ProductMessage",
    "ReconcileOutcome",
    "MalformedMessageError",
    "TransientTransportError",
]
