from .product_events import SNAPSHOT_EVENT_TYPES, ProductEventType, ProductMessage

__all__ = ["ProductEventType", "ProductMessage", "SNAPSHOT_EVENT_TYPES"]
