"""
Product Service Event Schemas
=============================

Envelope and event kinds for the catalog sync topic.
"""

from .event_schemas import ProductEventType, ProductMessage

__all__ = [
    "ProductEventType",
    "ProductMessage",
]
