"""
Product Service Event Schemas
=============================

Wire envelope for product change events published to the product topic.
Field names on the wire are camelCase (`imageUrl`, `eventType`).
"""

import json
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from ...models.product import Product, ProductCategory


class ProductEventType(str, Enum):
    """Closed set of product change kinds"""

    CREATED = "PRODUCT_CREATED"
    UPDATED = "PRODUCT_UPDATED"
    DELETED = "PRODUCT_DELETED"
    INITIAL_LOAD = "INITIAL_LOAD"


class ProductMessage(BaseModel):
    """
    Envelope describing one product change.

    For ``PRODUCT_DELETED`` only ``id`` and ``event_type`` are populated;
    every other kind carries the full snapshot at emission time.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    category: Optional[ProductCategory] = None
    image_url: Optional[str] = Field(None, alias="imageUrl")
    stock: Optional[int] = Field(None, ge=0)
    brand: Optional[str] = None
    event_type: ProductEventType = Field(..., alias="eventType")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_serializer("price", when_used="json")
    def _serialize_price(self, price: Optional[Decimal]) -> Optional[float]:
        return float(price) if price is not None else None

    @classmethod
    def from_product(
        cls, product: Product, event_type: ProductEventType
    ) -> "ProductMessage":
        """Snapshot an authoritative product into an envelope"""
        return cls(
            id=product.id,
            name=product.name,
            price=product.price,
            category=ProductCategory(product.category),
            image_url=product.image_url,
            stock=product.stock,
            brand=product.brand_name,
            event_type=event_type,
        )

    @classmethod
    def deleted(cls, product_id: int) -> "ProductMessage":
        return cls(id=product_id, event_type=ProductEventType.DELETED)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    def to_bytes(self) -> bytes:
        return json.dumps(self.to_wire()).encode("utf-8")
