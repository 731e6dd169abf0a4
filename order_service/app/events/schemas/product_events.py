"""
Product change envelope as received from the product topic.

Mirrors the catalog's wire format. Any ``eventType`` string parses; the
reconciler decides what to do with kinds it does not know.
"""

import json
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..base import MalformedMessageError


class ProductEventType(str, Enum):
    CREATED = "PRODUCT_CREATED"
    UPDATED = "PRODUCT_UPDATED"
    DELETED = "PRODUCT_DELETED"
    INITIAL_LOAD = "INITIAL_LOAD"


SNAPSHOT_EVENT_TYPES = frozenset(
    {ProductEventType.CREATED, ProductEventType.UPDATED, ProductEventType.INITIAL_LOAD}
)


class ProductMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int
    name: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    category: Optional[str] = None
    image_url: Optional[str] = Field(None, alias="imageUrl")
    stock: Optional[int] = Field(None, ge=0)
    brand: Optional[str] = None
    event_type: str = Field(..., alias="eventType")
    timestamp: Optional[datetime] = None

    @property
    def kind(self) -> Optional[ProductEventType]:
        """The event type if it is one of the known kinds, else ``None``"""
        try:
            return ProductEventType(self.event_type)
        except ValueError:
            return None

    @classmethod
    def from_bytes(cls, raw: bytes) -> "ProductMessage":
        """
        Decode a UTF-8 JSON record.

        Raises:
            MalformedMessageError: on bad encoding, invalid JSON, or a
                payload that does not satisfy the envelope schema
        """
        try:
            payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError, AttributeError) as e:
            raise MalformedMessageError(f"Record is not UTF-8 JSON: {e}") from e

        if not isinstance(payload, dict):
            raise MalformedMessageError(
                f"Expected a JSON object, got {type(payload).__name__}"
            )

        try:
            return cls.model_validate(payload)
        except ValidationError as e:
            raise MalformedMessageError(
                f"Record does not match the product envelope: {e.error_count()} error(s)"
            ) from e
