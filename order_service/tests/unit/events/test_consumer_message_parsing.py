import json
from decimal import Decimal

import pytest

from order_service.app.events.base import MalformedMessageError
from order_service.app.events.schemas import ProductEventType, ProductMessage


def test_parses_camel_case_wire_fields(product_record):
    message = ProductMessage.from_bytes(product_record("PRODUCT_CREATED", stock=3))

    assert message.id == 10
    assert message.image_url == "https://cdn.example.com/trail-runner.png"
    assert message.price == Decimal("89.9")
    assert message.stock == 3
    assert message.kind is ProductEventType.CREATED


def test_delete_record_carries_only_id(product_record):
    message = ProductMessage.from_bytes(product_record("PRODUCT_DELETED"))

    assert message.kind is ProductEventType.DELETED
    assert message.name is None
    assert message.stock is None


def test_unknown_event_type_still_parses(product_record):
    message = ProductMessage.from_bytes(product_record("FOO"))

    assert message.event_type == "FOO"
    assert message.kind is None


@pytest.mark.parametrize(
    "raw",
    [
        b"{not json",
        b"\xff\xfe\x00",
        b"[1, 2, 3]",
        json.dumps({"eventType": "PRODUCT_UPDATED"}).encode(),
        json.dumps({"id": 1}).encode(),
        json.dumps({"id": 1, "eventType": "PRODUCT_UPDATED", "stock": -1}).encode(),
    ],
)
def test_invalid_records_are_malformed(raw):
    with pytest.raises(MalformedMessageError):
        ProductMessage.from_bytes(raw)
