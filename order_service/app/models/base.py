from datetime import datetime, timezone

from sqlalchemy.orm import DeclarativeBase


def utcnow_naive() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class OrderServiceBase(DeclarativeBase):
    """Base class for all Order Service database models."""

    pass
