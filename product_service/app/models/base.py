from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow_naive() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class ProductServiceBase(DeclarativeBase):
    """Base class for all Product Service database models."""

    pass


class ProductServiceBaseModel(ProductServiceBase):
    """Base model with surrogate key and audit timestamps for catalog tables."""

    __abstract__ = True
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), default=_utcnow_naive, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        default=_utcnow_naive,
        onupdate=_utcnow_naive,
        nullable=False,
    )
