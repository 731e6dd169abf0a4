from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import DECIMAL, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import OrderServiceBase, utcnow_naive


class ProductReplica(OrderServiceBase):
    """
    Local, eventually consistent copy of a catalog product.

    The id is the catalog's id, never generated here. Only the product
    event reconciler writes to this table.
    """

    __tablename__ = "product_replicas"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    price: Mapped[Optional[Decimal]] = mapped_column(DECIMAL(10, 2), nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    stock: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    brand: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    last_event_type: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    last_synced_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        default=utcnow_naive,
        onupdate=utcnow_naive,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<ProductReplica(id={self.id}, stock={self.stock})>"
