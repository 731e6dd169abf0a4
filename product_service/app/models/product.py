import enum
from decimal import Decimal
from typing import Optional, Tuple

from sqlalchemy import DECIMAL, CheckConstraint, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import ProductServiceBaseModel


class ProductCategory(str, enum.Enum):
    """Closed set of product variants; also the polymorphic discriminator."""

    GENERAL = "general"
    CLOTHES = "clothes"
    ELECTRONICS = "electronics"
    SMARTPHONE = "smartphone"

    @property
    def is_branded(self) -> bool:
        return self in (
            ProductCategory.CLOTHES,
            ProductCategory.ELECTRONICS,
            ProductCategory.SMARTPHONE,
        )

    @property
    def variants(self) -> Tuple["ProductCategory", ...]:
        """Categories listed under this one; smartphones are electronics too."""
        if self is ProductCategory.ELECTRONICS:
            return (ProductCategory.ELECTRONICS, ProductCategory.SMARTPHONE)
        return (self,)


class Product(ProductServiceBaseModel):
    __tablename__ = "products"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    price: Mapped[Decimal] = mapped_column(DECIMAL(10, 2), nullable=False)
    category: Mapped[str] = mapped_column(
        String(32), nullable=False, default=ProductCategory.GENERAL.value
    )
    image_url: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    stock: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    __table_args__ = (
        CheckConstraint("price >= 0", name="product_price_non_negative"),
        CheckConstraint("stock >= 0", name="product_stock_non_negative"),
    )
    __mapper_args__ = {
        "polymorphic_on": "category",
        "polymorphic_identity": ProductCategory.GENERAL.value,
        # async sessions cannot lazy-load subclass columns
        "with_polymorphic": "*",
    }

    @property
    def brand_name(self) -> Optional[str]:
        """Brand of the product, ``None`` for unbranded variants."""
        if ProductCategory(self.category).is_branded:
            return getattr(self, "brand", None)
        return None


class Clothes(Product):
    __tablename__ = "clothes"

    id: Mapped[int] = mapped_column(ForeignKey("products.id"), primary_key=True)
    brand: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    size: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    color: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    fabric_type: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)

    __mapper_args__ = {"polymorphic_identity": ProductCategory.CLOTHES.value}


class Electronics(Product):
    __tablename__ = "electronics"

    id: Mapped[int] = mapped_column(ForeignKey("products.id"), primary_key=True)
    brand: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    model: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    warranty_period: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    specifications: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)

    __mapper_args__ = {"polymorphic_identity": ProductCategory.ELECTRONICS.value}


class Smartphone(Electronics):
    __tablename__ = "smartphones"

    id: Mapped[int] = mapped_column(ForeignKey("electronics.id"), primary_key=True)
    operating_system: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    storage_capacity: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    ram: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    processor: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    screen_size: Mapped[Optional[float]] = mapped_column(nullable=True)

    __mapper_args__ = {"polymorphic_identity": ProductCategory.SMARTPHONE.value}


PRODUCT_MODELS = {
    ProductCategory.GENERAL: Product,
    ProductCategory.CLOTHES: Clothes,
    ProductCategory.ELECTRONICS: Electronics,
    ProductCategory.SMARTPHONE: Smartphone,
}

