"""Product service for business logic"""

from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..events.change_dispatcher import ProductChangeDispatcher
from ..models.product import Product, ProductCategory
from ..repository.product_repository import ProductRepository
from ..schemas.product import ProductResponse, ProductUpdate
from ..utils.logging import setup_product_logging as setup_logging

logger = setup_logging("product_service.service")

_COMMON_FIELDS = {
    "id",
    "name",
    "price",
    "category",
    "image_url",
    "stock",
    "brand",
    "created_at",
    "updated_at",
}


class ProductService:
    """Catalog CRUD; change events are dispatched after each committed write"""

    def __init__(
        self, db: AsyncSession, dispatcher: Optional[ProductChangeDispatcher] = None
    ):
        self.db = db
        self.repository = ProductRepository(db)
        self.dispatcher = dispatcher

    def _convert_to_product_response(self, product: Product) -> ProductResponse:
        columns = type(product).__mapper__.columns.keys()
        attributes = {
            column: getattr(product, column)
            for column in columns
            if column not in _COMMON_FIELDS
        }
        return ProductResponse(
            id=product.id,
            name=product.name,
            price=Decimal(str(product.price)),
            category=product.category,
            image_url=product.image_url,
            stock=product.stock,
            brand=product.brand_name,
            attributes=attributes,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )

    async def create_product(
        self,
        product_data: Dict[str, Any],
        user_id: str,
        correlation_id: Optional[str] = None,
    ) -> ProductResponse:
        """Create a new product"""
        try:
            product = await self.repository.create_product(product_data)
        except IntegrityError as e:
            await self.db.rollback()
            raise ValueError(f"Product violates catalog constraints: {e.orig}") from e

        logger.info(
            "Product created successfully",
            extra={
                "product_id": product.id,
                "category": product.category,
                "user_id": user_id,
                "correlation_id": correlation_id,
            },
        )

        if self.dispatcher:
            await self.dispatcher.on_created(product)

        return self._convert_to_product_response(product)

    async def get_product(
        self, product_id: int, correlation_id: Optional[str] = None
    ) -> Optional[ProductResponse]:
        """Get product by ID"""
        product = await self.repository.find_by_id(product_id)
        if not product:
            return None

        logger.info(
            "Product retrieved",
            extra={"product_id": product_id, "correlation_id": correlation_id},
        )
        return self._convert_to_product_response(product)

    async def list_products(
        self, category: Optional[ProductCategory] = None
    ) -> List[ProductResponse]:
        products = await self.repository.list_all(category=category)
        return [self._convert_to_product_response(product) for product in products]

    async def update_product(
        self,
        product_id: int,
        product_data: ProductUpdate,
        user_id: str,
        correlation_id: Optional[str] = None,
    ) -> Optional[ProductResponse]:
        """Update product"""
        update_data = product_data.model_dump(exclude_unset=True)
        try:
            product = await self.repository.update_product(product_id, update_data)
        except IntegrityError as e:
            await self.db.rollback()
            raise ValueError(f"Product violates catalog constraints: {e.orig}") from e

        if not product:
            return None

        logger.info(
            "Product updated successfully",
            extra={
                "product_id": product_id,
                "updated_fields": sorted(update_data),
                "user_id": user_id,
                "correlation_id": correlation_id,
            },
        )

        if self.dispatcher:
            await self.dispatcher.on_updated(product)

        return self._convert_to_product_response(product)

    async def delete_product(
        self, product_id: int, user_id: str, correlation_id: Optional[str] = None
    ) -> bool:
        """Delete product"""
        deleted = await self.repository.delete_product(product_id)
        if not deleted:
            return False

        logger.info(
            "Product deleted successfully",
            extra={
                "product_id": product_id,
                "user_id": user_id,
                "correlation_id": correlation_id,
            },
        )

        if self.dispatcher:
            await self.dispatcher.on_deleted(product_id)

        return True
