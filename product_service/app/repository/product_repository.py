"""Product repository for database operations"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..models.product import PRODUCT_MODELS, Product, ProductCategory


class AuthoritativeProductStore(ABC):
    """Read access to the source-of-truth catalog used by the sync pipeline"""

    @abstractmethod
    async def list_all(self) -> List[Product]:
        pass

    @abstractmethod
    async def find_by_id(self, product_id: int) -> Optional[Product]:
        pass

    @abstractmethod
    async def count(self) -> int:
        pass


class ProductRepository(AuthoritativeProductStore):
    """Repository for product database operations"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_product(self, product_data: Dict[str, Any]) -> Product:
        """Create a product of the variant named by ``product_data["category"]``"""
        data = dict(product_data)
        category = ProductCategory(data.pop("category", ProductCategory.GENERAL))
        model_class = PRODUCT_MODELS[category]

        product = model_class(**data)
        self.db.add(product)
        await self.db.commit()
        await self.db.refresh(product)
        return product

    async def find_by_id(self, product_id: int) -> Optional[Product]:
        query = select(Product).where(Product.id == product_id)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def list_all(
        self, category: Optional[ProductCategory] = None
    ) -> List[Product]:
        """All products by id, or only those listed under ``category``"""
        query = select(Product).order_by(Product.id)
        if category is not None:
            query = query.where(
                Product.category.in_([variant.value for variant in category.variants])
            )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def count(self) -> int:
        result = await self.db.execute(select(func.count()).select_from(Product))
        return int(result.scalar_one())

    async def update_product(
        self, product_id: int, update_data: Dict[str, Any]
    ) -> Optional[Product]:
        """Apply a partial update; raises ValueError for fields the variant lacks"""
        product = await self.find_by_id(product_id)
        if not product:
            return None

        mapped_columns = set(type(product).__mapper__.columns.keys())
        unsupported = [field for field in update_data if field not in mapped_columns]
        if unsupported:
            raise ValueError(
                f"Fields {sorted(unsupported)} are not valid for "
                f"'{product.category}' products"
            )

        for field, value in update_data.items():
            setattr(product, field, value)

        await self.db.commit()
        await self.db.refresh(product)
        return product

    async def delete_product(self, product_id: int) -> bool:
        product = await self.find_by_id(product_id)
        if not product:
            return False

        await self.db.delete(product)
        await self.db.commit()
        return True


class SessionProductStore(AuthoritativeProductStore):
    """Opens a short-lived session per call; used outside of request scope"""

    def __init__(self, session_maker: async_sessionmaker):
        self.session_maker = session_maker

    async def list_all(self) -> List[Product]:
        async with self.session_maker() as session:
            return await ProductRepository(session).list_all()

    async def find_by_id(self, product_id: int) -> Optional[Product]:
        async with self.session_maker() as session:
            return await ProductRepository(session).find_by_id(product_id)

    async def count(self) -> int:
        async with self.session_maker() as session:
            return await ProductRepository(session).count()
