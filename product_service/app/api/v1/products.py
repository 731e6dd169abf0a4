"""Product API endpoints"""

from typing import List, Optional

from fastapi import APIRouter, HTTPException, status

from ...models.product import ProductCategory
from ...schemas.product import (
    ProductCreate,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
)
from ...services.product_service import ProductService
from ...utils.logging import setup_product_logging as setup_logging
from ..dependencies import AdminUserDep, CorrelationIdDep, ProductServiceDep

logger = setup_logging("product_service.products_api")
router = APIRouter(prefix="/products")


@router.post("/", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    product_data: ProductCreate,
    correlation_id: Optional[str] = CorrelationIdDep,
    service: ProductService = ProductServiceDep,
    user_id: str = AdminUserDep,
):
    """Create a new product of any category (admin only)"""
    try:
        return await service.create_product(
            product_data=product_data.model_dump(),
            user_id=user_id,
            correlation_id=correlation_id,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/", response_model=ProductListResponse)
async def list_products(
    category: Optional[ProductCategory] = None,
    service: ProductService = ProductServiceDep,
):
    """List products, optionally only one category (electronics includes smartphones)"""
    products = await service.list_products(category=category)
    return ProductListResponse(products=products, total=len(products))


@router.get("/categories", response_model=List[str])
async def list_categories():
    return [category.value for category in ProductCategory]


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: int,
    correlation_id: Optional[str] = CorrelationIdDep,
    service: ProductService = ProductServiceDep,
):
    """Get product details by ID"""
    product = await service.get_product(
        product_id=product_id, correlation_id=correlation_id
    )
    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Product not found"
        )
    return product


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: int,
    product_data: ProductUpdate,
    correlation_id: Optional[str] = CorrelationIdDep,
    service: ProductService = ProductServiceDep,
    user_id: str = AdminUserDep,
):
    """Update product (admin only)"""
    try:
        product = await service.update_product(
            product_id=product_id,
            product_data=product_data,
            user_id=user_id,
            correlation_id=correlation_id,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Product not found"
        )
    return product


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: int,
    correlation_id: Optional[str] = CorrelationIdDep,
    service: ProductService = ProductServiceDep,
    user_id: str = AdminUserDep,
):
    """Delete product (admin only)"""
    deleted = await service.delete_product(
        product_id=product_id, user_id=user_id, correlation_id=correlation_id
    )
    if not deleted:
        logger.info(
            "Delete requested for unknown product",
            extra={"product_id": product_id, "correlation_id": correlation_id},
        )
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Product not found"
        )
    return None
