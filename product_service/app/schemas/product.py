from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProductBase(BaseModel):
    name: str = Field(
        ..., min_length=1, description="Product name (required, non-empty)"
    )
    price: Decimal = Field(..., ge=0, description="Product price (non-negative)")
    image_url: Optional[str] = Field(None, max_length=512)
    stock: int = Field(0, ge=0, description="Units in stock (non-negative)")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("name cannot be empty or whitespace only")
        return v.strip()


class GeneralProductCreate(ProductBase):
    category: Literal["general"] = "general"


class ClothesCreate(ProductBase):
    category: Literal["clothes"]
    brand: Optional[str] = None
    size: Optional[str] = None
    color: Optional[str] = None
    fabric_type: Optional[str] = None


class ElectronicsCreate(ProductBase):
    category: Literal["electronics"]
    brand: Optional[str] = None
    model: Optional[str] = None
    warranty_period: Optional[str] = None
    specifications: Optional[str] = None


class SmartphoneCreate(ProductBase):
    category: Literal["smartphone"]
    brand: Optional[str] = None
    model: Optional[str] = None
    warranty_period: Optional[str] = None
    specifications: Optional[str] = None
    operating_system: Optional[str] = None
    storage_capacity: Optional[int] = Field(None, ge=0)
    ram: Optional[int] = Field(None, ge=0)
    processor: Optional[str] = None
    screen_size: Optional[float] = Field(None, gt=0)


ProductCreate = Annotated[
    Union[GeneralProductCreate, ClothesCreate, ElectronicsCreate, SmartphoneCreate],
    Field(discriminator="category"),
]


class ProductUpdate(BaseModel):
    """Partial update; subtype fields are only accepted for matching variants."""

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(None, min_length=1)
    price: Optional[Decimal] = Field(None, ge=0)
    image_url: Optional[str] = Field(None, max_length=512)
    stock: Optional[int] = Field(None, ge=0)
    brand: Optional[str] = None
    size: Optional[str] = None
    color: Optional[str] = None
    fabric_type: Optional[str] = None
    model: Optional[str] = None
    warranty_period: Optional[str] = None
    specifications: Optional[str] = None
    operating_system: Optional[str] = None
    storage_capacity: Optional[int] = Field(None, ge=0)
    ram: Optional[int] = Field(None, ge=0)
    processor: Optional[str] = None
    screen_size: Optional[float] = Field(None, gt=0)


class ProductResponse(BaseModel):
    id: int
    name: str
    price: Decimal
    category: str
    image_url: Optional[str] = None
    stock: int
    brand: Optional[str] = None
    attributes: Dict[str, Any] = {}
    created_at: datetime
    updated_at: datetime


class ProductListResponse(BaseModel):
    products: List[ProductResponse]
    total: int
