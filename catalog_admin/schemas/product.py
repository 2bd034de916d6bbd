"""
Schemas para productos.
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, field_validator

from catalog_admin.schemas.category import SLUG_PATTERN, ParentSummary
from catalog_admin.schemas.common import CamelModel, PaginationMeta

MAX_PRODUCT_IMAGES = 10


def _validate_images(value: Optional[List[str]]) -> Optional[List[str]]:
    for url in value or []:
        if not url.startswith(("http://", "https://")):
            raise ValueError("Images must be valid URLs")
    return value


class ProductCreate(CamelModel):
    """Schema para crear producto."""

    name: str = Field(..., min_length=2, max_length=200)
    slug: Optional[str] = Field(None, min_length=1, max_length=200, pattern=SLUG_PATTERN)
    description: Optional[str] = Field(None, max_length=5000)
    base_price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    category_id: str = Field(..., min_length=1)
    images: List[str] = Field(default_factory=list, max_length=MAX_PRODUCT_IMAGES)
    is_active: bool = True

    @field_validator("images")
    @classmethod
    def check_images(cls, value):
        return _validate_images(value)


class ProductUpdate(CamelModel):
    """Schema para actualizar producto. Solo se aplican los campos enviados."""

    name: Optional[str] = Field(None, min_length=2, max_length=200)
    slug: Optional[str] = Field(None, min_length=1, max_length=200, pattern=SLUG_PATTERN)
    description: Optional[str] = Field(None, max_length=5000)
    base_price: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    category_id: Optional[str] = Field(None, min_length=1)
    images: Optional[List[str]] = Field(None, max_length=MAX_PRODUCT_IMAGES)
    is_active: Optional[bool] = None

    @field_validator("images")
    @classmethod
    def check_images(cls, value):
        return _validate_images(value)

    @field_validator("name", "slug", "base_price", "category_id", "images", "is_active", mode="before")
    @classmethod
    def check_not_null(cls, value):
        if value is None:
            raise ValueError("Field cannot be null")
        return value


class ProductStatusUpdate(CamelModel):
    is_active: bool = Field(..., strict=True)


class ProductResponse(CamelModel):
    """Schema de respuesta de producto."""

    id: str
    name: str
    slug: str
    description: Optional[str] = None
    base_price: Decimal
    images: List[str] = Field(default_factory=list)
    is_active: bool
    category_id: str
    category: Optional[ParentSummary] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("images", mode="before")
    @classmethod
    def default_images(cls, value):
        return value or []


class ProductPayload(CamelModel):
    product: ProductResponse


class ProductListPayload(CamelModel):
    products: List[ProductResponse]
    pagination: PaginationMeta


class ProductCategoryListPayload(CamelModel):
    """Productos de una categoría (y de sus subcategorías directas)."""

    category: ParentSummary
    products: List[ProductResponse]
    pagination: PaginationMeta
