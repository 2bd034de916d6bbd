"""
Schemas para categorías y atributos de categoría.
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import ConfigDict, Field, field_validator, model_validator

from catalog_admin.models.category import AttributeType, OPTION_ATTRIBUTE_TYPES
from catalog_admin.schemas.common import CamelModel, PaginationMeta


SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"

OptionValue = Annotated[str, Field(max_length=50)]


def _validate_image_url(value: Optional[str]) -> Optional[str]:
    if value and not value.startswith(("http://", "https://")):
        raise ValueError("Image must be a valid URL")
    return value


def _reject_null(value):
    if value is None:
        raise ValueError("Field cannot be null")
    return value


# ================================================================
# CATEGORIAS - ENTRADA
# ================================================================

class CategoryCreate(CamelModel):
    """Schema para crear categoria."""

    name: str = Field(..., min_length=2, max_length=100)
    slug: Optional[str] = Field(None, min_length=1, max_length=120, pattern=SLUG_PATTERN)
    description: Optional[str] = Field(None, max_length=1000)
    image: Optional[str] = Field(None, max_length=500)
    parent_id: Optional[str] = None
    seo_title: Optional[str] = Field(None, max_length=60)
    seo_description: Optional[str] = Field(None, max_length=160)
    is_active: bool = True
    sort_order: Optional[int] = Field(None, ge=0)

    @field_validator("image")
    @classmethod
    def check_image(cls, value):
        return _validate_image_url(value)


class CategoryUpdate(CamelModel):
    """
    Schema para actualizar categoria.
    Solo se aplican los campos enviados; parentId: null mueve a la raíz.
    """

    name: Optional[str] = Field(None, min_length=2, max_length=100)
    slug: Optional[str] = Field(None, min_length=1, max_length=120, pattern=SLUG_PATTERN)
    description: Optional[str] = Field(None, max_length=1000)
    image: Optional[str] = Field(None, max_length=500)
    parent_id: Optional[str] = None
    seo_title: Optional[str] = Field(None, max_length=60)
    seo_description: Optional[str] = Field(None, max_length=160)
    is_active: Optional[bool] = None
    sort_order: Optional[int] = Field(None, ge=0)

    @field_validator("image")
    @classmethod
    def check_image(cls, value):
        return _validate_image_url(value)

    @field_validator("name", "slug", "is_active", "sort_order", mode="before")
    @classmethod
    def check_not_null(cls, value):
        return _reject_null(value)


class CategoryStatusUpdate(CamelModel):
    """Schema para activar/desactivar una categoria."""

    is_active: bool = Field(..., strict=True)


class CategoryOrderItem(CamelModel):
    """Nueva posición de una categoria."""

    id: str = Field(..., min_length=1)
    sort_order: int = Field(..., ge=0)


class CategoryReorderRequest(CamelModel):
    """Schema para reordenar categorias."""

    category_orders: List[CategoryOrderItem] = Field(..., min_length=1)


class CategoryMoveRequest(CamelModel):
    """Schema para mover una categoria a otro padre (null = raíz)."""

    new_parent_id: Optional[str] = None


class CategoryBulkPatch(CamelModel):
    """Campos permitidos en una actualización masiva."""

    is_active: Optional[bool] = None
    parent_id: Optional[str] = None

    @model_validator(mode="after")
    def check_not_empty(self):
        if not self.model_fields_set:
            raise ValueError("At least one field to update is required")
        if "is_active" in self.model_fields_set and self.is_active is None:
            raise ValueError("isActive cannot be null")
        return self


class CategoryBulkUpdateRequest(CamelModel):
    """Schema para actualización masiva de categorias."""

    category_ids: List[str] = Field(..., min_length=1)
    update_data: CategoryBulkPatch


# ================================================================
# ATRIBUTOS - ENTRADA
# ================================================================

class CategoryAttributeCreate(CamelModel):
    """Schema para crear atributo de categoria."""

    name: str = Field(..., min_length=1, max_length=50)
    type: AttributeType
    required: bool = False
    options: Optional[List[OptionValue]] = None
    sort_order: Optional[int] = Field(None, ge=0)


class CategoryAttributeUpdate(CamelModel):
    """Schema para actualizar atributo de categoria."""

    name: Optional[str] = Field(None, min_length=1, max_length=50)
    type: Optional[AttributeType] = None
    required: Optional[bool] = None
    options: Optional[List[OptionValue]] = None
    sort_order: Optional[int] = Field(None, ge=0)

    @field_validator("name", "type", "required", "sort_order", mode="before")
    @classmethod
    def check_not_null(cls, value):
        return _reject_null(value)


# ================================================================
# RESPUESTAS
# ================================================================

class ParentSummary(CamelModel):
    """Resumen del padre de una categoria."""

    id: str
    name: str
    slug: str


class CategoryCounts(CamelModel):
    """Conteos asociados a una categoria."""

    products: int = 0
    children: int = 0


class ProductSummary(CamelModel):
    """Resumen de un producto activo."""

    id: str
    name: str
    slug: str
    base_price: Decimal
    images: List[str] = Field(default_factory=list)

    @field_validator("images", mode="before")
    @classmethod
    def default_images(cls, value):
        return value or []


class CategoryAttributeResponse(CamelModel):
    """Schema de respuesta de atributo."""

    id: str
    category_id: str
    name: str
    type: AttributeType
    required: bool
    options: Optional[List[str]] = None
    sort_order: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CategoryResponse(CamelModel):
    """Schema de respuesta de categoria."""

    id: str
    name: str
    slug: str
    description: Optional[str] = None
    image: Optional[str] = None
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    parent_id: Optional[str] = None
    is_active: bool
    sort_order: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CategoryChildSummary(CategoryResponse):
    """Hijo directo con su conteo de productos."""

    counts: CategoryCounts = Field(default_factory=CategoryCounts, alias="_count")


class CategoryDetail(CategoryResponse):
    """Categoria con padre, conteos y relaciones opcionales."""

    parent: Optional[ParentSummary] = None
    counts: Optional[CategoryCounts] = Field(None, alias="_count")
    attributes: Optional[List[CategoryAttributeResponse]] = None
    children: Optional[List[CategoryChildSummary]] = None
    products: Optional[List[ProductSummary]] = None


class CategoryTreeNode(CategoryResponse):
    """Nodo del árbol jerárquico."""

    counts: CategoryCounts = Field(default_factory=CategoryCounts, alias="_count")
    products: Optional[List[ProductSummary]] = None
    children: List[CategoryTreeNode] = Field(default_factory=list)


class SearchParent(CamelModel):
    name: str


class CategorySearchResult(CamelModel):
    """Resultado de búsqueda de categorias."""

    id: str
    name: str
    slug: str
    description: Optional[str] = None
    image: Optional[str] = None
    parent: Optional[SearchParent] = None


class BreadcrumbItem(CamelModel):
    id: str
    name: str
    slug: str


class CategoryStatistics(CamelModel):
    """Estadísticas agregadas de categorias."""

    total_categories: int
    active_categories: int
    categories_with_products: int
    root_categories: int
    inactive_categories: int
    average_products_per_category: int


class BulkUpdateResult(CamelModel):
    count: int


# ================================================================
# PAYLOADS DEL SOBRE {success, data}
# ================================================================

class CategoryPayload(CamelModel):
    category: CategoryDetail


class CategoryListPayload(CamelModel):
    categories: List[CategoryDetail]
    pagination: PaginationMeta


class CategoryTreePayload(CamelModel):
    """Árbol de categorías (sin paginación)."""

    model_config = ConfigDict(extra="forbid")

    categories: List[CategoryTreeNode]


class CategoryAttributePayload(CamelModel):
    attribute: CategoryAttributeResponse


class CategoryAttributeListPayload(CamelModel):
    attributes: List[CategoryAttributeResponse]


class CategorySearchPayload(CamelModel):
    categories: List[CategorySearchResult]
    count: int


class BreadcrumbPayload(CamelModel):
    breadcrumb: List[BreadcrumbItem]


class StatisticsPayload(CamelModel):
    statistics: CategoryStatistics


def check_attribute_options(attribute_type: AttributeType, options: Optional[List[str]]) -> bool:
    """True si el par tipo/opciones es válido (SELECT y MULTI_SELECT exigen opciones)."""
    if attribute_type in OPTION_ATTRIBUTE_TYPES:
        return bool(options)
    return True
