"""
Endpoints de productos (panel de administración).
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from catalog_admin.config import settings
from catalog_admin.core.deps import get_db, require_permission
from catalog_admin.core.exceptions import NotFoundException
from catalog_admin.models.admin_user import AdminUser
from catalog_admin.schemas.category import ParentSummary
from catalog_admin.schemas.common import ApiResponse, PaginationMeta
from catalog_admin.schemas.product import (
    ProductCategoryListPayload,
    ProductCreate,
    ProductListPayload,
    ProductPayload,
    ProductStatusUpdate,
    ProductUpdate,
)
from catalog_admin.services.activity_log_service import log_audit
from catalog_admin.services.product_service import product_service
from catalog_admin.utils.pagination import create_pagination_meta

router = APIRouter()


@router.get("", response_model=ApiResponse[ProductListPayload])
def get_products(
    search: Optional[str] = Query(None, description="Texto en nombre o descripción"),
    category_id: Optional[str] = Query(None, alias="categoryId"),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1),
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_permission("products.read"))
):
    """Listado paginado de productos, los más recientes primero."""
    limit = min(limit, settings.MAX_PAGE_SIZE)
    products, total = product_service.list(
        db, search=search, category_id=category_id, is_active=is_active, page=page, limit=limit
    )
    return ApiResponse(data=ProductListPayload(
        products=products,
        pagination=PaginationMeta(**create_pagination_meta(total, page, limit)),
    ))


@router.get("/category/{category_id}", response_model=ApiResponse[ProductCategoryListPayload])
def get_products_by_category(
    category_id: str,
    include_subcategories: bool = Query(True, alias="includeSubcategories"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1),
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_permission("products.read"))
):
    """Productos activos de una categoría (y de sus subcategorías directas)."""
    limit = min(limit, settings.MAX_PAGE_SIZE)
    category, products, total = product_service.list_by_category(
        db, category_id, include_subcategories=include_subcategories, page=page, limit=limit
    )
    return ApiResponse(data=ProductCategoryListPayload(
        category=ParentSummary.model_validate(category),
        products=products,
        pagination=PaginationMeta(**create_pagination_meta(total, page, limit)),
    ))


@router.get("/{product_id}", response_model=ApiResponse[ProductPayload])
def get_product(
    product_id: str,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_permission("products.read"))
):
    product = product_service.get_by_id(db, product_id)
    if not product:
        raise NotFoundException("Product")
    return ApiResponse(data=ProductPayload(product=product))


@router.post("", response_model=ApiResponse[ProductPayload], status_code=status.HTTP_201_CREATED)
def create_product(
    product_in: ProductCreate,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_permission("products.create"))
):
    """Crear un producto en una categoría existente."""
    data = product_in.model_dump(exclude_unset=True)
    data.setdefault("images", [])
    product = product_service.create(db, data)
    log_audit("CREATE", current_user.id, "product", product.id, data)
    return ApiResponse(message="Product created successfully", data=ProductPayload(product=product))


@router.put("/{product_id}", response_model=ApiResponse[ProductPayload])
def update_product(
    product_id: str,
    product_in: ProductUpdate,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_permission("products.update"))
):
    """Actualizar un producto. Solo se modifican los campos enviados."""
    data = product_in.model_dump(exclude_unset=True)
    product = product_service.update(db, product_id, data)
    log_audit("UPDATE", current_user.id, "product", product_id, data)
    return ApiResponse(message="Product updated successfully", data=ProductPayload(product=product))


@router.patch("/{product_id}/status", response_model=ApiResponse[ProductPayload])
def update_product_status(
    product_id: str,
    status_in: ProductStatusUpdate,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_permission("products.update"))
):
    product = product_service.update_status(db, product_id, status_in.is_active)
    log_audit("UPDATE_STATUS", current_user.id, "product", product_id, {"is_active": status_in.is_active})
    state = "activated" if status_in.is_active else "deactivated"
    return ApiResponse(message=f"Product {state} successfully", data=ProductPayload(product=product))


@router.delete("/{product_id}", response_model=ApiResponse[None])
def delete_product(
    product_id: str,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_permission("products.delete"))
):
    product_service.delete(db, product_id)
    log_audit("DELETE", current_user.id, "product", product_id)
    return ApiResponse(message="Product deleted successfully")
