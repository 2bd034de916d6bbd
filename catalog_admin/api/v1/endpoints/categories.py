"""
Endpoints de categorías (panel de administración).

Las rutas estáticas (/stats, /search, /export/csv, /reorder, /bulk-update)
se declaran antes que /{category_id}.
"""
import io
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from catalog_admin.config import settings
from catalog_admin.core.deps import get_db, require_permission
from catalog_admin.core.exceptions import NotFoundException
from catalog_admin.models.admin_user import AdminUser
from catalog_admin.schemas.category import (
    BreadcrumbPayload,
    BulkUpdateResult,
    CategoryAttributeCreate,
    CategoryAttributeListPayload,
    CategoryAttributePayload,
    CategoryAttributeResponse,
    CategoryAttributeUpdate,
    CategoryBulkUpdateRequest,
    CategoryCreate,
    CategoryListPayload,
    CategoryMoveRequest,
    CategoryPayload,
    CategoryReorderRequest,
    CategorySearchPayload,
    CategoryStatusUpdate,
    CategoryTreePayload,
    CategoryUpdate,
    StatisticsPayload,
)
from catalog_admin.schemas.common import ApiResponse, PaginationMeta
from catalog_admin.services.activity_log_service import log_audit
from catalog_admin.services.category_attribute_service import category_attribute_service
from catalog_admin.services.category_service import category_service
from catalog_admin.utils.pagination import create_pagination_meta

router = APIRouter()


# ================================================================
# LECTURA
# ================================================================

@router.get("", response_model=ApiResponse[CategoryListPayload | CategoryTreePayload])
def get_categories(
    flat: bool = Query(False, description="Listado plano paginado en lugar de árbol"),
    include_products: bool = Query(False, alias="includeProducts"),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1),
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_permission("categories.read"))
):
    """
    Obtener categorías como árbol jerárquico (por defecto) o listado plano.
    El listado plano se pagina; el límite máximo es MAX_PAGE_SIZE.
    """
    if not flat:
        tree = category_service.get_hierarchy(db, is_active=is_active, include_products=include_products)
        return ApiResponse(data=CategoryTreePayload(categories=tree))

    limit = min(limit, settings.MAX_PAGE_SIZE)
    items, total = category_service.get_flat(
        db, is_active=is_active, include_products=include_products, page=page, limit=limit
    )
    return ApiResponse(data=CategoryListPayload(
        categories=items,
        pagination=PaginationMeta(**create_pagination_meta(total, page, limit)),
    ))


@router.get("/stats", response_model=ApiResponse[StatisticsPayload])
def get_category_statistics(
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_permission("categories.read"))
):
    """Estadísticas agregadas de categorías."""
    return ApiResponse(data=StatisticsPayload(statistics=category_service.statistics(db)))


@router.get("/search", response_model=ApiResponse[CategorySearchPayload])
def search_categories(
    q: str = Query(..., min_length=1, description="Término de búsqueda"),
    limit: int = Query(10, ge=1),
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_permission("categories.read"))
):
    """Buscar categorías activas por nombre o descripción."""
    results = category_service.search(db, q, limit=limit)
    return ApiResponse(data=CategorySearchPayload(categories=results, count=len(results)))


@router.get("/export/csv")
def export_categories(
    format: str = Query("csv", description="csv o xlsx"),
    include_hierarchy: bool = Query(True, alias="includeHierarchy"),
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_permission("categories.read"))
):
    """
    Exportar todas las categorías como archivo descargable.
    Soporta CSV y Excel (xlsx).
    """
    export_file = category_service.export(db, format=format, include_hierarchy=include_hierarchy)
    log_audit("EXPORT", current_user.id, "category", "multiple", {"format": format, "count": export_file.count})

    return StreamingResponse(
        io.BytesIO(export_file.content),
        media_type=export_file.content_type,
        headers={"Content-Disposition": f'attachment; filename="{export_file.filename}"'},
    )


# ================================================================
# OPERACIONES MASIVAS
# ================================================================

@router.patch("/reorder", response_model=ApiResponse[None])
def reorder_categories(
    request: CategoryReorderRequest,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_permission("categories.update"))
):
    """Reordenar categorías. Cada cambio se aplica por separado."""
    orders = [item.model_dump() for item in request.category_orders]
    category_service.reorder_many(db, orders)
    log_audit("REORDER", current_user.id, "category", "multiple", orders)
    return ApiResponse(message="Categories reordered successfully")


@router.patch("/bulk-update", response_model=ApiResponse[BulkUpdateResult])
def bulk_update_categories(
    request: CategoryBulkUpdateRequest,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_permission("categories.update"))
):
    """Aplicar el mismo cambio (isActive, parentId) a varias categorías."""
    patch = request.update_data.model_dump(exclude_unset=True)
    count = category_service.bulk_update(db, request.category_ids, patch)
    log_audit("BULK_UPDATE", current_user.id, "category", "multiple", {
        "category_ids": request.category_ids,
        "update_data": patch,
    })
    return ApiResponse(
        message=f"{count} categories updated successfully",
        data=BulkUpdateResult(count=count),
    )


# ================================================================
# CRUD POR ID
# ================================================================

@router.post("", response_model=ApiResponse[CategoryPayload], status_code=status.HTTP_201_CREATED)
def create_category(
    category_in: CategoryCreate,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_permission("categories.create"))
):
    """Crear una nueva categoría."""
    data = category_in.model_dump(exclude_unset=True)
    category = category_service.create(db, data)
    log_audit("CREATE", current_user.id, "category", category.id, data)
    return ApiResponse(message="Category created successfully", data=CategoryPayload(category=category))


@router.get("/{category_id}", response_model=ApiResponse[CategoryPayload])
def get_category(
    category_id: str,
    include_products: bool = Query(False, alias="includeProducts"),
    include_children: bool = Query(True, alias="includeChildren"),
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_permission("categories.read"))
):
    """Obtener una categoría con padre, atributos, hijos y conteos."""
    category = category_service.get_by_id(
        db, category_id, include_children=include_children, include_products=include_products
    )
    if not category:
        raise NotFoundException("Category")
    return ApiResponse(data=CategoryPayload(category=category))


@router.put("/{category_id}", response_model=ApiResponse[CategoryPayload])
def update_category(
    category_id: str,
    category_in: CategoryUpdate,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_permission("categories.update"))
):
    """
    Actualizar una categoría.
    Solo se modifican los campos enviados; parentId: null la mueve a la raíz.
    """
    data = category_in.model_dump(exclude_unset=True)
    category = category_service.update(db, category_id, data)
    log_audit("UPDATE", current_user.id, "category", category_id, data)
    return ApiResponse(message="Category updated successfully", data=CategoryPayload(category=category))


@router.patch("/{category_id}/status", response_model=ApiResponse[CategoryPayload])
def update_category_status(
    category_id: str,
    status_in: CategoryStatusUpdate,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_permission("categories.update"))
):
    """Activar o desactivar una categoría."""
    category = category_service.update_status(db, category_id, status_in.is_active)
    log_audit("UPDATE_STATUS", current_user.id, "category", category_id, {"is_active": status_in.is_active})
    state = "activated" if status_in.is_active else "deactivated"
    return ApiResponse(message=f"Category {state} successfully", data=CategoryPayload(category=category))


@router.patch("/{category_id}/move", response_model=ApiResponse[CategoryPayload])
def move_category(
    category_id: str,
    request: CategoryMoveRequest,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_permission("categories.update"))
):
    """Mover una categoría a otro padre (newParentId: null = raíz)."""
    category = category_service.move(db, category_id, request.new_parent_id)
    log_audit("MOVE", current_user.id, "category", category_id, {"new_parent_id": request.new_parent_id})
    return ApiResponse(message="Category moved successfully", data=CategoryPayload(category=category))


@router.delete("/{category_id}", response_model=ApiResponse[None])
def delete_category(
    category_id: str,
    move_products_to: Optional[str] = Query(None, alias="moveProductsTo"),
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_permission("categories.delete"))
):
    """
    Eliminar una categoría sin subcategorías.
    Si tiene productos, moveProductsTo indica la categoría destino.
    """
    moved = category_service.delete(db, category_id, move_products_to=move_products_to)
    log_audit("DELETE", current_user.id, "category", category_id, {
        "move_products_to": move_products_to,
        "products_moved": moved,
    })
    return ApiResponse(message="Category deleted successfully")


@router.get("/{category_id}/breadcrumb", response_model=ApiResponse[BreadcrumbPayload])
def get_category_breadcrumb(
    category_id: str,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_permission("categories.read"))
):
    """Ruta desde la raíz hasta la categoría."""
    trail = category_service.breadcrumb(db, category_id)
    return ApiResponse(data=BreadcrumbPayload(breadcrumb=trail))


# ================================================================
# ATRIBUTOS
# ================================================================

@router.get("/{category_id}/attributes", response_model=ApiResponse[CategoryAttributeListPayload])
def get_category_attributes(
    category_id: str,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_permission("categories.read"))
):
    """Atributos de la categoría ordenados por sortOrder."""
    attributes = category_attribute_service.list(db, category_id)
    return ApiResponse(data=CategoryAttributeListPayload(
        attributes=[CategoryAttributeResponse.model_validate(item) for item in attributes]
    ))


@router.post(
    "/{category_id}/attributes",
    response_model=ApiResponse[CategoryAttributePayload],
    status_code=status.HTTP_201_CREATED
)
def create_category_attribute(
    category_id: str,
    attribute_in: CategoryAttributeCreate,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_permission("categories.create"))
):
    """Crear un atributo personalizado para la categoría."""
    data = attribute_in.model_dump(exclude_unset=True)
    attribute = category_attribute_service.create(db, category_id, data)
    log_audit("CREATE", current_user.id, "category_attribute", attribute.id, data)
    return ApiResponse(
        message="Attribute created successfully",
        data=CategoryAttributePayload(attribute=CategoryAttributeResponse.model_validate(attribute)),
    )


@router.put("/{category_id}/attributes/{attribute_id}", response_model=ApiResponse[CategoryAttributePayload])
def update_category_attribute(
    category_id: str,
    attribute_id: str,
    attribute_in: CategoryAttributeUpdate,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_permission("categories.update"))
):
    """Actualizar un atributo de la categoría."""
    data = attribute_in.model_dump(exclude_unset=True)
    attribute = category_attribute_service.update(db, attribute_id, data, category_id=category_id)
    log_audit("UPDATE", current_user.id, "category_attribute", attribute_id, data)
    return ApiResponse(
        message="Attribute updated successfully",
        data=CategoryAttributePayload(attribute=CategoryAttributeResponse.model_validate(attribute)),
    )


@router.delete("/{category_id}/attributes/{attribute_id}", response_model=ApiResponse[None])
def delete_category_attribute(
    category_id: str,
    attribute_id: str,
    db: Session = Depends(get_db),
    current_user: AdminUser = Depends(require_permission("categories.delete"))
):
    """Eliminar un atributo de la categoría."""
    category_attribute_service.delete(db, attribute_id, category_id=category_id)
    log_audit("DELETE", current_user.id, "category_attribute", attribute_id)
    return ApiResponse(message="Attribute deleted successfully")
