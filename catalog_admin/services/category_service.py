"""
Servicio de negocio para categorías.

Orquesta la capa CRUD con las reglas de jerarquía (hierarchy_service):
creación, actualización, borrado protegido, movimientos, vistas de árbol
y listado plano, búsqueda, breadcrumbs, estadísticas y exportación.
"""
import logging
import math
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from catalog_admin.config import settings
from catalog_admin.core.exceptions import ConflictException, NotFoundException, ValidationException
from catalog_admin.crud.category import category as category_crud
from catalog_admin.crud.category_attribute import category_attribute as attribute_crud
from catalog_admin.crud.product import product as product_crud
from catalog_admin.crud.promotion import promotion as promotion_crud
from catalog_admin.models.category import Category
from catalog_admin.schemas.category import (
    BreadcrumbItem,
    CategoryAttributeResponse,
    CategoryChildSummary,
    CategoryCounts,
    CategoryDetail,
    CategoryResponse,
    CategorySearchResult,
    CategoryStatistics,
    CategoryTreeNode,
    ParentSummary,
    ProductSummary,
    SearchParent,
)
from catalog_admin.services.export_service import ExportFile, build_export
from catalog_admin.services.hierarchy_service import MAX_CATEGORY_DEPTH, hierarchy_service
from catalog_admin.utils.slug import generate_slug, with_timestamp_suffix

logger = logging.getLogger(__name__)

# Campos que admite la actualización masiva
BULK_UPDATE_FIELDS = ("is_active", "parent_id")


def _base_fields(category: Category) -> Dict[str, Any]:
    return CategoryResponse.model_validate(category).model_dump()


class CategoryService:
    """Operaciones de negocio sobre el árbol de categorías."""

    # ================================================================
    # HELPERS
    # ================================================================

    def _unique_slug(self, db: Session, slug: str, exclude_id: Optional[str] = None) -> str:
        """Devolver el slug o, si ya existe, el slug con sufijo de timestamp."""
        if category_crud.get_by_slug(db, slug=slug, exclude_id=exclude_id):
            return with_timestamp_suffix(slug)
        return slug

    def _to_detail(self, db: Session, category: Category, with_counts: bool = True) -> CategoryDetail:
        """Categoría con resumen del padre y, opcionalmente, conteos."""
        parent = ParentSummary.model_validate(category.parent) if category.parent else None
        counts = None
        if with_counts:
            counts = CategoryCounts(
                products=category_crud.count_products(db, category_id=category.id),
                children=category_crud.count_children(db, category_id=category.id),
            )
        return CategoryDetail(**_base_fields(category), parent=parent, counts=counts)

    # ================================================================
    # ESCRITURA
    # ================================================================

    def create(self, db: Session, data: Dict[str, Any]) -> CategoryDetail:
        """
        Crear una categoría.

        Args:
            db: Sesión de base de datos
            data: Campos de la categoría (name obligatorio)

        Returns:
            Categoría creada con padre y conteos

        Raises:
            ValidationException: nombre ausente, padre inexistente o profundidad excedida
        """
        data = dict(data)
        if not data.get("name"):
            raise ValidationException("Category name is required")

        slug = data.get("slug") or generate_slug(data["name"])
        data["slug"] = self._unique_slug(db, slug)

        parent_id = data.get("parent_id") or None
        data["parent_id"] = parent_id
        hierarchy_service.validate_reparent(db, None, parent_id)

        if data.get("sort_order") is None:
            max_order = category_crud.get_max_sort_order(db, parent_id=parent_id)
            data["sort_order"] = (max_order or 0) + 1

        category = category_crud.create(db, obj_in=data)
        logger.info(f"Categoría creada: {category.id} ({category.slug})")
        return self._to_detail(db, category)

    def update(self, db: Session, category_id: str, data: Dict[str, Any]) -> CategoryDetail:
        """
        Actualizar solo los campos enviados de una categoría.

        Si cambia el nombre sin slug explícito, el slug se regenera.
        Si parent_id viene en el parche (incluido None) se valida la jerarquía.

        Raises:
            NotFoundException: Si la categoría no existe
            ValidationException: Si el nuevo padre no es válido
        """
        category = category_crud.get_or_404(db, category_id, "Category")

        data = dict(data)

        if "parent_id" in data:
            data["parent_id"] = data["parent_id"] or None
            hierarchy_service.validate_reparent(db, category_id, data["parent_id"])

        if data.get("slug"):
            if data["slug"] != category.slug:
                data["slug"] = self._unique_slug(db, data["slug"], exclude_id=category_id)
        elif data.get("name") and data["name"] != category.name:
            data["slug"] = self._unique_slug(db, generate_slug(data["name"]), exclude_id=category_id)

        category = category_crud.update(db, db_obj=category, obj_in=data)
        logger.info(f"Categoría actualizada: {category_id} campos={sorted(data)}")
        return self._to_detail(db, category)

    def update_status(self, db: Session, category_id: str, is_active: bool) -> CategoryDetail:
        """Activar o desactivar una categoría."""
        return self.update(db, category_id, {"is_active": is_active})

    def delete(self, db: Session, category_id: str, move_products_to: Optional[str] = None) -> int:
        """
        Eliminar una categoría sin hijos.

        Los productos se mueven a move_products_to si se indica. Atributos,
        vínculos con promociones y la categoría se eliminan en una sola
        transacción.

        Returns:
            Cantidad de productos reasignados

        Raises:
            NotFoundException: Si la categoría no existe
            ConflictException: Si tiene subcategorías, o productos sin destino
            ValidationException: Si la categoría destino no existe
        """
        category = category_crud.get_or_404(db, category_id, "Category")

        if category_crud.count_children(db, category_id=category_id) > 0:
            raise ConflictException("Cannot delete category with subcategories. Move or delete them first.")

        product_count = category_crud.count_products(db, category_id=category_id)
        if product_count > 0:
            if not move_products_to:
                raise ConflictException(
                    "Category has products. Specify a target category to move them or delete products first."
                )
            if move_products_to == category_id or category_crud.get(db, move_products_to) is None:
                raise ValidationException("Target category not found")

        moved = 0
        try:
            if product_count > 0:
                moved = product_crud.reassign_category(
                    db, from_category_id=category_id, to_category_id=move_products_to
                )
            attribute_crud.delete_by_category(db, category_id=category_id)
            promotion_crud.delete_category_links(db, category_id=category_id)
            category_crud.remove(db, id=category_id, commit=False)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error eliminando categoría {category_id}: {str(e)}")
            raise

        logger.info(f"Categoría eliminada: {category_id} (productos movidos: {moved})")
        return moved

    def move(self, db: Session, category_id: str, new_parent_id: Optional[str] = None) -> CategoryDetail:
        """
        Mover una categoría a otro padre (None = raíz).

        Returns:
            Categoría con resumen del nuevo padre, sin conteos
        """
        category = category_crud.get_or_404(db, category_id, "Category")

        new_parent_id = new_parent_id or None
        hierarchy_service.validate_reparent(db, category_id, new_parent_id)

        category = category_crud.update(db, db_obj=category, obj_in={"parent_id": new_parent_id})
        logger.info(f"Categoría {category_id} movida a {new_parent_id or 'raíz'}")
        return self._to_detail(db, category, with_counts=False)

    def reorder_many(self, db: Session, orders: List[Dict[str, Any]]) -> int:
        """
        Aplicar nuevas posiciones a varias categorías.

        Cada cambio se confirma por separado: si un ID no existe, los
        cambios anteriores ya quedaron aplicados.

        Returns:
            Cantidad de categorías reordenadas
        """
        applied = 0
        for order in orders:
            category = category_crud.get(db, order["id"])
            if not category:
                logger.warning(f"Reordenamiento parcial: {applied} aplicados antes de {order['id']}")
                raise NotFoundException("Category")
            category_crud.update(db, db_obj=category, obj_in={"sort_order": order["sort_order"]})
            applied += 1
        return applied

    def bulk_update(self, db: Session, category_ids: List[str], patch: Dict[str, Any]) -> int:
        """
        Aplicar el mismo parche (is_active, parent_id) a varias categorías.

        No se revalida la jerarquía fila por fila.

        Returns:
            Cantidad de categorías actualizadas
        """
        data = {key: value for key, value in patch.items() if key in BULK_UPDATE_FIELDS}
        if not data:
            raise ValidationException("At least one field to update is required")

        updated = category_crud.bulk_update(db, ids=list(category_ids), data=data)
        logger.info(f"Actualización masiva de {updated} categorías: {data}")
        return updated

    # ================================================================
    # LECTURA: ARBOL, LISTADO Y DETALLE
    # ================================================================

    def get_hierarchy(
        self,
        db: Session,
        is_active: Optional[bool] = None,
        include_products: bool = False
    ) -> List[CategoryTreeNode]:
        """
        Árbol completo desde las raíces.

        Se carga nivel por nivel hasta la profundidad máxima (4 niveles),
        con hermanos ordenados por sort_order. El filtro is_active solo se
        aplica a las raíces; los descendientes se devuelven todos.
        """
        roots = category_crud.get_roots(db, is_active=is_active)
        levels = [roots]
        current = roots
        for _ in range(MAX_CATEGORY_DEPTH):
            current = category_crud.get_children_of(db, parent_ids=[item.id for item in current])
            if not current:
                break
            levels.append(current)

        categories = [item for level in levels for item in level]
        ids = [item.id for item in categories]
        product_counts = category_crud.get_product_counts(db, ids)
        children_counts = category_crud.get_children_counts(db, ids)
        products = category_crud.get_active_products(db, ids) if include_products else {}

        nodes: Dict[str, CategoryTreeNode] = {}
        for item in categories:
            nodes[item.id] = CategoryTreeNode(
                **_base_fields(item),
                counts=CategoryCounts(
                    products=product_counts.get(item.id, 0),
                    children=children_counts.get(item.id, 0),
                ),
                products=(
                    [ProductSummary.model_validate(p) for p in products[item.id]]
                    if include_products else None
                ),
            )

        for level in levels[1:]:
            for item in level:
                nodes[item.parent_id].children.append(nodes[item.id])

        return [nodes[item.id] for item in roots]

    def get_flat(
        self,
        db: Session,
        is_active: Optional[bool] = None,
        include_products: bool = False,
        page: int = 1,
        limit: int = 50
    ) -> Tuple[List[CategoryDetail], int]:
        """
        Listado plano paginado ordenado por sort_order y nombre.

        Returns:
            Tupla (categorías de la página, total)
        """
        categories, total = category_crud.get_flat(
            db, is_active=is_active, skip=(page - 1) * limit, limit=limit
        )
        ids = [item.id for item in categories]
        product_counts = category_crud.get_product_counts(db, ids)
        children_counts = category_crud.get_children_counts(db, ids)
        products = category_crud.get_active_products(db, ids) if include_products else {}

        items = [
            CategoryDetail(
                **_base_fields(item),
                parent=ParentSummary.model_validate(item.parent) if item.parent else None,
                counts=CategoryCounts(
                    products=product_counts.get(item.id, 0),
                    children=children_counts.get(item.id, 0),
                ),
                products=(
                    [ProductSummary.model_validate(p) for p in products[item.id]]
                    if include_products else None
                ),
            )
            for item in categories
        ]
        return items, total

    def get_by_id(
        self,
        db: Session,
        category_id: str,
        include_children: bool = True,
        include_products: bool = False
    ) -> Optional[CategoryDetail]:
        """
        Detalle de una categoría con padre, atributos y conteos.

        Returns:
            Detalle o None si no existe
        """
        category = category_crud.get_with_parent(db, category_id)
        if not category:
            return None

        detail = self._to_detail(db, category)
        extra: Dict[str, Any] = {
            "attributes": [
                CategoryAttributeResponse.model_validate(attribute)
                for attribute in attribute_crud.get_by_category(db, category_id=category_id)
            ]
        }

        if include_children:
            children = category_crud.get_children_of(db, parent_ids=[category_id])
            child_ids = [child.id for child in children]
            product_counts = category_crud.get_product_counts(db, child_ids)
            children_counts = category_crud.get_children_counts(db, child_ids)
            extra["children"] = [
                CategoryChildSummary(
                    **_base_fields(child),
                    counts=CategoryCounts(
                        products=product_counts.get(child.id, 0),
                        children=children_counts.get(child.id, 0),
                    ),
                )
                for child in children
            ]

        if include_products:
            products = category_crud.get_active_products(db, [category_id])[category_id]
            extra["products"] = [ProductSummary.model_validate(p) for p in products]

        return detail.model_copy(update=extra)

    # ================================================================
    # CONSULTAS Y REPORTES
    # ================================================================

    def search(self, db: Session, query: str, limit: int = 10) -> List[CategorySearchResult]:
        """
        Buscar categorías activas por nombre o descripción.

        El texto se busca literalmente (sin comodines), ignorando espacios
        en los extremos.

        Raises:
            ValidationException: Si el texto queda vacío
        """
        query = query.strip()
        if not query:
            raise ValidationException("Search query is required")
        limit = max(1, min(limit, settings.SEARCH_MAX_RESULTS))
        categories = category_crud.search(db, query=query, limit=limit)
        return [
            CategorySearchResult(
                id=item.id,
                name=item.name,
                slug=item.slug,
                description=item.description,
                image=item.image,
                parent=SearchParent(name=item.parent.name) if item.parent else None,
            )
            for item in categories
        ]

    def breadcrumb(self, db: Session, category_id: str) -> List[BreadcrumbItem]:
        """
        Ruta desde la raíz hasta la categoría.

        Raises:
            NotFoundException: Si la categoría no existe
        """
        current = category_crud.get_or_404(db, category_id, "Category")

        trail: List[BreadcrumbItem] = []
        visited = set()
        while current is not None and current.id not in visited:
            visited.add(current.id)
            trail.append(BreadcrumbItem(id=current.id, name=current.name, slug=current.slug))
            current = category_crud.get(db, current.parent_id)

        trail.reverse()
        return trail

    def statistics(self, db: Session) -> CategoryStatistics:
        """Estadísticas agregadas del catálogo de categorías."""
        stats = category_crud.get_statistics(db)
        total = stats["total"]
        average = math.floor(stats["products"] / total + 0.5) if total > 0 else 0

        return CategoryStatistics(
            total_categories=total,
            active_categories=stats["active"],
            categories_with_products=stats["with_products"],
            root_categories=stats["roots"],
            inactive_categories=total - stats["active"],
            average_products_per_category=average,
        )

    def export(self, db: Session, format: str = "csv", include_hierarchy: bool = True) -> ExportFile:
        """
        Exportar todas las categorías como lista plana.

        Args:
            db: Sesión de base de datos
            format: "csv" o "xlsx"
            include_hierarchy: Incluir el nombre de la categoría padre
        """
        categories, _ = category_crud.get_flat(db)
        ids = [item.id for item in categories]
        product_counts = category_crud.get_product_counts(db, ids)
        children_counts = category_crud.get_children_counts(db, ids)

        records = []
        for item in categories:
            record = {
                "id": item.id,
                "name": item.name,
                "slug": item.slug,
                "description": item.description,
                "product_count": product_counts.get(item.id, 0),
                "subcategory_count": children_counts.get(item.id, 0),
                "is_active": item.is_active,
                "sort_order": item.sort_order,
                "created_at": item.created_at,
            }
            if include_hierarchy:
                record["parent_category"] = item.parent.name if item.parent else ""
            records.append(record)

        return build_export(records, format, include_hierarchy)


# Instancia global del servicio
category_service = CategoryService()
