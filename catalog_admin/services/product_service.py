"""
Servicio de negocio para productos.

Alta, baja y modificación de productos y su asignación a categorías.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from catalog_admin.core.exceptions import ValidationException
from catalog_admin.crud.category import category as category_crud
from catalog_admin.crud.product import product as product_crud
from catalog_admin.models.category import Category
from catalog_admin.models.product import PRODUCT_SLUG_LENGTH
from catalog_admin.schemas.product import ProductResponse
from catalog_admin.utils.slug import generate_slug, with_timestamp_suffix

logger = logging.getLogger(__name__)


class ProductService:
    """Operaciones de negocio sobre productos."""

    def _unique_slug(self, db: Session, slug: str, exclude_id: Optional[str] = None) -> str:
        if product_crud.get_by_slug(db, slug=slug, exclude_id=exclude_id):
            return with_timestamp_suffix(slug, max_length=PRODUCT_SLUG_LENGTH)
        return slug

    def _check_category(self, db: Session, category_id: str) -> None:
        if category_crud.get(db, category_id) is None:
            raise ValidationException("Category not found")

    def list(
        self,
        db: Session,
        search: Optional[str] = None,
        category_id: Optional[str] = None,
        is_active: Optional[bool] = None,
        page: int = 1,
        limit: int = 50
    ) -> Tuple[List[ProductResponse], int]:
        """
        Listado paginado con filtros opcionales.

        Returns:
            Tupla (productos de la página, total)
        """
        search = search.strip() if search else None
        products, total = product_crud.get_filtered(
            db,
            search=search or None,
            category_ids=[category_id] if category_id else None,
            is_active=is_active,
            skip=(page - 1) * limit,
            limit=limit,
        )
        return [ProductResponse.model_validate(item) for item in products], total

    def list_by_category(
        self,
        db: Session,
        category_id: str,
        include_subcategories: bool = True,
        page: int = 1,
        limit: int = 50
    ) -> Tuple[Category, List[ProductResponse], int]:
        """
        Productos activos de una categoría y, opcionalmente, de sus hijos directos.

        Raises:
            NotFoundException: Si la categoría no existe
        """
        category = category_crud.get_or_404(db, category_id, "Category")

        category_ids = [category_id]
        if include_subcategories:
            children = category_crud.get_children_of(db, parent_ids=[category_id])
            category_ids.extend(child.id for child in children)

        products, total = product_crud.get_filtered(
            db,
            category_ids=category_ids,
            is_active=True,
            skip=(page - 1) * limit,
            limit=limit,
        )
        return category, [ProductResponse.model_validate(item) for item in products], total

    def get_by_id(self, db: Session, product_id: str) -> Optional[ProductResponse]:
        product = product_crud.get_with_category(db, product_id)
        return ProductResponse.model_validate(product) if product else None

    def create(self, db: Session, data: Dict[str, Any]) -> ProductResponse:
        """
        Crear un producto.

        El slug se deriva del nombre si no se envía; si ya existe se le
        agrega un sufijo de timestamp.

        Raises:
            ValidationException: Si la categoría no existe
        """
        data = dict(data)
        self._check_category(db, data["category_id"])

        slug = data.get("slug") or generate_slug(data["name"], fallback="product")
        data["slug"] = self._unique_slug(db, slug)

        product = product_crud.create(db, obj_in=data)
        logger.info(f"Producto creado: {product.id} en categoría {product.category_id}")
        return ProductResponse.model_validate(product)

    def update(self, db: Session, product_id: str, data: Dict[str, Any]) -> ProductResponse:
        """
        Actualizar solo los campos enviados.

        Raises:
            NotFoundException: Si el producto no existe
            ValidationException: Si la nueva categoría no existe
        """
        product = product_crud.get_or_404(db, product_id, "Product")
        data = dict(data)

        if data.get("category_id") and data["category_id"] != product.category_id:
            self._check_category(db, data["category_id"])

        if data.get("slug"):
            if data["slug"] != product.slug:
                data["slug"] = self._unique_slug(db, data["slug"], exclude_id=product_id)
        elif data.get("name") and data["name"] != product.name:
            slug = generate_slug(data["name"], fallback="product")
            data["slug"] = self._unique_slug(db, slug, exclude_id=product_id)

        product = product_crud.update(db, db_obj=product, obj_in=data)
        logger.info(f"Producto actualizado: {product_id} campos={sorted(data)}")
        return ProductResponse.model_validate(product)

    def update_status(self, db: Session, product_id: str, is_active: bool) -> ProductResponse:
        return self.update(db, product_id, {"is_active": is_active})

    def delete(self, db: Session, product_id: str) -> None:
        """
        Eliminar un producto.

        Raises:
            NotFoundException: Si el producto no existe
        """
        product_crud.get_or_404(db, product_id, "Product")
        product_crud.remove(db, id=product_id)
        logger.info(f"Producto eliminado: {product_id}")


# Instancia global del servicio
product_service = ProductService()
