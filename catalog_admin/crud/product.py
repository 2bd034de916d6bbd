"""
CRUD para productos.
"""
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from catalog_admin.crud.base import CRUDBase
from catalog_admin.models.product import Product
from catalog_admin.utils.search import LIKE_ESCAPE, contains_pattern


class CRUDProduct(CRUDBase[Product, dict, dict]):
    """CRUD específico para productos."""

    def get_with_category(self, db: Session, id: str) -> Optional[Product]:
        """Obtener un producto cargando su categoría."""
        return (
            db.query(Product)
            .options(joinedload(Product.category))
            .filter(Product.id == id)
            .first()
        )

    def get_by_slug(
        self, db: Session, *, slug: str, exclude_id: Optional[str] = None
    ) -> Optional[Product]:
        query = db.query(Product).filter(Product.slug == slug)
        if exclude_id is not None:
            query = query.filter(Product.id != exclude_id)
        return query.first()

    def get_filtered(
        self,
        db: Session,
        *,
        search: Optional[str] = None,
        category_ids: Optional[Sequence[str]] = None,
        is_active: Optional[bool] = None,
        skip: int = 0,
        limit: int = 50
    ) -> Tuple[List[Product], int]:
        """
        Listado paginado de productos, los más recientes primero.

        Args:
            db: Sesión de base de datos
            search: Texto a buscar en nombre o descripción
            category_ids: Restringir a estas categorías
            is_active: Filtrar por estado
            skip: Registros a saltar
            limit: Límite de registros

        Returns:
            Tupla (productos de la página, total sin paginar)
        """
        query = db.query(Product)
        if search:
            pattern = contains_pattern(search)
            query = query.filter(or_(
                Product.name.ilike(pattern, escape=LIKE_ESCAPE),
                Product.description.ilike(pattern, escape=LIKE_ESCAPE),
            ))
        if category_ids is not None:
            query = query.filter(Product.category_id.in_(list(category_ids)))
        if is_active is not None:
            query = query.filter(Product.is_active == is_active)

        total = query.count()
        products = (
            query.options(joinedload(Product.category))
            .order_by(Product.created_at.desc(), Product.name)
            .offset(skip)
            .limit(limit)
            .all()
        )
        return products, total

    def reassign_category(self, db: Session, *, from_category_id: str, to_category_id: str) -> int:
        """
        Mover todos los productos de una categoría a otra.
        No hace commit: forma parte de la transacción de borrado de la categoría.

        Returns:
            Cantidad de productos movidos
        """
        return (
            db.query(Product)
            .filter(Product.category_id == from_category_id)
            .update({Product.category_id: to_category_id}, synchronize_session="fetch")
        )


# Instancia global del CRUD
product = CRUDProduct(Product)
