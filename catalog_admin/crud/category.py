"""
CRUD para categorías.
"""
from typing import Any, Dict, Iterable, List, Optional, Tuple
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import func, or_

from catalog_admin.crud.base import CRUDBase
from catalog_admin.models.category import Category
from catalog_admin.models.product import Product
from catalog_admin.utils.search import LIKE_ESCAPE, contains_pattern


class CRUDCategory(CRUDBase[Category, dict, dict]):
    """CRUD específico para categorías."""

    def get_with_parent(self, db: Session, id: str) -> Optional[Category]:
        """Obtener una categoría cargando su padre en la misma consulta."""
        return (
            db.query(Category)
            .options(joinedload(Category.parent))
            .filter(Category.id == id)
            .first()
        )

    def get_parent_id(self, db: Session, id: str) -> Tuple[bool, Optional[str]]:
        """
        Leer solo el parent_id de una categoría.

        Returns:
            Tupla (existe, parent_id)
        """
        row = db.query(Category.parent_id).filter(Category.id == id).first()
        if row is None:
            return False, None
        return True, row.parent_id

    def get_by_slug(
        self, db: Session, *, slug: str, exclude_id: Optional[str] = None
    ) -> Optional[Category]:
        """
        Buscar una categoría por slug.

        Args:
            db: Sesión de base de datos
            slug: Slug a buscar
            exclude_id: ID a excluir (la propia categoría al renombrar)

        Returns:
            Categoría con ese slug o None
        """
        query = db.query(Category).filter(Category.slug == slug)
        if exclude_id is not None:
            query = query.filter(Category.id != exclude_id)
        return query.first()

    def get_max_sort_order(self, db: Session, *, parent_id: Optional[str]) -> Optional[int]:
        """Mayor sort_order entre las categorías hermanas (mismo parent_id)."""
        query = db.query(func.max(Category.sort_order))
        if parent_id is None:
            query = query.filter(Category.parent_id.is_(None))
        else:
            query = query.filter(Category.parent_id == parent_id)
        return query.scalar()

    def count_children(self, db: Session, *, category_id: str) -> int:
        """Cantidad de subcategorías directas."""
        return db.query(Category).filter(Category.parent_id == category_id).count()

    def count_products(self, db: Session, *, category_id: str) -> int:
        """Cantidad de productos asignados a la categoría."""
        return db.query(Product).filter(Product.category_id == category_id).count()

    def get_children_counts(self, db: Session, ids: Iterable[str]) -> Dict[str, int]:
        """Cantidad de subcategorías agrupada por categoría padre."""
        ids = list(ids)
        if not ids:
            return {}
        rows = (
            db.query(Category.parent_id, func.count(Category.id))
            .filter(Category.parent_id.in_(ids))
            .group_by(Category.parent_id)
            .all()
        )
        return {parent_id: count for parent_id, count in rows}

    def get_product_counts(self, db: Session, ids: Iterable[str]) -> Dict[str, int]:
        """Cantidad de productos agrupada por categoría."""
        ids = list(ids)
        if not ids:
            return {}
        rows = (
            db.query(Product.category_id, func.count(Product.id))
            .filter(Product.category_id.in_(ids))
            .group_by(Product.category_id)
            .all()
        )
        return {category_id: count for category_id, count in rows}

    def get_active_products(self, db: Session, ids: Iterable[str]) -> Dict[str, List[Product]]:
        """Productos activos agrupados por categoría."""
        ids = list(ids)
        grouped: Dict[str, List[Product]] = {category_id: [] for category_id in ids}
        if not ids:
            return grouped
        products = (
            db.query(Product)
            .filter(Product.category_id.in_(ids), Product.is_active == True)
            .order_by(Product.name)
            .all()
        )
        for product in products:
            grouped[product.category_id].append(product)
        return grouped

    def get_roots(self, db: Session, *, is_active: Optional[bool] = None) -> List[Category]:
        """Categorías raíz (sin padre) ordenadas por sort_order."""
        query = db.query(Category).filter(Category.parent_id.is_(None))
        if is_active is not None:
            query = query.filter(Category.is_active == is_active)
        return query.order_by(Category.sort_order, Category.name).all()

    def get_children_of(self, db: Session, *, parent_ids: Iterable[str]) -> List[Category]:
        """Hijos directos de un conjunto de categorías, ordenados por sort_order."""
        parent_ids = list(parent_ids)
        if not parent_ids:
            return []
        return (
            db.query(Category)
            .filter(Category.parent_id.in_(parent_ids))
            .order_by(Category.sort_order, Category.name)
            .all()
        )

    def get_flat(
        self,
        db: Session,
        *,
        is_active: Optional[bool] = None,
        skip: Optional[int] = None,
        limit: Optional[int] = None
    ) -> Tuple[List[Category], int]:
        """
        Listado plano ordenado por sort_order y nombre.

        Returns:
            Tupla (categorías de la página, total sin paginar)
        """
        query = db.query(Category)
        if is_active is not None:
            query = query.filter(Category.is_active == is_active)
        total = query.count()

        query = query.options(joinedload(Category.parent)).order_by(Category.sort_order, Category.name)
        if skip is not None:
            query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)
        return query.all(), total

    def search(self, db: Session, *, query: str, limit: int = 10) -> List[Category]:
        """Categorías activas cuyo nombre o descripción contiene el texto (con su padre cargado)."""
        pattern = contains_pattern(query)
        matches = or_(
            Category.name.ilike(pattern, escape=LIKE_ESCAPE),
            Category.description.ilike(pattern, escape=LIKE_ESCAPE),
        )
        return (
            db.query(Category)
            .options(joinedload(Category.parent))
            .filter(Category.is_active.is_(True), matches)
            .order_by(Category.name)
            .limit(limit)
            .all()
        )

    def bulk_update(self, db: Session, *, ids: List[str], data: Dict[str, Any]) -> int:
        """
        Aplicar el mismo parche a varias categorías en una sola sentencia.

        Returns:
            Cantidad de filas actualizadas
        """
        updated = (
            db.query(Category)
            .filter(Category.id.in_(ids))
            .update(data, synchronize_session=False)
        )
        db.commit()
        return updated

    def get_statistics(self, db: Session) -> Dict[str, int]:
        """Conteos agregados para el panel de estadísticas."""
        return {
            "total": db.query(func.count(Category.id)).scalar() or 0,
            "active": db.query(func.count(Category.id)).filter(Category.is_active == True).scalar() or 0,
            "roots": db.query(func.count(Category.id)).filter(Category.parent_id.is_(None)).scalar() or 0,
            "with_products": db.query(func.count(func.distinct(Product.category_id))).scalar() or 0,
            "products": db.query(func.count(Product.id)).scalar() or 0,
        }


# Instancia global del CRUD
category = CRUDCategory(Category)
