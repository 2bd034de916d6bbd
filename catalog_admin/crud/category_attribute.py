"""
CRUD para atributos de categoría.
"""
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import func

from catalog_admin.crud.base import CRUDBase
from catalog_admin.models.category import CategoryAttribute


class CRUDCategoryAttribute(CRUDBase[CategoryAttribute, dict, dict]):
    """CRUD específico para atributos de categoría."""

    def get_by_category(self, db: Session, *, category_id: str) -> List[CategoryAttribute]:
        """Atributos de una categoría ordenados por sort_order."""
        return (
            db.query(CategoryAttribute)
            .filter(CategoryAttribute.category_id == category_id)
            .order_by(CategoryAttribute.sort_order, CategoryAttribute.name)
            .all()
        )

    def get_by_name(
        self,
        db: Session,
        *,
        category_id: str,
        name: str,
        exclude_id: Optional[str] = None
    ) -> Optional[CategoryAttribute]:
        """
        Buscar un atributo por nombre dentro de una categoría.

        Args:
            db: Sesión de base de datos
            category_id: ID de la categoría dueña
            name: Nombre del atributo
            exclude_id: ID a excluir (el propio atributo al renombrar)

        Returns:
            Atributo encontrado o None
        """
        query = db.query(CategoryAttribute).filter(
            CategoryAttribute.category_id == category_id,
            CategoryAttribute.name == name
        )
        if exclude_id is not None:
            query = query.filter(CategoryAttribute.id != exclude_id)
        return query.first()

    def get_max_sort_order(self, db: Session, *, category_id: str) -> Optional[int]:
        """Mayor sort_order entre los atributos de la categoría."""
        return (
            db.query(func.max(CategoryAttribute.sort_order))
            .filter(CategoryAttribute.category_id == category_id)
            .scalar()
        )

    def delete_by_category(self, db: Session, *, category_id: str) -> int:
        """
        Eliminar todos los atributos de una categoría.
        No hace commit: forma parte de la transacción de borrado de la categoría.
        """
        return (
            db.query(CategoryAttribute)
            .filter(CategoryAttribute.category_id == category_id)
            .delete(synchronize_session="fetch")
        )


# Instancia global del CRUD
category_attribute = CRUDCategoryAttribute(CategoryAttribute)
