"""
CRUD para promociones y sus vínculos con categorías.
"""
from sqlalchemy.orm import Session

from catalog_admin.crud.base import CRUDBase
from catalog_admin.models.promotion import Promotion, PromotionCategory


class CRUDPromotion(CRUDBase[Promotion, dict, dict]):
    """CRUD específico para promociones."""

    def delete_category_links(self, db: Session, *, category_id: str) -> int:
        """
        Eliminar los vínculos promoción-categoría de una categoría.
        No hace commit: forma parte de la transacción de borrado de la categoría.
        """
        return (
            db.query(PromotionCategory)
            .filter(PromotionCategory.category_id == category_id)
            .delete(synchronize_session="fetch")
        )


# Instancia global del CRUD
promotion = CRUDPromotion(Promotion)
