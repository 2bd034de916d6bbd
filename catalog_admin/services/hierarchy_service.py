"""
Reglas de la jerarquía de categorías.

Toda operación que cambia la posición de una categoría en el árbol
(crear con padre, actualizar parent_id, mover) pasa por validate_reparent.
Los recorridos leen parent_id desde la base en cada llamada; no hay caché.
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from catalog_admin.core.exceptions import ValidationException
from catalog_admin.crud.category import category as category_crud

logger = logging.getLogger(__name__)

# Saltos máximos hasta la raíz: 4 niveles incluyendo el nivel raíz
MAX_CATEGORY_DEPTH = 3


class HierarchyService:
    """Cálculo de profundidad, detección de ciclos y validación de re-parentado."""

    def compute_depth(self, db: Session, category_id: str) -> int:
        """
        Cantidad de saltos desde la categoría hasta su raíz.

        Args:
            db: Sesión de base de datos
            category_id: ID de la categoría

        Returns:
            0 para una raíz (o una categoría inexistente), 1 para su hijo, etc.
        """
        depth = 0
        visited = {category_id}
        _, parent_id = category_crud.get_parent_id(db, category_id)

        while parent_id is not None:
            if parent_id in visited:
                logger.error(f"Ciclo detectado en la jerarquía al calcular profundidad de {category_id}")
                break
            visited.add(parent_id)
            depth += 1
            _, parent_id = category_crud.get_parent_id(db, parent_id)

        return depth

    def would_create_cycle(self, db: Session, category_id: str, proposed_parent_id: str) -> bool:
        """
        Verificar si colgar category_id de proposed_parent_id crearía un ciclo.

        Sube desde el padre propuesto siguiendo parent_id; si el recorrido
        alcanza a la propia categoría, el padre propuesto es un descendiente.
        """
        current_id: Optional[str] = proposed_parent_id
        visited = set()

        while current_id is not None and current_id not in visited:
            if current_id == category_id:
                return True
            visited.add(current_id)
            _, current_id = category_crud.get_parent_id(db, current_id)

        return False

    def subtree_height(self, db: Session, category_id: str) -> int:
        """
        Niveles de descendientes por debajo de la categoría (0 si no tiene hijos).

        Se recorre nivel por nivel; al mover una rama, sus descendientes
        también cambian de profundidad.
        """
        height = 0
        level_ids = [category_id]
        visited = {category_id}

        while True:
            children = category_crud.get_children_of(db, parent_ids=level_ids)
            level_ids = [child.id for child in children if child.id not in visited]
            if not level_ids:
                return height
            visited.update(level_ids)
            height += 1

    def validate_reparent(
        self,
        db: Session,
        category_id: Optional[str],
        proposed_parent_id: Optional[str]
    ) -> None:
        """
        Validar que category_id pueda colgar de proposed_parent_id.

        Args:
            db: Sesión de base de datos
            category_id: ID de la categoría (None al crear)
            proposed_parent_id: Nuevo padre (None = mover a la raíz)

        Raises:
            ValidationException: auto-referencia, padre inexistente,
                ciclo o profundidad máxima excedida
        """
        if proposed_parent_id is None:
            return

        if category_id is not None and proposed_parent_id == category_id:
            raise ValidationException("Category cannot be its own parent")

        if category_crud.get(db, proposed_parent_id) is None:
            raise ValidationException("Parent category not found")

        if category_id is not None and self.would_create_cycle(db, category_id, proposed_parent_id):
            raise ValidationException("This would create a circular reference")

        parent_depth = self.compute_depth(db, proposed_parent_id)
        subtree_height = self.subtree_height(db, category_id) if category_id is not None else 0
        if parent_depth + 1 + subtree_height > MAX_CATEGORY_DEPTH:
            raise ValidationException("Maximum category depth exceeded (4 levels)")


# Instancia global del servicio
hierarchy_service = HierarchyService()
