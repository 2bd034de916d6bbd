"""
Servicio de atributos personalizados de categoría.
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from catalog_admin.core.exceptions import ConflictException, NotFoundException, ValidationException
from catalog_admin.crud.category import category as category_crud
from catalog_admin.crud.category_attribute import category_attribute as attribute_crud
from catalog_admin.models.category import CategoryAttribute
from catalog_admin.schemas.category import check_attribute_options

logger = logging.getLogger(__name__)

DUPLICATE_NAME_MESSAGE = "Attribute with this name already exists for this category"
MISSING_OPTIONS_MESSAGE = "Options are required for SELECT and MULTI_SELECT types"


class CategoryAttributeService:
    """Alta, baja y modificación de atributos de una categoría."""

    def _get_attribute(
        self, db: Session, attribute_id: str, category_id: Optional[str] = None
    ) -> CategoryAttribute:
        attribute = attribute_crud.get(db, attribute_id)
        if not attribute or (category_id is not None and attribute.category_id != category_id):
            raise NotFoundException("Attribute")
        return attribute

    def list(self, db: Session, category_id: str) -> List[CategoryAttribute]:
        """Atributos de la categoría ordenados por sort_order."""
        category_crud.get_or_404(db, category_id, "Category")
        return attribute_crud.get_by_category(db, category_id=category_id)

    def create(self, db: Session, category_id: str, data: Dict[str, Any]) -> CategoryAttribute:
        """
        Crear un atributo para la categoría.

        Raises:
            NotFoundException: Si la categoría no existe
            ConflictException: Si ya hay un atributo con ese nombre
            ValidationException: Si SELECT/MULTI_SELECT no trae opciones
        """
        category_crud.get_or_404(db, category_id, "Category")

        data = dict(data)
        if attribute_crud.get_by_name(db, category_id=category_id, name=data["name"]):
            raise ConflictException(DUPLICATE_NAME_MESSAGE)

        if not check_attribute_options(data["type"], data.get("options")):
            raise ValidationException(MISSING_OPTIONS_MESSAGE)

        if data.get("sort_order") is None:
            max_order = attribute_crud.get_max_sort_order(db, category_id=category_id)
            data["sort_order"] = (max_order or 0) + 1

        data["category_id"] = category_id
        attribute = attribute_crud.create(db, obj_in=data)
        logger.info(f"Atributo {attribute.name} creado en categoría {category_id}")
        return attribute

    def update(
        self,
        db: Session,
        attribute_id: str,
        data: Dict[str, Any],
        category_id: Optional[str] = None
    ) -> CategoryAttribute:
        """
        Actualizar un atributo con los campos enviados.

        El par tipo/opciones resultante se vuelve a validar.
        """
        attribute = self._get_attribute(db, attribute_id, category_id)
        data = dict(data)

        if data.get("name") and data["name"] != attribute.name:
            duplicate = attribute_crud.get_by_name(
                db, category_id=attribute.category_id, name=data["name"], exclude_id=attribute_id
            )
            if duplicate:
                raise ConflictException(DUPLICATE_NAME_MESSAGE)

        effective_type = data.get("type", attribute.type)
        effective_options = data["options"] if "options" in data else attribute.options
        if not check_attribute_options(effective_type, effective_options):
            raise ValidationException(MISSING_OPTIONS_MESSAGE)

        return attribute_crud.update(db, db_obj=attribute, obj_in=data)

    def delete(self, db: Session, attribute_id: str, category_id: Optional[str] = None) -> None:
        """Eliminar un atributo."""
        attribute = self._get_attribute(db, attribute_id, category_id)
        attribute_crud.remove(db, id=attribute.id)
        logger.info(f"Atributo {attribute_id} eliminado")


# Instancia global del servicio
category_attribute_service = CategoryAttributeService()
