"""
CRUD base genérico sobre un modelo ORM.
"""
from typing import Any, Dict, Generic, Optional, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy.orm import Session

from catalog_admin.core.exceptions import NotFoundException
from catalog_admin.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """
    Operaciones comunes por clave primaria.

    Las escrituras confirman la transacción por defecto. Con commit=False
    solo hacen flush y el llamador decide cuándo confirmar (borrado de
    categoría con reasignación de productos, por ejemplo).
    """

    def __init__(self, model: Type[ModelType]):
        self.model = model

    def _persist(self, db: Session, db_obj: ModelType, commit: bool) -> ModelType:
        db.add(db_obj)
        if commit:
            db.commit()
            db.refresh(db_obj)
        else:
            db.flush()
        return db_obj

    def get(self, db: Session, id: Any) -> Optional[ModelType]:
        """Registro por ID, o None (también cuando id es None)."""
        if id is None:
            return None
        return db.query(self.model).filter(self.model.id == id).first()

    def get_or_404(self, db: Session, id: Any, resource: str) -> ModelType:
        """
        Registro por ID.

        Raises:
            NotFoundException: "<resource> not found" si no existe
        """
        db_obj = self.get(db, id)
        if db_obj is None:
            raise NotFoundException(resource)
        return db_obj

    def create(
        self,
        db: Session,
        *,
        obj_in: CreateSchemaType | Dict[str, Any],
        commit: bool = True
    ) -> ModelType:
        """
        Insertar un registro.

        Args:
            db: Sesión de base de datos
            obj_in: Schema o dict con las columnas
            commit: False para solo hacer flush

        Returns:
            Registro creado
        """
        data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump()
        return self._persist(db, self.model(**data), commit)

    def update(
        self,
        db: Session,
        *,
        db_obj: ModelType,
        obj_in: UpdateSchemaType | Dict[str, Any],
        commit: bool = True
    ) -> ModelType:
        """
        Aplicar un parche parcial.

        Los schemas se vuelcan con exclude_unset; las claves que no son
        columnas del modelo se ignoran.
        """
        if isinstance(obj_in, dict):
            changes = obj_in
        else:
            changes = obj_in.model_dump(exclude_unset=True)

        for field, value in changes.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        return self._persist(db, db_obj, commit)

    def remove(self, db: Session, *, id: Any, commit: bool = True) -> Optional[ModelType]:
        """
        Borrado físico por ID.

        Returns:
            Registro eliminado o None si no existía
        """
        db_obj = self.get(db, id)
        if db_obj is None:
            return None
        db.delete(db_obj)
        if commit:
            db.commit()
        else:
            db.flush()
        return db_obj
