"""
Schemas comunes reutilizables.
"""
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Generic, TypeVar, Optional


T = TypeVar('T')


class CamelModel(BaseModel):
    """
    Base de todos los schemas de la API.
    Expone los campos en camelCase y acepta también snake_case en la entrada.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(CamelModel, Generic[T]):
    """Sobre estándar de respuesta: {success, message, data}."""

    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


class PaginationMeta(CamelModel):
    """Metadatos de paginación de un listado."""

    current_page: int
    total_pages: int
    total_items: int
    items_per_page: int
    has_next_page: bool
    has_previous_page: bool
    next_page: Optional[int] = None
    previous_page: Optional[int] = None
