"""
Utilidades de paginación.
"""
import math
from typing import Any, Dict


def create_pagination_meta(total: int, page: int, limit: int) -> Dict[str, Any]:
    """
    Construir los metadatos de paginación de un listado.

    Args:
        total: Total de registros
        page: Página actual (desde 1)
        limit: Registros por página

    Returns:
        Diccionario con currentPage, totalPages, hasNextPage, etc.
    """
    total_pages = math.ceil(total / limit) if limit > 0 else 0
    return {
        "currentPage": page,
        "totalPages": total_pages,
        "totalItems": total,
        "itemsPerPage": limit,
        "hasNextPage": page < total_pages,
        "hasPreviousPage": page > 1,
        "nextPage": page + 1 if page < total_pages else None,
        "previousPage": page - 1 if page > 1 else None,
    }
