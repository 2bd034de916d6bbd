"""
Excepciones personalizadas para Catalog Admin.

Cada excepción lleva el código HTTP y el código de error que el handler
de main.py usa para construir la respuesta {success, message, code}.
"""
from typing import Any, List, Optional


class CatalogException(Exception):
    """Excepción base para todas las excepciones de la aplicación."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str = "Error en la aplicación"):
        self.message = message
        super().__init__(self.message)


class NotFoundException(CatalogException):
    """Excepción cuando un recurso no se encuentra."""

    status_code = 404
    code = "NOT_FOUND_ERROR"

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found")


class UnauthorizedException(CatalogException):
    """Excepción cuando el usuario no está autenticado."""

    status_code = 401
    code = "AUTHENTICATION_ERROR"

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message)


class ForbiddenException(CatalogException):
    """Excepción cuando el usuario no tiene permisos."""

    status_code = 403
    code = "AUTHORIZATION_ERROR"

    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(message)


class ConflictException(CatalogException):
    """Excepción cuando hay un conflicto con el estado actual."""

    status_code = 409
    code = "CONFLICT_ERROR"

    def __init__(self, message: str = "Conflict with current resource state"):
        super().__init__(message)


class ValidationException(CatalogException):
    """Excepción cuando falla la validación de datos."""

    status_code = 400
    code = "VALIDATION_ERROR"

    def __init__(self, message: str = "Validation failed", details: Optional[List[Any]] = None):
        super().__init__(message)
        self.details = details or []
