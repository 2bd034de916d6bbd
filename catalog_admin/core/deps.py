"""
Dependencias comunes de FastAPI.
"""
from typing import Callable, Generator, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from catalog_admin.core.exceptions import ForbiddenException, UnauthorizedException
from catalog_admin.core.security import decode_access_token
from catalog_admin.db.session import SessionLocal
from catalog_admin.models.admin_user import AdminUser
from catalog_admin.services.activity_log_service import log_security_event

security = HTTPBearer(auto_error=False)


def get_db() -> Generator:
    """
    Dependencia que proporciona una sesión de base de datos.

    Yields:
        Session: Sesión de SQLAlchemy
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_admin_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> AdminUser:
    """
    Obtener el administrador actual desde el JWT.

    Raises:
        UnauthorizedException: Si falta el token, es inválido o la cuenta está inactiva
    """
    if credentials is None:
        raise UnauthorizedException("Access token required")

    try:
        payload = decode_access_token(credentials.credentials)
    except JWTError:
        raise UnauthorizedException("Invalid or expired token")

    user_id = payload["sub"]
    user = db.query(AdminUser).filter(AdminUser.id == user_id).first()
    if user is None or not user.is_active:
        raise UnauthorizedException("User not found or inactive")

    return user


def require_permission(permission: str) -> Callable[..., AdminUser]:
    """
    Fábrica de dependencias que exige un permiso "recurso.accion".

    Uso:
        current_user: AdminUser = Depends(require_permission("categories.read"))
    """

    def permission_checker(current_user: AdminUser = Depends(get_current_admin_user)) -> AdminUser:
        if not current_user.has_permission(permission):
            log_security_event(
                "PERMISSION_DENIED",
                user_id=current_user.id,
                permission=permission,
            )
            raise ForbiddenException(f"Permission '{permission}' required")
        return current_user

    return permission_checker
