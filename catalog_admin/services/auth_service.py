"""
Servicio de autenticación de administradores.
"""
import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from catalog_admin.config import settings
from catalog_admin.core.exceptions import UnauthorizedException
from catalog_admin.core.security import create_access_token, verify_password
from catalog_admin.crud.admin_user import admin_user as crud_admin_user
from catalog_admin.schemas.auth import LoginRequest, TokenResponse
from catalog_admin.services.activity_log_service import log_security_event

logger = logging.getLogger(__name__)


def login_admin(db: Session, login_data: LoginRequest) -> TokenResponse:
    """
    Autenticar administrador y generar access token.

    Args:
        db: Sesión de base de datos
        login_data: Credenciales de login

    Returns:
        Token de acceso

    Raises:
        UnauthorizedException: Si las credenciales son inválidas o la cuenta está inactiva
    """
    user = crud_admin_user.get_by_email(db, email=login_data.email)

    if not user or not verify_password(login_data.password, user.password_hash):
        log_security_event("LOGIN_FAILED", email=login_data.email)
        raise UnauthorizedException("Invalid email or password")

    if not user.is_active:
        log_security_event("LOGIN_INACTIVE", email=login_data.email)
        raise UnauthorizedException("Account is inactive")

    # Actualizar último login
    user.last_login_at = datetime.now(timezone.utc)
    db.commit()

    access_token = create_access_token(
        user.id, claims={"email": user.email, "role": user.role.value}
    )
    logger.info(f"Login exitoso: {user.email}")

    return TokenResponse(
        access_token=access_token,
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )
