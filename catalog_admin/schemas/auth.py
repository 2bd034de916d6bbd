"""
Schemas para autenticación de administradores.
"""
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import EmailStr, Field

from catalog_admin.models.admin_user import AdminRole
from catalog_admin.schemas.common import CamelModel


class LoginRequest(CamelModel):
    """Schema para solicitud de login."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class TokenResponse(CamelModel):
    """Schema de respuesta con el access token."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int  # segundos


class AdminProfile(CamelModel):
    """Perfil del administrador autenticado."""

    id: str
    email: str
    full_name: str
    role: AdminRole
    permissions: Optional[Dict[str, Any]] = None
    is_active: bool
    last_login_at: Optional[datetime] = None
