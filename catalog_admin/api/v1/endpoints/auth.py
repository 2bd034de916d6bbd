"""
Endpoints de autenticación de administradores.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from catalog_admin.core.deps import get_current_admin_user, get_db
from catalog_admin.models.admin_user import AdminUser
from catalog_admin.schemas.auth import AdminProfile, LoginRequest, TokenResponse
from catalog_admin.schemas.common import ApiResponse
from catalog_admin.services import auth_service

router = APIRouter()


@router.post("/login", response_model=ApiResponse[TokenResponse])
def login(
    login_data: LoginRequest,
    db: Session = Depends(get_db)
):
    """
    Autenticar administrador y obtener el access token.

    Retorna:
    - accessToken: Token de acceso (Bearer)
    - expiresIn: Validez en segundos
    """
    token = auth_service.login_admin(db, login_data)
    return ApiResponse(message="Login successful", data=token)


@router.get("/me", response_model=ApiResponse[AdminProfile])
def get_me(
    current_user: AdminUser = Depends(get_current_admin_user)
):
    """Perfil del administrador autenticado."""
    return ApiResponse(data=AdminProfile.model_validate(current_user))
