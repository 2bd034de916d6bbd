"""
Hash de contraseñas (bcrypt) y tokens de acceso JWT de los administradores.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from catalog_admin.config import settings

ACCESS_TOKEN_TYPE = "access"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(
    subject: str,
    claims: Optional[Dict[str, Any]] = None,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Firmar un access token para un administrador.

    Args:
        subject: Id del administrador (claim "sub")
        claims: Claims adicionales (email, role)
        expires_delta: Vigencia; por defecto ACCESS_TOKEN_EXPIRE_MINUTES
    """
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = dict(claims or {})
    payload.update({
        "sub": subject,
        "type": ACCESS_TOKEN_TYPE,
        "exp": datetime.now(timezone.utc) + lifetime,
    })
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Validar firma, expiración y tipo de un access token.

    Raises:
        JWTError: Si el token no es un access token válido
    """
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    if payload.get("type") != ACCESS_TOKEN_TYPE or not payload.get("sub"):
        raise JWTError("Not an access token")
    return payload
