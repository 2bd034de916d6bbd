"""
Modelo ORM para usuarios administradores del panel.
"""
import enum

from sqlalchemy import Column, String, Boolean, DateTime, Enum, JSON
from sqlalchemy.sql import func
from catalog_admin.db.base import Base, generate_uuid


class AdminRole(str, enum.Enum):
    """Roles del panel de administración."""

    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    EDITOR = "EDITOR"


class AdminUser(Base):
    """Usuario administrador con permisos por recurso."""

    __tablename__ = "admin_users"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(200), nullable=False)
    role = Column(Enum(AdminRole, name="admin_role"), nullable=False, default=AdminRole.EDITOR)
    # Ej: {"categories": {"read": true, "update": false}}
    permissions = Column(JSON, default=dict)
    is_active = Column(Boolean, default=True, nullable=False)
    last_login_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def has_permission(self, permission: str) -> bool:
        """
        Verificar un permiso con formato "recurso.accion".
        SUPER_ADMIN tiene todos los permisos.
        """
        if self.role == AdminRole.SUPER_ADMIN:
            return True
        resource, _, action = permission.partition(".")
        granted = (self.permissions or {}).get(resource) or {}
        return bool(granted.get(action))

    def __repr__(self):
        return f"<AdminUser {self.email}>"
