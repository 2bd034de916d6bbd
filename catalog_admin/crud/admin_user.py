"""
CRUD para usuarios administradores.
"""
from typing import Optional
from sqlalchemy.orm import Session

from catalog_admin.crud.base import CRUDBase
from catalog_admin.models.admin_user import AdminUser


class CRUDAdminUser(CRUDBase[AdminUser, dict, dict]):
    """CRUD específico para administradores."""

    def get_by_email(self, db: Session, *, email: str) -> Optional[AdminUser]:
        """Buscar un administrador por email (sin distinguir mayúsculas)."""
        return db.query(AdminUser).filter(AdminUser.email == email.lower()).first()


# Instancia global del CRUD
admin_user = CRUDAdminUser(AdminUser)
