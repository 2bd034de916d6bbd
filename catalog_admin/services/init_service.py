"""
Servicio de inicialización de la aplicación.
Crea las tablas y el administrador inicial al arrancar.
"""
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from catalog_admin.config import get_settings
from catalog_admin.core.security import get_password_hash
from catalog_admin.db.base import Base
from catalog_admin.db.session import get_db_connection
from catalog_admin.models.admin_user import AdminRole, AdminUser

logger = logging.getLogger(__name__)


def create_tables() -> None:
    """Crear las tablas que falten (no altera las existentes)."""
    # Registrar todos los modelos en el metadata
    import catalog_admin.models  # noqa: F401

    Base.metadata.create_all(bind=get_db_connection().engine)


def init_admin_user(db: Session) -> bool:
    """
    Crear el SUPER_ADMIN inicial si no existe.

    Usa las variables de entorno ADMIN_EMAIL y ADMIN_PASSWORD.

    Returns:
        True si se creó el usuario, False si ya existía o no está configurado
    """
    settings = get_settings()

    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
        logger.warning("ADMIN_EMAIL o ADMIN_PASSWORD no configurados")
        return False

    email = settings.ADMIN_EMAIL.lower()
    if db.query(AdminUser).filter(AdminUser.email == email).first():
        logger.info(f"Usuario administrador ya existe: {email}")
        return False

    db.add(AdminUser(
        email=email,
        password_hash=get_password_hash(settings.ADMIN_PASSWORD),
        full_name="Administrador",
        role=AdminRole.SUPER_ADMIN,
        permissions={},
        is_active=True,
    ))
    db.commit()

    logger.info(f"Usuario administrador creado: {email}")
    logger.warning("IMPORTANTE: Cambia la contraseña después del primer login")
    return True


def run_initialization() -> None:
    """
    Ejecutar todas las tareas de inicialización.
    Llamar desde el evento startup de FastAPI.
    """
    logger.info("Ejecutando inicialización...")
    create_tables()

    db = get_db_connection().get_session()
    try:
        init_admin_user(db)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error al crear usuario administrador: {e}")
    finally:
        db.close()

    logger.info("Inicialización completada")
