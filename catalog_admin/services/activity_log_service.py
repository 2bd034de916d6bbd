"""
Servicio de registro de actividad (auditoría).

Las acciones de los administradores sobre el catálogo se registran
en el logger "catalog_admin.audit".
"""
import logging
from datetime import datetime, timezone
from typing import Any, Optional

audit_logger = logging.getLogger("catalog_admin.audit")


def log_audit(
    action: str,
    user_id: Optional[str],
    resource: str,
    resource_id: Optional[str],
    changes: Optional[Any] = None,
) -> None:
    """
    Registra una acción administrativa.

    Args:
        action: Tipo de acción (ej: 'CREATE', 'MOVE', 'REORDER')
        user_id: ID del administrador que realiza la acción
        resource: Tipo de entidad afectada (ej: 'category', 'category_attribute')
        resource_id: ID de la entidad afectada ('multiple' en operaciones masivas)
        changes: Datos enviados en la petición
    """
    audit_logger.info(
        f"Audit Log action={action} user={user_id} resource={resource} "
        f"resource_id={resource_id} changes={changes} "
        f"timestamp={datetime.now(timezone.utc).isoformat()}"
    )


def log_security_event(event: str, **context: Any) -> None:
    """Registra un evento de seguridad (permisos insuficientes, login fallido)."""
    audit_logger.warning(f"Security event {event}: {context}")
