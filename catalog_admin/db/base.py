"""
Base declarativa de SQLAlchemy.
Todos los modelos heredan de esta clase base.
"""
import uuid

from sqlalchemy.orm import declarative_base


def generate_uuid() -> str:
    """Generar un identificador de texto para claves primarias."""
    return str(uuid.uuid4())


# Base declarativa de SQLAlchemy
Base = declarative_base()
