"""
Engine y fábrica de sesiones SQLAlchemy (una instancia por proceso).
"""
from typing import Any, Dict, Optional

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from catalog_admin.config import Settings, get_settings


def engine_options(settings: Settings) -> Dict[str, Any]:
    """
    Opciones de create_engine según el motor.

    SQLite (desarrollo y tests) no acepta opciones de pool y necesita
    compartir la conexión entre hilos del threadpool de FastAPI.
    """
    if settings.is_sqlite:
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,
        "pool_recycle": 3600,
        "pool_size": 5,
        "max_overflow": 10,
    }


class DatabaseConnection:
    """Singleton que mantiene el engine y el sessionmaker."""

    _instance: Optional["DatabaseConnection"] = None
    _engine: Optional[Engine] = None
    _session_factory: Optional[sessionmaker] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if self._engine is not None:
            return

        settings = get_settings()
        self._engine = create_engine(
            settings.DATABASE_URL,
            echo=settings.DEBUG,
            **engine_options(settings),
        )
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self._engine)

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def session_factory(self) -> sessionmaker:
        return self._session_factory

    def get_session(self) -> Session:
        return self._session_factory()

    def close(self):
        """Liberar el pool de conexiones."""
        if self._engine:
            self._engine.dispose()


_db = DatabaseConnection()

SessionLocal = _db.session_factory


def get_db_connection() -> DatabaseConnection:
    return _db
