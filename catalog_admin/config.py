"""
Configuración de Catalog Admin.

Los valores se leen de variables de entorno o del archivo .env.
DATABASE_URL y SECRET_KEY son obligatorios.
"""
from typing import List

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings de la aplicación (Pydantic Settings v2)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Base de datos
    DATABASE_URL: str

    # JWT
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Aplicación
    APP_NAME: str = "Catalog Admin API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # SUPER_ADMIN creado al arrancar si no existe
    ADMIN_EMAIL: str = "admin@catalogadmin.com"
    ADMIN_PASSWORD: str = "changeme123"

    # Listados y búsqueda
    DEFAULT_PAGE_SIZE: int = 50
    MAX_PAGE_SIZE: int = 100
    SEARCH_MAX_RESULTS: int = 50

    @field_validator("LOG_LEVEL")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"LOG_LEVEL inválido: {value}")
        return level

    @model_validator(mode="after")
    def check_page_sizes(self):
        if not 0 < self.DEFAULT_PAGE_SIZE <= self.MAX_PAGE_SIZE:
            raise ValueError("DEFAULT_PAGE_SIZE debe estar entre 1 y MAX_PAGE_SIZE")
        return self

    @property
    def allowed_origins_list(self) -> List[str]:
        """ALLOWED_ORIGINS separado por comas, sin entradas vacías."""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")


_settings_instance = None


def get_settings() -> Settings:
    """Settings cargados una sola vez por proceso."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance


settings = get_settings()
