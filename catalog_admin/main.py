"""
Aplicación FastAPI principal de Catalog Admin.
"""
import logging
import re

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from catalog_admin.api.v1.router import api_router
from catalog_admin.config import settings
from catalog_admin.core.exceptions import CatalogException, ValidationException
from catalog_admin.db.session import get_db_connection
from catalog_admin.services.init_service import run_initialization

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# "UNIQUE constraint failed: categories.slug" (SQLite) o "Key (slug)=(...)" (PostgreSQL)
_UNIQUE_FIELD_PATTERNS = (
    re.compile(r"UNIQUE constraint failed: \w+\.(\w+)"),
    re.compile(r"Key \((\w+)(?:, \w+)*\)=\("),
)

# Crear aplicación FastAPI
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="""
    ## Catalog Admin - Gestión de categorías del catálogo

    API RESTful del panel de administración para el árbol de categorías.

    ### Características principales:

    * **Autenticación JWT** con permisos por recurso
    * **Jerarquía** de hasta 4 niveles sin ciclos
    * **Atributos** personalizados por categoría
    * **Búsqueda, breadcrumbs y estadísticas**
    * **Exportación** a CSV y Excel

    ### Documentación:

    - **Swagger UI**: /docs
    - **ReDoc**: /redoc
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

# Configurar CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(status_code: int, message: str, code: str, details=None) -> JSONResponse:
    content = {"success": False, "message": message, "code": code}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


# Exception Handlers
@app.exception_handler(CatalogException)
async def catalog_exception_handler(request: Request, exc: CatalogException):
    """Handler para las excepciones de la aplicación (404, 401, 403, 409, 400)."""
    details = exc.details if isinstance(exc, ValidationException) else None
    return _error_response(exc.status_code, exc.message, exc.code, details)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handler para errores de validación de Pydantic."""
    details = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        details.append({
            "field": ".".join(loc),
            "message": error.get("msg"),
        })

    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        "Validation failed",
        "VALIDATION_ERROR",
        details,
    )


@app.exception_handler(IntegrityError)
async def integrity_exception_handler(request: Request, exc: IntegrityError):
    """Handler para violaciones de restricciones de la base de datos."""
    error_text = str(exc.orig)
    logger.warning(f"IntegrityError en {request.url.path}: {error_text}")

    for pattern in _UNIQUE_FIELD_PATTERNS:
        match = pattern.search(error_text)
        if match:
            return _error_response(
                status.HTTP_409_CONFLICT,
                f"{match.group(1)} already exists",
                "CONFLICT_ERROR",
            )

    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        "Related record not found or still referenced",
        "FOREIGN_KEY_ERROR",
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    """Handler para errores de base de datos no controlados."""
    logger.error(f"Error de base de datos en {request.url.path}: {exc}")
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Database operation failed",
        "DATABASE_ERROR",
    )


# Incluir routers de la API
app.include_router(api_router, prefix="/api/v1")


# Endpoint raíz
@app.get("/", tags=["Health"])
async def root():
    """
    Endpoint raíz para verificar que la API está funcionando.
    """
    return {
        "message": "Catalog Admin API",
        "version": settings.APP_VERSION,
        "status": "online",
        "docs": "/docs",
        "redoc": "/redoc"
    }


# Health check
@app.get("/health", tags=["Health"])
async def health_check():
    """
    Endpoint de health check para monitoreo.
    """
    return {
        "status": "healthy",
        "version": settings.APP_VERSION
    }


# Startup event
@app.on_event("startup")
async def startup_event():
    """
    Evento ejecutado al iniciar la aplicación.
    """
    logger.info(f"Catalog Admin API v{settings.APP_VERSION} iniciada")
    logger.info(f"Modo debug: {settings.DEBUG}")

    # Crear tablas y el administrador inicial si no existe
    run_initialization()


# Shutdown event
@app.on_event("shutdown")
async def shutdown_event():
    """
    Evento ejecutado al apagar la aplicación.
    """
    get_db_connection().close()
    logger.info("Catalog Admin API detenida")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "catalog_admin.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
