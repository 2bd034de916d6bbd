"""
Router de la API v1 (montado en /api/v1).
"""
from fastapi import APIRouter

from catalog_admin.api.v1.endpoints import auth, categories, products

api_router = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["Autenticación"])
api_router.include_router(categories.router, prefix="/categories", tags=["Categorías"])
api_router.include_router(products.router, prefix="/products", tags=["Productos"])
