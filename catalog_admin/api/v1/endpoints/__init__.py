"""
Endpoints de la API v1.
"""
from catalog_admin.api.v1.endpoints import auth, categories, products

__all__ = ["auth", "categories", "products"]
