"""
Módulo de modelos ORM.
Importa todos los modelos para que SQLAlchemy los reconozca.
"""
from catalog_admin.db.base import Base

# Catálogo
from catalog_admin.models.category import Category, CategoryAttribute, AttributeType
from catalog_admin.models.product import Product
from catalog_admin.models.promotion import Promotion, PromotionCategory

# Administración
from catalog_admin.models.admin_user import AdminUser, AdminRole

__all__ = [
    "Base",
    # Catálogo
    "Category",
    "CategoryAttribute",
    "AttributeType",
    "Product",
    "Promotion",
    "PromotionCategory",
    # Administración
    "AdminUser",
    "AdminRole",
]
