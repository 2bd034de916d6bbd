"""
Modelo ORM para Productos.

Producto básico asignado a una categoría (sin variantes ni inventario).
"""
from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey, Numeric, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from catalog_admin.db.base import Base, generate_uuid

# Largo de la columna products.slug
PRODUCT_SLUG_LENGTH = 220


class Product(Base):
    """Modelo de Productos del catálogo."""

    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(200), nullable=False)
    slug = Column(String(PRODUCT_SLUG_LENGTH), nullable=False, unique=True, index=True)
    description = Column(Text)
    base_price = Column(Numeric(10, 2), nullable=False, default=0)
    # Lista de URLs
    images = Column(JSON, default=list)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    category_id = Column(String(36), ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    category = relationship("Category", back_populates="products")

    def __repr__(self):
        return f"<Product {self.name}>"
