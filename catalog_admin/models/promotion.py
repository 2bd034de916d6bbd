"""
Modelos ORM para Promociones y su vínculo con categorías.
"""
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from catalog_admin.db.base import Base, generate_uuid


class Promotion(Base):
    """Modelo de Promociones."""

    __tablename__ = "promotions"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(150), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    starts_at = Column(DateTime(timezone=True))
    ends_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    category_links = relationship("PromotionCategory", back_populates="promotion", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Promotion {self.name}>"


class PromotionCategory(Base):
    """Tabla de unión promoción <-> categoría."""

    __tablename__ = "promotion_categories"

    promotion_id = Column(String(36), ForeignKey("promotions.id", ondelete="CASCADE"), primary_key=True)
    category_id = Column(String(36), ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True)

    promotion = relationship("Promotion", back_populates="category_links")
    category = relationship("Category", back_populates="promotion_links")
