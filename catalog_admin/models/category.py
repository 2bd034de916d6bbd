"""
Modelos ORM para Categorías y sus atributos personalizados.
"""
import enum

from sqlalchemy import (
    Column,
    String,
    Text,
    Integer,
    Boolean,
    DateTime,
    ForeignKey,
    Enum,
    JSON,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from catalog_admin.db.base import Base, generate_uuid


class AttributeType(str, enum.Enum):
    """Tipos de campo disponibles para los atributos de categoría."""

    TEXT = "TEXT"
    NUMBER = "NUMBER"
    BOOLEAN = "BOOLEAN"
    SELECT = "SELECT"
    MULTI_SELECT = "MULTI_SELECT"
    COLOR = "COLOR"
    DATE = "DATE"


# Tipos que exigen una lista de opciones
OPTION_ATTRIBUTE_TYPES = {AttributeType.SELECT, AttributeType.MULTI_SELECT}


class Category(Base):
    """
    Modelo de Categorías del catálogo.

    La jerarquía se guarda únicamente como parent_id (auto-referencia);
    los recorridos de profundidad y ancestros se hacen por id.
    """

    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(100), nullable=False)
    slug = Column(String(120), nullable=False, unique=True, index=True)
    description = Column(Text)
    image = Column(String(500))
    seo_title = Column(String(60))
    seo_description = Column(String(160))
    parent_id = Column(String(36), ForeignKey("categories.id", ondelete="RESTRICT"), index=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    sort_order = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Self-referential relationship
    parent = relationship("Category", remote_side=[id], back_populates="children")
    children = relationship(
        "Category",
        back_populates="parent",
        order_by="Category.sort_order",
        passive_deletes=True,
    )

    # Relationships
    products = relationship("Product", back_populates="category", passive_deletes=True)
    attributes = relationship(
        "CategoryAttribute",
        back_populates="category",
        order_by="CategoryAttribute.sort_order",
        passive_deletes=True,
    )
    promotion_links = relationship("PromotionCategory", back_populates="category", passive_deletes=True)

    def __repr__(self):
        return f"<Category {self.name}>"


class CategoryAttribute(Base):
    """Campo personalizado definido para una categoría (ej: Talla, Color)."""

    __tablename__ = "category_attributes"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    category_id = Column(String(36), ForeignKey("categories.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(50), nullable=False)
    type = Column(Enum(AttributeType, name="attribute_type"), nullable=False)
    required = Column(Boolean, default=False, nullable=False)
    options = Column(JSON)
    sort_order = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Constraints
    __table_args__ = (
        UniqueConstraint("category_id", "name", name="uq_category_attribute_name"),
    )

    category = relationship("Category", back_populates="attributes")

    def __repr__(self):
        return f"<CategoryAttribute {self.name} ({self.type})>"
