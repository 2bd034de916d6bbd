"""
Pytest configuration and fixtures
"""
import os
from decimal import Decimal

# Configuración mínima antes de importar la aplicación
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from catalog_admin.core.deps import get_current_admin_user, get_db
from catalog_admin.core.security import create_access_token, get_password_hash
from catalog_admin.models import (
    AdminRole,
    AdminUser,
    AttributeType,
    Base,
    Category,
    CategoryAttribute,
    Product,
    Promotion,
    PromotionCategory,
)
from catalog_admin.utils.slug import generate_slug

TEST_PASSWORD = "secret-password"

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    """Sesión sobre una base SQLite en memoria recreada en cada test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def make_category(db):
    """Insertar categorías directamente, sin pasar por las reglas del servicio."""

    def _make(name, parent=None, **kwargs):
        kwargs.setdefault("slug", generate_slug(name))
        kwargs.setdefault("sort_order", 0)
        category = Category(
            name=name,
            parent_id=parent.id if parent is not None else None,
            **kwargs,
        )
        db.add(category)
        db.commit()
        db.refresh(category)
        return category

    return _make


@pytest.fixture
def make_product(db):
    def _make(name, category, is_active=True, price="10.00", images=None):
        product = Product(
            name=name,
            slug=generate_slug(name),
            base_price=Decimal(price),
            images=images,
            is_active=is_active,
            category_id=category.id,
        )
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    return _make


@pytest.fixture
def make_attribute(db):
    def _make(category, name, type="TEXT", options=None, sort_order=0):
        attribute = CategoryAttribute(
            category_id=category.id,
            name=name,
            type=AttributeType(type),
            options=options,
            sort_order=sort_order,
        )
        db.add(attribute)
        db.commit()
        db.refresh(attribute)
        return attribute

    return _make


@pytest.fixture
def make_promotion(db):
    def _make(name, categories=()):
        promotion = Promotion(name=name)
        db.add(promotion)
        db.flush()
        for category in categories:
            db.add(PromotionCategory(promotion_id=promotion.id, category_id=category.id))
        db.commit()
        db.refresh(promotion)
        return promotion

    return _make


@pytest.fixture
def make_admin(db):
    def _make(email, role=AdminRole.EDITOR, permissions=None, is_active=True):
        admin = AdminUser(
            email=email,
            password_hash=get_password_hash(TEST_PASSWORD),
            full_name="Test Admin",
            role=role,
            permissions=permissions or {},
            is_active=is_active,
        )
        db.add(admin)
        db.commit()
        db.refresh(admin)
        return admin

    return _make


@pytest.fixture
def super_admin(make_admin):
    return make_admin("root@catalogadmin.com", role=AdminRole.SUPER_ADMIN)


@pytest.fixture
def client(db):
    """Cliente HTTP con la sesión de test inyectada en get_db."""
    from catalog_admin.main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    test_client = TestClient(app, raise_server_exceptions=False)
    yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_client(client, super_admin):
    """Cliente autenticado como SUPER_ADMIN sin pasar por el JWT."""
    from catalog_admin.main import app

    app.dependency_overrides[get_current_admin_user] = lambda: super_admin
    return client


@pytest.fixture
def auth_headers():
    """Create authorization headers"""

    def _headers(admin):
        token = create_access_token(admin.id, {"email": admin.email, "role": admin.role.value})
        return {"Authorization": f"Bearer {token}"}

    return _headers
