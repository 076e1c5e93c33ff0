"""
==============================================================================
Pytest Configuration and Fixtures
==============================================================================

Each test gets an empty in-memory database. The API client shares that
session, so rows created through services are visible to requests and the
other way round.

==============================================================================
"""

import os

# The app's own engine only runs the startup bootstrap; keep it in memory
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime, timedelta
from typing import Callable, Dict, Iterator, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from app.main import app
from app.catalog.publisher import CatalogPublisher
from app.catalog.store import CatalogStore
from app.core.security import get_security_manager
from app.db.database import Base, get_db
from app.db.models import Product, User, UserRole
from app.schemas.product import MediaCreate, ProductCreate, VariantCreate
from app.services.media_service import MediaService
from app.services.permission_service import CREATE_PRODUCT, PermissionService
from app.services.product_service import ProductService


PRIMARY_SHOP = "primary"
OTHER_SHOP = "shop-b"


# ============================================================================
# DATABASE FIXTURES
# ============================================================================

test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@pytest.fixture
def db() -> Iterator[Session]:
    Base.metadata.create_all(test_engine)
    with Session(test_engine, autoflush=False) as session:
        yield session
    Base.metadata.drop_all(test_engine)


@pytest.fixture
def client(db: Session) -> Iterator[TestClient]:
    """API client whose requests run on the test session."""
    app.dependency_overrides[get_db] = lambda: db
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.pop(get_db, None)


# ============================================================================
# USER FIXTURES
# ============================================================================

def _create_user(db: Session, username: str, password: str, role: UserRole, shop_id: Optional[str]) -> User:
    user = User(
        username=username,
        password_hash=get_security_manager().hash_password(password),
        role=role,
        shop_id=shop_id,
        is_active=True
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def admin_user(db: Session) -> User:
    """Admin working in the primary shop."""
    return _create_user(db, "admin", "admin123", UserRole.ADMIN, PRIMARY_SHOP)


@pytest.fixture
def manager_user(db: Session) -> User:
    """Shop manager of shop-b holding createProduct there."""
    user = _create_user(db, "manager", "manager123", UserRole.SHOP_MANAGER, OTHER_SHOP)
    PermissionService(db, PRIMARY_SHOP).grant(user, CREATE_PRODUCT, OTHER_SHOP)
    return user


@pytest.fixture
def customer_user(db: Session) -> User:
    """Account in shop-b without any grants."""
    return _create_user(db, "customer", "customer123", UserRole.CUSTOMER, OTHER_SHOP)


# ============================================================================
# TOKEN / HEADER FIXTURES
# ============================================================================

def _headers(user: User) -> Dict[str, str]:
    token = get_security_manager().create_access_token({
        "sub": user.id,
        "username": user.username,
        "role": user.role.value,
        "shop_id": user.shop_id,
    })
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(admin_user: User) -> Dict[str, str]:
    return _headers(admin_user)


@pytest.fixture
def manager_headers(manager_user: User) -> Dict[str, str]:
    return _headers(manager_user)


@pytest.fixture
def customer_headers(customer_user: User) -> Dict[str, str]:
    return _headers(customer_user)


# ============================================================================
# SERVICE FIXTURES
# ============================================================================

@pytest.fixture
def products(db: Session) -> ProductService:
    return ProductService(db)


@pytest.fixture
def media(db: Session) -> MediaService:
    return MediaService(db)


@pytest.fixture
def catalog(db: Session) -> CatalogStore:
    return CatalogStore(db)


@pytest.fixture
def publisher(db: Session) -> CatalogPublisher:
    return CatalogPublisher.for_session(db)


# ============================================================================
# PRODUCT FIXTURES
# ============================================================================

@pytest.fixture
def make_product(products: ProductService) -> Callable[..., Product]:
    """
    Factory creating a product with variants.

    Each variant is a dict of VariantCreate fields.
    """
    def _make(
        product_id: str,
        shop_id: str = PRIMARY_SHOP,
        variants: Optional[List[dict]] = None
    ) -> Product:
        product = products.create_product(ProductCreate(
            id=product_id,
            shop_id=shop_id,
            title=f"Product {product_id}",
            attributes={"pageTitle": f"Page {product_id}"},
        ))
        for variant in variants or []:
            products.create_variant(product_id, VariantCreate(**variant))
        return products.get_or_404(product_id)

    return _make


@pytest.fixture
def shirt(make_product, media: MediaService) -> Product:
    """
    Product p1 with two tracked variants and one grid image.

    v1: policy on, 3 left, warning at 5 (low quantity)
    v2: policy off, 0 left
    """
    product = make_product("p1", variants=[
        {
            "id": "v1",
            "title": "Small",
            "position": 0,
            "inventory_management": True,
            "inventory_policy": True,
            "inventory_quantity": 3,
            "low_inventory_warning_threshold": 5,
        },
        {
            "id": "v2",
            "title": "Large",
            "position": 1,
            "inventory_management": True,
            "inventory_policy": False,
            "inventory_quantity": 0,
        },
    ])
    media.add_media("p1", PRIMARY_SHOP, MediaCreate(
        filename="shirt.jpg",
        priority=0,
        uploaded_at=datetime(2024, 1, 1) + timedelta(hours=1),
    ))
    return product
