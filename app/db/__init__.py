"""
==============================================================================
Database Package
==============================================================================

SQLAlchemy database infrastructure and ORM models.

├── database.py   - engine, sessions, get_db
├── models.py     - users, shop grants, products, media, catalog entries
└── init_db.py    - table creation and admin bootstrap

Usage:
------
    from app.db import DatabaseManager, CatalogEntry

    session = DatabaseManager().get_session()
    entries = session.query(CatalogEntry).all()

==============================================================================
"""

from .database import DatabaseManager, Base, get_db
from .models import (
    CatalogEntry,
    Media,
    MediaWorkflow,
    Product,
    ProductAncestor,
    ProductType,
    ShopPermission,
    User,
    UserRole,
)
from .init_db import DatabaseInitializer, init_db

__all__ = [
    # Database management
    "DatabaseManager",
    "Base",
    "get_db",
    # Models
    "CatalogEntry",
    "Media",
    "Product",
    "ProductAncestor",
    "ShopPermission",
    "User",
    # Enums
    "MediaWorkflow",
    "ProductType",
    "UserRole",
    # Initialization
    "DatabaseInitializer",
    "init_db",
]
