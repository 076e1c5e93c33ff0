"""
==============================================================================
Services Package - Business Logic Layer
==============================================================================

Service classes implementing business logic.

This package provides:
- AuthService: Authentication and token management
- UserService: User management
- PermissionService: Per-shop permission checks and grants
- ProductService: Product store (products, variants, options)
- MediaService: Product media lookups

Architecture Pattern: Service Layer
----------------------------------
    ┌─────────────────┐
    │   API Router    │
    └────────┬────────┘
             │
    ┌────────▼────────┐
    │    Service      │  ← Business Logic
    └────────┬────────┘
             │
    ┌────────▼────────┐
    │   Repository    │  ← Data Access (via ORM)
    └─────────────────┘

The catalog publisher lives in app.catalog and is built from these
services.

==============================================================================
"""

from .auth_service import AuthService
from .user_service import UserService
from .permission_service import CREATE_PRODUCT, PermissionService
from .product_service import ProductService
from .media_service import MediaService

__all__ = [
    "AuthService",
    "UserService",
    "CREATE_PRODUCT",
    "PermissionService",
    "ProductService",
    "MediaService",
]
