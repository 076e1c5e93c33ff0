"""
==============================================================================
Schemas Package - Pydantic Models
==============================================================================

Request and response schemas using Pydantic for validation.

This package provides:
- Common: Shared response schemas
- Auth: Authentication schemas
- User: User and permission schemas
- Product: Product store schemas
- Catalog: Publish and catalog entry schemas

==============================================================================
"""

from .common import MessageResponse
from .auth import (
    ChangePasswordRequest,
    CurrentUserResponse,
    LoginRequest,
    RefreshRequest,
    TokenResponse,
)
from .user import (
    PermissionGrantRequest,
    PermissionListResponse,
    UserCreate,
    UserDetail,
    UserListResponse,
    UserResponse,
    UserUpdate,
)
from .product import (
    InventoryUpdate,
    InventoryUpdateResponse,
    MediaCreate,
    MediaResponse,
    ProductCreate,
    ProductResponse,
    VariantCreate,
)
from .catalog import (
    CatalogEntryResponse,
    InventoryAdjustmentResponse,
    PublishRequest,
    PublishResponse,
)

__all__ = [
    # Common
    "MessageResponse",
    # Auth
    "LoginRequest",
    "TokenResponse",
    "RefreshRequest",
    "ChangePasswordRequest",
    "CurrentUserResponse",
    # User
    "UserCreate",
    "UserUpdate",
    "UserResponse",
    "UserListResponse",
    "UserDetail",
    "PermissionGrantRequest",
    "PermissionListResponse",
    # Product
    "ProductCreate",
    "VariantCreate",
    "InventoryUpdate",
    "InventoryUpdateResponse",
    "MediaCreate",
    "MediaResponse",
    "ProductResponse",
    # Catalog
    "PublishRequest",
    "PublishResponse",
    "InventoryAdjustmentResponse",
    "CatalogEntryResponse",
]
