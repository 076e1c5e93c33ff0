"""
==============================================================================
SQLAlchemy ORM Models Module
==============================================================================

ORM models for callers, the product store, media and the catalog.

This module defines:
- UserRole: Enum for user role types
- User: Back office account with an active shop
- ShopPermission: Per-shop permission grant (e.g. createProduct)
- Product: Product, variant or option row (source of truth)
- ProductAncestor: Ordered ancestor links of a product row
- Media: Image record attached to a product
- CatalogEntry: Denormalized, read-optimized product document

Database Schema:
---------------

    ┌──────────────────────┐ 1:N ┌───────────────────────────────┐
    │ users                │────▶│ shop_permissions              │
    │ id, username, role,  │     │ user_id, shop_id, permission  │
    │ shop_id, is_active   │     └───────────────────────────────┘
    └──────────────────────┘

    ┌──────────────────────┐ 1:N ┌───────────────────────────────┐
    │ products             │────▶│ product_ancestors             │
    │ id, shop_id, type,   │     │ product_id, position,         │
    │ title, inventory_*,  │     │ ancestor_id                   │
    │ attributes (JSON)    │     └───────────────────────────────┘
    └──────────────────────┘
              ▲ product_id
    ┌─────────┴────────────┐     ┌───────────────────────────────┐
    │ media                │     │ catalog                       │
    │ to_grid, workflow,   │     │ id (= top-level product id),  │
    │ priority, uploaded_at│     │ document (JSON), published_at │
    └──────────────────────┘     └───────────────────────────────┘

Product Hierarchy:
-----------------
    product   ancestors = []
    variant   ancestors = [product_id]
    option    ancestors = [product_id, variant_id]

=============================================================================
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, relationship

from app.db.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


# =============================================================================
# ENUMS
# =============================================================================

class UserRole(str, enum.Enum):
    """
    User role enumeration.

    - ADMIN: Holds every permission in every shop
    - SHOP_MANAGER: Holds the permissions granted in shop_permissions
    - CUSTOMER: Storefront account, no back office permissions by default

    The enum inherits from str to enable JSON serialization.
    """

    ADMIN = "admin"
    SHOP_MANAGER = "shop_manager"
    CUSTOMER = "customer"

    def __str__(self) -> str:
        return self.value


class ProductType(str, enum.Enum):
    """Row type in the products table."""

    SIMPLE = "simple"
    VARIANT = "variant"

    def __str__(self) -> str:
        return self.value


class MediaWorkflow(str, enum.Enum):
    """Media workflow states; archived and unpublished media stay off the grid."""

    PUBLISHED = "published"
    ARCHIVED = "archived"
    UNPUBLISHED = "unpublished"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def hidden(cls) -> List[str]:
        """Workflow values excluded from grid listings."""
        return [cls.ARCHIVED.value, cls.UNPUBLISHED.value]


# =============================================================================
# USER MODELS
# =============================================================================

class User(Base):
    """
    Back office account.

    Attributes:
        id: Unique identifier (UUID)
        username: Unique login name (lowercase)
        password_hash: Bcrypt hashed password
        role: User role (admin/shop_manager/customer)
        shop_id: Active shop the user works in (None = primary shop)
        is_active: Account status (soft delete support)
    """

    __tablename__ = "users"

    id: str = Column(String(36), primary_key=True, default=_new_id)

    username: str = Column(
        String(50),
        unique=True,
        nullable=False,
        index=True,
        doc="Unique login name (lowercase)"
    )

    password_hash: str = Column(String(255), nullable=False)

    role: UserRole = Column(
        Enum(UserRole),
        default=UserRole.SHOP_MANAGER,
        nullable=False,
        doc="User role for access control"
    )

    shop_id: Optional[str] = Column(
        String(36),
        nullable=True,
        doc="Active shop (None falls back to the primary shop)"
    )

    is_active: bool = Column(Boolean, default=True, nullable=False)

    created_at: datetime = Column(DateTime, default=datetime.utcnow, nullable=False)

    updated_at: datetime = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False
    )

    permissions: Mapped[List["ShopPermission"]] = relationship(
        "ShopPermission",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    @property
    def is_admin(self) -> bool:
        """Check if user has admin role."""
        return self.role == UserRole.ADMIN

    def __repr__(self) -> str:
        return (
            f"User(id={self.id!r}, "
            f"username={self.username!r}, "
            f"role={self.role.value!r}, "
            f"shop_id={self.shop_id!r})"
        )

    def __str__(self) -> str:
        return f"{self.username} ({self.role.value})"


class ShopPermission(Base):
    """A single permission granted to a user within one shop."""

    __tablename__ = "shop_permissions"
    __table_args__ = (
        UniqueConstraint("user_id", "shop_id", "permission", name="uq_shop_permission"),
    )

    id: int = Column(Integer, primary_key=True, autoincrement=True)

    user_id: str = Column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    shop_id: str = Column(String(36), nullable=False, index=True)

    permission: str = Column(String(50), nullable=False)

    created_at: datetime = Column(DateTime, default=datetime.utcnow, nullable=False)

    user: Mapped["User"] = relationship("User", back_populates="permissions")

    def __repr__(self) -> str:
        return (
            f"ShopPermission(user_id={self.user_id!r}, "
            f"shop_id={self.shop_id!r}, permission={self.permission!r})"
        )


# =============================================================================
# PRODUCT STORE MODELS
# =============================================================================

class ProductAncestor(Base):
    """
    Ordered ancestor link.

    position 0 is always the top-level product.
    """

    __tablename__ = "product_ancestors"

    product_id: str = Column(
        String(36),
        ForeignKey("products.id", ondelete="CASCADE"),
        primary_key=True
    )

    position: int = Column(Integer, primary_key=True)

    ancestor_id: str = Column(String(36), nullable=False, index=True)

    product: Mapped["Product"] = relationship("Product", back_populates="ancestor_links")

    def __repr__(self) -> str:
        return (
            f"ProductAncestor(product_id={self.product_id!r}, "
            f"position={self.position}, ancestor_id={self.ancestor_id!r})"
        )


class Product(Base):
    """
    Product, variant or option row.

    Top-level products have no ancestors. Inventory columns are only
    meaningful on variants and options; they are left out of the document
    of a top-level product.

    Free-form descriptive fields live in ``attributes`` and are merged into
    the document as-is.
    """

    __tablename__ = "products"

    id: str = Column(String(36), primary_key=True, default=_new_id)

    shop_id: str = Column(String(36), nullable=False, index=True)

    type: ProductType = Column(
        Enum(ProductType),
        default=ProductType.SIMPLE,
        nullable=False
    )

    title: Optional[str] = Column(String(255), nullable=True)
    handle: Optional[str] = Column(String(255), nullable=True, index=True)
    description: Optional[str] = Column(Text, nullable=True)
    vendor: Optional[str] = Column(String(255), nullable=True)
    option_title: Optional[str] = Column(String(255), nullable=True)
    price: Optional[float] = Column(Float, nullable=True)

    position: int = Column(Integer, default=0, nullable=False, doc="Sort index among siblings")

    is_visible: bool = Column(Boolean, default=False, nullable=False)
    is_deleted: bool = Column(
        Boolean,
        default=False,
        nullable=False,
        doc="Soft delete; deleted rows are invisible to ProductService lookups"
    )

    inventory_management: bool = Column(Boolean, default=False, nullable=False)
    inventory_policy: bool = Column(Boolean, default=False, nullable=False)
    inventory_quantity: int = Column(Integer, default=0, nullable=False)
    low_inventory_warning_threshold: int = Column(Integer, default=0, nullable=False)

    attributes: Dict[str, Any] = Column(JSON, default=dict, nullable=False)

    created_at: datetime = Column(DateTime, default=datetime.utcnow, nullable=False)

    updated_at: datetime = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False
    )

    ancestor_links: Mapped[List["ProductAncestor"]] = relationship(
        "ProductAncestor",
        back_populates="product",
        order_by="ProductAncestor.position",
        cascade="all, delete-orphan",
    )

    # =========================================================================
    # HIERARCHY
    # =========================================================================

    @property
    def ancestors(self) -> List[str]:
        """Ordered ancestor ids, top-level product first."""
        return [link.ancestor_id for link in self.ancestor_links]

    def set_ancestors(self, ancestor_ids: List[str]) -> None:
        """Replace the ancestor chain."""
        self.ancestor_links = [
            ProductAncestor(position=index, ancestor_id=ancestor_id)
            for index, ancestor_id in enumerate(ancestor_ids)
        ]

    @property
    def is_top_level(self) -> bool:
        return not self.ancestor_links

    @property
    def top_level_id(self) -> str:
        """Id of the top-level product this row belongs to."""
        ancestors = self.ancestors
        return ancestors[0] if ancestors else self.id

    # =========================================================================
    # DOCUMENT PROJECTION
    # =========================================================================

    def to_document(self) -> Dict[str, Any]:
        """
        Render the row as a camelCase document.

        Free-form attributes are applied first so the stored columns win
        on key collisions.
        """
        document: Dict[str, Any] = dict(self.attributes or {})
        document.update({
            "id": self.id,
            "shopId": self.shop_id,
            "ancestors": self.ancestors,
            "type": self.type.value,
            "title": self.title,
            "handle": self.handle,
            "description": self.description,
            "vendor": self.vendor,
            "index": self.position,
            "isVisible": self.is_visible,
            "isDeleted": self.is_deleted,
            "createdAt": _isoformat(self.created_at),
            "updatedAt": _isoformat(self.updated_at),
        })

        if self.type == ProductType.VARIANT:
            document.update({
                "optionTitle": self.option_title,
                "price": self.price,
                "inventoryManagement": self.inventory_management,
                "inventoryPolicy": self.inventory_policy,
                "inventoryQuantity": self.inventory_quantity,
                "lowInventoryWarningThreshold": self.low_inventory_warning_threshold,
            })

        return document

    def __repr__(self) -> str:
        return (
            f"Product(id={self.id!r}, "
            f"type={self.type.value!r}, "
            f"shop_id={self.shop_id!r}, "
            f"title={self.title!r})"
        )


class Media(Base):
    """
    Image uploaded for a product.

    Only media with ``to_grid == 1`` and a workflow outside
    MediaWorkflow.hidden() show up in catalog listings.
    """

    __tablename__ = "media"

    STORES = ("thumbnail", "small", "medium", "large", "image")

    id: str = Column(String(36), primary_key=True, default=_new_id)

    product_id: str = Column(String(36), nullable=False, index=True)

    shop_id: Optional[str] = Column(String(36), nullable=True)

    filename: str = Column(String(255), nullable=False)

    to_grid: int = Column(Integer, default=1, nullable=False)

    workflow: Optional[str] = Column(String(20), nullable=True)

    priority: Optional[int] = Column(Integer, nullable=True)

    uploaded_at: datetime = Column(DateTime, default=datetime.utcnow, nullable=False)

    def url(self, store: str, prefix: str = "") -> str:
        """
        URL of one size variant of this image.

        Raises:
            ValueError: If store is not one of Media.STORES
        """
        if store not in self.STORES:
            raise ValueError(f"Unknown media store: {store}")
        return f"{prefix}/{self.id}/{store}/{self.filename}"

    def __repr__(self) -> str:
        return (
            f"Media(id={self.id!r}, product_id={self.product_id!r}, "
            f"workflow={self.workflow!r}, priority={self.priority})"
        )


# =============================================================================
# CATALOG MODEL
# =============================================================================

class CatalogEntry(Base):
    """
    Published catalog document for a top-level product.

    ``document`` holds the full entry. Row timestamps stay outside of it,
    so republishing an unchanged product stores an identical document.
    """

    __tablename__ = "catalog"

    id: str = Column(String(36), primary_key=True, doc="Top-level product id")

    shop_id: Optional[str] = Column(String(36), nullable=True, index=True)

    document: Dict[str, Any] = Column(JSON, nullable=False)

    published_at: datetime = Column(DateTime, default=datetime.utcnow, nullable=False)

    updated_at: datetime = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False
    )

    def __repr__(self) -> str:
        return f"CatalogEntry(id={self.id!r}, shop_id={self.shop_id!r})"
