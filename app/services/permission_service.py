"""
==============================================================================
Permission Service Module
==============================================================================

Per-shop permission checks for back office callers.

Rules:
------
- Admins hold every permission in every shop.
- Other users hold a permission in a shop if a shop_permissions row grants
  it.
- A grant in the primary shop applies to products of every shop.
- Checks without an explicit shop use the caller's active shop
  (users.shop_id, falling back to the primary shop).

The caller is always passed in explicitly.

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from app.config import get_settings
from app.core import exceptions
from app.db.models import Product, ShopPermission, User


# Module logger
logger = logging.getLogger(__name__)

CREATE_PRODUCT = "createProduct"


class PermissionService:
    """
    Permission checks and grants.

    Attributes:
        _db: Database session
        _primary_shop_id: Shop whose grants cover every shop

    Example:
        >>> permissions = PermissionService(db_session)
        >>> permissions.has_permission(user, CREATE_PRODUCT, "shop-b")
        True
        >>> permissions.filter_publishable(user, products)
        ['p1']
    """

    def __init__(self, db: Session, primary_shop_id: Optional[str] = None) -> None:
        self._db = db
        self._primary_shop_id = primary_shop_id or get_settings().primary_shop_id

    @property
    def primary_shop_id(self) -> str:
        return self._primary_shop_id

    def active_shop_id(self, user: User) -> str:
        """Shop the user is currently working in."""
        return user.shop_id or self._primary_shop_id

    # =========================================================================
    # CHECKS
    # =========================================================================

    def has_permission(
        self,
        user: User,
        permission: str,
        shop_id: Optional[str] = None
    ) -> bool:
        """
        Check whether user holds permission in a shop.

        Args:
            user: Caller
            permission: Permission name, e.g. "createProduct"
            shop_id: Shop to check (defaults to the caller's active shop)
        """
        if user.is_admin:
            return True

        shop_id = shop_id or self.active_shop_id(user)

        grant = self._db.query(ShopPermission).filter(
            ShopPermission.user_id == user.id,
            ShopPermission.shop_id == shop_id,
            ShopPermission.permission == permission,
        ).first()

        return grant is not None

    def can_manage_shop(self, user: User, permission: str, shop_id: Optional[str]) -> bool:
        """Permission in the given shop, or in the primary shop."""
        return (
            self.has_permission(user, permission, shop_id or self._primary_shop_id)
            or self.has_permission(user, permission, self._primary_shop_id)
        )

    def require_permission(
        self,
        user: User,
        permission: str,
        shop_id: Optional[str] = None
    ) -> User:
        """
        Require a permission in a shop.

        Raises:
            AppException: ACCESS_DENIED if the user lacks the permission
        """
        if not self.has_permission(user, permission, shop_id):
            shop_id = shop_id or self.active_shop_id(user)
            logger.warning(f"Permission denied: {user.username} needs {permission} in {shop_id}")
            raise exceptions.access_denied(permission, shop_id)
        return user

    def require_shop_permission(self, user: User, permission: str, shop_id: Optional[str]) -> User:
        """
        Require a permission in the shop that owns a record.

        Raises:
            AppException: ACCESS_DENIED unless can_manage_shop holds
        """
        if not self.can_manage_shop(user, permission, shop_id):
            logger.warning(f"Permission denied: {user.username} needs {permission} in {shop_id}")
            raise exceptions.access_denied(permission, shop_id)
        return user

    def filter_publishable(self, user: User, products: Iterable[Product]) -> List[str]:
        """
        Ids of the products the user may publish.

        Products of shops the user has no createProduct grant for are
        dropped silently, unless the user holds createProduct in the
        primary shop.
        """
        products = list(products)
        covers_all_shops = self.has_permission(user, CREATE_PRODUCT, self._primary_shop_id)

        publishable = [
            product.id
            for product in products
            if covers_all_shops or self.has_permission(user, CREATE_PRODUCT, product.shop_id)
        ]

        dropped = len(products) - len(publishable)
        if dropped:
            logger.info(f"Dropped {dropped} product(s) {user.username} may not publish")

        return publishable

    # =========================================================================
    # GRANTS
    # =========================================================================

    def grant(self, user: User, permission: str, shop_id: str) -> ShopPermission:
        """Grant a permission in a shop; granting twice is a no-op."""
        existing = self._db.query(ShopPermission).filter(
            ShopPermission.user_id == user.id,
            ShopPermission.shop_id == shop_id,
            ShopPermission.permission == permission,
        ).first()

        if existing:
            return existing

        grant = ShopPermission(user_id=user.id, shop_id=shop_id, permission=permission)

        self._db.add(grant)
        self._db.commit()
        self._db.refresh(grant)

        logger.info(f"✅ Granted {permission} in {shop_id} to {user.username}")
        return grant

    def revoke(self, user: User, permission: str, shop_id: str) -> bool:
        """Revoke a permission; returns whether a grant was removed."""
        removed = self._db.query(ShopPermission).filter(
            ShopPermission.user_id == user.id,
            ShopPermission.shop_id == shop_id,
            ShopPermission.permission == permission,
        ).delete()
        self._db.commit()

        if removed:
            logger.info(f"Revoked {permission} in {shop_id} from {user.username}")
        return bool(removed)

    def list_grants(self, user: User) -> List[ShopPermission]:
        return (
            self._db.query(ShopPermission)
            .filter(ShopPermission.user_id == user.id)
            .order_by(ShopPermission.shop_id, ShopPermission.permission)
            .all()
        )
