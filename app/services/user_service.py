"""
==============================================================================
User Service Module
==============================================================================

Back office accounts. Every user has a role and an active shop; shop
permissions are managed separately by PermissionService.

Only admins reach this service (the /users router requires the admin role).

==============================================================================
"""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from app.core import exceptions
from app.core.security import SecurityManager, get_security_manager
from app.db.models import User, UserRole
from app.schemas.user import UserCreate, UserUpdate


# Module logger
logger = logging.getLogger(__name__)


class UserService:
    """
    Account creation, lookup and updates.

    Example:
        >>> users = UserService(db_session)
        >>> manager = users.create_user(UserCreate(
        ...     username="john", password="secret123", shop_id="shop-b"
        ... ))
        >>> users.count_users(shop_id="shop-b")
        1
    """

    def __init__(
        self,
        db: Session,
        security: Optional[SecurityManager] = None
    ) -> None:
        self._db = db
        self._security = security or get_security_manager()

    def create_user(self, data: UserCreate) -> User:
        """
        Raises:
            AppException: USERNAME_EXISTS if the (lower-cased) name is taken
        """
        username = data.username.lower()
        user = User(
            username=username,
            password_hash=self._security.hash_password(data.password),
            role=data.role,
            shop_id=data.shop_id,
            is_active=True
        )
        self._db.add(user)

        # the unique index on username catches concurrent creates as well
        try:
            self._db.commit()
        except IntegrityError:
            self._db.rollback()
            logger.warning(f"Username already taken: {username}")
            raise exceptions.username_exists(data.username)

        self._db.refresh(user)
        logger.info(f"✅ User created: {username} ({user.role.value}, shop {user.shop_id})")
        return user

    def get_by_id(self, user_id: str) -> User:
        """
        Raises:
            AppException: USER_NOT_FOUND
        """
        user = self._db.get(User, user_id)
        if user is None:
            raise exceptions.user_not_found(user_id)
        return user

    def list_users(
        self,
        role: Optional[UserRole] = None,
        shop_id: Optional[str] = None,
        offset: int = 0,
        limit: int = 100
    ) -> List[User]:
        """Newest first, optionally narrowed to a role and an active shop."""
        return (
            self._query(role, shop_id)
            .order_by(User.created_at.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )

    def count_users(self, role: Optional[UserRole] = None, shop_id: Optional[str] = None) -> int:
        return self._query(role, shop_id).count()

    def _query(self, role: Optional[UserRole], shop_id: Optional[str]) -> Query:
        query = self._db.query(User)
        if role is not None:
            query = query.filter(User.role == role)
        if shop_id is not None:
            query = query.filter(User.shop_id == shop_id)
        return query

    def update_user(self, user_id: str, data: UserUpdate) -> User:
        """Apply the fields present in ``data``; a new password is re-hashed."""
        user = self.get_by_id(user_id)
        changes = data.model_dump(exclude_none=True)

        password = changes.pop("password", None)
        if password is not None:
            user.password_hash = self._security.hash_password(password)

        for field, value in changes.items():
            setattr(user, field, value)

        self._db.commit()
        self._db.refresh(user)

        changed = sorted(changes) + (["password"] if password is not None else [])
        logger.info(f"User {user.username} updated: {', '.join(changed) or 'no changes'}")
        return user

    def deactivate_user(self, user_id: str) -> User:
        """Soft delete; the account and its grants stay in place."""
        user = self.get_by_id(user_id)

        if user.is_active:
            user.is_active = False
            self._db.commit()
            self._db.refresh(user)
            logger.info(f"✅ User deactivated: {user.username}")

        return user
