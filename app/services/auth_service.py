"""
==============================================================================
Authentication Service Module
==============================================================================

Login, token refresh and password changes for back office users.

Login failures never reveal whether the username exists: an unknown user
and a wrong password both raise INVALID_CREDENTIALS. Disabled accounts are
rejected after the password check.

Tokens carry the user's active shop so clients can tell which shop a
publish request will be checked against.

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from app.config import get_settings
from app.core import exceptions
from app.core.security import REFRESH, SecurityManager, get_security_manager
from app.db.models import User


# Module logger
logger = logging.getLogger(__name__)

TokenPair = Tuple[str, str]


class AuthService:
    """
    Credential checks and token issue.

    Example:
        >>> auth_service = AuthService(db_session)
        >>> user, access, refresh = auth_service.authenticate("john", "pass123")
        >>> user, access, refresh = auth_service.refresh_tokens(refresh)
    """

    def __init__(
        self,
        db: Session,
        security: Optional[SecurityManager] = None
    ) -> None:
        self._db = db
        self._security = security or get_security_manager()
        self._settings = get_settings()

    def authenticate(self, username: str, password: str) -> Tuple[User, str, str]:
        """
        Log a user in.

        Returns:
            (user, access_token, refresh_token)

        Raises:
            AppException: INVALID_CREDENTIALS for an unknown user or a wrong
                password, ACCOUNT_DISABLED for an inactive account
        """
        username = username.lower().strip()
        user = self._db.query(User).filter(User.username == username).first()

        if user is None or not self._security.verify_password(password, user.password_hash):
            logger.warning(f"Login failed for {username}")
            raise exceptions.invalid_credentials()

        self._ensure_active(user)

        logger.info(f"✅ User authenticated: {user.username}")
        return (user, *self._issue_tokens(user))

    def refresh_tokens(self, refresh_token: str) -> Tuple[User, str, str]:
        """
        Exchange a refresh token for a new token pair.

        Raises:
            AppException: TOKEN_EXPIRED for an expired or unreadable token,
                TOKEN_INVALID without a subject, USER_NOT_FOUND for a deleted
                user, ACCOUNT_DISABLED for an inactive account
        """
        payload = self._security.verify_token(refresh_token, REFRESH)
        if payload is None:
            raise exceptions.token_expired()

        user_id = payload.get("sub")
        if not user_id:
            raise exceptions.token_invalid()

        user = self._db.query(User).filter(User.id == user_id).first()
        if user is None:
            logger.warning(f"Refresh token for unknown user {user_id}")
            raise exceptions.user_not_found(user_id)

        self._ensure_active(user)

        logger.info(f"Tokens refreshed for {user.username}")
        return (user, *self._issue_tokens(user))

    def change_password(self, user: User, current_password: str, new_password: str) -> User:
        """
        Replace a user's password after checking the current one.

        Raises:
            AppException: INVALID_CREDENTIALS if current_password is wrong
        """
        if not self._security.verify_password(current_password, user.password_hash):
            logger.warning(f"Password change rejected for {user.username}")
            raise exceptions.invalid_credentials()

        user.password_hash = self._security.hash_password(new_password)
        self._db.commit()
        self._db.refresh(user)

        logger.info(f"✅ Password changed for: {user.username}")
        return user

    def get_token_expiry_seconds(self) -> int:
        return self._settings.access_token_expire_seconds

    @staticmethod
    def _ensure_active(user: User) -> None:
        if not user.is_active:
            logger.warning(f"Disabled account {user.username} rejected")
            raise exceptions.account_disabled()

    def _issue_tokens(self, user: User) -> TokenPair:
        claims = {
            "sub": user.id,
            "username": user.username,
            "role": user.role.value,
            "shop_id": user.shop_id or self._settings.primary_shop_id,
        }
        return (
            self._security.create_access_token(claims),
            self._security.create_refresh_token(claims),
        )
