"""
==============================================================================
FastAPI Dependencies Module
==============================================================================

Caller resolution for protected routes.

    get_db ──▶ get_current_user ──▶ require_admin

Roles only separate admins from everyone else. Shop permissions such as
createProduct are checked by PermissionService inside the endpoints,
against the caller resolved here.

Usage:
------
    @router.post("/users")
    async def create_user(admin: User = Depends(require_admin)):
        ...

    @router.post("/publish/products")
    async def publish(user: User = Depends(get_current_user)):
        ...

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core import exceptions
from app.core.security import ACCESS, SecurityManager, get_security_manager
from app.db.database import get_db
from app.db.models import User, UserRole


# Module logger
logger = logging.getLogger(__name__)

# Bearer scheme; missing credentials are reported as TOKEN_INVALID, not 403
bearer_scheme = HTTPBearer(auto_error=False)


class AuthenticationManager:
    """
    Resolves the caller behind a bearer token.

    Example:
        >>> auth = AuthenticationManager(get_security_manager(), db_session)
        >>> user = auth.get_current_user(credentials)
        >>> auth.require_role(user, UserRole.ADMIN)
    """

    def __init__(self, security: SecurityManager, db: Optional[Session]) -> None:
        self._security = security
        self._db = db

    def get_current_user(self, credentials: Optional[HTTPAuthorizationCredentials]) -> User:
        """
        Active user owning the access token.

        Raises:
            AppException: TOKEN_INVALID without a token or subject,
                TOKEN_EXPIRED for an expired or unreadable token,
                USER_NOT_FOUND, ACCOUNT_DISABLED
        """
        if credentials is None:
            raise exceptions.token_invalid()

        payload = self._security.verify_token(credentials.credentials, ACCESS)
        if payload is None:
            raise exceptions.token_expired()

        user_id = payload.get("sub")
        if not user_id:
            logger.warning("Access token without subject")
            raise exceptions.token_invalid()

        user = self._db.query(User).filter(User.id == user_id).first()
        if user is None:
            logger.warning(f"Access token for unknown user {user_id}")
            raise exceptions.user_not_found(user_id)

        if not user.is_active:
            logger.warning(f"Disabled user attempted access: {user.username}")
            raise exceptions.account_disabled()

        return user

    @staticmethod
    def require_role(user: User, *allowed_roles: UserRole) -> User:
        """
        Raises:
            AppException: ADMIN_REQUIRED when an admin-only check fails,
                ACCESS_DENIED for any other role check
        """
        if user.role in allowed_roles:
            return user

        logger.warning(
            f"{user.username} ({user.role.value}) needs one of "
            f"{[role.value for role in allowed_roles]}"
        )
        if UserRole.ADMIN in allowed_roles:
            raise exceptions.admin_required()
        raise exceptions.access_denied()


# =============================================================================
# FASTAPI DEPENDENCY FUNCTIONS
# =============================================================================

async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> User:
    """Authenticated caller."""
    return AuthenticationManager(get_security_manager(), db).get_current_user(credentials)


async def require_admin(user: User = Depends(get_current_user)) -> User:
    """Authenticated caller with the admin role."""
    return AuthenticationManager.require_role(user, UserRole.ADMIN)


def get_pagination(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(20, ge=1, le=100, description="Items per page")
) -> Dict[str, int]:
    """Page, page size and the matching row offset."""
    return {
        "page": page,
        "page_size": page_size,
        "offset": (page - 1) * page_size
    }
