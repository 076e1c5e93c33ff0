"""
==============================================================================
Security Module - Passwords & Tokens
==============================================================================

bcrypt password hashing (passlib) and JWT tokens (python-jose).

Token claims:
------------
    sub       user id
    username  login name
    role      admin | shop_manager | customer
    shop_id   caller's active shop
    type      access | refresh
    iat, exp  issue and expiry times (UTC)

A token identifies the caller and nothing more. Shop grants are read from
the database on every check, so revoking one takes effect immediately.

==============================================================================
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Dict, Optional

from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTError
from passlib.context import CryptContext

from app.config import Settings, get_settings


# Module logger
logger = logging.getLogger(__name__)

ACCESS = "access"
REFRESH = "refresh"


class SecurityManager:
    """
    Password hashing and token issue/verification.

    Example:
        >>> security = get_security_manager()
        >>> security.verify_password("secret123", security.hash_password("secret123"))
        True
        >>> token = security.create_access_token({"sub": "user-id"})
        >>> security.verify_token(token)["sub"]
        'user-id'
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._passwords = CryptContext(schemes=["bcrypt"], deprecated="auto")

    # =========================================================================
    # PASSWORDS
    # =========================================================================

    def hash_password(self, plain_password: str) -> str:
        """
        bcrypt hash of a password.

        Raises:
            ValueError: If the password is empty
        """
        if not plain_password:
            raise ValueError("Password cannot be empty")
        return self._passwords.hash(plain_password)

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Check a password; a malformed stored hash never matches."""
        try:
            return self._passwords.verify(plain_password, hashed_password)
        except (ValueError, TypeError) as e:
            logger.warning(f"Unreadable password hash: {type(e).__name__}")
            return False

    # =========================================================================
    # TOKENS
    # =========================================================================

    def create_access_token(self, claims: Dict[str, Any], lifetime: Optional[timedelta] = None) -> str:
        lifetime = lifetime or timedelta(minutes=self._settings.access_token_expire_minutes)
        return self._encode(claims, ACCESS, lifetime)

    def create_refresh_token(self, claims: Dict[str, Any], lifetime: Optional[timedelta] = None) -> str:
        lifetime = lifetime or timedelta(days=self._settings.refresh_token_expire_days)
        return self._encode(claims, REFRESH, lifetime)

    def _encode(self, claims: Dict[str, Any], token_type: str, lifetime: timedelta) -> str:
        issued_at = datetime.now(timezone.utc)
        payload = dict(claims, type=token_type, iat=issued_at, exp=issued_at + lifetime)

        return jwt.encode(
            payload,
            self._settings.jwt_secret_key,
            algorithm=self._settings.jwt_algorithm
        )

    def verify_token(self, token: str, token_type: str = ACCESS) -> Optional[Dict[str, Any]]:
        """
        Decode a token of the expected type.

        Returns:
            The claims, or None if the token is expired, forged, malformed
            or of the other type
        """
        try:
            payload = jwt.decode(
                token,
                self._settings.jwt_secret_key,
                algorithms=[self._settings.jwt_algorithm]
            )
        except ExpiredSignatureError:
            logger.debug(f"Expired {token_type} token")
            return None
        except JWTError as e:
            logger.warning(f"Rejected {token_type} token: {e}")
            return None

        if payload.get("type") != token_type:
            logger.warning(f"Expected a {token_type} token, got {payload.get('type')}")
            return None

        return payload


@lru_cache(maxsize=1)
def get_security_manager() -> SecurityManager:
    """Shared SecurityManager instance."""
    return SecurityManager()
