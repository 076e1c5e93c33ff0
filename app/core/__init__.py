"""
==============================================================================
Core Package
==============================================================================

Core utilities and infrastructure for the application.

Modules:
--------
- exceptions: AppException class and error factory functions
- security: SecurityManager for password hashing and JWT tokens
- dependencies: FastAPI dependency injection functions

Usage:
------
    from app.core import get_current_user, require_admin

    # Exception factory functions via module
    from app.core import exceptions
    raise exceptions.access_denied("createProduct", "shop-b")

==============================================================================
"""

from . import exceptions
from .exceptions import (
    AppException,
    register_exception_handlers,
)
from .security import SecurityManager, get_security_manager
from .dependencies import (
    AuthenticationManager,
    get_current_user,
    get_pagination,
    require_admin,
)

__all__ = [
    # Exceptions
    "exceptions",
    "AppException",
    "register_exception_handlers",
    # Security
    "SecurityManager",
    "get_security_manager",
    # Dependencies
    "AuthenticationManager",
    "get_current_user",
    "get_pagination",
    "require_admin",
]
