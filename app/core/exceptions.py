"""
Application Exception Handling

Every error leaves the API as

    {"success": false, "error": {"code", "message", "timestamp", "details"?}}

Services raise AppException through the factories at the bottom of this
module, e.g. ``raise exceptions.product_not_found(product_id)``.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class AppException(Exception):
    """
    Error with a machine-readable code and an HTTP status.

    Codes by area:
        auth      INVALID_CREDENTIALS, TOKEN_EXPIRED, TOKEN_INVALID (401),
                  ACCOUNT_DISABLED (403)
        access    ACCESS_DENIED, ADMIN_REQUIRED (403)
        users     USER_NOT_FOUND (404), USERNAME_EXISTS (409)
        products  PRODUCT_NOT_FOUND (404), PRODUCT_EXISTS (409),
                  INVALID_PRODUCT (400)
        catalog   CATALOG_ENTRY_NOT_FOUND, NO_PUBLISHABLE_PRODUCTS (404),
                  PUBLISH_FAILED (500)
        packages  PACKAGE_NOT_FOUND (404)
    """

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()

    def to_dict(self) -> Dict[str, Any]:
        error: Dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "timestamp": self.timestamp,
        }
        if self.details:
            error["details"] = self.details
        return {"success": False, "error": error}


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppException, app_exception_handler)


# ============================================
# FACTORIES
# ============================================

def invalid_credentials() -> AppException:
    return AppException("Invalid username or password", "INVALID_CREDENTIALS", 401)


def token_expired() -> AppException:
    return AppException("Token has expired", "TOKEN_EXPIRED", 401)


def token_invalid() -> AppException:
    return AppException("Invalid or malformed token", "TOKEN_INVALID", 401)


def account_disabled() -> AppException:
    return AppException("Account has been disabled", "ACCOUNT_DISABLED", 403)


def access_denied(permission: Optional[str] = None, shop_id: Optional[str] = None) -> AppException:
    """Caller lacks ``permission`` in ``shop_id`` (or a non-admin role check failed)."""
    details = {key: value for key, value in (("permission", permission), ("shop_id", shop_id)) if value}
    return AppException("Access Denied", "ACCESS_DENIED", 403, details)


def admin_required() -> AppException:
    return AppException("Admin role required", "ADMIN_REQUIRED", 403)


def user_not_found(user_id: Optional[str] = None) -> AppException:
    return AppException("User not found", "USER_NOT_FOUND", 404, {"user_id": user_id} if user_id else None)


def username_exists(username: str) -> AppException:
    return AppException(f"Username '{username}' already exists", "USERNAME_EXISTS", 409, {"username": username})


def product_not_found(product_id: Optional[str] = None) -> AppException:
    """Unknown id, soft-deleted product, or a variant whose ancestors are gone."""
    details = {"product_id": product_id} if product_id else None
    return AppException("Product not found", "PRODUCT_NOT_FOUND", 404, details)


def product_exists(product_id: str) -> AppException:
    return AppException(f"Product '{product_id}' already exists", "PRODUCT_EXISTS", 409, {"product_id": product_id})


def invalid_product(product_id: str, reason: str) -> AppException:
    return AppException(
        f"Invalid product: {reason}",
        "INVALID_PRODUCT",
        400,
        {"product_id": product_id, "reason": reason}
    )


def catalog_entry_not_found(product_id: str, message: str = "Catalog entry not found") -> AppException:
    return AppException(message, "CATALOG_ENTRY_NOT_FOUND", 404, {"product_id": product_id})


def no_publishable_products(product_ids: List[str]) -> AppException:
    """Nothing requested exists or the caller may publish none of it."""
    return AppException(
        "No publishable products found",
        "NO_PUBLISHABLE_PRODUCTS",
        404,
        {"product_ids": product_ids}
    )


def publish_failed(product_ids: List[str]) -> AppException:
    return AppException(
        "Some products could not be published to the catalog.",
        "PUBLISH_FAILED",
        500,
        {"product_ids": product_ids}
    )


def package_not_found(name: str) -> AppException:
    return AppException(f"Package '{name}' is not registered", "PACKAGE_NOT_FOUND", 404, {"name": name})
