"""
==============================================================================
Main API Router
==============================================================================

Combines all v1 API routes under /api/v1 prefix.

==============================================================================
"""

from fastapi import APIRouter

from app.api.v1 import auth, catalog, health, packages, products, users


class MainAPIRouter:
    """Main API router combining all versioned routes."""

    def __init__(self):
        self._router = APIRouter(prefix="/api/v1")
        self._include_routers()

    def _include_routers(self) -> None:
        self._router.include_router(health.router)
        self._router.include_router(auth.router)
        self._router.include_router(users.router)
        self._router.include_router(products.router)
        self._router.include_router(catalog.router)
        self._router.include_router(packages.router)

    @property
    def router(self):
        return self._router


# Create main API router instance
api_router = MainAPIRouter().router
