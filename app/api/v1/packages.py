"""
==============================================================================
Package Registry Endpoints
==============================================================================

Read-only view of the registered packages and the panels they provide.

==============================================================================
"""

from typing import Optional

from fastapi import APIRouter, Query

from app.core import exceptions
from app.plugins import get_registry


router = APIRouter(prefix="/packages", tags=["Packages"])


class PackageController:
    """Controller for package registry lookups."""

    def __init__(self):
        self._registry = get_registry()

    def list_packages(self, provides: Optional[str]) -> dict:
        packages = self._registry.list(provides)
        return {
            "success": True,
            "total": len(packages),
            "packages": [package.model_dump(by_alias=True) for package in packages]
        }

    def get_package(self, name: str, provides: Optional[str]) -> dict:
        package = self._registry.get(name)
        if package is None:
            raise exceptions.package_not_found(name)
        return {
            "success": True,
            "package": package.filtered(provides).model_dump(by_alias=True)
        }


@router.get("")
async def list_packages(provides: Optional[str] = Query(None, min_length=1)):
    """Registered packages; ?provides=settings keeps only settings panels."""
    controller = PackageController()
    return controller.list_packages(provides)


@router.get("/{name}")
async def get_package(name: str, provides: Optional[str] = Query(None, min_length=1)):
    """One registered package by name."""
    controller = PackageController()
    return controller.get_package(name, provides)
