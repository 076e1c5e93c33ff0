"""
==============================================================================
Package Registry Module
==============================================================================

In-process registry of the packages this application ships.

A package is described by a PackageDefinition: display metadata, default
settings, and the registry entries that tell an admin UI which panels the
package provides (a dashboard card, a settings page, ...).

Usage:
------
    from app.plugins import PackageDefinition, register_package

    register_package(PackageDefinition(
        name="reaction-example",
        label="Example",
        registry=[RegistryEntry(name="example", provides=["dashboard"])],
    ))

==============================================================================
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# Module logger
logger = logging.getLogger(__name__)


class RegistryEntry(BaseModel):
    """A UI panel provided by a package."""
    name: str
    provides: List[str] = Field(default_factory=list)
    label: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    priority: Optional[int] = None
    container: Optional[str] = None
    route: Optional[str] = None
    template: Optional[str] = None
    workflow: Optional[str] = None


class PackageDefinition(BaseModel):
    """A registered package."""
    name: str = Field(..., min_length=1)
    label: str
    icon: Optional[str] = None
    auto_enable: bool = Field(default=False, alias="autoEnable")
    settings: Dict[str, Any] = Field(default_factory=dict)
    registry: List[RegistryEntry] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)

    def entries(self, provides: Optional[str] = None) -> List[RegistryEntry]:
        """Registry entries, optionally only those providing `provides`."""
        if provides is None:
            return list(self.registry)
        return [entry for entry in self.registry if provides in entry.provides]

    def filtered(self, provides: Optional[str] = None) -> "PackageDefinition":
        """Copy of this definition keeping only matching registry entries."""
        return self.model_copy(update={"registry": self.entries(provides)})


class PackageRegistry:
    """
    Packages by name.

    Example:
        >>> registry = PackageRegistry()
        >>> registry.register(payments)
        >>> registry.get("reaction-payments").label
        'Payments'
    """

    def __init__(self) -> None:
        self._packages: Dict[str, PackageDefinition] = {}

    def register(self, package: PackageDefinition) -> PackageDefinition:
        """
        Register a package.

        Raises:
            ValueError: If a package with the same name is already registered
        """
        if package.name in self._packages:
            raise ValueError(f"Package already registered: {package.name}")

        self._packages[package.name] = package
        logger.debug(f"Registered package {package.name} ({len(package.registry)} registry entries)")
        return package

    def get(self, name: str) -> Optional[PackageDefinition]:
        return self._packages.get(name)

    def list(self, provides: Optional[str] = None) -> List[PackageDefinition]:
        """
        Registered packages in registration order.

        With `provides`, only packages with at least one matching entry are
        returned, and only their matching entries are kept.
        """
        if provides is None:
            return list(self._packages.values())

        return [
            package.filtered(provides)
            for package in self._packages.values()
            if package.entries(provides)
        ]

    def names(self) -> List[str]:
        return list(self._packages)

    def __contains__(self, name: str) -> bool:
        return name in self._packages

    def __len__(self) -> int:
        return len(self._packages)


@lru_cache()
def get_registry() -> PackageRegistry:
    """Application-wide package registry."""
    return PackageRegistry()


def register_package(package: PackageDefinition) -> PackageDefinition:
    return get_registry().register(package)


def get_package(name: str) -> Optional[PackageDefinition]:
    return get_registry().get(name)


def list_packages(provides: Optional[str] = None) -> List[PackageDefinition]:
    return get_registry().list(provides)
