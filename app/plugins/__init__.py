"""
==============================================================================
Plugins Package - Registered Packages
==============================================================================

Importing this package registers every bundled package definition.

Modules:
--------
- registry: PackageDefinition, RegistryEntry, PackageRegistry
- payments: reaction-payments (dashboard card, settings page)
- catalog: reaction-catalog

==============================================================================
"""

from .registry import (
    PackageDefinition,
    PackageRegistry,
    RegistryEntry,
    get_package,
    get_registry,
    list_packages,
    register_package,
)
from .payments import PAYMENTS_PACKAGE
from .catalog import CATALOG_PACKAGE

__all__ = [
    "CATALOG_PACKAGE",
    "PAYMENTS_PACKAGE",
    "PackageDefinition",
    "PackageRegistry",
    "RegistryEntry",
    "get_package",
    "get_registry",
    "list_packages",
    "register_package",
]
