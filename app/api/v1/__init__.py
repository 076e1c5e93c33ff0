"""
==============================================================================
API v1 Endpoints
==============================================================================

Version 1 of the REST API.

Routers:
--------
- health: Health check endpoints
- auth: Authentication endpoints
- users: User and permission management (admin)
- products: Product store (products, variants, inventory, media)
- catalog: Publishing and catalog entries
- packages: Package registry

==============================================================================
"""

from . import auth, catalog, health, packages, products, users

__all__ = ["auth", "catalog", "health", "packages", "products", "users"]
