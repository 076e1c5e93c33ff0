"""
==============================================================================
Catalog Package - Product Publishing
==============================================================================

Read-optimized catalog of published products.

Modules:
--------
- inventory_status: Sold out / backorder / low quantity flags
- models: Pydantic catalog document models
- store: CatalogStore (get / put / patch / delete)
- publisher: CatalogPublisher (full publish and inventory adjustments)

The publisher depends on the product and media services, which depend on
the catalog models, so it is imported from app.catalog.publisher directly:

    from app.catalog.publisher import CatalogPublisher

==============================================================================
"""

from .inventory_status import (
    InventoryStatus,
    evaluate_inventory_status,
    is_backorder,
    is_low_quantity,
    is_sold_out,
)
from .models import CATALOG_PRODUCT_TYPE, CatalogDocument, ProductMedia
from .store import CatalogStore

__all__ = [
    "CATALOG_PRODUCT_TYPE",
    "CatalogDocument",
    "CatalogStore",
    "InventoryStatus",
    "ProductMedia",
    "evaluate_inventory_status",
    "is_backorder",
    "is_low_quantity",
    "is_sold_out",
]
