"""
==============================================================================
Catalog Endpoints
==============================================================================

Publishing products to the catalog and reading published entries.

Publish Flow:
-------------
    ┌──────────────────────┐
    │ createProduct in     │──▶ ACCESS_DENIED (403)
    │ caller's active shop │
    └──────────┬───────────┘
    ┌──────────▼───────────┐
    │ load requested ids   │  exact id match only
    └──────────┬───────────┘
    ┌──────────▼───────────┐
    │ keep publishable     │──▶ NO_PUBLISHABLE_PRODUCTS (404) if none left
    └──────────┬───────────┘
    ┌──────────▼───────────┐
    │ publish batch        │──▶ PUBLISH_FAILED (500)
    └──────────────────────┘

Products the caller may not publish are dropped without an error.

==============================================================================
"""

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.catalog.publisher import CatalogPublisher
from app.catalog.store import CatalogStore
from app.core import exceptions
from app.core.dependencies import get_current_user
from app.db.database import get_db
from app.db.models import User
from app.schemas.catalog import (
    CatalogEntryResponse,
    InventoryAdjustmentResponse,
    PublishRequest,
    PublishResponse,
)
from app.services.permission_service import CREATE_PRODUCT, PermissionService
from app.services.product_service import ProductService


# Module logger
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/catalog", tags=["Catalog"])


class CatalogController:
    """Controller for catalog operations."""

    def __init__(self, db: Session):
        self._catalog = CatalogStore(db)
        self._products = ProductService(db)
        self._permissions = PermissionService(db)
        self._publisher = CatalogPublisher.for_session(db)

    async def publish_products(self, user: User, request: PublishRequest) -> PublishResponse:
        self._permissions.require_permission(user, CREATE_PRODUCT)

        requested = request.id_list()
        products = {product.id: product for product in self._products.get_many(requested)}
        publishable = self._in_request_order(
            requested,
            self._permissions.filter_publishable(user, list(products.values()))
        )

        if not publishable:
            logger.warning(f"Nothing publishable for {user.username} in {requested}")
            raise exceptions.no_publishable_products(requested)

        if not await self._publisher.publish_products(publishable):
            logger.error(f"Publishing failed for {publishable}")
            raise exceptions.publish_failed(publishable)

        # variant and option ids are published under their top-level product
        catalog_ids = list(dict.fromkeys(products[product_id].top_level_id for product_id in publishable))

        logger.info(f"✅ {user.username} published {len(catalog_ids)} product(s)")
        return PublishResponse(product_ids=catalog_ids)

    @staticmethod
    def _in_request_order(requested: List[str], ids: List[str]) -> List[str]:
        allowed = set(ids)
        return [product_id for product_id in requested if product_id in allowed]

    def get_entry(self, product_id: str) -> CatalogEntryResponse:
        document = self._catalog.get(product_id)
        if document is None:
            raise exceptions.catalog_entry_not_found(product_id)
        return CatalogEntryResponse(product=document)

    def adjust_inventory(self, user: User, product_id: str) -> InventoryAdjustmentResponse:
        self._permissions.require_permission(user, CREATE_PRODUCT)

        document = self._catalog.get(product_id)
        if document is None:
            raise exceptions.catalog_entry_not_found(product_id)

        self._permissions.require_shop_permission(user, CREATE_PRODUCT, document.get("shopId"))

        updated = self._publisher.publish_inventory_adjustment(product_id)
        return InventoryAdjustmentResponse(updated=updated)


@router.post("/publish/products", response_model=PublishResponse)
async def publish_products(
    request: PublishRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Publish one or many products to the catalog.

    Variant ids publish their top-level product. Requires createProduct in
    the caller's active shop, and per product in the product's shop (or the
    primary shop).
    """
    controller = CatalogController(db)
    return await controller.publish_products(user, request)


@router.get("/{product_id}", response_model=CatalogEntryResponse)
async def get_catalog_entry(
    product_id: str,
    db: Session = Depends(get_db)
):
    """Published catalog document of a top-level product."""
    controller = CatalogController(db)
    return controller.get_entry(product_id)


@router.post("/{product_id}/inventory-adjustments", response_model=InventoryAdjustmentResponse)
async def adjust_inventory(
    product_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Recompute the inventory flags of a published product."""
    controller = CatalogController(db)
    return controller.adjust_inventory(user, product_id)
