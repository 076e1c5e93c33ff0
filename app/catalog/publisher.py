"""
==============================================================================
Catalog Publisher Module
==============================================================================

Copies products from the product store into the catalog.

Publish Flow (per product id):
-----------------------------
    ┌──────────────────────┐
    │ resolve top-level    │  variant/option ids resolve to their product
    └──────────┬───────────┘
    ┌──────────▼───────────┐
    │ load variants        │  every row below the product
    └──────────┬───────────┘
    ┌──────────▼───────────┐
    │ load grid media      │  priority, then upload time
    └──────────┬───────────┘
    ┌──────────▼───────────┐
    │ compute flags        │  sold out / backorder / low quantity
    └──────────┬───────────┘
    ┌──────────▼───────────┐
    │ CatalogStore.put     │  replace the whole entry
    └──────────────────────┘

A batch is joined with asyncio.gather before its results are combined, so
the aggregate outcome is only known once every product has settled.

Inventory adjustments only rewrite the three inventory flags, and only
when one of them changed.

==============================================================================
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence, Union

from sqlalchemy.orm import Session

from app.catalog.inventory_status import (
    QuantityResolver,
    evaluate_inventory_status,
)
from app.catalog.models import CATALOG_PRODUCT_TYPE, CatalogDocument
from app.catalog.store import CatalogStore
from app.core import exceptions
from app.db.models import Product
from app.services.media_service import MediaService
from app.services.product_service import ProductService


# Module logger
logger = logging.getLogger(__name__)


class CatalogPublisher:
    """
    Publishes products and inventory changes to the catalog.

    Attributes:
        _products: Product store
        _media: Media store
        _catalog: Catalog store
        _resolve_quantity: Available quantity lookup for variants

    Example:
        >>> publisher = CatalogPublisher(products, media, catalog)
        >>> await publisher.publish_products(["p1", "p2"])
        True
        >>> publisher.publish_inventory_adjustment("p1")
        False
    """

    def __init__(
        self,
        products: ProductService,
        media: MediaService,
        catalog: CatalogStore,
        quantity_resolver: Optional[QuantityResolver] = None
    ) -> None:
        self._products = products
        self._media = media
        self._catalog = catalog
        self._resolve_quantity = quantity_resolver or products.get_variant_quantity

    @classmethod
    def for_session(cls, db: Session) -> "CatalogPublisher":
        """Publisher over the product, media and catalog stores of one session."""
        return cls(ProductService(db), MediaService(db), CatalogStore(db))

    # =========================================================================
    # FULL PUBLISH
    # =========================================================================

    async def publish_products(self, product_ids: Union[str, Sequence[str]]) -> bool:
        """
        Publish one or many products.

        Args:
            product_ids: A single product id or a sequence of ids

        Returns:
            True if every product was published (True for an empty batch)

        Raises:
            AppException: PRODUCT_NOT_FOUND if any id cannot be resolved;
                raised only after the whole batch has settled
        """
        ids = [product_ids] if isinstance(product_ids, str) else list(product_ids)

        outcomes = await asyncio.gather(
            *(self.publish_product(product_id) for product_id in ids),
            return_exceptions=True,
        )

        for product_id, outcome in zip(ids, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning(f"Publish failed for {product_id}: {outcome}")
                raise outcome

        return all(outcomes)

    async def publish_product(self, product_id: str) -> bool:
        """
        Publish a single product (or the product owning a variant id).

        Returns:
            True if the catalog entry was written
        """
        product = self._products.resolve_top_level(product_id)

        document = self.build_document(product)
        written = self._catalog.put(product.id, document, shop_id=product.shop_id)

        if not written:
            logger.warning(f"Catalog entry for {product.id} was not written")
        elif product.id != product_id:
            logger.info(f"📦 Published {product.id} (requested as {product_id})")
        else:
            logger.info(f"📦 Published {product.id}")

        return written

    def build_document(self, product: Product) -> Dict[str, Any]:
        """Build the catalog document of a top-level product."""
        variants = self._products.list_variant_documents(product.id)
        status = evaluate_inventory_status(variants, self._resolve_quantity)

        document = product.to_document()
        document.update({
            "media": self._media.product_media(product.id),
            "type": CATALOG_PRODUCT_TYPE,
            "variants": self._strip_inventory(variants),
        })
        document.update(status.as_update())

        return CatalogDocument(**document).model_dump()

    @staticmethod
    def _strip_inventory(variants: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return [
            {key: value for key, value in variant.items() if key != "inventoryQuantity"}
            for variant in variants
        ]

    # =========================================================================
    # INVENTORY ADJUSTMENTS
    # =========================================================================

    def publish_inventory_adjustment(self, product_id: str) -> bool:
        """
        Refresh the inventory flags of an existing catalog entry.

        Args:
            product_id: Top-level product id of the catalog entry

        Returns:
            True if the entry was patched, False if every flag was unchanged

        Raises:
            AppException: CATALOG_ENTRY_NOT_FOUND if the product was never
                published
        """
        entry = self._catalog.get(product_id)

        if entry is None:
            logger.warning(f"Catalog entry not found for inventory adjustment: {product_id}")
            raise exceptions.catalog_entry_not_found(
                product_id, "Cannot publish inventory changes to catalog product"
            )

        variants = self._products.list_variant_documents(product_id)
        status = evaluate_inventory_status(variants, self._resolve_quantity)

        if not status.differs_from(entry):
            logger.debug(f"Inventory flags unchanged for {product_id}, skipping write")
            return False

        return self._catalog.patch(product_id, status.as_update())
