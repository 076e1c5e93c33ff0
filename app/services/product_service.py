"""
==============================================================================
Product Service Module
==============================================================================

Product store access for the catalog publisher and the product endpoints.

This module implements:
- ProductService: Lookups over the product hierarchy, variant quantity
  resolution, and product/variant/inventory writes

Hierarchy Lookups:
-----------------
    find_by_id_or_ancestor(X)  product X itself, else any row below X
    resolve_top_level(X)       top-level product owning X
    list_variants(X)           every row whose ancestor chain includes X

Soft-deleted rows are skipped by every lookup: a deleted product cannot be
resolved or published, and deleted variants drop out of catalog documents.

Quantity Resolution:
-------------------
The available quantity of a variant is the sum of its options' stored
quantities; a variant without options uses its own stored quantity.

==============================================================================
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from sqlalchemy import case, or_, select
from sqlalchemy.orm import Session, selectinload

from app.config import get_settings
from app.core import exceptions
from app.db.models import Product, ProductAncestor, ProductType
from app.schemas.product import ProductCreate, VariantCreate


# Module logger
logger = logging.getLogger(__name__)

# product -> variant -> option
MAX_DEPTH = 2


class ProductService:
    """
    Product store service.

    Attributes:
        _db: Database session

    Example:
        >>> service = ProductService(db_session)
        >>> product = service.resolve_top_level("variant-id")
        >>> variants = service.list_variant_documents(product.id)
        >>> service.get_variant_quantity(variants[0])
        12
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def _query(self):
        """Live products only; soft-deleted rows behave as if absent."""
        return (
            self._db.query(Product)
            .options(selectinload(Product.ancestor_links))
            .filter(Product.is_deleted.is_(False))
        )

    def _id_taken(self, product_id: str) -> bool:
        # deleted rows still hold their primary key
        return self._db.get(Product, product_id) is not None

    def _descendants_query(self, product_id: str):
        return (
            self._query()
            .join(ProductAncestor, ProductAncestor.product_id == Product.id)
            .filter(ProductAncestor.ancestor_id == product_id)
        )

    # =========================================================================
    # READ OPERATIONS
    # =========================================================================

    def get(self, product_id: str) -> Optional[Product]:
        """Get a product row by id, or None."""
        return self._query().filter(Product.id == product_id).first()

    def get_or_404(self, product_id: str) -> Product:
        """
        Get a product row by id.

        Raises:
            AppException: PRODUCT_NOT_FOUND if it doesn't exist
        """
        product = self.get(product_id)
        if product is None:
            logger.warning(f"Product not found: {product_id}")
            raise exceptions.product_not_found(product_id)
        return product

    def get_many(self, product_ids: Sequence[str]) -> List[Product]:
        """Get product rows by exact id; unknown ids are skipped."""
        if not product_ids:
            return []
        return self._query().filter(Product.id.in_(list(product_ids))).all()

    def find_by_id_or_ancestor(self, product_id: str) -> Optional[Product]:
        """
        Find the product with this id, or failing that any product below it.

        An exact id match always wins over a descendant.
        """
        below = (
            select(ProductAncestor.product_id)
            .where(ProductAncestor.ancestor_id == product_id)
        )
        return (
            self._query()
            .filter(or_(Product.id == product_id, Product.id.in_(below)))
            .order_by(case((Product.id == product_id, 0), else_=1), Product.id)
            .first()
        )

    def resolve_top_level(self, product_id: str) -> Product:
        """
        Resolve any product, variant or option id to its top-level product.

        Raises:
            AppException: PRODUCT_NOT_FOUND if nothing matches, or the
                matched row's top-level product is missing
        """
        product = self.find_by_id_or_ancestor(product_id)

        if product is None:
            logger.warning(f"Cannot resolve product: {product_id}")
            raise exceptions.product_not_found(product_id)

        if product.is_top_level:
            return product

        top_level = self.get(product.top_level_id)
        if top_level is None:
            logger.warning(
                f"Top-level product {product.top_level_id} missing for {product_id}"
            )
            raise exceptions.product_not_found(product.top_level_id)

        return top_level

    def list_variants(self, product_id: str) -> List[Product]:
        """Every row whose ancestor chain includes product_id, in sort order."""
        return (
            self._descendants_query(product_id)
            .order_by(Product.position, Product.id)
            .all()
        )

    def list_variant_documents(self, product_id: str) -> List[Dict[str, Any]]:
        """Documents of list_variants(product_id)."""
        return [variant.to_document() for variant in self.list_variants(product_id)]

    # =========================================================================
    # QUANTITY RESOLUTION
    # =========================================================================

    def get_variant_quantity(self, variant: Mapping[str, Any]) -> int:
        """
        Available quantity of a variant document.

        Args:
            variant: Variant document (needs "id" to find options)

        Returns:
            Sum of option quantities, or the variant's own stored quantity
        """
        variant_id = variant.get("id")
        options = self.list_variants(variant_id) if variant_id else []

        if options:
            return sum(option.inventory_quantity or 0 for option in options)

        return variant.get("inventoryQuantity") or 0

    # =========================================================================
    # WRITE OPERATIONS
    # =========================================================================

    def create_product(self, data: ProductCreate) -> Product:
        """
        Create a top-level product.

        Raises:
            AppException: PRODUCT_EXISTS if the requested id is taken
        """
        if data.id and self._id_taken(data.id):
            raise exceptions.product_exists(data.id)

        product = Product(
            shop_id=data.shop_id or get_settings().primary_shop_id,
            type=ProductType.SIMPLE,
            title=data.title,
            handle=data.handle,
            description=data.description,
            vendor=data.vendor,
            is_visible=data.is_visible,
            attributes=dict(data.attributes),
        )
        if data.id:
            product.id = data.id

        self._db.add(product)
        self._db.commit()
        self._db.refresh(product)

        logger.info(f"✅ Product created: {product.id} ({product.title})")
        return product

    def create_variant(self, parent_id: str, data: VariantCreate) -> Product:
        """
        Create a variant under a product, or an option under a variant.

        Raises:
            AppException: PRODUCT_NOT_FOUND if the parent doesn't exist
            AppException: PRODUCT_EXISTS if the requested id is taken
            AppException: INVALID_PRODUCT if the parent is already an option
        """
        parent = self.get_or_404(parent_id)

        if len(parent.ancestors) >= MAX_DEPTH:
            raise exceptions.invalid_product(parent_id, "options cannot have children")

        if data.id and self._id_taken(data.id):
            raise exceptions.product_exists(data.id)

        variant = Product(
            shop_id=parent.shop_id,
            type=ProductType.VARIANT,
            title=data.title,
            option_title=data.option_title,
            price=data.price,
            position=data.position,
            is_visible=parent.is_visible,
            inventory_management=data.inventory_management,
            inventory_policy=data.inventory_policy,
            inventory_quantity=data.inventory_quantity,
            low_inventory_warning_threshold=data.low_inventory_warning_threshold,
            attributes=dict(data.attributes),
        )
        if data.id:
            variant.id = data.id
        variant.set_ancestors(parent.ancestors + [parent.id])

        self._db.add(variant)
        self._db.commit()
        self._db.refresh(variant)

        logger.info(f"✅ Variant created: {variant.id} under {parent_id}")
        return variant

    def update_inventory(self, variant_id: str, quantity: int) -> Product:
        """
        Set the stored inventory quantity of a variant or option.

        Raises:
            AppException: PRODUCT_NOT_FOUND if the row doesn't exist
            AppException: INVALID_PRODUCT for top-level products
        """
        variant = self.get_or_404(variant_id)

        if variant.is_top_level:
            raise exceptions.invalid_product(
                variant_id, "inventory is tracked on variants, not products"
            )

        previous = variant.inventory_quantity
        variant.inventory_quantity = quantity
        self._db.commit()
        self._db.refresh(variant)

        logger.info(f"Inventory updated: {variant_id} {previous} -> {quantity}")
        return variant
