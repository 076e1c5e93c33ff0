"""
==============================================================================
Product Store Endpoints
==============================================================================

Back office endpoints for products, variants, inventory and media.

Every write requires createProduct in the shop that owns the product (or in
the primary shop). Inventory updates refresh the flags of an already
published catalog entry.

==============================================================================
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.catalog.publisher import CatalogPublisher
from app.catalog.store import CatalogStore
from app.core import exceptions
from app.core.dependencies import get_current_user
from app.db.database import get_db
from app.db.models import User
from app.schemas.product import (
    InventoryUpdate,
    InventoryUpdateResponse,
    MediaCreate,
    MediaDetail,
    MediaResponse,
    ProductCreate,
    ProductResponse,
    VariantCreate,
)
from app.services.media_service import MediaService
from app.services.permission_service import CREATE_PRODUCT, PermissionService
from app.services.product_service import ProductService


# Module logger
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["Products"])


class ProductController:
    """Controller for product store operations."""

    def __init__(self, db: Session, user: User):
        self._db = db
        self._user = user
        self._products = ProductService(db)
        self._permissions = PermissionService(db)

    def _require_active_shop(self) -> None:
        # runs before any lookup; unknown and foreign ids both answer 403
        self._permissions.require_permission(self._user, CREATE_PRODUCT)

    def _require_shop(self, shop_id: str) -> None:
        self._permissions.require_shop_permission(self._user, CREATE_PRODUCT, shop_id)

    def create(self, data: ProductCreate) -> ProductResponse:
        self._require_shop(data.shop_id or self._permissions.primary_shop_id)
        product = self._products.create_product(data)
        return ProductResponse(product=product.to_document())

    def create_variant(self, parent_id: str, data: VariantCreate) -> ProductResponse:
        self._require_active_shop()
        parent = self._products.get_or_404(parent_id)
        self._require_shop(parent.shop_id)
        variant = self._products.create_variant(parent_id, data)
        return ProductResponse(product=variant.to_document())

    def get(self, product_id: str) -> ProductResponse:
        product = self._products.get_or_404(product_id)
        document = product.to_document()
        if product.is_top_level:
            document["variants"] = self._products.list_variant_documents(product.id)
        return ProductResponse(product=document)

    def update_inventory(self, variant_id: str, data: InventoryUpdate) -> InventoryUpdateResponse:
        self._require_active_shop()
        variant = self._products.get_or_404(variant_id)
        self._require_shop(variant.shop_id)

        variant = self._products.update_inventory(variant_id, data.inventory_quantity)

        catalog_updated = False
        top_level_id = variant.top_level_id
        if CatalogStore(self._db).exists(top_level_id):
            publisher = CatalogPublisher.for_session(self._db)
            catalog_updated = publisher.publish_inventory_adjustment(top_level_id)
        else:
            logger.debug(f"{top_level_id} not published, catalog left untouched")

        return InventoryUpdateResponse(
            product=variant.to_document(),
            catalog_updated=catalog_updated
        )

    def add_media(self, product_id: str, data: MediaCreate) -> MediaResponse:
        self._require_active_shop()
        product = self._products.get_or_404(product_id)
        self._require_shop(product.shop_id)

        if not product.is_top_level:
            raise exceptions.invalid_product(product_id, "media belongs to top-level products")

        media = MediaService(self._db).add_media(product.id, product.shop_id, data)
        return MediaResponse(media=MediaDetail.model_validate(media))


@router.post("", response_model=ProductResponse)
async def create_product(
    request: ProductCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a top-level product."""
    controller = ProductController(db, user)
    return controller.create(request)


@router.post("/{product_id}/variants", response_model=ProductResponse)
async def create_variant(
    product_id: str,
    request: VariantCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create a variant under a product, or an option under a variant."""
    controller = ProductController(db, user)
    return controller.create_variant(product_id, request)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Product document; top-level products include their variants."""
    controller = ProductController(db, user)
    return controller.get(product_id)


@router.put("/{product_id}/inventory", response_model=InventoryUpdateResponse)
async def update_inventory(
    product_id: str,
    request: InventoryUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Set the stored inventory quantity of a variant or option.

    If the owning product is published, its catalog flags are refreshed and
    "catalogUpdated" tells whether any of them changed.
    """
    controller = ProductController(db, user)
    return controller.update_inventory(product_id, request)


@router.post("/{product_id}/media", response_model=MediaResponse)
async def add_media(
    product_id: str,
    request: MediaCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Attach a media record to a top-level product."""
    controller = ProductController(db, user)
    return controller.add_media(product_id, request)
