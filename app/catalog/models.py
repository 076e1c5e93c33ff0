"""
==============================================================================
Catalog Document Models
==============================================================================

Pydantic models for published catalog documents.

==============================================================================
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


CATALOG_PRODUCT_TYPE = "product-simple"


class ProductMedia(BaseModel):
    """URLs of one product image, one per size variant."""

    thumbnail: str
    small: str
    medium: str
    large: str
    image: str


class CatalogDocument(BaseModel):
    """
    Denormalized product document stored in the catalog.

    Any product field not declared here is carried through verbatim.

    Attributes:
        id: Top-level product id
        type: Always "product-simple"
        media: Grid images ordered by priority, then upload time
        isSoldOut: Every variant is tracked and out of stock
        isBackorder: Every variant can be ordered at zero stock
        isLowQuantity: Some variant is at or below its warning threshold
        variants: Variant documents without inventoryQuantity
    """

    model_config = ConfigDict(extra="allow")

    id: str = Field(..., min_length=1)
    shopId: Optional[str] = None
    type: str = Field(default=CATALOG_PRODUCT_TYPE)
    media: List[ProductMedia] = Field(default_factory=list)
    isSoldOut: bool = False
    isBackorder: bool = False
    isLowQuantity: bool = False
    variants: List[Dict[str, Any]] = Field(default_factory=list)
