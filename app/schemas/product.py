"""
==============================================================================
Product Schemas Module
==============================================================================

Request and response schemas for the product store endpoints.

==============================================================================
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProductCreate(BaseModel):
    """Top-level product creation request."""
    id: Optional[str] = Field(default=None, min_length=1, max_length=36)
    shop_id: Optional[str] = Field(default=None, min_length=1, max_length=36)
    title: str = Field(..., min_length=1, max_length=255)
    handle: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    vendor: Optional[str] = Field(default=None, max_length=255)
    is_visible: bool = Field(default=False)
    attributes: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("handle")
    @classmethod
    def normalize_handle(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return v.strip().lower().replace(" ", "-")


class VariantCreate(BaseModel):
    """Variant or option creation request."""
    id: Optional[str] = Field(default=None, min_length=1, max_length=36)
    title: Optional[str] = Field(default=None, max_length=255)
    option_title: Optional[str] = Field(default=None, max_length=255)
    price: Optional[float] = Field(default=None, ge=0)
    position: int = Field(default=0, ge=0)
    inventory_management: bool = Field(default=False)
    inventory_policy: bool = Field(default=False)
    inventory_quantity: int = Field(default=0)
    low_inventory_warning_threshold: int = Field(default=0, ge=0)
    attributes: Dict[str, Any] = Field(default_factory=dict)


class InventoryUpdate(BaseModel):
    """Stored inventory quantity of a variant or option."""
    inventory_quantity: int = Field(..., alias="inventoryQuantity")

    model_config = ConfigDict(populate_by_name=True)


class MediaCreate(BaseModel):
    """Media record attached to a product."""
    filename: str = Field(..., min_length=1, max_length=255)
    to_grid: int = Field(default=1, ge=0, le=1)
    workflow: Optional[str] = Field(default=None, max_length=20)
    priority: Optional[int] = None
    uploaded_at: Optional[datetime] = None


class MediaDetail(BaseModel):
    """Media record details."""
    id: str
    product_id: str
    filename: str
    to_grid: int
    workflow: Optional[str] = None
    priority: Optional[int] = None
    uploaded_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductResponse(BaseModel):
    """Single product document response."""
    success: bool = Field(default=True)
    product: Dict[str, Any]


class InventoryUpdateResponse(BaseModel):
    """Inventory update result, including the catalog refresh outcome."""
    success: bool = Field(default=True)
    product: Dict[str, Any]
    catalog_updated: bool = Field(default=False, serialization_alias="catalogUpdated")


class MediaResponse(BaseModel):
    """Single media response."""
    success: bool = Field(default=True)
    media: MediaDetail
