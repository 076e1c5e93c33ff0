"""
==============================================================================
Catalog Schemas Module
==============================================================================

Request and response schemas for the catalog endpoints.

The publish request mirrors the RPC contract: "productIds" is either a
single id or a list of ids.

==============================================================================
"""

from typing import Any, Dict, List, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PublishRequest(BaseModel):
    """Publish one or many products to the catalog."""
    product_ids: Union[str, List[str]] = Field(..., alias="productIds")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("product_ids")
    @classmethod
    def validate_ids(cls, v: Union[str, List[str]]) -> Union[str, List[str]]:
        ids = [v] if isinstance(v, str) else v
        if any(not product_id.strip() for product_id in ids):
            raise ValueError("Product ids must be non-empty strings")
        return v

    def id_list(self) -> List[str]:
        """Requested ids as a list, duplicates removed, order kept."""
        ids = [self.product_ids] if isinstance(self.product_ids, str) else self.product_ids
        return list(dict.fromkeys(product_id.strip() for product_id in ids))


class PublishResponse(BaseModel):
    """Publish outcome."""
    success: bool = Field(default=True)
    product_ids: List[str] = Field(..., serialization_alias="productIds")


class InventoryAdjustmentResponse(BaseModel):
    """Inventory flag refresh outcome."""
    success: bool = Field(default=True)
    updated: bool


class CatalogEntryResponse(BaseModel):
    """A catalog entry document."""
    success: bool = Field(default=True)
    product: Dict[str, Any]
