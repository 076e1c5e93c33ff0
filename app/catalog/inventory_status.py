"""
==============================================================================
Inventory Status Module
==============================================================================

Product-level inventory flags computed from a product's variant documents.

Flags:
------
- is_sold_out:     every variant tracks inventory and has nothing left
- is_low_quantity: some tracked, policy-enforced variant is at or below
                   its low inventory warning threshold (but not at zero)
- is_backorder:    every variant tracks inventory without enforcing a
                   policy and has a stored quantity of exactly zero

Quantities:
----------
is_sold_out and is_low_quantity ask a quantity resolver for the available
quantity of a variant (the product store sums child options). is_backorder
reads the stored ``inventoryQuantity`` field directly.

These functions never raise on malformed variants: missing keys read as
False / 0.

==============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Sequence


VariantDocument = Mapping[str, Any]
QuantityResolver = Callable[[VariantDocument], int]


def stored_quantity(variant: VariantDocument) -> int:
    """Stored ``inventoryQuantity`` of a variant, 0 when absent."""
    return variant.get("inventoryQuantity") or 0


def is_sold_out(
    variants: Sequence[VariantDocument],
    quantity_resolver: Optional[QuantityResolver] = None
) -> bool:
    """
    Check whether new orders should stop being accepted.

    A variant without inventory management never counts as sold out, so a
    single untracked variant keeps the product available. An empty
    sequence is sold out.

    Args:
        variants: Variant documents of one product
        quantity_resolver: Available quantity lookup (defaults to stored quantity)

    Returns:
        True if every variant is tracked and has a quantity <= 0
    """
    resolve = quantity_resolver or stored_quantity

    return all(
        bool(variant.get("inventoryManagement")) and resolve(variant) <= 0
        for variant in variants
    )


def is_low_quantity(
    variants: Sequence[VariantDocument],
    quantity_resolver: Optional[QuantityResolver] = None
) -> bool:
    """
    Check whether at least one variant is running low.

    Only variants that track inventory and enforce an inventory policy are
    considered. A quantity of zero is sold out, not low.

    Args:
        variants: Variant documents of one product
        quantity_resolver: Available quantity lookup (defaults to stored quantity)

    Returns:
        True if any variant has 0 < quantity <= lowInventoryWarningThreshold
    """
    resolve = quantity_resolver or stored_quantity

    for variant in variants:
        quantity = resolve(variant)
        if variant.get("inventoryManagement") and variant.get("inventoryPolicy") and quantity:
            if quantity <= (variant.get("lowInventoryWarningThreshold") or 0):
                return True

    return False


def is_backorder(variants: Sequence[VariantDocument]) -> bool:
    """
    Check whether the product can still be ordered once stock runs out.

    Uses the stored ``inventoryQuantity`` of each variant, not a resolved
    quantity. A missing quantity is not treated as zero here.

    Returns:
        True if every variant has no inventory policy, tracks inventory
        and has a stored quantity of exactly 0
    """
    return all(
        not variant.get("inventoryPolicy")
        and bool(variant.get("inventoryManagement"))
        and variant.get("inventoryQuantity") == 0
        for variant in variants
    )


@dataclass(frozen=True)
class InventoryStatus:
    """The three inventory flags stored on a catalog entry."""

    is_sold_out: bool
    is_backorder: bool
    is_low_quantity: bool

    def as_update(self) -> Dict[str, bool]:
        """Partial catalog document holding only the three flags."""
        return {
            "isSoldOut": self.is_sold_out,
            "isBackorder": self.is_backorder,
            "isLowQuantity": self.is_low_quantity,
        }

    def differs_from(self, document: Mapping[str, Any]) -> bool:
        """Check whether any flag differs from the stored document."""
        return any(
            document.get(field) != value
            for field, value in self.as_update().items()
        )


def evaluate_inventory_status(
    variants: Sequence[VariantDocument],
    quantity_resolver: Optional[QuantityResolver] = None
) -> InventoryStatus:
    """Compute all three flags for one product."""
    return InventoryStatus(
        is_sold_out=is_sold_out(variants, quantity_resolver),
        is_backorder=is_backorder(variants),
        is_low_quantity=is_low_quantity(variants, quantity_resolver),
    )
