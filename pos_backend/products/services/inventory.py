# products/services/inventory.py

"""
======================================================
PATH: products/services/inventory.py
======================================================
INVENTORY CORE SERVICES

Purpose:
- Adjust a product's on-hand counter by a signed delta.
- Append movement rows to the inventory ledger.

Rules:
- Quantities are integer units.
- adjust_stock is a single UPDATE ... SET stock_quantity = stock_quantity + delta,
  so concurrent calls for the same product are commutative.
- No reservation and no "cannot go below zero" guard: oversell prevention is
  not this service's job.
"""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db.models import F
from django.utils import timezone

from products.models import Product, StockMovement

logger = logging.getLogger(__name__)


class InventoryError(Exception):
    """Domain error for stock counter / ledger failures."""


def _to_int_delta(value, *, field_name="quantity_delta") -> int:
    if value is None or value == "":
        raise InventoryError(f"{field_name} is required")

    if isinstance(value, bool):
        # guardrail: bool is an int subclass in Python
        raise InventoryError(f"{field_name} must be an integer")

    try:
        delta = int(value)
    except (TypeError, ValueError):
        raise InventoryError(f"{field_name} must be an integer")

    if delta == 0:
        raise InventoryError(f"{field_name} cannot be 0")

    return delta


def adjust_stock(*, product_id, quantity_delta) -> int:
    """
    Apply a signed delta to Product.stock_quantity.

    Returns the number of rows touched (always 1 on success).
    """
    delta = _to_int_delta(quantity_delta)

    updated = Product.objects.filter(pk=product_id).update(
        stock_quantity=F("stock_quantity") + delta,
        updated_at=timezone.now(),
    )
    if not updated:
        raise InventoryError(f"Product {product_id} not found")

    logger.info(
        "Stock adjusted",
        extra={"product_id": str(product_id), "quantity_delta": delta},
    )
    return updated


def record_stock_movement(
    *,
    product_id,
    quantity,
    reason: str,
    reference_type: str = "",
    reference_id: str = "",
    user=None,
) -> StockMovement:
    """
    Append one ledger row. quantity is signed; the direction is derived from it.
    """
    qty = _to_int_delta(quantity, field_name="quantity")

    if reason not in StockMovement.Reason.values:
        raise InventoryError(f"Unknown stock movement reason: {reason}")

    try:
        return StockMovement.objects.create(
            product_id=product_id,
            quantity=qty,
            reason=reason,
            reference_type=reference_type or "",
            reference_id=str(reference_id or ""),
            performed_by=user,
        )
    except ValidationError as exc:
        raise InventoryError(str(exc)) from exc
