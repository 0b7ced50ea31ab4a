# products/models/stock_movement.py

"""
INVENTORY MOVEMENT LEDGER

Immutable inventory ledger entry.

GUARANTEES:
- Append-only (no updates, no deletes)
- quantity is SIGNED: outbound rows are negative, inbound rows positive
- Movement direction must agree with the sign of quantity
- SALE rows must carry a reference to the sale that caused them

The ledger references the sale, not the result of the stock counter update,
so a SALE row can exist even if the matching decrement failed (and vice versa).
"""

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from .product import Product


class StockMovement(models.Model):
    class MovementType(models.TextChoices):
        IN = "IN", "Stock In"
        OUT = "OUT", "Stock Out"

    class Reason(models.TextChoices):
        SALE = "SALE", "Sale"
        RETURN = "RETURN", "Customer Return"
        ADJUSTMENT = "ADJUSTMENT", "Manual Adjustment"
        DAMAGE = "DAMAGE", "Damaged Stock"

    REASON_TO_MOVEMENT = {
        Reason.SALE: MovementType.OUT,
        Reason.DAMAGE: MovementType.OUT,
        Reason.RETURN: MovementType.IN,
        Reason.ADJUSTMENT: None,
    }

    REFERENCE_SALE = "sale"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        Product, on_delete=models.CASCADE, related_name="stock_movements"
    )

    movement_type = models.CharField(max_length=3, choices=MovementType.choices)
    reason = models.CharField(max_length=20, choices=Reason.choices)

    quantity = models.IntegerField(help_text="Signed quantity (negative for stock out).")

    reference_type = models.CharField(max_length=32, blank=True, default="")
    reference_id = models.CharField(max_length=64, blank=True, default="")

    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_movements",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["created_at"], name="products_st_created_7a8b9c_idx"),
            models.Index(fields=["reason"], name="products_st_reason_0d1e2f_idx"),
            models.Index(fields=["product", "created_at"], name="products_st_product_3a4b5c_idx"),
            models.Index(fields=["reference_type", "reference_id"], name="products_st_referen_6d7e8f_idx"),
        ]

    def clean(self):
        if not self.quantity:
            raise ValidationError("quantity cannot be zero")

        direction = self.MovementType.OUT if self.quantity < 0 else self.MovementType.IN
        if self.movement_type and self.movement_type != direction:
            raise ValidationError(
                f"movement_type={self.movement_type} does not match quantity sign ({self.quantity})"
            )

        expected_type = self.REASON_TO_MOVEMENT.get(self.reason)
        if expected_type and direction != expected_type:
            raise ValidationError(f"{self.reason} requires movement_type={expected_type}")

        if self.reason == self.Reason.SALE and not self.reference_id:
            raise ValidationError("SALE movements must reference a sale")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("StockMovement records are immutable")

        if not self.movement_type and self.quantity:
            self.movement_type = (
                self.MovementType.OUT if self.quantity < 0 else self.MovementType.IN
            )

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError(
            "StockMovement records are immutable and cannot be deleted"
        )

    def __str__(self):
        product_name = getattr(self.product, "name", "Product")
        return f"{product_name} | {self.reason} | {self.quantity}"
