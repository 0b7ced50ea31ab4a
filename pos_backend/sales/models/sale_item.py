# sales/models/sale_item.py

"""
SALE ITEM (IMMUTABLE SNAPSHOT)

Represents an immutable snapshot of a sold line item.

Notes:
- product_name and unit_price are copied from the cart line at commit time.
- total_price = unit_price * quantity - discount_amount (server-derived).
- SaleItem rows are append-only: no updates, no deletes.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from products.models import Product

from .sale import Sale


class SaleItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sale = models.ForeignKey(
        Sale,
        on_delete=models.CASCADE,
        related_name="items",
    )

    product = models.ForeignKey(
        Product,
        on_delete=models.SET_NULL,
        null=True,
        related_name="sale_items",
    )
    product_name = models.CharField(max_length=255)

    quantity = models.PositiveIntegerField()

    unit_price = models.DecimalField(max_digits=10, decimal_places=2)

    discount_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Line discount in currency at commit time.",
    )

    total_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        editable=False,
    )

    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["sale", "created_at"], name="sales_salei_sale_id_2e3f4a_idx"),
            models.Index(fields=["product", "created_at"], name="sales_salei_product_5b6c7d_idx"),
        ]

    def clean(self):
        if not self.quantity or int(self.quantity) < 1:
            raise ValidationError({"quantity": "quantity must be at least 1"})
        if self.unit_price is None or Decimal(self.unit_price) < Decimal("0.00"):
            raise ValidationError({"unit_price": "unit_price cannot be negative"})
        if self.discount_amount is None or Decimal(self.discount_amount) < Decimal("0.00"):
            raise ValidationError({"discount_amount": "discount_amount cannot be negative"})

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("SaleItem records are immutable")

        self.total_price = (
            Decimal(self.unit_price) * Decimal(int(self.quantity or 0))
            - Decimal(self.discount_amount or 0)
        )

        self.full_clean()
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("SaleItem records cannot be deleted")

    def __str__(self):
        return f"{self.product_name} x {self.quantity}"
