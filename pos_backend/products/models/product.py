# products/models/product.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models


class Product(models.Model):
    """
    Represents a sellable product.

    STOCK MODEL:
    - stock_quantity is a running on-hand counter.
    - It is mutated ONLY through products.services.inventory.adjust_stock
      (atomic F() update per call), never by assigning the field directly.
    - Every sale-driven change also gets an append-only StockMovement row.
    - No oversell prevention here: concurrent sales of the last unit can
      drive the counter below zero.

    PRICE:
    - unit_price is the current selling price.
    - The cart snapshots it on add; SaleItem snapshots it again at commit.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sku = models.CharField(max_length=128, unique=True, db_index=True)
    name = models.CharField(max_length=255, db_index=True)
    barcode = models.CharField(max_length=64, blank=True, default="")

    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    cost_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Informational purchase cost; costing algorithms live elsewhere.",
    )

    stock_quantity = models.IntegerField(default=0)
    min_stock_level = models.PositiveIntegerField(default=10)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["sku"], name="products_pr_sku_1a2b3c_idx"),
            models.Index(fields=["name"], name="products_pr_name_4d5e6f_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.sku})"

    def clean(self):
        if self.unit_price is None or Decimal(self.unit_price) <= 0:
            raise ValidationError("Unit price must be greater than zero")

        if self.cost_price is not None and Decimal(self.cost_price) < 0:
            raise ValidationError("cost_price cannot be negative")

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    @property
    def is_low_stock(self) -> bool:
        return int(self.stock_quantity or 0) <= int(self.min_stock_level or 0)
