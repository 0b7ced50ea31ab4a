# customers/models/deferred_obligation.py

"""
DEFERRED PAYMENT OBLIGATION (BNPL)

What a customer owes for a sale that left the store unpaid.

Rules:
- At most one obligation per sale (one-to-one).
- original_amount is the sale total at commit time and never changes.
- amount_due starts equal to original_amount; collections (owned by another
  subsystem) reduce it and move status along.
"""

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models

from .customer import Customer


class DeferredObligation(models.Model):
    STATUS_PENDING = "pending"
    STATUS_PARTIAL = "partial"
    STATUS_PAID = "paid"
    STATUS_OVERDUE = "overdue"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_PARTIAL, "Partially Paid"),
        (STATUS_PAID, "Paid"),
        (STATUS_OVERDUE, "Overdue"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sale = models.OneToOneField(
        "sales.Sale",
        on_delete=models.PROTECT,
        related_name="deferred_obligation",
    )

    customer = models.ForeignKey(
        Customer,
        on_delete=models.PROTECT,
        related_name="deferred_obligations",
    )

    original_amount = models.DecimalField(max_digits=12, decimal_places=2)
    amount_due = models.DecimalField(max_digits=12, decimal_places=2)
    due_date = models.DateField()

    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["due_date", "created_at"]
        indexes = [
            models.Index(fields=["customer", "status"], name="customers_d_custome_2b4c6d_idx"),
            models.Index(fields=["due_date"], name="customers_d_due_dat_8e0f1a_idx"),
        ]

    def clean(self):
        if self.original_amount is None or Decimal(self.original_amount) <= Decimal("0.00"):
            raise ValidationError({"original_amount": "must be greater than zero"})
        if self.amount_due is None or Decimal(self.amount_due) < Decimal("0.00"):
            raise ValidationError({"amount_due": "cannot be negative"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.customer} owes {self.amount_due} (due {self.due_date})"
