# customers/models/customer.py

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models


class Customer(models.Model):
    """
    Registered customer.

    CREDIT MODEL:
    - credit_limit is the ceiling for buy-now-pay-later (deferred) sales.
    - current_balance is what the customer owes right now.
    - total_outstanding_dues mirrors current_balance for reporting screens.
    - available_credit = credit_limit - current_balance (derived, never stored).

    Balances and loyalty_points are moved by customers.services only
    (F() updates), never by assigning them from a request.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255, db_index=True)
    phone = models.CharField(max_length=32, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    address = models.TextField(blank=True, default="")

    credit_limit = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    current_balance = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total_outstanding_dues = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )

    loyalty_points = models.PositiveIntegerField(default=0)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def clean(self):
        if not (self.name or "").strip():
            raise ValidationError({"name": "name is required"})
        if self.credit_limit is not None and Decimal(self.credit_limit) < 0:
            raise ValidationError({"credit_limit": "credit_limit cannot be negative"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    @property
    def available_credit(self) -> Decimal:
        limit = Decimal(self.credit_limit or 0)
        balance = Decimal(self.current_balance or 0)
        return limit - balance

    def __str__(self):
        if self.phone:
            return f"{self.name} ({self.phone})"
        return self.name
