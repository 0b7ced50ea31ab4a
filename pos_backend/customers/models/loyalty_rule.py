# customers/models/loyalty_rule.py

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models


class LoyaltyRule(models.Model):
    """
    Points-per-currency accrual tier.

    A purchase qualifies for every active rule whose min_purchase_amount it
    reaches; the rule with the highest qualifying threshold wins.
    """

    rule_name = models.CharField(max_length=100)
    points_per_currency = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal("1.00")
    )
    min_purchase_amount = models.DecimalField(
        max_digits=10, decimal_places=2, default=Decimal("0.00")
    )
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-min_purchase_amount"]

    def clean(self):
        if self.points_per_currency is None or Decimal(self.points_per_currency) < 0:
            raise ValidationError({"points_per_currency": "must be zero or positive"})
        if self.min_purchase_amount is None or Decimal(self.min_purchase_amount) < 0:
            raise ValidationError({"min_purchase_amount": "must be zero or positive"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.rule_name} ({self.points_per_currency}/unit from {self.min_purchase_amount})"
