# customers/services/loyalty.py

"""
LOYALTY ACCRUAL SERVICE

points = floor(amount * points_per_currency)

Rate selection:
- Active LoyaltyRule with the highest min_purchase_amount <= amount.
- No qualifying rule: settings.LOYALTY_DEFAULT_POINTS_PER_CURRENCY (1.0).
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation, ROUND_FLOOR

from django.conf import settings
from django.db.models import F
from django.utils import timezone

from customers.models import Customer, LoyaltyRule

logger = logging.getLogger(__name__)


class LoyaltyError(Exception):
    pass


def _rate_for_amount(amount: Decimal) -> Decimal:
    rule = (
        LoyaltyRule.objects.filter(is_active=True, min_purchase_amount__lte=amount)
        .order_by("-min_purchase_amount")
        .first()
    )
    if rule is not None:
        return Decimal(rule.points_per_currency)
    return Decimal(str(getattr(settings, "LOYALTY_DEFAULT_POINTS_PER_CURRENCY", "1.0")))


def points_for_amount(amount) -> int:
    try:
        amt = Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise LoyaltyError(f"Invalid purchase amount: {amount!r}") from exc

    if amt <= 0:
        return 0

    points = (amt * _rate_for_amount(amt)).to_integral_value(rounding=ROUND_FLOOR)
    return int(points)


def accrue_loyalty(*, customer_id, amount) -> int:
    """
    Credit points to the customer. Returns the number of points awarded.
    """
    points = points_for_amount(amount)

    if points:
        updated = Customer.objects.filter(pk=customer_id, is_active=True).update(
            loyalty_points=F("loyalty_points") + points,
            updated_at=timezone.now(),
        )
    else:
        updated = Customer.objects.filter(pk=customer_id, is_active=True).count()

    if not updated:
        raise LoyaltyError(f"Active customer {customer_id} not found")

    logger.info(
        "Loyalty points accrued",
        extra={"customer_id": str(customer_id), "amount": str(amount), "points": points},
    )
    return points
