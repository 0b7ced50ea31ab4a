# customers/services/bnpl.py

"""
======================================================
PATH: customers/services/bnpl.py
======================================================
DEFERRED PAYMENT (BNPL) SERVICE

Purpose:
- Record that a customer owes the total of a deferred sale.
- Raise the customer's running balance + outstanding dues in the same
  transaction, so the obligation row and the balance never disagree.

Rules:
- amount must be > 0 (2dp).
- due_date = today + settings.BNPL_DUE_DAYS.
- One obligation per sale (model enforces one-to-one).
- Credit-limit checks happen BEFORE checkout writes anything; this service
  records the debt it is given.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from customers.models import Customer, DeferredObligation

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")


class DeferredPaymentError(Exception):
    """Raised when a deferred-payment obligation cannot be recorded."""


def _money(value) -> Decimal:
    try:
        return Decimal(str(value)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise DeferredPaymentError(f"Invalid amount: {value!r}") from exc


@transaction.atomic
def create_deferred_obligation(*, sale_id, customer_id, amount) -> DeferredObligation:
    amt = _money(amount)
    if amt <= Decimal("0.00"):
        raise DeferredPaymentError(f"Deferred amount must be greater than zero (got {amt})")

    try:
        customer = Customer.objects.select_for_update().get(pk=customer_id)
    except Customer.DoesNotExist as exc:
        raise DeferredPaymentError(f"Customer {customer_id} not found") from exc

    if not customer.is_active:
        raise DeferredPaymentError(f"Customer {customer_id} is inactive")

    due_days = int(getattr(settings, "BNPL_DUE_DAYS", 30))

    try:
        obligation = DeferredObligation.objects.create(
            sale_id=sale_id,
            customer=customer,
            original_amount=amt,
            amount_due=amt,
            due_date=timezone.localdate() + timedelta(days=due_days),
            status=DeferredObligation.STATUS_PENDING,
        )
    except ValidationError as exc:
        raise DeferredPaymentError(str(exc)) from exc

    Customer.objects.filter(pk=customer.pk).update(
        current_balance=F("current_balance") + amt,
        total_outstanding_dues=F("total_outstanding_dues") + amt,
        updated_at=timezone.now(),
    )

    logger.info(
        "Deferred obligation recorded",
        extra={
            "sale_id": str(sale_id),
            "customer_id": str(customer_id),
            "amount": str(amt),
            "due_date": obligation.due_date.isoformat(),
        },
    )
    return obligation
