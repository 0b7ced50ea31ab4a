# sales/models/sale.py

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from pos.constants import PAYMENT_CASH, PAYMENT_METHOD_CHOICES

User = settings.AUTH_USER_MODEL


class Sale(models.Model):
    """
    Represents a committed POS transaction.

    GUARANTEES:
    - Immutable financial record from the moment it is created
    - Written ONLY by the checkout orchestrator (via its SaleBackend)
    - Safe for reporting and audits

    IDENTIFIERS:
    - invoice_no: generated locally at commit time (timestamp based)
    - receipt_no: canonical, issued by ReceiptSequence

    PAYMENT:
    - cash / card  -> payment_status = paid
    - deferred     -> payment_status = pending (a DeferredObligation tracks the debt)

    Receipt printing state is owned by another subsystem and stays mutable.
    """

    PAYMENT_STATUS_PAID = "paid"
    PAYMENT_STATUS_PENDING = "pending"

    PAYMENT_STATUS_CHOICES = [
        (PAYMENT_STATUS_PAID, "Paid"),
        (PAYMENT_STATUS_PENDING, "Pending (deferred)"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    invoice_no = models.CharField(
        max_length=64,
        unique=True,
        help_text="Locally generated invoice number",
    )
    receipt_no = models.CharField(
        max_length=32,
        unique=True,
        help_text="Canonical receipt number from the receipt sequence",
    )

    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="sales",
    )

    cashier = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sales",
        help_text="Cashier / staff who processed the sale",
    )
    cashier_name = models.CharField(max_length=255, blank=True, default="")

    subtotal_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    discount_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Line discounts + order discount.",
    )
    tax_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    total_amount = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )

    payment_method = models.CharField(
        max_length=16,
        choices=PAYMENT_METHOD_CHOICES,
        default=PAYMENT_CASH,
    )
    payment_status = models.CharField(
        max_length=16,
        choices=PAYMENT_STATUS_CHOICES,
        default=PAYMENT_STATUS_PAID,
    )

    receipt_printed = models.BooleanField(default=False)
    receipt_printed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["created_at"], name="sales_sale_created_5c1d2e_idx"),
            models.Index(fields=["payment_method"], name="sales_sale_payment_7f3a4b_idx"),
            models.Index(fields=["payment_status"], name="sales_sale_payment_9b8c7d_idx"),
        ]

    _IMMUTABLE_FIELDS = (
        "invoice_no",
        "receipt_no",
        "customer_id",
        "cashier_id",
        "subtotal_amount",
        "discount_amount",
        "tax_amount",
        "total_amount",
        "payment_method",
        "payment_status",
        "created_at",
    )

    def _validate_immutable(self, previous: "Sale"):
        for field in self._IMMUTABLE_FIELDS:
            current = self._meta.get_field(field).to_python(getattr(self, field))
            if current != getattr(previous, field):
                raise ValidationError(
                    f"Sale is immutable once committed. Field '{field}' cannot be changed."
                )

    def clean(self):
        for field in ("subtotal_amount", "discount_amount", "tax_amount", "total_amount"):
            value = getattr(self, field)
            if value is None or Decimal(value) < Decimal("0.00"):
                raise ValidationError({field: "cannot be negative"})

    def save(self, *args, **kwargs):
        if self.pk and not self._state.adding:
            previous = Sale.objects.filter(pk=self.pk).first()
            if previous is not None:
                self._validate_immutable(previous)

        self.full_clean()
        super().save(*args, **kwargs)

    @property
    def is_deferred(self) -> bool:
        return self.payment_status == self.PAYMENT_STATUS_PENDING

    def __str__(self):
        return f"{self.receipt_no} | {self.total_amount}"
