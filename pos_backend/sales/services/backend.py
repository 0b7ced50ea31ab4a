# sales/services/backend.py

"""
======================================================
PATH: sales/services/backend.py
======================================================
SALE BACKEND (PERSISTENCE CONTRACT)

Purpose:
- The narrow set of writes the checkout orchestrator needs.
- One abstract contract, one Django implementation. Tests may plug in
  their own backend to script failures at any step.

Every method performs exactly one logical write (or read) and raises on
failure; policy about which failures matter lives in the orchestrator.
"""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Sequence

from django.db import transaction
from django.utils import timezone

from customers.models import Customer
from customers.services.bnpl import create_deferred_obligation
from customers.services.loyalty import accrue_loyalty
from products.models import StockMovement
from products.services.inventory import adjust_stock, record_stock_movement
from sales.models import ReceiptSequence, Sale, SaleItem
from sales.signals import views_invalidated

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SaleHeader:
    invoice_no: str
    receipt_no: str
    customer_id: Optional[str]
    subtotal_amount: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    payment_method: str
    payment_status: str
    cashier_id: Optional[str] = None
    cashier_name: str = ""


class SaleBackend(ABC):
    @abstractmethod
    def generate_invoice_id(self) -> str:
        ...

    @abstractmethod
    def generate_receipt_id(self) -> str:
        ...

    @abstractmethod
    def get_available_credit(self, customer_id) -> Decimal:
        ...

    @abstractmethod
    def create_sale(self, header: SaleHeader):
        ...

    @abstractmethod
    def create_sale_line_items(self, sale_id, lines: Sequence) -> list:
        ...

    @abstractmethod
    def adjust_stock(self, product_id, quantity_delta: int) -> None:
        ...

    @abstractmethod
    def record_stock_movement(self, product_id, delta: int, reason: str, *, reference_id=""):
        ...

    @abstractmethod
    def create_deferred_obligation(self, sale_id, customer_id, amount: Decimal):
        ...

    @abstractmethod
    def accrue_loyalty(self, customer_id, amount: Decimal) -> int:
        ...

    @abstractmethod
    def invalidate_views(self, views: Sequence[str]) -> None:
        ...


class DjangoSaleBackend(SaleBackend):
    """
    SaleBackend against the Django ORM.

    `user` is the authenticated cashier; it is stamped on stock movements.
    """

    def __init__(self, *, user=None):
        self.user = user

    def generate_invoice_id(self) -> str:
        stamp = timezone.now().strftime("INV%Y%m%d%H%M%S")
        return f"{stamp}-{uuid.uuid4().hex[:6].upper()}"

    def generate_receipt_id(self) -> str:
        return ReceiptSequence.next_receipt_no()

    def get_available_credit(self, customer_id) -> Decimal:
        customer = Customer.objects.get(pk=customer_id)
        return customer.available_credit

    def create_sale(self, header: SaleHeader) -> Sale:
        return Sale.objects.create(
            invoice_no=header.invoice_no,
            receipt_no=header.receipt_no,
            customer_id=header.customer_id,
            cashier_id=header.cashier_id,
            cashier_name=header.cashier_name,
            subtotal_amount=header.subtotal_amount,
            discount_amount=header.discount_amount,
            tax_amount=header.tax_amount,
            total_amount=header.total_amount,
            payment_method=header.payment_method,
            payment_status=header.payment_status,
        )

    def create_sale_line_items(self, sale_id, lines: Sequence) -> list[SaleItem]:
        # All lines or none.
        with transaction.atomic():
            return [
                SaleItem.objects.create(
                    sale_id=sale_id,
                    product_id=line.product_id,
                    product_name=line.product_name,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    discount_amount=line.discount_amount,
                )
                for line in lines
            ]

    def adjust_stock(self, product_id, quantity_delta: int) -> None:
        adjust_stock(product_id=product_id, quantity_delta=quantity_delta)

    def record_stock_movement(self, product_id, delta: int, reason: str, *, reference_id=""):
        return record_stock_movement(
            product_id=product_id,
            quantity=delta,
            reason=reason,
            reference_type=StockMovement.REFERENCE_SALE if reference_id else "",
            reference_id=reference_id,
            user=self.user,
        )

    def create_deferred_obligation(self, sale_id, customer_id, amount: Decimal):
        return create_deferred_obligation(sale_id=sale_id, customer_id=customer_id, amount=amount)

    def accrue_loyalty(self, customer_id, amount: Decimal) -> int:
        return accrue_loyalty(customer_id=customer_id, amount=amount)

    def invalidate_views(self, views: Sequence[str]) -> None:
        views_invalidated.send(sender=self.__class__, views=tuple(views))
