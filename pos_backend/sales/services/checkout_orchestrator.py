# sales/services/checkout_orchestrator.py

"""
CHECKOUT ORCHESTRATOR (APPLICATION SERVICE)

Purpose:
- Turn a priced cart snapshot into a persisted Sale.
- Apply the sale's side effects (stock, BNPL debt, loyalty) in order.
- Report exactly which side effects did not happen.

Preconditions (checked before ANY write):
- Cart has at least one line.
- Cash with an amount tendered requires amount_tendered >= total.
- Deferred payment requires a customer.
- Deferred payment requires customer.available_credit >= total.

Commit sequence (COMMIT_STEPS):
    1  generate_identifiers         ABORT
    2  create_sale                  ABORT
    3  create_line_items            ABORT
    4a adjust_stock (per line)      CONTINUE
    4b record_stock_movement (")    CONTINUE
    5  create_deferred_obligation   CONTINUE   deferred + customer + total > 0
    6  accrue_loyalty               CONTINUE   cash/card + customer
    -  invalidate_views             CONTINUE

ABORT: the commit stops and SaleCommitError(step=...) is raised, chained to
the cause. If line items fail after the header was written, the error is
OrphanedSaleError and carries the sale id.

CONTINUE: the failure is logged and collected in CommitOutcome.soft_failures;
the sale still counts as committed.

Atomicity:
- settings.SALES_COMMIT_ATOMIC_WRITES = True wraps steps 2-3 in one DB
  transaction (a line item failure rolls the header back, no orphan).
- Default False: steps run independently and an orphaned header is
  reported, not hidden.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, Optional

from django.conf import settings
from django.db import transaction

from pos.constants import IMMEDIATE_PAYMENT_METHODS, PAYMENT_CASH, PAYMENT_DEFERRED
from products.models import StockMovement
from sales.models import Sale
from sales.services.backend import DjangoSaleBackend, SaleBackend, SaleHeader

logger = logging.getLogger(__name__)

ABORT = "abort"
CONTINUE = "continue"

INVALIDATED_VIEWS = ("sales", "stock", "customers", "summaries")


@dataclass(frozen=True)
class CommitStep:
    name: str
    policy: str


GENERATE_IDENTIFIERS = CommitStep("generate_identifiers", ABORT)
CREATE_SALE = CommitStep("create_sale", ABORT)
CREATE_LINE_ITEMS = CommitStep("create_line_items", ABORT)
ADJUST_STOCK = CommitStep("adjust_stock", CONTINUE)
RECORD_STOCK_MOVEMENT = CommitStep("record_stock_movement", CONTINUE)
CREATE_DEFERRED_OBLIGATION = CommitStep("create_deferred_obligation", CONTINUE)
ACCRUE_LOYALTY = CommitStep("accrue_loyalty", CONTINUE)
INVALIDATE_VIEWS = CommitStep("invalidate_views", CONTINUE)

COMMIT_STEPS = (
    GENERATE_IDENTIFIERS,
    CREATE_SALE,
    CREATE_LINE_ITEMS,
    ADJUST_STOCK,
    RECORD_STOCK_MOVEMENT,
    CREATE_DEFERRED_OBLIGATION,
    ACCRUE_LOYALTY,
    INVALIDATE_VIEWS,
)


# =====================================================
# ERRORS
# =====================================================


class CheckoutError(Exception):
    """Base checkout exception"""


class CheckoutPreconditionError(CheckoutError):
    """Raised before anything is written."""


class EmptyCartError(CheckoutPreconditionError):
    pass


class MissingCustomerError(CheckoutPreconditionError):
    pass


class InsufficientCreditError(CheckoutPreconditionError):
    def __init__(self, message, *, available: Decimal, required: Decimal):
        super().__init__(message)
        self.available = available
        self.required = required


class InsufficientPaymentError(CheckoutPreconditionError):
    def __init__(self, message, *, tendered: Decimal, required: Decimal):
        super().__init__(message)
        self.tendered = tendered
        self.required = required


class SaleCommitError(CheckoutError):
    """A step with ABORT policy failed."""

    def __init__(self, message, *, step: str, sale_id=None):
        super().__init__(message)
        self.step = step
        self.sale_id = sale_id


class OrphanedSaleError(SaleCommitError):
    """The sale header exists but its line items could not be written."""


# =====================================================
# OUTCOME
# =====================================================


@dataclass(frozen=True)
class SoftFailure:
    step: str
    error: str
    product_id: Optional[str] = None


@dataclass
class CommitOutcome:
    sale: Any
    soft_failures: list = field(default_factory=list)
    change_due: Optional[Decimal] = None

    @property
    def degraded(self) -> bool:
        return bool(self.soft_failures)


# =====================================================
# STEP RUNNER
# =====================================================


def _run_step(step: CommitStep, fn: Callable, *, outcome: CommitOutcome | None = None, product_id=None):
    try:
        return fn()
    except Exception as exc:
        if step.policy == ABORT:
            raise SaleCommitError(f"Checkout step '{step.name}' failed: {exc}", step=step.name) from exc

        logger.exception(
            "Checkout side effect failed",
            extra={
                "step": step.name,
                "product_id": product_id,
                "sale_id": str(outcome.sale.pk) if outcome and outcome.sale is not None else None,
            },
        )
        if outcome is not None:
            outcome.soft_failures.append(
                SoftFailure(step=step.name, error=str(exc), product_id=product_id)
            )
        return None


# =====================================================
# PRECONDITIONS
# =====================================================


def _check_preconditions(snapshot, *, backend: SaleBackend, amount_tendered=None) -> None:
    if snapshot.is_empty:
        raise EmptyCartError("Cart is empty")

    if snapshot.payment_method == PAYMENT_CASH and amount_tendered is not None:
        total = snapshot.totals.total_amount
        if amount_tendered < total:
            raise InsufficientPaymentError(
                f"Insufficient payment amount. Tendered: {amount_tendered}, Required: {total}",
                tendered=amount_tendered,
                required=total,
            )

    if snapshot.payment_method != PAYMENT_DEFERRED:
        return

    if snapshot.customer is None:
        raise MissingCustomerError("Buy-now-pay-later requires a customer")

    total = snapshot.totals.total_amount
    try:
        available = Decimal(backend.get_available_credit(snapshot.customer.id))
    except Exception as exc:
        raise MissingCustomerError(f"Customer {snapshot.customer.id} could not be loaded") from exc

    if available < total:
        raise InsufficientCreditError(
            f"Insufficient credit limit. Available credit: {available}, Required: {total}",
            available=available,
            required=total,
        )


# =====================================================
# COMMIT
# =====================================================


def _payment_status(method: str, total: Decimal) -> str:
    # nothing is owed on a zero-total sale, whatever the method
    if method == PAYMENT_DEFERRED and total > 0:
        return Sale.PAYMENT_STATUS_PENDING
    return Sale.PAYMENT_STATUS_PAID


def _write_sale(*, backend: SaleBackend, header: SaleHeader, lines) -> Any:
    sale = _run_step(CREATE_SALE, lambda: backend.create_sale(header))

    try:
        _run_step(CREATE_LINE_ITEMS, lambda: backend.create_sale_line_items(sale.pk, lines))
    except SaleCommitError as exc:
        exc.sale_id = sale.pk
        raise

    return sale


def commit_sale(
    snapshot,
    *,
    backend: SaleBackend | None = None,
    cashier=None,
    amount_tendered=None,
) -> CommitOutcome:
    """
    Persist `snapshot` (a pos.services.pricing.CartSnapshot) as a Sale.

    Raises CheckoutPreconditionError before any write, SaleCommitError on an
    ABORT step. Otherwise returns a CommitOutcome; soft failures never turn
    a committed sale into an error.

    amount_tendered is the cash handed over; when given for a cash sale it
    must cover the total, and outcome.change_due is the difference.
    """
    backend = backend or DjangoSaleBackend(user=cashier)

    if amount_tendered is not None:
        amount_tendered = Decimal(str(amount_tendered))

    _check_preconditions(snapshot, backend=backend, amount_tendered=amount_tendered)

    totals = snapshot.totals
    customer_id = snapshot.customer.id if snapshot.customer else None
    method = snapshot.payment_method

    # 1
    invoice_no, receipt_no = _run_step(
        GENERATE_IDENTIFIERS,
        lambda: (backend.generate_invoice_id(), backend.generate_receipt_id()),
    )

    header = SaleHeader(
        invoice_no=invoice_no,
        receipt_no=receipt_no,
        customer_id=customer_id,
        subtotal_amount=totals.subtotal,
        discount_amount=totals.discount_amount,
        tax_amount=totals.tax_amount,
        total_amount=totals.total_amount,
        payment_method=method,
        payment_status=_payment_status(method, totals.total_amount),
        cashier_id=str(cashier.pk) if cashier is not None else None,
        cashier_name=_cashier_name(cashier),
    )

    # 2-3
    atomic = bool(getattr(settings, "SALES_COMMIT_ATOMIC_WRITES", False))
    try:
        if atomic:
            with transaction.atomic():
                sale = _write_sale(backend=backend, header=header, lines=snapshot.lines)
        else:
            sale = _write_sale(backend=backend, header=header, lines=snapshot.lines)
    except SaleCommitError as exc:
        if exc.step == CREATE_LINE_ITEMS.name and not atomic and exc.sale_id is not None:
            logger.error(
                "Sale header written without line items",
                extra={"sale_id": str(exc.sale_id), "receipt_no": receipt_no},
            )
            raise OrphanedSaleError(
                f"Sale {exc.sale_id} was created but its line items were not: {exc.__cause__}",
                step=exc.step,
                sale_id=exc.sale_id,
            ) from exc.__cause__
        if atomic:
            exc.sale_id = None
        raise

    outcome = CommitOutcome(sale=sale)
    if method == PAYMENT_CASH and amount_tendered is not None:
        outcome.change_due = (amount_tendered - totals.total_amount).quantize(Decimal("0.01"))

    # 4
    for line in snapshot.lines:
        _run_step(
            ADJUST_STOCK,
            lambda line=line: backend.adjust_stock(line.product_id, -line.quantity),
            outcome=outcome,
            product_id=line.product_id,
        )
        _run_step(
            RECORD_STOCK_MOVEMENT,
            lambda line=line: backend.record_stock_movement(
                line.product_id,
                -line.quantity,
                StockMovement.Reason.SALE,
                reference_id=str(sale.pk),
            ),
            outcome=outcome,
            product_id=line.product_id,
        )

    # 5
    if method == PAYMENT_DEFERRED and customer_id and totals.total_amount > 0:
        _run_step(
            CREATE_DEFERRED_OBLIGATION,
            lambda: backend.create_deferred_obligation(sale.pk, customer_id, totals.total_amount),
            outcome=outcome,
        )

    # 6
    if method in IMMEDIATE_PAYMENT_METHODS and customer_id:
        _run_step(
            ACCRUE_LOYALTY,
            lambda: backend.accrue_loyalty(customer_id, totals.total_amount),
            outcome=outcome,
        )

    _run_step(INVALIDATE_VIEWS, lambda: backend.invalidate_views(INVALIDATED_VIEWS), outcome=outcome)

    logger.info(
        "Sale committed",
        extra={
            "sale_id": str(sale.pk),
            "receipt_no": receipt_no,
            "total_amount": str(totals.total_amount),
            "payment_method": method,
            "soft_failures": len(outcome.soft_failures),
        },
    )
    return outcome


def _cashier_name(cashier) -> str:
    if cashier is None:
        return ""
    name = getattr(cashier, "display_name", None)
    if name:
        return str(name)
    return str(getattr(cashier, "email", "") or "")
