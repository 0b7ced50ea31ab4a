# pos/services/pricing.py

"""
======================================================
PATH: pos/services/pricing.py
======================================================
CART PRICING ENGINE

Purpose:
- Own ONE in-progress cart (one PricingEngine per checkout session).
- Keep derived totals consistent with the lines on every mutation.
- Hand a frozen snapshot to the checkout orchestrator.

Recompute (run by every mutator that can change money):
    line gross      = unit_price * quantity
    line discount   = gross * d / 100            (percentage)
                    = d                          (amount)
    line net        = gross - line discount
    working         = SUM(line net)
    order discount  = working * o / 100          (percentage)
                    = o                          (amount)
    net_subtotal    = working - order discount
    tax             = max(0, net_subtotal) * tax_rate / 100
    total           = max(0, net_subtotal + tax)
    subtotal        = SUM(line gross)            (undiscounted, for receipts)

Rules:
- Exact Decimal arithmetic; reported totals are quantized to 2dp (HALF_UP).
- Discounts must be >= 0; percentage discounts must be <= 100.
- Tax rate must be within 0..100.
- Fixed-amount discounts are not capped. An over-discounted cart has a
  negative net_subtotal, zero tax and a total of zero.
- Invalid input raises PricingValidationError and leaves state untouched.
- No I/O. Pure, synchronous, single-threaded.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

from django.conf import settings
from django.core.exceptions import ValidationError

from pos.constants import (
    DISCOUNT_AMOUNT,
    DISCOUNT_MODES,
    DISCOUNT_PERCENTAGE,
    PAYMENT_CASH,
    PAYMENT_METHODS,
)

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


class PricingValidationError(ValidationError):
    """Rejected cart input (bad quantity, discount, tax rate or payment method)."""


def _money(value: Decimal) -> Decimal:
    return value.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _to_decimal(value, *, field_name: str) -> Decimal:
    if value is None or value == "" or isinstance(value, bool):
        raise PricingValidationError({field_name: f"{field_name} must be a number"})
    try:
        d = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise PricingValidationError({field_name: f"{field_name} must be a number"})
    if not d.is_finite():
        raise PricingValidationError({field_name: f"{field_name} must be a finite number"})
    return d


def _to_int(value, *, field_name: str = "quantity") -> int:
    if isinstance(value, bool):
        raise PricingValidationError({field_name: f"{field_name} must be a whole integer"})
    if isinstance(value, int):
        return value
    if isinstance(value, str) and re.fullmatch(r"-?\d+", value.strip()):
        return int(value.strip())
    raise PricingValidationError({field_name: f"{field_name} must be a whole integer"})


def _validate_discount(value, mode, *, field_name: str) -> tuple[Decimal, str]:
    if mode not in DISCOUNT_MODES:
        raise PricingValidationError(
            {field_name: f"discount mode must be one of {', '.join(DISCOUNT_MODES)}"}
        )
    d = _to_decimal(value, field_name=field_name)
    if d < ZERO:
        raise PricingValidationError({field_name: "discount cannot be negative"})
    if mode == DISCOUNT_PERCENTAGE and d > HUNDRED:
        raise PricingValidationError({field_name: "percentage discount cannot exceed 100"})
    return d, mode


def _validate_tax_rate(rate) -> Decimal:
    r = _to_decimal(rate, field_name="tax_rate")
    if r < ZERO or r > HUNDRED:
        raise PricingValidationError({"tax_rate": "tax_rate must be between 0 and 100"})
    return r


def _discount_amount(base: Decimal, value: Decimal, mode: str) -> Decimal:
    if mode == DISCOUNT_PERCENTAGE:
        return base * value / HUNDRED
    return value


def default_tax_rate() -> Decimal:
    return Decimal(str(getattr(settings, "POS_DEFAULT_TAX_RATE", "17")))


# =====================================================
# VALUE TYPES
# =====================================================


@dataclass(frozen=True)
class ProductRef:
    """Price snapshot of a product taken when it entered the cart."""

    id: str
    name: str
    unit_price: Decimal
    sku: str = ""

    @classmethod
    def from_product(cls, product) -> "ProductRef":
        return cls(
            id=str(product.id),
            name=str(getattr(product, "name", "") or ""),
            unit_price=Decimal(str(product.unit_price)),
            sku=str(getattr(product, "sku", "") or ""),
        )


@dataclass(frozen=True)
class CustomerRef:
    id: str
    name: str = ""

    @classmethod
    def from_customer(cls, customer) -> "CustomerRef":
        return cls(id=str(customer.id), name=str(getattr(customer, "name", "") or ""))


@dataclass(frozen=True)
class CartLine:
    product: ProductRef
    quantity: int
    discount: Decimal = ZERO
    discount_mode: str = DISCOUNT_PERCENTAGE

    @property
    def gross(self) -> Decimal:
        return self.product.unit_price * Decimal(self.quantity)

    @property
    def discount_amount(self) -> Decimal:
        return _discount_amount(self.gross, self.discount, self.discount_mode)

    @property
    def net(self) -> Decimal:
        return self.gross - self.discount_amount


@dataclass(frozen=True)
class CartTotals:
    subtotal: Decimal = Decimal("0.00")
    line_discount_amount: Decimal = Decimal("0.00")
    order_discount_amount: Decimal = Decimal("0.00")
    discount_amount: Decimal = Decimal("0.00")
    net_subtotal: Decimal = Decimal("0.00")
    tax_amount: Decimal = Decimal("0.00")
    total_amount: Decimal = Decimal("0.00")
    item_count: int = 0


@dataclass
class CartState:
    lines: dict = field(default_factory=dict)  # product_id -> CartLine, insertion-ordered
    customer: Optional[CustomerRef] = None
    order_discount: Decimal = ZERO
    order_discount_mode: str = DISCOUNT_PERCENTAGE
    tax_rate: Decimal = field(default_factory=default_tax_rate)
    payment_method: str = PAYMENT_CASH
    totals: CartTotals = field(default_factory=CartTotals)


@dataclass(frozen=True)
class LineSnapshot:
    product_id: str
    product_name: str
    sku: str
    quantity: int
    unit_price: Decimal
    gross: Decimal
    discount_amount: Decimal
    net: Decimal


@dataclass(frozen=True)
class CartSnapshot:
    """What the checkout orchestrator commits. Detached from the engine."""

    lines: tuple
    customer: Optional[CustomerRef]
    payment_method: str
    order_discount: Decimal
    order_discount_mode: str
    tax_rate: Decimal
    totals: CartTotals

    @property
    def is_empty(self) -> bool:
        return not self.lines


# =====================================================
# ENGINE
# =====================================================


def compute_totals(state: CartState) -> CartTotals:
    gross_sum = ZERO
    line_discount_sum = ZERO
    working = ZERO
    item_count = 0

    for line in state.lines.values():
        gross_sum += line.gross
        line_discount_sum += line.discount_amount
        working += line.net
        item_count += line.quantity

    order_discount = _discount_amount(working, state.order_discount, state.order_discount_mode)
    net_subtotal = working - order_discount
    tax = max(net_subtotal, ZERO) * state.tax_rate / HUNDRED
    total = max(ZERO, net_subtotal + tax)

    return CartTotals(
        subtotal=_money(gross_sum),
        line_discount_amount=_money(line_discount_sum),
        order_discount_amount=_money(order_discount),
        discount_amount=_money(line_discount_sum + order_discount),
        net_subtotal=_money(net_subtotal),
        tax_amount=_money(tax),
        total_amount=_money(total),
        item_count=item_count,
    )


class PricingEngine:
    """
    Cart pricing state machine for a single checkout session.

    Every mutator that can affect money returns the freshly derived
    CartTotals. set_customer / set_payment_method do not touch totals.
    """

    def __init__(self, state: CartState | None = None):
        self.state = state if state is not None else CartState()
        self.recompute()

    # ---------------- derived ----------------

    @property
    def totals(self) -> CartTotals:
        return self.state.totals

    @property
    def lines(self) -> list[CartLine]:
        return list(self.state.lines.values())

    @property
    def is_empty(self) -> bool:
        return not self.state.lines

    def recompute(self) -> CartTotals:
        self.state.totals = compute_totals(self.state)
        return self.state.totals

    # ---------------- line operations ----------------

    def add_line(self, product, quantity=1) -> CartTotals:
        """
        Existing line: quantities are summed, the discount is kept and the
        price snapshot is refreshed from `product`. A merged quantity <= 0
        removes the line.
        New line: appended with a 0% discount (quantity < 1 is ignored).
        """
        qty = _to_int(quantity)
        ref = product if isinstance(product, ProductRef) else ProductRef.from_product(product)

        existing = self.state.lines.get(ref.id)
        if existing is not None:
            merged = existing.quantity + qty
            if merged <= 0:
                return self.remove_line(ref.id)
            self.state.lines[ref.id] = replace(existing, product=ref, quantity=merged)
            return self.recompute()

        if qty < 1:
            return self.state.totals

        self.state.lines[ref.id] = CartLine(product=ref, quantity=qty)
        return self.recompute()

    def remove_line(self, product_id) -> CartTotals:
        self.state.lines.pop(str(product_id), None)
        return self.recompute()

    def set_quantity(self, product_id, quantity) -> CartTotals:
        qty = _to_int(quantity)
        key = str(product_id)

        if qty <= 0:
            return self.remove_line(key)

        line = self.state.lines.get(key)
        if line is None:
            return self.state.totals

        self.state.lines[key] = replace(line, quantity=qty)
        return self.recompute()

    def set_line_discount(self, product_id, value, mode=DISCOUNT_PERCENTAGE) -> CartTotals:
        discount, mode = _validate_discount(value, mode, field_name="discount")
        key = str(product_id)

        line = self.state.lines.get(key)
        if line is None:
            return self.state.totals

        self.state.lines[key] = replace(line, discount=discount, discount_mode=mode)
        return self.recompute()

    # ---------------- order-level fields ----------------

    def set_customer(self, customer) -> None:
        if customer is None or isinstance(customer, CustomerRef):
            self.state.customer = customer
        else:
            self.state.customer = CustomerRef.from_customer(customer)

    def set_payment_method(self, method: str) -> None:
        m = (method or "").strip().lower()
        if m not in PAYMENT_METHODS:
            raise PricingValidationError(
                {"payment_method": f"payment_method must be one of {', '.join(PAYMENT_METHODS)}"}
            )
        self.state.payment_method = m

    def set_order_discount(self, value, mode=DISCOUNT_PERCENTAGE) -> CartTotals:
        discount, mode = _validate_discount(value, mode, field_name="order_discount")
        self.state.order_discount = discount
        self.state.order_discount_mode = mode
        return self.recompute()

    def set_tax_rate(self, rate) -> CartTotals:
        self.state.tax_rate = _validate_tax_rate(rate)
        return self.recompute()

    def clear(self) -> CartTotals:
        self.state = CartState()
        return self.recompute()

    # ---------------- hand-off ----------------

    def snapshot(self) -> CartSnapshot:
        self.recompute()
        lines = tuple(
            LineSnapshot(
                product_id=line.product.id,
                product_name=line.product.name,
                sku=line.product.sku,
                quantity=line.quantity,
                unit_price=_money(line.product.unit_price),
                gross=_money(line.gross),
                discount_amount=_money(line.discount_amount),
                net=_money(line.net),
            )
            for line in self.state.lines.values()
        )
        return CartSnapshot(
            lines=lines,
            customer=self.state.customer,
            payment_method=self.state.payment_method,
            order_discount=self.state.order_discount,
            order_discount_mode=self.state.order_discount_mode,
            tax_rate=self.state.tax_rate,
            totals=self.state.totals,
        )

    # ---------------- session serialization ----------------

    def to_dict(self) -> dict:
        s = self.state
        return {
            "lines": [
                {
                    "product_id": line.product.id,
                    "product_name": line.product.name,
                    "sku": line.product.sku,
                    "unit_price": str(line.product.unit_price),
                    "quantity": line.quantity,
                    "discount": str(line.discount),
                    "discount_mode": line.discount_mode,
                }
                for line in s.lines.values()
            ],
            "customer": (
                {"id": s.customer.id, "name": s.customer.name} if s.customer else None
            ),
            "order_discount": str(s.order_discount),
            "order_discount_mode": s.order_discount_mode,
            "tax_rate": str(s.tax_rate),
            "payment_method": s.payment_method,
        }

    @classmethod
    def from_dict(cls, data: dict | None) -> "PricingEngine":
        if not data:
            return cls()

        lines = {}
        for raw in data.get("lines") or []:
            ref = ProductRef(
                id=str(raw["product_id"]),
                name=raw.get("product_name") or "",
                unit_price=Decimal(str(raw["unit_price"])),
                sku=raw.get("sku") or "",
            )
            lines[ref.id] = CartLine(
                product=ref,
                quantity=int(raw["quantity"]),
                discount=Decimal(str(raw.get("discount") or "0")),
                discount_mode=raw.get("discount_mode") or DISCOUNT_PERCENTAGE,
            )

        customer = data.get("customer")
        state = CartState(
            lines=lines,
            customer=CustomerRef(id=str(customer["id"]), name=customer.get("name") or "")
            if customer
            else None,
            order_discount=Decimal(str(data.get("order_discount") or "0")),
            order_discount_mode=data.get("order_discount_mode") or DISCOUNT_PERCENTAGE,
            tax_rate=Decimal(str(data.get("tax_rate") or default_tax_rate())),
            payment_method=data.get("payment_method") or PAYMENT_CASH,
        )
        return cls(state=state)
