# sales/tests/test_checkout_orchestrator.py

"""
Commit path tests against a scripted in-memory backend.

Each collaborator call is recorded so the tests can assert exactly which
writes and side effects happened, and any call can be made to fail.
"""

from decimal import Decimal
from types import SimpleNamespace

from django.test import SimpleTestCase, override_settings

from pos.constants import (
    DISCOUNT_AMOUNT,
    DISCOUNT_PERCENTAGE,
    PAYMENT_CARD,
    PAYMENT_CASH,
    PAYMENT_DEFERRED,
)
from pos.services.pricing import CustomerRef, PricingEngine, ProductRef
from sales.services.backend import SaleBackend
from sales.services.checkout_orchestrator import (
    ABORT,
    COMMIT_STEPS,
    CONTINUE,
    EmptyCartError,
    InsufficientCreditError,
    InsufficientPaymentError,
    MissingCustomerError,
    OrphanedSaleError,
    SaleCommitError,
    commit_sale,
)


class CollaboratorDown(Exception):
    pass


class RecordingBackend(SaleBackend):
    def __init__(self, *, fail=(), available_credit=Decimal("1000.00")):
        self.fail = set(fail)
        self.available_credit = available_credit
        self.calls = []
        self.sales = []
        self.line_items = []

    def _call(self, name, *args):
        self.calls.append((name, args))
        if name in self.fail:
            raise CollaboratorDown(f"{name} unavailable")

    def count(self, name):
        return sum(1 for call, _ in self.calls if call == name)

    def generate_invoice_id(self):
        self._call("generate_invoice_id")
        return "INV-1"

    def generate_receipt_id(self):
        self._call("generate_receipt_id")
        return "RCP-000001"

    def get_available_credit(self, customer_id):
        self._call("get_available_credit", customer_id)
        return self.available_credit

    def create_sale(self, header):
        self._call("create_sale", header)
        sale = SimpleNamespace(pk=f"sale-{len(self.sales) + 1}", header=header)
        self.sales.append(sale)
        return sale

    def create_sale_line_items(self, sale_id, lines):
        self._call("create_sale_line_items", sale_id, lines)
        self.line_items.extend((sale_id, line) for line in lines)
        return list(lines)

    def adjust_stock(self, product_id, quantity_delta):
        self._call("adjust_stock", product_id, quantity_delta)

    def record_stock_movement(self, product_id, delta, reason, *, reference_id=""):
        self._call("record_stock_movement", product_id, delta, reason, reference_id)

    def create_deferred_obligation(self, sale_id, customer_id, amount):
        self._call("create_deferred_obligation", sale_id, customer_id, amount)

    def accrue_loyalty(self, customer_id, amount):
        self._call("accrue_loyalty", customer_id, amount)
        return int(amount)

    def invalidate_views(self, views):
        self._call("invalidate_views", tuple(views))


def _snapshot(*, payment_method=PAYMENT_CASH, customer=True):
    engine = PricingEngine()
    engine.set_tax_rate(17)
    engine.add_line(ProductRef(id="p-1", name="Rice 5kg", unit_price=Decimal("100.00")), 2)
    engine.set_line_discount("p-1", 10, DISCOUNT_PERCENTAGE)
    if customer:
        engine.set_customer(CustomerRef(id="c-1", name="Jane"))
    engine.set_payment_method(payment_method)
    return engine.snapshot()


class CommitStepTableTests(SimpleTestCase):
    def test_policy_table(self):
        policies = {step.name: step.policy for step in COMMIT_STEPS}

        for name in ("generate_identifiers", "create_sale", "create_line_items"):
            self.assertEqual(policies[name], ABORT)
        for name in ("adjust_stock", "record_stock_movement", "create_deferred_obligation", "accrue_loyalty"):
            self.assertEqual(policies[name], CONTINUE)


@override_settings(SALES_COMMIT_ATOMIC_WRITES=False)
class CommitScenarioTests(SimpleTestCase):
    """
    GUARANTEES:
    - Exactly one header and one line item per cart line
    - Side effects follow the payment method
    - Soft failures never turn a committed sale into an error
    """

    def test_cash_sale_with_customer(self):
        backend = RecordingBackend()
        outcome = commit_sale(_snapshot(), backend=backend)

        self.assertEqual(backend.count("create_sale"), 1)
        self.assertEqual(len(backend.line_items), 1)
        self.assertEqual(backend.count("adjust_stock"), 1)
        self.assertEqual(backend.count("record_stock_movement"), 1)
        self.assertEqual(backend.count("create_deferred_obligation"), 0)
        self.assertEqual(backend.count("accrue_loyalty"), 1)

        header = backend.sales[0].header
        self.assertEqual(header.subtotal_amount, Decimal("200.00"))
        self.assertEqual(header.discount_amount, Decimal("20.00"))
        self.assertEqual(header.tax_amount, Decimal("30.60"))
        self.assertEqual(header.total_amount, Decimal("210.60"))
        self.assertEqual(header.payment_status, "paid")
        self.assertEqual(header.receipt_no, "RCP-000001")

        adjust = next(args for name, args in backend.calls if name == "adjust_stock")
        self.assertEqual(adjust, ("p-1", -2))

        movement = next(args for name, args in backend.calls if name == "record_stock_movement")
        self.assertEqual(movement[1], -2)
        self.assertEqual(movement[3], outcome.sale.pk)

        self.assertFalse(outcome.degraded)
        self.assertEqual(outcome.soft_failures, [])

    def test_deferred_sale_creates_obligation_and_no_loyalty(self):
        backend = RecordingBackend()
        outcome = commit_sale(_snapshot(payment_method=PAYMENT_DEFERRED), backend=backend)

        obligation = [args for name, args in backend.calls if name == "create_deferred_obligation"]
        self.assertEqual(len(obligation), 1)
        self.assertEqual(obligation[0], (outcome.sale.pk, "c-1", Decimal("210.60")))
        self.assertEqual(backend.count("accrue_loyalty"), 0)
        self.assertEqual(backend.sales[0].header.payment_status, "pending")

    def test_walk_in_cash_sale_skips_loyalty(self):
        backend = RecordingBackend()
        commit_sale(_snapshot(customer=False), backend=backend)

        self.assertEqual(backend.count("accrue_loyalty"), 0)
        self.assertIsNone(backend.sales[0].header.customer_id)

    def test_stock_failure_is_soft(self):
        backend = RecordingBackend(fail={"adjust_stock"})

        with self.assertLogs("sales.services.checkout_orchestrator", level="ERROR"):
            outcome = commit_sale(_snapshot(), backend=backend)

        self.assertEqual(outcome.sale, backend.sales[0])
        self.assertTrue(outcome.degraded)
        self.assertEqual(len(outcome.soft_failures), 1)
        failure = outcome.soft_failures[0]
        self.assertEqual(failure.step, "adjust_stock")
        self.assertEqual(failure.product_id, "p-1")
        self.assertIn("unavailable", failure.error)

        # later steps still ran
        self.assertEqual(backend.count("record_stock_movement"), 1)
        self.assertEqual(backend.count("accrue_loyalty"), 1)
        self.assertEqual(backend.count("invalidate_views"), 1)

    def test_every_soft_step_failing_still_commits(self):
        backend = RecordingBackend(
            fail={"adjust_stock", "record_stock_movement", "accrue_loyalty", "invalidate_views"}
        )

        with self.assertLogs("sales.services.checkout_orchestrator", level="ERROR"):
            outcome = commit_sale(_snapshot(), backend=backend)

        steps = [f.step for f in outcome.soft_failures]
        self.assertEqual(
            steps,
            ["adjust_stock", "record_stock_movement", "accrue_loyalty", "invalidate_views"],
        )

    def test_deferred_obligation_failure_is_soft(self):
        backend = RecordingBackend(fail={"create_deferred_obligation"})

        with self.assertLogs("sales.services.checkout_orchestrator", level="ERROR"):
            outcome = commit_sale(_snapshot(payment_method=PAYMENT_DEFERRED), backend=backend)

        self.assertEqual([f.step for f in outcome.soft_failures], ["create_deferred_obligation"])

    def test_views_invalidated_after_commit(self):
        backend = RecordingBackend()
        commit_sale(_snapshot(), backend=backend)

        views = next(args for name, args in backend.calls if name == "invalidate_views")[0]
        self.assertEqual(set(views), {"sales", "stock", "customers", "summaries"})


@override_settings(SALES_COMMIT_ATOMIC_WRITES=False)
class CommitHardFailureTests(SimpleTestCase):
    def test_receipt_failure_aborts_before_any_write(self):
        backend = RecordingBackend(fail={"generate_receipt_id"})

        with self.assertRaises(SaleCommitError) as ctx:
            commit_sale(_snapshot(), backend=backend)

        self.assertEqual(ctx.exception.step, "generate_identifiers")
        self.assertIsInstance(ctx.exception.__cause__, CollaboratorDown)
        self.assertEqual(backend.count("create_sale"), 0)

    def test_header_failure_aborts(self):
        backend = RecordingBackend(fail={"create_sale"})

        with self.assertRaises(SaleCommitError) as ctx:
            commit_sale(_snapshot(), backend=backend)

        self.assertNotIsInstance(ctx.exception, OrphanedSaleError)
        self.assertEqual(ctx.exception.step, "create_sale")
        self.assertEqual(backend.count("create_sale_line_items"), 0)
        self.assertEqual(backend.count("adjust_stock"), 0)

    def test_line_item_failure_reports_orphaned_header(self):
        backend = RecordingBackend(fail={"create_sale_line_items"})

        with self.assertLogs("sales.services.checkout_orchestrator", level="ERROR"):
            with self.assertRaises(OrphanedSaleError) as ctx:
                commit_sale(_snapshot(), backend=backend)

        self.assertEqual(len(backend.sales), 1)
        self.assertEqual(ctx.exception.sale_id, backend.sales[0].pk)
        self.assertEqual(ctx.exception.step, "create_line_items")
        self.assertEqual(backend.line_items, [])
        self.assertEqual(backend.count("adjust_stock"), 0)
        self.assertEqual(backend.count("accrue_loyalty"), 0)


@override_settings(SALES_COMMIT_ATOMIC_WRITES=False)
class CommitPreconditionTests(SimpleTestCase):
    """
    GUARANTEES:
    - Preconditions fail before any collaborator write
    """

    def _assert_no_writes(self, backend):
        written = {name for name, _ in backend.calls} - {"get_available_credit"}
        self.assertEqual(written, set())

    def test_empty_cart(self):
        backend = RecordingBackend()
        with self.assertRaises(EmptyCartError):
            commit_sale(PricingEngine().snapshot(), backend=backend)
        self._assert_no_writes(backend)

    def test_deferred_requires_customer(self):
        backend = RecordingBackend()
        with self.assertRaises(MissingCustomerError):
            commit_sale(_snapshot(payment_method=PAYMENT_DEFERRED, customer=False), backend=backend)
        self._assert_no_writes(backend)

    def test_deferred_requires_available_credit(self):
        backend = RecordingBackend(available_credit=Decimal("210.59"))
        with self.assertRaises(InsufficientCreditError) as ctx:
            commit_sale(_snapshot(payment_method=PAYMENT_DEFERRED), backend=backend)

        self.assertEqual(ctx.exception.required, Decimal("210.60"))
        self._assert_no_writes(backend)

    def test_credit_exactly_covering_total_is_enough(self):
        backend = RecordingBackend(available_credit=Decimal("210.60"))
        outcome = commit_sale(_snapshot(payment_method=PAYMENT_DEFERRED), backend=backend)
        self.assertFalse(outcome.degraded)

    def test_cash_tendered_below_total_is_rejected(self):
        backend = RecordingBackend()
        with self.assertRaises(InsufficientPaymentError) as ctx:
            commit_sale(_snapshot(), backend=backend, amount_tendered=Decimal("200.00"))

        self.assertEqual(ctx.exception.tendered, Decimal("200.00"))
        self.assertEqual(ctx.exception.required, Decimal("210.60"))
        self._assert_no_writes(backend)


def _over_discounted_snapshot(*, payment_method=PAYMENT_CASH):
    engine = PricingEngine()
    engine.set_tax_rate(17)
    engine.add_line(ProductRef(id="p-1", name="Rice 5kg", unit_price=Decimal("100.00")), 1)
    engine.set_order_discount("150", DISCOUNT_AMOUNT)
    engine.set_customer(CustomerRef(id="c-1", name="Jane"))
    engine.set_payment_method(payment_method)
    return engine.snapshot()


@override_settings(SALES_COMMIT_ATOMIC_WRITES=False)
class CashTenderTests(SimpleTestCase):
    """
    GUARANTEES:
    - change_due = amount_tendered - total for cash sales
    - No tender check and no change for other methods
    """

    def test_exact_tender_gives_zero_change(self):
        outcome = commit_sale(_snapshot(), backend=RecordingBackend(), amount_tendered=Decimal("210.60"))
        self.assertEqual(outcome.change_due, Decimal("0.00"))

    def test_over_tender_gives_change(self):
        outcome = commit_sale(_snapshot(), backend=RecordingBackend(), amount_tendered="250")
        self.assertEqual(outcome.change_due, Decimal("39.40"))

    def test_no_tender_means_no_change(self):
        outcome = commit_sale(_snapshot(), backend=RecordingBackend())
        self.assertIsNone(outcome.change_due)

    def test_tender_ignored_for_card(self):
        backend = RecordingBackend()
        outcome = commit_sale(
            _snapshot(payment_method=PAYMENT_CARD),
            backend=backend,
            amount_tendered=Decimal("1.00"),
        )

        self.assertEqual(backend.count("create_sale"), 1)
        self.assertIsNone(outcome.change_due)


@override_settings(SALES_COMMIT_ATOMIC_WRITES=False)
class ZeroTotalCommitTests(SimpleTestCase):
    """
    GUARANTEES:
    - An over-discounted cart commits with non-negative amounts
    - A zero-total deferred sale is settled and creates no obligation
    """

    def test_over_discounted_cash_cart_commits(self):
        backend = RecordingBackend()
        outcome = commit_sale(_over_discounted_snapshot(), backend=backend)

        header = backend.sales[0].header
        self.assertEqual(header.subtotal_amount, Decimal("100.00"))
        self.assertEqual(header.discount_amount, Decimal("150.00"))
        self.assertEqual(header.tax_amount, Decimal("0.00"))
        self.assertEqual(header.total_amount, Decimal("0.00"))
        self.assertEqual(header.payment_status, "paid")
        self.assertFalse(outcome.degraded)

    def test_zero_total_deferred_sale_is_settled(self):
        backend = RecordingBackend(available_credit=Decimal("0.00"))
        outcome = commit_sale(_over_discounted_snapshot(payment_method=PAYMENT_DEFERRED), backend=backend)

        self.assertEqual(backend.sales[0].header.payment_status, "paid")
        self.assertEqual(backend.count("create_deferred_obligation"), 0)
        self.assertEqual(backend.count("accrue_loyalty"), 0)
        self.assertFalse(outcome.degraded)
