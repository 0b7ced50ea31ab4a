# pos/tests/test_api.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from customers.models import Customer, DeferredObligation
from products.models import Product, StockMovement
from sales.models import Sale, SaleItem

User = get_user_model()


@override_settings(POS_DEFAULT_TAX_RATE="17", SALES_COMMIT_ATOMIC_WRITES=False)
class POSApiTestBase(TestCase):
    def setUp(self):
        cache.clear()
        self.client = APIClient()

        self.cashier = User.objects.create_user(
            email="cashier@example.com",
            password="pass",
            role="cashier",
        )
        self.client.force_authenticate(user=self.cashier)

        self.product = Product.objects.create(
            sku="MILK-1L",
            name="Milk 1L",
            unit_price=Decimal("100.00"),
            stock_quantity=10,
        )
        self.other_product = Product.objects.create(
            sku="BREAD",
            name="Bread",
            unit_price=Decimal("50.00"),
            stock_quantity=5,
        )
        self.customer = Customer.objects.create(name="John Doe", credit_limit=Decimal("500.00"))

    # --------------------------------------------------
    # Helpers
    # --------------------------------------------------

    def _add(self, product, quantity=1):
        return self.client.post(
            reverse("pos:add-cart-item"),
            {"product_id": str(product.id), "quantity": quantity},
            format="json",
        )

    def _discount(self, product, value, mode="percentage"):
        return self.client.patch(
            reverse("pos:discount-cart-item", args=[product.id]),
            {"value": value, "mode": mode},
            format="json",
        )

    def _settings(self, **payload):
        return self.client.patch(reverse("pos:cart-settings"), payload, format="json")

    def _cart(self):
        return self.client.get(reverse("pos:active-cart")).data

    def _checkout(self, **payload):
        return self.client.post(reverse("pos:checkout"), payload, format="json")

    def _ring_up_standard_cart(self):
        self._add(self.product, 2)
        self._discount(self.product, "10")


class CartApiTests(POSApiTestBase):
    """
    GUARANTEES:
    - Cart lives in the session across requests
    - Totals are always server-derived
    - Rejected input leaves the cart as it was
    """

    def test_new_session_has_empty_cart(self):
        cart = self._cart()

        self.assertEqual(cart["lines"], [])
        self.assertEqual(cart["totals"]["total_amount"], "0.00")
        self.assertEqual(cart["payment_method"], "cash")

    def test_add_item_snapshots_price_and_prices_cart(self):
        res = self._add(self.product, 2)

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        line = res.data["lines"][0]
        self.assertEqual(line["product_id"], str(self.product.id))
        self.assertEqual(line["unit_price"], "100.00")
        self.assertEqual(line["quantity"], 2)
        self.assertEqual(res.data["totals"]["subtotal"], "200.00")
        self.assertEqual(res.data["totals"]["tax_amount"], "34.00")
        self.assertEqual(res.data["totals"]["total_amount"], "234.00")

    def test_adding_same_product_sums_quantity(self):
        self._add(self.product, 2)
        res = self._add(self.product, 3)

        self.assertEqual(len(res.data["lines"]), 1)
        self.assertEqual(res.data["lines"][0]["quantity"], 5)

    def test_inactive_product_is_not_found(self):
        self.product.is_active = False
        self.product.save()

        res = self._add(self.product, 1)

        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(self._cart()["lines"], [])

    def test_line_discount_and_tax(self):
        self._ring_up_standard_cart()

        totals = self._cart()["totals"]
        self.assertEqual(totals["discount_amount"], "20.00")
        self.assertEqual(totals["tax_amount"], "30.60")
        self.assertEqual(totals["total_amount"], "210.60")

    def test_invalid_discount_leaves_cart_unchanged(self):
        self._ring_up_standard_cart()

        res = self._discount(self.product, "150")

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "INVALID_CART_INPUT")
        self.assertEqual(self._cart()["totals"]["total_amount"], "210.60")

    def test_invalid_tax_rate_is_rejected(self):
        self._add(self.product, 1)

        res = self._settings(tax_rate="150")

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "INVALID_CART_INPUT")
        self.assertEqual(self._cart()["totals"]["total_amount"], "117.00")

    def test_update_quantity_to_zero_removes_line(self):
        self._add(self.product, 2)
        self._add(self.other_product, 1)

        res = self.client.patch(
            reverse("pos:update-cart-item", args=[self.product.id]),
            {"quantity": 0},
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual([l["product_id"] for l in res.data["lines"]], [str(self.other_product.id)])

    def test_remove_line(self):
        self._add(self.product, 2)

        res = self.client.delete(reverse("pos:remove-cart-item", args=[self.product.id]))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["lines"], [])

    def test_order_discount_amount(self):
        self._add(self.product, 2)

        res = self._settings(order_discount="50.00", order_discount_mode="amount")

        self.assertEqual(res.data["totals"]["order_discount_amount"], "50.00")
        self.assertEqual(res.data["totals"]["net_subtotal"], "150.00")
        self.assertEqual(res.data["totals"]["total_amount"], "175.50")

    def test_attach_and_detach_customer(self):
        res = self._settings(customer_id=str(self.customer.id))
        self.assertEqual(res.data["customer"]["name"], "John Doe")

        res = self._settings(customer_id=None)
        self.assertIsNone(res.data["customer"])

    def test_unknown_customer_is_not_found(self):
        self.customer.is_active = False
        self.customer.save()

        res = self._settings(customer_id=str(self.customer.id))

        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_clear_cart(self):
        self._ring_up_standard_cart()
        self._settings(customer_id=str(self.customer.id), tax_rate="5")

        res = self.client.delete(reverse("pos:clear-cart"))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["lines"], [])
        self.assertIsNone(res.data["customer"])
        self.assertEqual(Decimal(res.data["tax_rate"]), Decimal("17"))

    def test_anonymous_request_is_rejected(self):
        client = APIClient()

        res = client.get(reverse("pos:active-cart"))

        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)


class CheckoutApiTests(POSApiTestBase):
    def test_cash_checkout_commits_sale_and_resets_cart(self):
        self._ring_up_standard_cart()

        res = self._checkout(payment_method="cash")

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertFalse(res.data["degraded"])
        self.assertEqual(res.data["soft_failures"], [])
        self.assertEqual(res.data["sale"]["total_amount"], "210.60")
        self.assertEqual(res.data["sale"]["payment_status"], "paid")
        self.assertEqual(len(res.data["sale"]["items"]), 1)

        sale = Sale.objects.get()
        self.assertEqual(sale.cashier, self.cashier)
        self.assertEqual(SaleItem.objects.filter(sale=sale).count(), 1)

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 8)
        self.assertEqual(StockMovement.objects.filter(reference_id=str(sale.id)).count(), 1)

        self.assertEqual(self._cart()["lines"], [])

    def test_empty_cart_checkout_is_rejected(self):
        res = self._checkout()

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "EMPTY_CART")
        self.assertFalse(Sale.objects.exists())

    def test_deferred_checkout_requires_customer(self):
        self._ring_up_standard_cart()

        res = self._checkout(payment_method="deferred")

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "CUSTOMER_REQUIRED")
        self.assertFalse(Sale.objects.exists())

    def test_deferred_checkout_over_credit_limit_is_rejected(self):
        self.customer.credit_limit = Decimal("100.00")
        self.customer.save()

        self._ring_up_standard_cart()
        self._settings(customer_id=str(self.customer.id))

        res = self._checkout(payment_method="deferred")

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "INSUFFICIENT_CREDIT")
        self.assertFalse(Sale.objects.exists())

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 10)
        # cart survives a rejected checkout
        self.assertEqual(len(self._cart()["lines"]), 1)

    def test_deferred_checkout_records_obligation(self):
        self._ring_up_standard_cart()
        self._settings(customer_id=str(self.customer.id), payment_method="deferred")

        res = self._checkout()

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["sale"]["payment_status"], "pending")
        self.assertIsNotNone(res.data["sale"]["deferred_due_date"])

        obligation = DeferredObligation.objects.get()
        self.assertEqual(obligation.amount_due, Decimal("210.60"))

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.current_balance, Decimal("210.60"))

    def test_cash_tender_returns_change(self):
        self._ring_up_standard_cart()

        res = self._checkout(payment_method="cash", amount_tendered="250.00")

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["change_due"], "39.40")

    def test_change_due_is_null_without_tender(self):
        self._ring_up_standard_cart()

        res = self._checkout(payment_method="card", amount_tendered="1.00")

        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(res.data["change_due"])

    def test_short_cash_tender_is_rejected(self):
        self._ring_up_standard_cart()

        res = self._checkout(payment_method="cash", amount_tendered="200.00")

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["error"]["code"], "INSUFFICIENT_PAYMENT")
        self.assertFalse(Sale.objects.exists())

        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 10)
        self.assertEqual(len(self._cart()["lines"]), 1)

    def test_negative_tender_fails_validation(self):
        self._ring_up_standard_cart()

        res = self._checkout(payment_method="cash", amount_tendered="-5")

        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Sale.objects.exists())


class ProjectEndpointTests(TestCase):
    def test_health_check_reports_db_and_cache(self):
        res = APIClient().get(reverse("health-check"))

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["db"], "ok")
        self.assertEqual(res.data["cache"], "ok")

    def test_index_lists_checkout(self):
        res = APIClient().get(reverse("api-root"))

        self.assertEqual(res.data["pos"]["checkout"], reverse("pos:checkout"))
