# pos/views/api.py

"""
POS API VIEWS

Purpose:
- Session cart lifecycle (one PricingEngine per checkout session)
- Add/update/discount/remove/clear lines (server-owned pricing)
- Order settings: customer, payment method, order discount, tax rate
- Checkout endpoint that commits the cart via the checkout orchestrator

Hard rules:
- Money is server-owned: unit_price is snapshotted from Product on add.
- Totals are never accepted from the client.
- A rejected input leaves the stored cart untouched.
"""

from __future__ import annotations

import logging

from django.shortcuts import get_object_or_404

from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from rest_framework import serializers

from drf_spectacular.utils import extend_schema, OpenApiExample

from customers.models import Customer
from pos.constants import DISCOUNT_MODES, DISCOUNT_PERCENTAGE, PAYMENT_METHODS
from pos.serializers import CartSerializer
from pos.services.cart_session import load_engine, reset_engine, save_engine
from pos.services.pricing import PricingValidationError
from products.models import Product
from sales.serializers import SaleSerializer
from users.permissions import IsPOSUser

from sales.services.checkout_orchestrator import (
    commit_sale,
    CheckoutError,
    EmptyCartError,
    InsufficientCreditError,
    InsufficientPaymentError,
    MissingCustomerError,
    OrphanedSaleError,
    SaleCommitError,
)

logger = logging.getLogger(__name__)


# =====================================================
# SWAGGER INPUT SERIALIZERS
# =====================================================

class AddCartItemInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(required=False, default=1)


class UpdateCartItemInputSerializer(serializers.Serializer):
    """
    quantity <= 0 removes the line.
    """
    quantity = serializers.IntegerField()


class LineDiscountInputSerializer(serializers.Serializer):
    value = serializers.DecimalField(max_digits=14, decimal_places=4)
    mode = serializers.ChoiceField(choices=DISCOUNT_MODES, default=DISCOUNT_PERCENTAGE)


class CartSettingsInputSerializer(serializers.Serializer):
    """
    Every field is optional; only the fields sent are applied.
    customer_id = null detaches the customer.
    """
    customer_id = serializers.UUIDField(required=False, allow_null=True)
    payment_method = serializers.ChoiceField(choices=PAYMENT_METHODS, required=False)
    order_discount = serializers.DecimalField(max_digits=14, decimal_places=4, required=False)
    order_discount_mode = serializers.ChoiceField(
        choices=DISCOUNT_MODES, required=False, default=DISCOUNT_PERCENTAGE
    )
    tax_rate = serializers.DecimalField(max_digits=7, decimal_places=4, required=False)


class CheckoutInputSerializer(serializers.Serializer):
    payment_method = serializers.ChoiceField(choices=PAYMENT_METHODS, required=False)
    amount_tendered = serializers.DecimalField(
        max_digits=14, decimal_places=2, min_value=0, required=False
    )


# =====================================================
# API ERROR NORMALIZATION
# =====================================================

def error_response(*, code: str, message: str, http_status: int):
    return Response(
        {"error": {"code": code, "message": message}},
        status=http_status,
    )


def _invalid_cart_input(exc: PricingValidationError):
    return error_response(
        code="INVALID_CART_INPUT",
        message="; ".join(exc.messages),
        http_status=status.HTTP_400_BAD_REQUEST,
    )


def _cart_response(engine, http_status=status.HTTP_200_OK):
    return Response(CartSerializer(engine).data, status=http_status)


# =====================================================
# POS API VIEWS
# =====================================================

class POSHealthCheckView(APIView):
    permission_classes = [IsPOSUser]
    serializer_class = None

    @extend_schema(
        responses={200: dict},
        description="POS module health check",
    )
    def get(self, request):
        return Response(
            {
                "status": "ok",
                "module": "pos",
                "user": request.user.email,
                "role": request.user.role,
            }
        )


class ActiveCartView(APIView):
    """
    Return the session cart with server-derived totals.
    """

    permission_classes = [IsPOSUser]
    serializer_class = CartSerializer

    @extend_schema(
        responses={200: CartSerializer},
        description="Get the cart of the current checkout session",
    )
    def get(self, request):
        return _cart_response(load_engine(request))


class AddCartItemView(APIView):
    """
    Add a product to the cart (quantity is summed when the line exists).

    Money rule:
    - Unit price is OWNED by Product and snapshotted server-side.
    """

    permission_classes = [IsPOSUser]
    serializer_class = CartSerializer

    @extend_schema(
        request=AddCartItemInputSerializer,
        responses={200: CartSerializer},
        description="Add a product to the cart (increments quantity if already present)",
    )
    def post(self, request):
        serializer = AddCartItemInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        product = get_object_or_404(
            Product, id=serializer.validated_data["product_id"], is_active=True
        )

        engine = load_engine(request)
        try:
            engine.add_line(product, serializer.validated_data["quantity"])
        except PricingValidationError as exc:
            return _invalid_cart_input(exc)

        save_engine(request, engine)
        return _cart_response(engine)


class UpdateCartItemView(APIView):
    """
    Set the quantity of a cart line. quantity <= 0 removes it.
    """

    permission_classes = [IsPOSUser]
    serializer_class = CartSerializer

    @extend_schema(
        request=UpdateCartItemInputSerializer,
        responses={200: CartSerializer},
        description="Set quantity of a cart line (<= 0 removes the line)",
    )
    def patch(self, request, product_id):
        serializer = UpdateCartItemInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        engine = load_engine(request)
        try:
            engine.set_quantity(product_id, serializer.validated_data["quantity"])
        except PricingValidationError as exc:
            return _invalid_cart_input(exc)

        save_engine(request, engine)
        return _cart_response(engine)


class LineDiscountView(APIView):
    permission_classes = [IsPOSUser]
    serializer_class = CartSerializer

    @extend_schema(
        request=LineDiscountInputSerializer,
        responses={200: CartSerializer},
        description="Set a percentage or fixed-amount discount on one cart line",
        examples=[
            OpenApiExample(
                "Ten percent off",
                value={"value": "10", "mode": "percentage"},
                request_only=True,
            ),
            OpenApiExample(
                "Fixed amount off",
                value={"value": "50.00", "mode": "amount"},
                request_only=True,
            ),
        ],
    )
    def patch(self, request, product_id):
        serializer = LineDiscountInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        engine = load_engine(request)
        try:
            engine.set_line_discount(
                product_id,
                serializer.validated_data["value"],
                serializer.validated_data["mode"],
            )
        except PricingValidationError as exc:
            return _invalid_cart_input(exc)

        save_engine(request, engine)
        return _cart_response(engine)


class RemoveCartItemView(APIView):
    permission_classes = [IsPOSUser]
    serializer_class = CartSerializer

    @extend_schema(
        responses={200: CartSerializer},
        description="Remove a line from the cart (no-op if absent)",
    )
    def delete(self, request, product_id):
        engine = load_engine(request)
        engine.remove_line(product_id)
        save_engine(request, engine)
        return _cart_response(engine)


class CartSettingsView(APIView):
    """
    Order-level settings: customer, payment method, order discount, tax rate.
    """

    permission_classes = [IsPOSUser]
    serializer_class = CartSerializer

    @extend_schema(
        request=CartSettingsInputSerializer,
        responses={200: CartSerializer},
        description="Update customer, payment method, order discount and/or tax rate",
    )
    def patch(self, request):
        serializer = CartSettingsInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        engine = load_engine(request)

        try:
            if "customer_id" in data:
                customer = None
                if data["customer_id"] is not None:
                    customer = get_object_or_404(Customer, id=data["customer_id"], is_active=True)
                engine.set_customer(customer)

            if "payment_method" in data:
                engine.set_payment_method(data["payment_method"])

            if "order_discount" in data:
                engine.set_order_discount(data["order_discount"], data["order_discount_mode"])

            if "tax_rate" in data:
                engine.set_tax_rate(data["tax_rate"])
        except PricingValidationError as exc:
            return _invalid_cart_input(exc)

        save_engine(request, engine)
        return _cart_response(engine)


class ClearCartView(APIView):
    """
    Clear the cart back to its initial state.

    This is a POS UX must-have: cashier cancels a cart in one click.
    """

    permission_classes = [IsPOSUser]
    serializer_class = CartSerializer

    @extend_schema(
        responses={200: CartSerializer},
        description="Reset the cart (lines, customer, discounts, tax rate)",
    )
    def delete(self, request):
        return _cart_response(reset_engine(request))


class CheckoutCartView(APIView):
    """
    Commit the session cart as a Sale.

    Calls:
    - sales.services.checkout_orchestrator.commit_sale()

    201: sale committed (soft_failures lists side effects that did not happen)
    400: precondition failed, nothing written
         (INSUFFICIENT_PAYMENT when cash tendered is below the total)
    502: a commit step failed (sale not, or only partially, written)
    """

    permission_classes = [IsPOSUser]

    @extend_schema(
        request=CheckoutInputSerializer,
        responses={201: dict},
        description="Commit the cart into a sale.",
        examples=[
            OpenApiExample(
                "Cash sale",
                value={"payment_method": "cash", "amount_tendered": "250.00"},
                request_only=True,
            ),
            OpenApiExample(
                "Buy now, pay later",
                value={"payment_method": "deferred"},
                request_only=True,
            ),
        ],
    )
    def post(self, request):
        serializer = CheckoutInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        engine = load_engine(request)

        if "payment_method" in serializer.validated_data:
            try:
                engine.set_payment_method(serializer.validated_data["payment_method"])
            except PricingValidationError as exc:
                return _invalid_cart_input(exc)

        try:
            outcome = commit_sale(
                engine.snapshot(),
                cashier=request.user,
                amount_tendered=serializer.validated_data.get("amount_tendered"),
            )
        except EmptyCartError as exc:
            return error_response(
                code="EMPTY_CART",
                message=str(exc),
                http_status=status.HTTP_400_BAD_REQUEST,
            )
        except MissingCustomerError as exc:
            return error_response(
                code="CUSTOMER_REQUIRED",
                message=str(exc),
                http_status=status.HTTP_400_BAD_REQUEST,
            )
        except InsufficientCreditError as exc:
            return error_response(
                code="INSUFFICIENT_CREDIT",
                message=str(exc),
                http_status=status.HTTP_400_BAD_REQUEST,
            )
        except InsufficientPaymentError as exc:
            return error_response(
                code="INSUFFICIENT_PAYMENT",
                message=str(exc),
                http_status=status.HTTP_400_BAD_REQUEST,
            )
        except OrphanedSaleError as exc:
            return error_response(
                code="ORPHANED_SALE",
                message=str(exc),
                http_status=status.HTTP_502_BAD_GATEWAY,
            )
        except SaleCommitError as exc:
            return error_response(
                code="SALE_COMMIT_FAILED",
                message=str(exc),
                http_status=status.HTTP_502_BAD_GATEWAY,
            )
        except CheckoutError as exc:
            return error_response(
                code="CHECKOUT_FAILED",
                message=str(exc),
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        reset_engine(request)

        return Response(
            {
                "sale": SaleSerializer(outcome.sale).data,
                "change_due": str(outcome.change_due) if outcome.change_due is not None else None,
                "degraded": outcome.degraded,
                "soft_failures": [
                    {"step": f.step, "error": f.error, "product_id": f.product_id}
                    for f in outcome.soft_failures
                ],
            },
            status=status.HTTP_201_CREATED,
        )
