# pos/serializers/cart.py

"""
CART SERIALIZER

Purpose:
- Return the session cart (a PricingEngine) in a frontend-friendly shape.
- Keep money + totals server-derived (single source of truth).

Money is rendered as 2dp strings to avoid float serialization issues.
"""

from decimal import Decimal, ROUND_HALF_UP

from rest_framework import serializers

TWOPLACES = Decimal("0.01")


def _money_str(value) -> str:
    return str(Decimal(value).quantize(TWOPLACES, rounding=ROUND_HALF_UP))


class CartLineSerializer(serializers.Serializer):
    product_id = serializers.SerializerMethodField()
    product_name = serializers.SerializerMethodField()
    sku = serializers.SerializerMethodField()
    quantity = serializers.IntegerField(read_only=True)
    unit_price = serializers.SerializerMethodField()
    discount = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    discount_mode = serializers.CharField(read_only=True)
    gross = serializers.SerializerMethodField()
    discount_amount = serializers.SerializerMethodField()
    net = serializers.SerializerMethodField()

    def get_product_id(self, obj) -> str:
        return obj.product.id

    def get_product_name(self, obj) -> str:
        return obj.product.name

    def get_sku(self, obj) -> str:
        return obj.product.sku

    def get_unit_price(self, obj) -> str:
        return _money_str(obj.product.unit_price)

    def get_gross(self, obj) -> str:
        return _money_str(obj.gross)

    def get_discount_amount(self, obj) -> str:
        return _money_str(obj.discount_amount)

    def get_net(self, obj) -> str:
        return _money_str(obj.net)


class CartTotalsSerializer(serializers.Serializer):
    subtotal = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    line_discount_amount = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    order_discount_amount = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    discount_amount = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    net_subtotal = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    tax_amount = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    total_amount = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)
    item_count = serializers.IntegerField(read_only=True)


class CartSerializer(serializers.Serializer):
    """
    Serializer for the POS session cart.

    Expects a PricingEngine instance.
    """

    lines = serializers.SerializerMethodField()
    customer = serializers.SerializerMethodField()
    payment_method = serializers.SerializerMethodField()
    order_discount = serializers.SerializerMethodField()
    order_discount_mode = serializers.SerializerMethodField()
    tax_rate = serializers.SerializerMethodField()
    totals = serializers.SerializerMethodField()

    def get_lines(self, engine) -> list:
        return CartLineSerializer(engine.lines, many=True).data

    def get_customer(self, engine) -> dict | None:
        customer = engine.state.customer
        if customer is None:
            return None
        return {"id": customer.id, "name": customer.name}

    def get_payment_method(self, engine) -> str:
        return engine.state.payment_method

    def get_order_discount(self, engine) -> str:
        return str(engine.state.order_discount)

    def get_order_discount_mode(self, engine) -> str:
        return engine.state.order_discount_mode

    def get_tax_rate(self, engine) -> str:
        return str(engine.state.tax_rate)

    def get_totals(self, engine) -> dict:
        return CartTotalsSerializer(engine.totals).data
