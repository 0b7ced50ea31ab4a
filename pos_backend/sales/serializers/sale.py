# sales/serializers/sale.py

from rest_framework import serializers

from sales.models import Sale

from .sale_item import SaleItemSerializer


class SaleSerializer(serializers.ModelSerializer):
    """
    CANONICAL SALE SERIALIZER

    Read-only. Used for receipts, sales history and the checkout response.
    """

    items = SaleItemSerializer(many=True, read_only=True)
    customer_name = serializers.SerializerMethodField()
    deferred_due_date = serializers.SerializerMethodField()

    class Meta:
        model = Sale
        fields = [
            "id",
            "invoice_no",
            "receipt_no",
            "customer",
            "customer_name",
            "cashier",
            "cashier_name",
            "subtotal_amount",
            "discount_amount",
            "tax_amount",
            "total_amount",
            "payment_method",
            "payment_status",
            "deferred_due_date",
            "receipt_printed",
            "receipt_printed_at",
            "created_at",
            "items",
        ]
        read_only_fields = fields

    def get_customer_name(self, obj: Sale):
        customer = getattr(obj, "customer", None)
        return getattr(customer, "name", None)

    def get_deferred_due_date(self, obj: Sale):
        obligation = getattr(obj, "deferred_obligation", None)
        if obligation is None:
            return None
        return obligation.due_date.isoformat()
