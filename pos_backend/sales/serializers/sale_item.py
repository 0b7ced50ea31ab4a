from rest_framework import serializers

from sales.models import SaleItem


class SaleItemSerializer(serializers.ModelSerializer):
    """
    Sale line item serializer (read-only).
    Designed for receipts + UI display.
    """

    sku = serializers.SerializerMethodField()

    class Meta:
        model = SaleItem
        fields = [
            "id",
            "product",
            "product_name",
            "sku",
            "quantity",
            "unit_price",
            "discount_amount",
            "total_price",
        ]
        read_only_fields = fields

    def get_sku(self, obj):
        p = getattr(obj, "product", None)
        return getattr(p, "sku", None)
