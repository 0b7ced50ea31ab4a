# products/admin.py
"""
=====================================================
PATH: products/admin.py
=====================================================

Admin rules (audit-safe stock):

- Product stock_quantity is read-only here; it only moves through
  products.services.inventory (sales, adjustments).
- StockMovement rows are append-only and cannot be edited or deleted.
"""

from __future__ import annotations

from django.contrib import admin

from products.models import Product, StockMovement


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "sku",
        "unit_price",
        "stock_quantity",
        "min_stock_level",
        "is_active",
    )
    readonly_fields = ("stock_quantity", "created_at", "updated_at")
    search_fields = ("name", "sku", "barcode")
    list_filter = ("is_active",)


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = (
        "product",
        "movement_type",
        "reason",
        "quantity",
        "reference_type",
        "reference_id",
        "created_at",
    )
    list_filter = ("movement_type", "reason")
    search_fields = ("product__name", "product__sku", "reference_id")

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
