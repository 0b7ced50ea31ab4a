# sales/admin.py

from django.contrib import admin

from sales.models import ReceiptSequence, Sale, SaleItem


# ======================================================
# SALE ADMIN
# ======================================================


class SaleItemInline(admin.TabularInline):
    model = SaleItem
    extra = 0
    can_delete = False
    readonly_fields = (
        "product",
        "product_name",
        "quantity",
        "unit_price",
        "discount_amount",
        "total_price",
        "created_at",
    )

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = (
        "receipt_no",
        "invoice_no",
        "customer",
        "payment_method",
        "payment_status",
        "total_amount",
        "created_at",
    )
    # Financial fields are immutable; only print state may change.
    readonly_fields = (
        "invoice_no",
        "receipt_no",
        "customer",
        "cashier",
        "cashier_name",
        "subtotal_amount",
        "discount_amount",
        "tax_amount",
        "total_amount",
        "payment_method",
        "payment_status",
        "created_at",
    )
    search_fields = ("invoice_no", "receipt_no", "customer__name")
    list_filter = ("payment_method", "payment_status", "created_at")
    inlines = [SaleItemInline]

    def has_add_permission(self, request):
        return False


# ======================================================
# RECEIPT SEQUENCE ADMIN
# ======================================================


@admin.register(ReceiptSequence)
class ReceiptSequenceAdmin(admin.ModelAdmin):
    list_display = ("id", "last_number", "updated_at")
    readonly_fields = ("id", "last_number", "updated_at")

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
