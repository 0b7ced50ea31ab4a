# customers/admin.py

from django.contrib import admin

from customers.models import Customer, DeferredObligation, LoyaltyRule


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "phone",
        "credit_limit",
        "current_balance",
        "loyalty_points",
        "is_active",
    )
    # Balances and points are service-managed.
    readonly_fields = (
        "current_balance",
        "total_outstanding_dues",
        "loyalty_points",
        "created_at",
        "updated_at",
    )
    search_fields = ("name", "phone", "email")
    list_filter = ("is_active",)


@admin.register(LoyaltyRule)
class LoyaltyRuleAdmin(admin.ModelAdmin):
    list_display = ("rule_name", "points_per_currency", "min_purchase_amount", "is_active")
    list_filter = ("is_active",)


@admin.register(DeferredObligation)
class DeferredObligationAdmin(admin.ModelAdmin):
    list_display = ("sale", "customer", "original_amount", "amount_due", "due_date", "status")
    readonly_fields = ("sale", "customer", "original_amount", "created_at")
    list_filter = ("status", "due_date")
    search_fields = ("customer__name", "sale__invoice_no", "sale__receipt_no")
