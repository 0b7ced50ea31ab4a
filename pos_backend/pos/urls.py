"""
PATH: pos/urls.py

POS URLS

Purpose:
- POS health check
- Session cart
- Cart line operations + order settings
- Checkout (commits the cart via the checkout orchestrator)
"""

from django.urls import path

from pos.views.api import (
    POSHealthCheckView,
    ActiveCartView,
    AddCartItemView,
    UpdateCartItemView,
    LineDiscountView,
    RemoveCartItemView,
    CartSettingsView,
    ClearCartView,
    CheckoutCartView,
)

app_name = "pos"

urlpatterns = [
    path("health/", POSHealthCheckView.as_view(), name="health"),

    path("cart/", ActiveCartView.as_view(), name="active-cart"),
    path("cart/clear/", ClearCartView.as_view(), name="clear-cart"),
    path("cart/settings/", CartSettingsView.as_view(), name="cart-settings"),

    path("cart/items/add/", AddCartItemView.as_view(), name="add-cart-item"),
    path("cart/items/<uuid:product_id>/update/", UpdateCartItemView.as_view(), name="update-cart-item"),
    path("cart/items/<uuid:product_id>/discount/", LineDiscountView.as_view(), name="discount-cart-item"),
    path("cart/items/<uuid:product_id>/remove/", RemoveCartItemView.as_view(), name="remove-cart-item"),

    path("checkout/", CheckoutCartView.as_view(), name="checkout"),
]
