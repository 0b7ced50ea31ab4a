# sales/api/urls.py

"""
SALES API URLS (CANONICAL)

Rules:
- Explicit non-PK routes (like "summary/daily") MUST be registered BEFORE
  router URLs, otherwise the router will treat them as a <pk>.

Provides:
    GET  /api/sales/                      (sales history)
    GET  /api/sales/<uuid>/               (retrieve)
    GET  /api/sales/<uuid>/receipt/       (receipt payload)
    POST /api/sales/<uuid>/receipt/printed/
    GET  /api/sales/summary/daily/?date=YYYY-MM-DD   (manager/admin)

Checkout lives at /api/pos/checkout/ (see pos/urls.py).
"""

from django.urls import path, include
from rest_framework.routers import SimpleRouter

from sales.api.summary import DailySalesSummaryView
from sales.api.viewsets.sale import SaleViewSet

router = SimpleRouter()
router.register(r"", SaleViewSet, basename="sales")

urlpatterns = [
    path("summary/daily/", DailySalesSummaryView.as_view(), name="sales-summary-daily"),
    path("", include(router.urls)),
]
