# backend/urls.py
"""
PROJECT URLS

Everything the tills talk to lives under /api/:
- /api/pos/     session cart + checkout
- /api/sales/   sales history, receipts, daily summary

Public (AllowAny): API index and /api/health/.
The Django admin path comes from settings.ADMIN_PATH.
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.contrib import admin
from django.core.cache import cache
from django.db import connections
from django.db.utils import OperationalError
from django.urls import include, path
from django.views.generic import RedirectView
from drf_spectacular.utils import extend_schema
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

logger = logging.getLogger(__name__)

HEALTH_CACHE_KEY = "health:ping"

POS_ENDPOINTS = {
    "cart": "/api/pos/cart/",
    "add_item": "/api/pos/cart/items/add/",
    "settings": "/api/pos/cart/settings/",
    "clear": "/api/pos/cart/clear/",
    "checkout": "/api/pos/checkout/",
}

SALES_ENDPOINTS = {
    "history": "/api/sales/",
    "daily_summary": "/api/sales/summary/daily/",
}


@extend_schema(responses={200: dict})
@api_view(["GET"])
@permission_classes([AllowAny])
def api_index(request):
    return Response(
        {
            "service": "retail-pos-backend",
            "auth": {
                "jwt_create": "/api/auth/jwt/create/",
                "jwt_refresh": "/api/auth/jwt/refresh/",
            },
            "pos": POS_ENDPOINTS,
            "sales": SALES_ENDPOINTS,
            "docs": "/api/docs/",
        }
    )


def _database_ok() -> tuple[bool, str]:
    try:
        with connections["default"].cursor() as cursor:
            cursor.execute("SELECT 1;")
            cursor.fetchone()
    except OperationalError as exc:
        logger.error("Health check: database unreachable", extra={"error": str(exc)})
        return False, str(exc)
    return True, ""


def _cache_ok() -> bool:
    # the daily summary read model depends on it
    cache.set(HEALTH_CACHE_KEY, "ok", timeout=5)
    return cache.get(HEALTH_CACHE_KEY) == "ok"


@extend_schema(responses={200: dict, 503: dict})
@api_view(["GET"])
@permission_classes([AllowAny])
def health_check(request):
    """
    DB must answer SELECT 1. A cache miss only degrades the summary, so it
    is reported but does not fail the check.
    """
    db_ok, db_error = _database_ok()
    body = {
        "status": "ok" if db_ok else "degraded",
        "db": "ok" if db_ok else "down",
        "cache": "ok" if _cache_ok() else "unavailable",
    }
    if not db_ok:
        body["error"] = db_error
        return Response(body, status=status.HTTP_503_SERVICE_UNAVAILABLE)
    return Response(body)


ADMIN_PATH = getattr(settings, "ADMIN_PATH", "admin/")
if not ADMIN_PATH.endswith("/"):
    ADMIN_PATH = f"{ADMIN_PATH}/"


api_urlpatterns = [
    path("", api_index, name="api-root"),
    path("health/", health_check, name="health-check"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path("docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    path("auth/jwt/create/", TokenObtainPairView.as_view(), name="jwt-create"),
    path("auth/jwt/refresh/", TokenRefreshView.as_view(), name="jwt-refresh"),
    path("pos/", include("pos.urls")),
    path("sales/", include("sales.api.urls")),
]

urlpatterns = [
    path(ADMIN_PATH, admin.site.urls),
    path("", RedirectView.as_view(url="/api/docs/", permanent=False), name="root"),
    path("api/", include(api_urlpatterns)),
]
