# sales/api/summary.py

"""
DAILY SALES SUMMARY (SALES MODULE)

GET /api/sales/summary/daily/?date=YYYY-MM-DD

Contract:
- date is optional, defaults to today (server timezone).
- An unparseable date is a 400, not a silent fallback.
- Served from cache; a committed sale invalidates it.
"""

from __future__ import annotations

from datetime import datetime

from django.utils import timezone
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from sales.services.summary import get_daily_summary
from users.permissions import IsManagerOrAdmin


class DailySalesSummaryView(APIView):
    permission_classes = [IsManagerOrAdmin]

    @extend_schema(
        parameters=[OpenApiParameter("date", str, description="YYYY-MM-DD (default: today)")],
        responses={200: dict},
        description="Daily sales totals with a payment method breakdown.",
    )
    def get(self, request):
        raw = (request.query_params.get("date") or "").strip()
        if raw:
            try:
                day = datetime.strptime(raw, "%Y-%m-%d").date()
            except ValueError:
                return Response(
                    {"error": {"code": "INVALID_DATE", "message": "date must be YYYY-MM-DD"}},
                    status=status.HTTP_400_BAD_REQUEST,
                )
        else:
            day = timezone.localdate()

        return Response(get_daily_summary(day))
