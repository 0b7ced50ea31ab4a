# sales/services/summary.py

"""
DAILY SALES SUMMARY (CACHED READ MODEL)

Purpose:
- Aggregate one calendar day of sales for dashboards.
- Cache the result; a committed sale invalidates every cached day.

Cache layout:
- Keys embed a generation number. invalidate_summaries() bumps the
  generation, which orphans all previously cached days at once.
"""

from __future__ import annotations

import logging
from datetime import date as date_cls, datetime, time, timedelta

from django.conf import settings
from django.core.cache import cache
from django.db.models import Count, Sum
from django.utils import timezone

from sales.models import Sale, SaleItem

logger = logging.getLogger(__name__)

GENERATION_KEY = "sales:summary:generation"


def _generation() -> int:
    return cache.get_or_set(GENERATION_KEY, 1, timeout=None)


def _cache_key(day: date_cls) -> str:
    return f"sales:summary:daily:{_generation()}:{day.isoformat()}"


def _money(value) -> str:
    return f"{(value or 0):.2f}"


def _day_bounds(day: date_cls):
    tz = timezone.get_current_timezone()
    start = timezone.make_aware(datetime.combine(day, time.min), tz)
    return start, start + timedelta(days=1)


def invalidate_summaries() -> None:
    try:
        cache.incr(GENERATION_KEY)
    except ValueError:
        cache.set(GENERATION_KEY, 2, timeout=None)
    logger.debug("Sales summary cache invalidated")


def build_daily_summary(day: date_cls) -> dict:
    start, end = _day_bounds(day)
    sales_qs = Sale.objects.filter(created_at__gte=start, created_at__lt=end)

    totals = sales_qs.aggregate(
        sales_count=Count("id"),
        subtotal_amount=Sum("subtotal_amount"),
        discount_amount=Sum("discount_amount"),
        tax_amount=Sum("tax_amount"),
        total_amount=Sum("total_amount"),
    )

    items_sold = (
        SaleItem.objects.filter(sale__in=sales_qs).aggregate(qty=Sum("quantity")).get("qty") or 0
    )

    by_payment_method = [
        {
            "payment_method": row["payment_method"],
            "count": row["count"],
            "total_amount": _money(row["total_amount"]),
        }
        for row in sales_qs.values("payment_method")
        .annotate(count=Count("id"), total_amount=Sum("total_amount"))
        .order_by("payment_method")
    ]

    pending = sales_qs.filter(payment_status=Sale.PAYMENT_STATUS_PENDING).aggregate(
        total=Sum("total_amount")
    )

    return {
        "date": day.isoformat(),
        "sales_count": totals.get("sales_count") or 0,
        "items_sold": int(items_sold),
        "subtotal_amount": _money(totals.get("subtotal_amount")),
        "discount_amount": _money(totals.get("discount_amount")),
        "tax_amount": _money(totals.get("tax_amount")),
        "total_amount": _money(totals.get("total_amount")),
        "deferred_outstanding_amount": _money(pending.get("total")),
        "by_payment_method": by_payment_method,
    }


def get_daily_summary(day: date_cls | None = None) -> dict:
    day = day or timezone.localdate()
    key = _cache_key(day)

    cached = cache.get(key)
    if cached is not None:
        return cached

    summary = build_daily_summary(day)
    cache.set(key, summary, timeout=int(getattr(settings, "SALES_SUMMARY_CACHE_TTL", 300)))
    return summary
