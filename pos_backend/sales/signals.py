# sales/signals.py

"""
SALES SIGNALS

views_invalidated(sender, views=tuple[str, ...])
    Sent after a sale is committed. `views` names the read models whose
    cached data is now stale: "sales", "stock", "customers", "summaries".
"""

from django.dispatch import Signal, receiver

views_invalidated = Signal()


@receiver(views_invalidated, dispatch_uid="sales.invalidate_summaries")
def invalidate_sales_summaries(sender, views=(), **kwargs):
    if "summaries" in views or "sales" in views:
        from sales.services.summary import invalidate_summaries

        invalidate_summaries()
