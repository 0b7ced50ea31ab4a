# sales/api/filters.py

import django_filters
from django.db.models import Q

from pos.constants import PAYMENT_METHOD_CHOICES
from sales.models import Sale


class SaleFilter(django_filters.FilterSet):
    """
    Sales history filters:
        ?payment_method=cash|card|deferred
        ?payment_status=paid|pending
        ?customer=<uuid>
        ?date_from=YYYY-MM-DD&date_to=YYYY-MM-DD
        ?q=<invoice or receipt fragment>
    """

    payment_method = django_filters.ChoiceFilter(choices=PAYMENT_METHOD_CHOICES)
    payment_status = django_filters.ChoiceFilter(choices=Sale.PAYMENT_STATUS_CHOICES)
    date_from = django_filters.DateFilter(field_name="created_at", lookup_expr="date__gte")
    date_to = django_filters.DateFilter(field_name="created_at", lookup_expr="date__lte")
    q = django_filters.CharFilter(method="filter_q")

    class Meta:
        model = Sale
        fields = ["payment_method", "payment_status", "customer", "cashier"]

    def filter_q(self, queryset, name, value):
        value = (value or "").strip()
        if not value:
            return queryset

        return queryset.filter(Q(invoice_no__icontains=value) | Q(receipt_no__icontains=value))
