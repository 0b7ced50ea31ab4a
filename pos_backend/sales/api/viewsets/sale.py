# sales/api/viewsets/sale.py

"""
======================================================
PATH: sales/api/viewsets/sale.py
======================================================
SALE VIEWSET (STAFF)

Purpose:
- Provide "Sales History" API for staff UI.
- List + retrieve sales with django-filter filters (see SaleFilter).
- Provide Receipt endpoint (print-ready payload) and mark it printed.

Security:
- Any POS role (admin / manager / cashier)

Sales are written only by the checkout orchestrator; this viewset is
read-only apart from the receipt-printed flag.
======================================================
"""

from __future__ import annotations

import logging

from django.utils import timezone
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from sales.api.filters import SaleFilter
from sales.models import Sale
from sales.serializers import SaleSerializer
from users.permissions import IsPOSUser

logger = logging.getLogger(__name__)


class SaleViewSet(viewsets.ReadOnlyModelViewSet):
    permission_classes = [IsPOSUser]
    serializer_class = SaleSerializer
    filter_backends = [DjangoFilterBackend]
    filterset_class = SaleFilter

    def get_queryset(self):
        return (
            Sale.objects.select_related("customer", "cashier", "deferred_obligation")
            .prefetch_related("items__product")
            .order_by("-created_at")
        )

    # ======================================================
    # STAFF RECEIPT
    # GET  /api/sales/:id/receipt/
    # POST /api/sales/:id/receipt/printed/
    # ======================================================

    @extend_schema(
        responses={200: SaleSerializer},
        description="Return a print-ready receipt payload for a sale.",
    )
    @action(detail=True, methods=["get"], url_path="receipt")
    def receipt(self, request, pk=None):
        sale: Sale = self.get_object()
        return Response(SaleSerializer(sale).data, status=status.HTTP_200_OK)

    @extend_schema(
        request=None,
        responses={200: SaleSerializer},
        description="Mark the sale's receipt as printed (first print time is kept).",
    )
    @action(detail=True, methods=["post"], url_path="receipt/printed")
    def mark_receipt_printed(self, request, pk=None):
        sale: Sale = self.get_object()

        if not sale.receipt_printed:
            sale.receipt_printed = True
            sale.receipt_printed_at = timezone.now()
            sale.save(update_fields=["receipt_printed", "receipt_printed_at"])
            logger.info("Receipt printed", extra={"sale_id": str(sale.pk)})

        return Response(SaleSerializer(sale).data, status=status.HTTP_200_OK)
