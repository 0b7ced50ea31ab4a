# sales/models/__init__.py

"""
SALES MODELS PACKAGE EXPORTS

Purpose:
- Central export surface for sales app models.
"""

from .receipt_sequence import ReceiptSequence
from .sale import Sale
from .sale_item import SaleItem

__all__ = [
    "Sale",
    "SaleItem",
    "ReceiptSequence",
]
