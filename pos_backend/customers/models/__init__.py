"""
PATH: customers/models/__init__.py

Customers models export surface.
"""

from .customer import Customer
from .deferred_obligation import DeferredObligation
from .loyalty_rule import LoyaltyRule

__all__ = [
    "Customer",
    "DeferredObligation",
    "LoyaltyRule",
]
