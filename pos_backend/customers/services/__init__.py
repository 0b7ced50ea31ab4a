from .bnpl import DeferredPaymentError, create_deferred_obligation
from .loyalty import LoyaltyError, accrue_loyalty, points_for_amount

__all__ = [
    "DeferredPaymentError",
    "create_deferred_obligation",
    "LoyaltyError",
    "accrue_loyalty",
    "points_for_amount",
]
