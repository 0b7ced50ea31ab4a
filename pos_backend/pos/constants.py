# pos/constants.py

"""
POS vocabulary shared by the pricing engine, the checkout orchestrator
and the Sale model.
"""

DISCOUNT_PERCENTAGE = "percentage"
DISCOUNT_AMOUNT = "amount"

DISCOUNT_MODES = (DISCOUNT_PERCENTAGE, DISCOUNT_AMOUNT)

PAYMENT_CASH = "cash"
PAYMENT_CARD = "card"
PAYMENT_DEFERRED = "deferred"

PAYMENT_METHODS = (PAYMENT_CASH, PAYMENT_CARD, PAYMENT_DEFERRED)

# Methods settled at the till (loyalty-eligible).
IMMEDIATE_PAYMENT_METHODS = frozenset({PAYMENT_CASH, PAYMENT_CARD})

PAYMENT_METHOD_CHOICES = [
    (PAYMENT_CASH, "Cash"),
    (PAYMENT_CARD, "Card"),
    (PAYMENT_DEFERRED, "Buy now, pay later"),
]
