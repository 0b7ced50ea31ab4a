# pos/services/cart_session.py

"""
SESSION CART STORE

One PricingEngine per checkout session. The cart lives in the Django
session under CART_SESSION_KEY as the engine's plain-dict form.
"""

from __future__ import annotations

from pos.services.pricing import PricingEngine

CART_SESSION_KEY = "pos_cart"


def load_engine(request) -> PricingEngine:
    return PricingEngine.from_dict(request.session.get(CART_SESSION_KEY))


def save_engine(request, engine: PricingEngine) -> None:
    request.session[CART_SESSION_KEY] = engine.to_dict()
    request.session.modified = True


def reset_engine(request) -> PricingEngine:
    engine = PricingEngine()
    save_engine(request, engine)
    return engine
