from .cart import CartLineSerializer, CartSerializer, CartTotalsSerializer

__all__ = [
    "CartSerializer",
    "CartLineSerializer",
    "CartTotalsSerializer",
]
