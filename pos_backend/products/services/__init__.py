from .inventory import InventoryError, adjust_stock, record_stock_movement

__all__ = [
    "InventoryError",
    "adjust_stock",
    "record_stock_movement",
]
