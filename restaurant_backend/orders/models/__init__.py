# orders/models/__init__.py

from .order import Order
from .order_item import OrderItem
from .order_payment import OrderPayment

__all__ = ["Order", "OrderItem", "OrderPayment"]
