from .base import Order
from .order_events import OrderEvent, create_order_event

__all__ = [
    "Order",
    "OrderEvent",
    "create_order_event",
]
