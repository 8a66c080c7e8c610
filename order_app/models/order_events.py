from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict

from .base import Order


class OrderEvent(BaseModel):
    """
    Event published to the order topic whenever an order is placed.

    Consumers only read it: the model is frozen so a handler cannot change
    what the next handler sees.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    message: str
    status: str
    order: Order


def create_order_event(
    name: str,
    qty: int,
    price: float,
    *,
    status: str = "PENDING",
    message: str = "order status is in pending state",
) -> OrderEvent:
    order = Order(order_id=str(uuid.uuid4()), name=name, qty=qty, price=price)
    return OrderEvent(message=message, status=status, order=order)
