# order_app/subscriptions.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List

from order_app.models import OrderEvent

logger = logging.getLogger(__name__)

OrderHandler = Callable[[OrderEvent], None]


@dataclass(frozen=True)
class Subscription:
    name: str
    topic: str
    group_id: str
    handler: OrderHandler


class SubscriptionRegistry:
    """
    Topic subscriptions known to this process.

    Each service registers its handler at start-up; the runner then looks the
    subscription up by name and drives it against the broker.
    """

    def __init__(self) -> None:
        self._subscriptions: Dict[str, Subscription] = {}

    def register(self, name: str, topic: str, group_id: str, handler: OrderHandler) -> Subscription:
        if name in self._subscriptions:
            raise ValueError(f"Subscription {name!r} is already registered")
        if not topic:
            raise ValueError(f"Subscription {name!r} needs a topic")
        if not group_id:
            raise ValueError(f"Subscription {name!r} needs a consumer group id")

        subscription = Subscription(name=name, topic=topic, group_id=group_id, handler=handler)
        self._subscriptions[name] = subscription
        logger.info(
            "Registered subscription '%s' – topic=%s group_id=%s handler=%s",
            name,
            topic,
            group_id,
            getattr(handler, "__qualname__", repr(handler)),
        )
        return subscription

    def get(self, name: str) -> Subscription:
        try:
            return self._subscriptions[name]
        except KeyError:
            raise KeyError(f"No subscription registered under {name!r}") from None

    def for_topic(self, topic: str) -> List[Subscription]:
        return [s for s in self._subscriptions.values() if s.topic == topic]

    def __iter__(self) -> Iterator[Subscription]:
        return iter(list(self._subscriptions.values()))

    def __len__(self) -> int:
        return len(self._subscriptions)


def decode_order_event(payload: Any) -> OrderEvent:
    """Turn a record value (dict, JSON text or bytes) into an OrderEvent."""
    if isinstance(payload, OrderEvent):
        return payload
    if isinstance(payload, (bytes, bytearray)):
        payload = payload.decode("utf-8")
    if isinstance(payload, str):
        return OrderEvent.model_validate_json(payload)
    return OrderEvent.model_validate(payload)


def dispatch(subscription: Subscription, payload: Any) -> OrderEvent:
    """
    Decode one record value and hand it to the subscription's handler.

    Decoding and handler errors are not caught here.
    """
    event = decode_order_event(payload)
    subscription.handler(event)
    return event

