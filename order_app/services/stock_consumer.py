# order_app/services/stock_consumer.py

from __future__ import annotations

import argparse
import logging
import threading
from typing import Optional

from order_app.config import KafkaSettings, get_kafka_settings
from order_app.kafka_helpers import get_bootstrap_servers
from order_app.models import OrderEvent
from order_app.services.runner import install_signal_handlers, run_subscription
from order_app.subscriptions import Subscription, SubscriptionRegistry

logger = logging.getLogger(__name__)

SUBSCRIPTION_NAME = "stock"


def consume_order(order_event: OrderEvent) -> None:
    logger.info("Order event received in stock service: %s", order_event)
    logger.info(f"Order Event received in stock service => {order_event}")


def register(registry: SubscriptionRegistry, settings: KafkaSettings) -> Subscription:
    return registry.register(
        SUBSCRIPTION_NAME,
        topic=settings.order_topic,
        group_id=settings.stock_group_id,
        handler=consume_order,
    )


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Stock service: log every OrderEvent on the order topic.")
    parser.add_argument("--topic", help="Order topic (default: ORDER_TOPIC_NAME or 'order_topics')")
    parser.add_argument("--group-id", help="Consumer group id (default: STOCK_CONSUMER_GROUP or 'stock')")
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> None:
    """
    Stock update service.

    Usage:
        python -m order_app.services.stock_consumer --group-id stock
    """
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
    args = parse_args(argv)

    settings = get_kafka_settings()
    if args.topic:
        settings.order_topic = args.topic
    if args.group_id:
        settings.stock_group_id = args.group_id

    registry = SubscriptionRegistry()
    subscription = register(registry, settings)

    stop_event = threading.Event()
    install_signal_handlers(stop_event)

    run_subscription(
        subscription,
        bootstrap_servers=get_bootstrap_servers(settings),
        stop_event=stop_event,
        settings=settings,
    )
    logger.info("Stock service stopped.")


if __name__ == "__main__":
    main()
