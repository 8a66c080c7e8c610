# order_app/services/email_consumer.py

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

SUBSCRIPTION_NAME = "email"


def consume_order(order_event: OrderEvent) -> None:
    logger.info("Order Event received in email service => %s", order_event)


def register(registry: SubscriptionRegistry, settings: KafkaSettings) -> Subscription:
    return registry.register(
        SUBSCRIPTION_NAME,
        topic=settings.order_topic,
        group_id=settings.email_group_id,
        handler=consume_order,
    )


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Email service: log every OrderEvent on the order topic.")
    parser.add_argument("--topic", help="Order topic (default: ORDER_TOPIC_NAME or 'order_topics')")
    parser.add_argument("--group-id", help="Consumer group id (default: EMAIL_CONSUMER_GROUP or 'email')")
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> None:
    """
    Email notification service.

    Usage:
        python -m order_app.services.email_consumer --group-id email
    """
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
    args = parse_args(argv)

    settings = get_kafka_settings()
    if args.topic:
        settings.order_topic = args.topic
    if args.group_id:
        settings.email_group_id = args.group_id

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
    logger.info("Email service stopped.")


if __name__ == "__main__":
    main()
