# order_app/services/order_producer.py

from __future__ import annotations

import argparse
import logging
import signal
import time
from typing import Optional

from kafka.errors import KafkaError

from order_app.config import get_kafka_settings
from order_app.kafka_helpers import create_json_producer, get_bootstrap_servers
from order_app.models import OrderEvent, create_order_event

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
logger = logging.getLogger(__name__)

_running = True


def _handle_sigint(signum, frame) -> None:  # type: ignore[override]
    global _running
    logger.info("Received signal %s – shutting down order producer.", signum)
    _running = False


def publish_order_event(producer, topic: str, event: OrderEvent, *, timeout: float = 10.0):
    """
    Send one OrderEvent keyed by its order id and wait for the broker ack.

    Returns the RecordMetadata; KafkaError is left to the caller.
    """
    key = event.order.order_id
    future = producer.send(topic, key=key, value=event.model_dump(mode="json"))
    meta = future.get(timeout=timeout)
    logger.info(
        "Order event sent key=%r → %s (p=%s, offset=%s): %s",
        key,
        topic,
        meta.partition,
        meta.offset,
        event,
    )
    return meta


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Publish OrderEvents to the order topic.")
    parser.add_argument("--name", default="book", help="Item name (default: %(default)s)")
    parser.add_argument("--qty", type=int, default=1, help="Quantity (default: %(default)s)")
    parser.add_argument("--price", type=float, default=0.0, help="Unit price (default: %(default)s)")
    parser.add_argument("--count", type=int, default=1, help="Number of events; 0 sends until interrupted")
    parser.add_argument("--interval", type=float, default=1.0, help="Seconds between events (default: %(default)s)")
    parser.add_argument("--topic", help="Order topic (default: ORDER_TOPIC_NAME or 'order_topics')")
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> None:
    """
    Order service stand-in: places orders by publishing OrderEvents.

    Usage:
        python -m order_app.services.order_producer --name book --qty 2 --price 9.5 --count 3
    """
    args = parse_args(argv)

    signal.signal(signal.SIGINT, _handle_sigint)
    signal.signal(signal.SIGTERM, _handle_sigint)

    settings = get_kafka_settings()
    topic = args.topic or settings.order_topic
    producer = create_json_producer(get_bootstrap_servers(settings), settings=settings)

    sent = 0
    try:
        while _running and (args.count == 0 or sent < args.count):
            event = create_order_event(args.name, args.qty, args.price)
            try:
                publish_order_event(producer, topic, event)
            except KafkaError as exc:
                logger.error("Failed to send order event key=%r: %s", event.order.order_id, exc)
                raise

            sent += 1
            if args.count == 0 or sent < args.count:
                time.sleep(args.interval)
    finally:
        logger.info("Flushing and closing producer after %d event(s).", sent)
        producer.flush()
        producer.close()


if __name__ == "__main__":
    main()
