# order_app/services/runner.py

from __future__ import annotations

import logging
import signal
import threading
from typing import Callable, Optional

from order_app.config import KafkaSettings
from order_app.kafka_helpers import create_json_consumer, format_record, get_bootstrap_servers
from order_app.subscriptions import Subscription, dispatch

logger = logging.getLogger(__name__)

ConsumerFactory = Callable[..., object]


def install_signal_handlers(stop_event: threading.Event) -> None:
    """Set `stop_event` on SIGINT/SIGTERM."""

    def _handle(sig, frame) -> None:  # type: ignore[override]
        logger.info("Received signal %s – stopping consumer loop.", sig)
        stop_event.set()

    signal.signal(signal.SIGINT, _handle)
    signal.signal(signal.SIGTERM, _handle)


def run_subscription(
    subscription: Subscription,
    *,
    bootstrap_servers: Optional[str] = None,
    stop_event: Optional[threading.Event] = None,
    consumer_factory: ConsumerFactory = create_json_consumer,
    poll_timeout_ms: int = 1000,
    settings: Optional[KafkaSettings] = None,
) -> int:
    """
    Consume `subscription.topic` under `subscription.group_id` and hand every
    record value to the subscription's handler.

    Blocks until stop_event is set. Exceptions raised while decoding or
    handling a record are not caught: they end the loop and reach the caller.
    On that path the consumer is closed without a final commit, so the failed
    record and the rest of its batch are redelivered to the group.

    Returns the number of records dispatched.
    """
    if bootstrap_servers is None:
        bootstrap_servers = get_bootstrap_servers(settings)

    if stop_event is None:
        stop_event = threading.Event()

    logger.info(
        "[%s] Starting consumer – topic=%s group_id=%s",
        subscription.name,
        subscription.topic,
        subscription.group_id,
    )

    consumer = consumer_factory(
        [subscription.topic],
        group_id=subscription.group_id,
        bootstrap_servers=bootstrap_servers,
        auto_offset_reset="earliest",
        enable_auto_commit=True,
        settings=settings,
    )

    handled = 0
    try:
        while not stop_event.is_set():
            for records in consumer.poll(timeout_ms=poll_timeout_ms).values():
                for record in records:
                    logger.debug("[%s] Record %s", subscription.name, format_record(record))
                    dispatch(subscription, record.value)
                    handled += 1
    except BaseException:
        # poll() already moved the position past the whole batch
        logger.error(
            "[%s] Record handling failed after %d record(s); closing without commit.",
            subscription.name,
            handled,
        )
        consumer.close(autocommit=False)
        raise

    logger.info("[%s] Closing consumer.", subscription.name)
    consumer.close()

    logger.info("[%s] Consumer stopped cleanly after %d record(s).", subscription.name, handled)
    return handled
