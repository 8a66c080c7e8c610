"""
Run every order consumer in one process, one thread per subscription.

Examples:
  export KAFKA_PROFILE=docker
  export KAFKA_BOOTSTRAP_SERVERS=localhost:19092

  python -m order_app.services.orchestrator
  python -m order_app.services.orchestrator --only stock
"""

from __future__ import annotations

import argparse
import logging
import threading
from typing import List, Optional

from order_app.config import KafkaSettings, get_kafka_settings
from order_app.kafka_helpers import get_bootstrap_servers
from order_app.services import email_consumer, stock_consumer
from order_app.services.runner import install_signal_handlers, run_subscription
from order_app.subscriptions import Subscription, SubscriptionRegistry

log_format = "%(asctime)s [%(levelname)s] [%(threadName)s] %(message)s"
logger = logging.getLogger(__name__)

SERVICES = {
    email_consumer.SUBSCRIPTION_NAME: email_consumer.register,
    stock_consumer.SUBSCRIPTION_NAME: stock_consumer.register,
}


def build_registry(
    names: Optional[List[str]] = None, settings: Optional[KafkaSettings] = None
) -> SubscriptionRegistry:
    settings = settings or get_kafka_settings()
    registry = SubscriptionRegistry()
    for name, register in SERVICES.items():
        if names and name not in names:
            continue
        register(registry, settings)
    return registry


def run_all(
    registry: SubscriptionRegistry,
    *,
    bootstrap_servers: Optional[str] = None,
    stop_event: Optional[threading.Event] = None,
    **runner_kwargs,
) -> List[BaseException]:
    """
    Start one worker thread per registered subscription and wait for all.

    A worker that raises logs the exception and sets `stop_event` so the
    others wind down. The collected exceptions are returned.
    """
    if bootstrap_servers is None:
        bootstrap_servers = get_bootstrap_servers()

    if stop_event is None:
        stop_event = threading.Event()

    failures: List[BaseException] = []
    lock = threading.Lock()

    def _worker(subscription: Subscription) -> None:
        try:
            run_subscription(
                subscription,
                bootstrap_servers=bootstrap_servers,
                stop_event=stop_event,
                **runner_kwargs,
            )
        except Exception as exc:
            logger.exception("[%s] Consumer failed – stopping all workers.", subscription.name)
            with lock:
                failures.append(exc)
            stop_event.set()

    threads = [
        threading.Thread(target=_worker, args=(s,), name=f"{s.name}-consumer", daemon=True)
        for s in registry
    ]

    for t in threads:
        t.start()
    logger.info("Started %d consumer thread(s).", len(threads))

    for t in threads:
        t.join()

    return failures


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the order consumers in one process.")
    parser.add_argument(
        "--only",
        action="append",
        choices=sorted(SERVICES),
        help="Run only the named consumer (repeatable).",
    )
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> None:
    logging.basicConfig(level=logging.INFO, format=log_format)
    args = parse_args(argv)

    settings = get_kafka_settings()
    registry = build_registry(args.only, settings)

    stop_event = threading.Event()
    install_signal_handlers(stop_event)

    failures = run_all(
        registry,
        bootstrap_servers=get_bootstrap_servers(settings),
        stop_event=stop_event,
        settings=settings,
    )
    if failures:
        raise SystemExit(1)
    logger.info("All consumers stopped.")


if __name__ == "__main__":
    main()
