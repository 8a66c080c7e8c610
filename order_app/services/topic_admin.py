# order_app/services/topic_admin.py

from __future__ import annotations

import argparse
import logging
from typing import Optional

from kafka import KafkaAdminClient
from kafka.admin import NewTopic
from kafka.errors import KafkaError, TopicAlreadyExistsError

from order_app.config import KafkaSettings, get_kafka_settings
from order_app.kafka_helpers import check_connection, get_bootstrap_servers

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
logger = logging.getLogger(__name__)


def build_order_topic(settings: KafkaSettings) -> NewTopic:
    return NewTopic(
        name=settings.order_topic,
        num_partitions=settings.topic_partitions,
        replication_factor=settings.topic_replication,
    )


def cli_command(settings: KafkaSettings) -> str:
    """Equivalent kafka-topics.sh invocation for the order topic."""
    return (
        "bin/kafka-topics.sh --create "
        f"--topic {settings.order_topic} "
        f"--partitions {settings.topic_partitions} "
        f"--replication-factor {settings.topic_replication} "
        f"--bootstrap-server {settings.bootstrap_servers}"
    )


def create_order_topic(settings: KafkaSettings, admin: Optional[KafkaAdminClient] = None) -> bool:
    """
    Create the order topic. Returns False when it already exists.
    """
    if admin is None:
        admin = KafkaAdminClient(client_id="order-topic-initialiser", **settings.client_config())

    logger.info(
        "Creating topic %s on %s (partitions=%s, replication=%s)",
        settings.order_topic,
        settings.bootstrap_servers,
        settings.topic_partitions,
        settings.topic_replication,
    )

    try:
        admin.create_topics(new_topics=[build_order_topic(settings)], validate_only=False)
    except TopicAlreadyExistsError as exc:
        logger.warning("Topic %s already exists: %s", settings.order_topic, exc)
        return False
    except KafkaError as exc:
        logger.error("Topic creation failed: %s", exc)
        raise
    finally:
        admin.close()

    logger.info("Topic creation request sent. Use kafka-topics.sh --list to verify.")
    return True


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Create the order topic on the configured Kafka cluster. "
            "Use --check for a connectivity test or --dry-run-cli to print "
            "the equivalent kafka-topics.sh command."
        )
    )
    parser.add_argument("--check", action="store_true", help="Only check broker connectivity.")
    parser.add_argument(
        "--dry-run-cli",
        action="store_true",
        help="Do not create the topic; only print the kafka-topics.sh command.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> None:
    """
    Usage:
        python -m order_app.services.topic_admin --check
        python -m order_app.services.topic_admin
        python -m order_app.services.topic_admin --dry-run-cli
    """
    args = parse_args(argv)
    settings = get_kafka_settings()

    if args.check:
        bootstrap = get_bootstrap_servers(settings)
        if not check_connection(bootstrap, settings):
            raise SystemExit(f"Could not connect to Kafka at {bootstrap}. Is the broker running?")
        return

    if args.dry_run_cli:
        logger.info("Dry run; showing kafka-topics.sh command only:\n")
        print(cli_command(settings))
        return

    create_order_topic(settings)


if __name__ == "__main__":
    main()
