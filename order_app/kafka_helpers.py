# order_app/kafka_helpers.py

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterable, Optional

from kafka import KafkaConsumer, KafkaProducer
from kafka.errors import NoBrokersAvailable

from order_app.config import KafkaSettings, get_kafka_settings

logger = logging.getLogger(__name__)


def get_bootstrap_servers(settings: Optional[KafkaSettings] = None) -> str:
    """
    Resolve the Kafka bootstrap servers for the active profile.

    Environment variables (see order_app.config):
        KAFKA_BOOTSTRAP_SERVERS:   Comma-separated host:port list (optional).
        KAFKA_PROFILE:             local, docker or cloud.
    """
    settings = settings or get_kafka_settings()
    logger.info(
        "Using KAFKA_PROFILE=%s, bootstrap servers=%s",
        settings.profile,
        settings.bootstrap_servers,
    )
    return settings.bootstrap_servers


def _client_config(
    bootstrap_servers: Optional[str], settings: Optional[KafkaSettings] = None
) -> Dict[str, Any]:
    settings = settings or get_kafka_settings()
    config = settings.client_config()
    if bootstrap_servers:
        config["bootstrap_servers"] = bootstrap_servers
    return config


def _encode_key(k: Any) -> Optional[bytes]:
    if k is None:
        return None
    return k if isinstance(k, bytes) else str(k).encode("utf-8")


def create_json_producer(
    bootstrap_servers: Optional[str] = None,
    *,
    settings: Optional[KafkaSettings] = None,
) -> KafkaProducer:
    """
    Create a KafkaProducer that sends JSON values and string keys.

    `settings` supplies SASL options; it is loaded from the environment when omitted.
    """
    config = _client_config(bootstrap_servers, settings)
    return KafkaProducer(
        key_serializer=_encode_key,
        value_serializer=lambda v: json.dumps(v).encode("utf-8"),
        **config,
    )


def create_json_consumer(
    topics: Iterable[str],
    *,
    group_id: Optional[str] = None,
    bootstrap_servers: Optional[str] = None,
    auto_offset_reset: str = "earliest",
    enable_auto_commit: bool = True,
    extra_config: Optional[Dict[str, Any]] = None,
    settings: Optional[KafkaSettings] = None,
) -> KafkaConsumer:
    """
    Create a KafkaConsumer that expects JSON values and string keys.
    """
    config = _client_config(bootstrap_servers, settings)
    config.update(
        {
            "group_id": group_id,
            "auto_offset_reset": auto_offset_reset,
            "enable_auto_commit": enable_auto_commit,
            "key_deserializer": lambda b: None if b is None else b.decode("utf-8"),
            "value_deserializer": lambda b: json.loads(b.decode("utf-8")),
        }
    )

    if extra_config:
        config.update(extra_config)

    consumer = KafkaConsumer(**config)
    consumer.subscribe(list(topics))
    return consumer


def check_connection(
    bootstrap_servers: Optional[str] = None, settings: Optional[KafkaSettings] = None
) -> bool:
    """
    Try to connect to Kafka by listing topics once.
    """
    config = _client_config(bootstrap_servers, settings)
    bootstrap = config["bootstrap_servers"]
    try:
        consumer = KafkaConsumer(
            request_timeout_ms=3000,
            metadata_max_age_ms=3000,
            **config,
        )
    except NoBrokersAvailable as exc:
        logger.error("No Kafka broker available at %s (%s)", bootstrap, exc)
        return False

    try:
        topics = consumer.topics()
    finally:
        consumer.close()

    logger.info("Connected to Kafka broker(s) %s; %d topics visible.", bootstrap, len(topics))
    return True


def format_record(msg) -> str:
    """
    Render a kafka-python ConsumerRecord on one line.

    Works for JSON payloads; values that are not dicts are rendered as-is.
    """
    key = getattr(msg, "key", None)
    topic = getattr(msg, "topic", "?")
    partition = getattr(msg, "partition", "?")
    offset = getattr(msg, "offset", "?")
    value = getattr(msg, "value", None)

    if isinstance(value, dict):
        value_str = json.dumps(value, ensure_ascii=False)
    else:
        value_str = repr(value)

    return f"topic={topic} partition={partition} offset={offset} key={key!r} value={value_str}"
