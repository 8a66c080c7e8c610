from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class KafkaSettings:
    profile: str
    bootstrap_servers: str
    security_protocol: str | None = None
    sasl_mechanism: str | None = None
    sasl_username: str | None = None
    sasl_password: str | None = None

    order_topic: str = "order_topics"
    email_group_id: str = "email"
    stock_group_id: str = "stock"
    topic_partitions: int = 1
    topic_replication: int = 1

    def client_config(self) -> Dict[str, Any]:
        """
        Keyword arguments shared by every kafka-python client we build.

        SASL settings are only included when the profile provides them.
        """
        config: Dict[str, Any] = {"bootstrap_servers": self.bootstrap_servers}
        if self.security_protocol:
            config["security_protocol"] = self.security_protocol
        if self.sasl_mechanism:
            config["sasl_mechanism"] = self.sasl_mechanism
        if self.sasl_username is not None:
            config["sasl_plain_username"] = self.sasl_username
        if self.sasl_password is not None:
            config["sasl_plain_password"] = self.sasl_password
        return config


def _load_env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None:
        return default
    return value


def _load_int(name: str, default: int) -> int:
    raw = _load_env(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _topic_fields() -> Dict[str, Any]:
    return {
        "order_topic": _load_env("ORDER_TOPIC_NAME", "order_topics") or "order_topics",
        "email_group_id": _load_env("EMAIL_CONSUMER_GROUP", "email") or "email",
        "stock_group_id": _load_env("STOCK_CONSUMER_GROUP", "stock") or "stock",
        "topic_partitions": _load_int("ORDER_TOPIC_PARTITIONS", 1),
        "topic_replication": _load_int("ORDER_TOPIC_REPLICATION", 1),
    }


def get_kafka_settings() -> KafkaSettings:
    profile = _load_env("KAFKA_PROFILE", "local") or "local"
    topics = _topic_fields()

    if profile == "docker":
        bootstrap = _load_env("KAFKA_BOOTSTRAP_SERVERS", "kafka:9092") or "kafka:9092"
        return KafkaSettings(profile=profile, bootstrap_servers=bootstrap, **topics)

    if profile == "cloud":
        bootstrap = _load_env("KAFKA_BOOTSTRAP_SERVERS", "")
        if not bootstrap:
            raise RuntimeError("KAFKA_BOOTSTRAP_SERVERS must be set for cloud profile")

        return KafkaSettings(
            profile=profile,
            bootstrap_servers=bootstrap,
            security_protocol=_load_env("KAFKA_SECURITY_PROTOCOL", "SASL_SSL"),
            sasl_mechanism=_load_env("KAFKA_SASL_MECHANISM", "PLAIN"),
            sasl_username=_load_env("KAFKA_SASL_USERNAME"),
            sasl_password=_load_env("KAFKA_SASL_PASSWORD"),
            **topics,
        )

    # local and any unknown profile
    bootstrap = _load_env("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092") or "localhost:9092"
    return KafkaSettings(profile=profile, bootstrap_servers=bootstrap, **topics)
