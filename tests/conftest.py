"""
conftest.py - Shared fixtures for the consumer tests.

No broker is needed: the Kafka clients are replaced by the fakes below.
"""
import time
from dataclasses import dataclass
from typing import Any, Optional

import pytest

from order_app.models import Order, OrderEvent

KAFKA_ENV_VARS = [
    "KAFKA_PROFILE",
    "KAFKA_BOOTSTRAP_SERVERS",
    "KAFKA_SECURITY_PROTOCOL",
    "KAFKA_SASL_MECHANISM",
    "KAFKA_SASL_USERNAME",
    "KAFKA_SASL_PASSWORD",
    "ORDER_TOPIC_NAME",
    "EMAIL_CONSUMER_GROUP",
    "STOCK_CONSUMER_GROUP",
    "ORDER_TOPIC_PARTITIONS",
    "ORDER_TOPIC_REPLICATION",
]


@pytest.fixture(autouse=True)
def clean_kafka_env(monkeypatch):
    """Every test starts from the default local profile."""
    for name in KAFKA_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def make_order_event():
    """Factory fixture - creates OrderEvents with sensible defaults."""
    def _make_order_event(
        order_id: str = "1",
        name: str = "X",
        qty: int = 2,
        price: float = 10.0,
        status: str = "PENDING",
        message: str = "order status is in pending state",
    ) -> OrderEvent:
        return OrderEvent(
            message=message,
            status=status,
            order=Order(order_id=order_id, name=name, qty=qty, price=price),
        )
    return _make_order_event


@pytest.fixture
def make_payload(make_order_event):
    """Factory fixture - the JSON dict a consumer receives for an event."""
    def _make_payload(**kwargs) -> dict:
        return make_order_event(**kwargs).model_dump(mode="json")
    return _make_payload


@dataclass
class FakeRecord:
    value: Any
    key: Optional[str] = None
    topic: str = "order_topics"
    partition: int = 0
    offset: int = 0


class FakeConsumer:
    """
    Stands in for kafka.KafkaConsumer in the runner loop.

    Each poll() hands out the next batch; once drained it either sets
    `stop_event` (stop_when_drained) or keeps returning nothing.
    """

    def __init__(self, batches, stop_event=None, stop_when_drained=True):
        self.batches = [list(b) for b in batches]
        self.stop_event = stop_event
        self.stop_when_drained = stop_when_drained
        self.polls = 0
        self.closed = False
        self.close_calls = []
        self.topics = None
        self.kwargs = None

    def poll(self, timeout_ms=None):
        self.polls += 1
        if self.batches:
            records = self.batches.pop(0)
            return {(records[0].topic if records else "order_topics", 0): records}
        if self.stop_when_drained and self.stop_event is not None:
            self.stop_event.set()
        else:
            time.sleep(0.01)
        return {}

    def close(self, autocommit=True):
        self.closed = True
        self.close_calls.append(autocommit)

    def factory(self, topics, **kwargs):
        self.topics = list(topics)
        self.kwargs = kwargs
        return self


@pytest.fixture
def make_record(make_payload):
    """Factory fixture - a consumed record carrying an OrderEvent payload."""
    def _make_record(offset: int = 0, value=None, **kwargs) -> FakeRecord:
        if value is None:
            value = make_payload(**kwargs)
        return FakeRecord(value=value, offset=offset)
    return _make_record


@pytest.fixture
def make_fake_consumer():
    """Factory fixture - a FakeConsumer serving the given record batches."""
    def _make_fake_consumer(batches, stop_event=None, stop_when_drained=True) -> FakeConsumer:
        return FakeConsumer(batches, stop_event=stop_event, stop_when_drained=stop_when_drained)
    return _make_fake_consumer
