import copy
import logging

import pytest

from order_app.config import get_kafka_settings
from order_app.services import email_consumer, stock_consumer
from order_app.subscriptions import SubscriptionRegistry, dispatch


def _messages(caplog, logger_name):
    return [r.getMessage() for r in caplog.records if r.name == logger_name]


class TestEmailConsumer:
    def test_logs_exactly_one_record(self, caplog, make_order_event):
        caplog.set_level(logging.INFO, logger="order_app")
        event = make_order_event(order_id="1", name="X", qty=2)

        email_consumer.consume_order(event)

        messages = _messages(caplog, email_consumer.logger.name)
        assert len(messages) == 1
        assert str(event) in messages[0]
        assert "1" in messages[0] and "X" in messages[0]
        assert messages[0].startswith("Order Event received in email service => ")

    def test_returns_nothing(self, make_order_event):
        assert email_consumer.consume_order(make_order_event()) is None

    def test_logging_error_propagates(self, monkeypatch, make_order_event):
        def boom(*args, **kwargs):
            raise RuntimeError("log sink down")

        monkeypatch.setattr(email_consumer.logger, "info", boom)
        with pytest.raises(RuntimeError, match="log sink down"):
            email_consumer.consume_order(make_order_event())

    def test_register_uses_email_group(self):
        registry = SubscriptionRegistry()
        subscription = email_consumer.register(registry, get_kafka_settings())
        assert subscription.name == "email"
        assert subscription.topic == "order_topics"
        assert subscription.group_id == "email"
        assert subscription.handler is email_consumer.consume_order


class TestStockConsumer:
    def test_logs_exactly_two_records(self, caplog, make_order_event):
        caplog.set_level(logging.INFO, logger="order_app")
        event = make_order_event(order_id="1", name="X", qty=2)

        stock_consumer.consume_order(event)

        messages = _messages(caplog, stock_consumer.logger.name)
        assert len(messages) == 2
        for message in messages:
            assert str(event) in message
            assert "1" in message and "X" in message

    def test_one_structured_and_one_formatted_record(self, caplog, make_order_event):
        caplog.set_level(logging.INFO, logger="order_app")
        event = make_order_event()

        stock_consumer.consume_order(event)

        records = [r for r in caplog.records if r.name == stock_consumer.logger.name]
        assert records[0].args == (event,)
        assert not records[1].args

    def test_logging_error_propagates(self, monkeypatch, make_order_event):
        def boom(*args, **kwargs):
            raise RuntimeError("log sink down")

        monkeypatch.setattr(stock_consumer.logger, "info", boom)
        with pytest.raises(RuntimeError):
            stock_consumer.consume_order(make_order_event())

    def test_register_uses_stock_group(self, monkeypatch):
        monkeypatch.setenv("STOCK_CONSUMER_GROUP", "stock-eu")
        registry = SubscriptionRegistry()
        subscription = stock_consumer.register(registry, get_kafka_settings())
        assert subscription.name == "stock"
        assert subscription.group_id == "stock-eu"


class TestDeliveredPayload:
    """Both services receiving the same record off the wire."""

    def test_same_payload_to_both_services(self, caplog, make_payload):
        caplog.set_level(logging.INFO, logger="order_app")
        settings = get_kafka_settings()
        registry = SubscriptionRegistry()
        email_consumer.register(registry, settings)
        stock_consumer.register(registry, settings)
        payload = make_payload(order_id="1", name="X", qty=2)
        before = copy.deepcopy(payload)

        for subscription in registry.for_topic(settings.order_topic):
            dispatch(subscription, payload)

        assert payload == before
        assert len(_messages(caplog, email_consumer.logger.name)) == 1
        assert len(_messages(caplog, stock_consumer.logger.name)) == 2
        for message in caplog.messages:
            if "received in" in message:
                assert "'1'" in message and "'X'" in message
