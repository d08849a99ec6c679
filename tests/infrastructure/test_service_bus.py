"""
Service Bus topic adapters with a mocked ServiceBusClient.
"""

import json
import threading
from unittest.mock import MagicMock, patch

import pytest
from azure.servicebus.exceptions import ServiceBusError as AzureServiceBusError

from config import QueueConfig
from core.schema.queue import QueueMessage
from exceptions import ConfigurationError, ServiceBusError
from infrastructure.service_bus import (
    ServiceBusTopicPublisher,
    ServiceBusTopicSubscriber,
    create_service_bus_client,
)
from tests.factories.model_factories import make_envelope


@pytest.fixture
def queue_config():
    return QueueConfig(
        connection_string="Endpoint=sb://test.servicebus.windows.net/;SharedAccessKeyName=k;SharedAccessKey=v",
        retry_count=3,
        retry_base_delay_seconds=0,
        max_wait_time_seconds=1,
    )


def make_message():
    return QueueMessage(message_type="test", data=make_envelope())


class TestCreateClient:
    def test_connection_string_preferred(self, queue_config):
        with patch("infrastructure.service_bus.ServiceBusClient") as client_cls:
            create_service_bus_client(queue_config.model_copy(update={"namespace": "ns.servicebus.windows.net"}))
        client_cls.from_connection_string.assert_called_once_with(queue_config.connection_string)

    def test_managed_identity(self):
        config = QueueConfig(connection_string=None, namespace="ns.servicebus.windows.net")
        with patch("infrastructure.service_bus.ServiceBusClient") as client_cls, \
                patch("infrastructure.service_bus.DefaultAzureCredential") as credential:
            create_service_bus_client(config)
        client_cls.assert_called_once_with(
            fully_qualified_namespace="ns.servicebus.windows.net",
            credential=credential.return_value,
        )

    def test_unconfigured(self):
        with pytest.raises(ConfigurationError):
            create_service_bus_client(QueueConfig(connection_string=None, namespace=None))


class TestPublisher:
    def test_sends_camel_case_json(self, queue_config):
        client = MagicMock()
        publisher = ServiceBusTopicPublisher("gtfs-pathways-data", client=client, config=queue_config)
        message = make_message()

        message_id = publisher.publish(message)

        client.get_topic_sender.assert_called_once_with(topic_name="gtfs-pathways-data")
        sent = client.get_topic_sender.return_value.send_messages.call_args.args[0]
        body = json.loads(str(sent))
        assert message_id == message.message_id == sent.message_id
        assert body["data"]["tdeiRecordId"] == message.data["tdeiRecordId"]
        assert sent.application_properties["tdei_record_id"] == message.data["tdeiRecordId"]

    def test_sender_reused(self, queue_config):
        client = MagicMock()
        publisher = ServiceBusTopicPublisher("t", client=client, config=queue_config)
        publisher.publish(make_message())
        publisher.publish(make_message())
        assert client.get_topic_sender.call_count == 1

    def test_retries_then_succeeds(self, queue_config):
        client = MagicMock()
        sender = client.get_topic_sender.return_value
        sender.send_messages.side_effect = [AzureServiceBusError("busy"), None]
        publisher = ServiceBusTopicPublisher("t", client=client, config=queue_config)

        publisher.publish(make_message())

        assert sender.send_messages.call_count == 2
        # sender dropped after the failure and recreated
        assert client.get_topic_sender.call_count == 2

    def test_exhausted_retries_raise(self, queue_config):
        client = MagicMock()
        client.get_topic_sender.return_value.send_messages.side_effect = AzureServiceBusError("down")
        publisher = ServiceBusTopicPublisher("t", client=client, config=queue_config)

        with pytest.raises(ServiceBusError):
            publisher.publish(make_message())
        assert client.get_topic_sender.return_value.send_messages.call_count == 3

    def test_backoff_is_exponential(self, queue_config):
        client = MagicMock()
        client.get_topic_sender.return_value.send_messages.side_effect = AzureServiceBusError("down")
        config = queue_config.model_copy(update={"retry_base_delay_seconds": 2})
        publisher = ServiceBusTopicPublisher("t", client=client, config=config)

        with patch("infrastructure.service_bus.time.sleep") as sleep, pytest.raises(ServiceBusError):
            publisher.publish(make_message())

        assert [c.args[0] for c in sleep.call_args_list] == [2, 4]


class FakeReceivedMessage:
    def __init__(self, body):
        self.body = body
        self.message_id = "m"
        self.delivery_count = 1

    def __str__(self):
        return self.body


class TestSubscriber:
    def _subscriber(self, queue_config, batches, stop_event):
        client = MagicMock()
        receiver = client.get_subscription_receiver.return_value.__enter__.return_value
        remaining = list(batches)

        def receive_messages(**kwargs):
            if not remaining:
                stop_event.set()
                return []
            batch = remaining.pop(0)
            if isinstance(batch, Exception):
                raise batch
            return batch

        receiver.receive_messages.side_effect = receive_messages
        subscriber = ServiceBusTopicSubscriber("topic", "sub", client=client, config=queue_config)
        return subscriber, client, receiver

    def test_completes_handled_messages(self, queue_config):
        stop = threading.Event()
        msgs = [FakeReceivedMessage("a"), FakeReceivedMessage("b")]
        subscriber, client, receiver = self._subscriber(queue_config, [msgs], stop)
        seen = []

        count = subscriber.run(seen.append, stop)

        assert count == 2
        assert seen == ["a", "b"]
        assert receiver.complete_message.call_count == 2
        receiver.abandon_message.assert_not_called()
        client.get_subscription_receiver.assert_called_once_with(topic_name="topic", subscription_name="sub")

    def test_handler_error_abandons_and_continues(self, queue_config):
        stop = threading.Event()
        bad, good = FakeReceivedMessage("bad"), FakeReceivedMessage("good")
        subscriber, _, receiver = self._subscriber(queue_config, [[bad], [good]], stop)

        def handler(body):
            if body == "bad":
                raise ServiceBusError("publish failed")

        assert subscriber.run(handler, stop) == 2
        receiver.abandon_message.assert_called_once_with(bad)
        receiver.complete_message.assert_called_once_with(good)

    def test_receive_error_does_not_stop_loop(self, queue_config):
        stop = threading.Event()
        msg = FakeReceivedMessage("x")
        subscriber, _, receiver = self._subscriber(queue_config, [AzureServiceBusError("link"), [msg]], stop)

        assert subscriber.run(lambda body: None, stop) == 1
        receiver.complete_message.assert_called_once_with(msg)

    def test_settle_error_is_logged_not_raised(self, queue_config):
        stop = threading.Event()
        msg = FakeReceivedMessage("x")
        subscriber, _, receiver = self._subscriber(queue_config, [[msg]], stop)
        receiver.complete_message.side_effect = AzureServiceBusError("lock lost")

        assert subscriber.run(lambda body: None, stop) == 1

    def test_stop_event_already_set(self, queue_config):
        stop = threading.Event()
        stop.set()
        subscriber, _, receiver = self._subscriber(queue_config, [], stop)

        assert subscriber.run(lambda body: None, stop) == 0
        receiver.receive_messages.assert_not_called()
