# ============================================================================
# SERVICE BUS TOPIC CHANNELS
# ============================================================================
# STATUS: Infrastructure - Azure Service Bus topic publish/subscribe
# PURPOSE: Outbound publisher and inbound pull-loop subscriber for the workflow
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================
"""
Service Bus Topic Channels

Azure Service Bus adapters for the pathways workflow:

- ServiceBusTopicPublisher: sends one pydantic message to a topic, with
  bounded retries and exponential backoff. Exhausted retries raise
  exceptions.ServiceBusError so the transport can redeliver the inbound
  message.
- ServiceBusTopicSubscriber: blocking receive loop on a topic
  subscription. Each message is handed to the handler once, completed when
  the handler returns and abandoned when it raises. Nothing a handler does
  stops the loop; only the stop event does.

Authentication:
    - ServiceBusConnection (connection string) for local development
    - SERVICE_BUS_NAMESPACE + DefaultAzureCredential (managed identity)
"""

from datetime import timedelta
from typing import Any, Callable, Optional
import threading
import time

from azure.servicebus import ServiceBusClient, ServiceBusMessage
from azure.servicebus.exceptions import ServiceBusError as AzureServiceBusError
from azure.identity import DefaultAzureCredential
from pydantic import BaseModel

from config import QueueConfig, get_config
from config.defaults import QueueDefaults
from exceptions import ConfigurationError, ServiceBusError
from interfaces.repository import IMessagePublisher, IMessageSubscriber
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.ADAPTER, "ServiceBus")


def create_service_bus_client(config: Optional[QueueConfig] = None) -> ServiceBusClient:
    """
    Build a ServiceBusClient from configuration.

    Connection string wins over managed identity when both are set.

    Raises:
        ConfigurationError: Neither auth mode configured
    """
    config = config or get_config().queues

    if config.connection_string:
        logger.info("🔑 Using connection string authentication")
        return ServiceBusClient.from_connection_string(config.connection_string)

    if config.namespace:
        logger.info(f"🔐 Using DefaultAzureCredential for namespace: {config.namespace}")
        return ServiceBusClient(
            fully_qualified_namespace=config.namespace,
            credential=DefaultAzureCredential()
        )

    raise ConfigurationError(
        "Service Bus not configured: set ServiceBusConnection or SERVICE_BUS_NAMESPACE"
    )


class ServiceBusTopicPublisher(IMessagePublisher):
    """
    Publishes pydantic messages to one topic.

    The sender is created lazily and reused; Service Bus senders are safe
    to keep open between sends.
    """

    def __init__(
        self,
        topic_name: str,
        client: Optional[ServiceBusClient] = None,
        config: Optional[QueueConfig] = None
    ):
        self.config = config or get_config().queues
        self.topic_name = topic_name
        self.client = client or create_service_bus_client(self.config)
        self.max_retries = self.config.retry_count
        self.retry_delay = self.config.retry_base_delay_seconds
        self._sender = None
        self._lock = threading.Lock()

    def _get_sender(self):
        with self._lock:
            if self._sender is None:
                logger.debug(f"🚌 Creating sender for topic: {self.topic_name}")
                self._sender = self.client.get_topic_sender(topic_name=self.topic_name)
            return self._sender

    def _to_service_bus_message(self, message: BaseModel) -> ServiceBusMessage:
        properties = {}
        data = getattr(message, 'data', None)
        if isinstance(data, dict) and data.get('tdeiRecordId'):
            properties['tdei_record_id'] = data['tdeiRecordId']

        return ServiceBusMessage(
            body=message.model_dump_json(by_alias=True),
            content_type="application/json",
            message_id=getattr(message, 'message_id', None),
            time_to_live=timedelta(hours=QueueDefaults.MESSAGE_TTL_HOURS),
            application_properties=properties or None
        )

    def publish(self, message: BaseModel) -> str:
        """
        Send one message with retries.

        Raises:
            ServiceBusError: All attempts failed
        """
        sb_message = self._to_service_bus_message(message)

        for attempt in range(self.max_retries):
            try:
                self._get_sender().send_messages(sb_message)
                message_id = sb_message.message_id
                logger.info(f"✅ Message sent to topic {self.topic_name}. ID: {message_id}")
                return message_id

            except AzureServiceBusError as e:
                logger.warning(
                    f"⚠️ Send attempt {attempt + 1}/{self.max_retries} to {self.topic_name} failed: "
                    f"{type(e).__name__}: {e}"
                )
                # Drop the sender; the next attempt reconnects
                with self._lock:
                    self._sender = None

                if attempt == self.max_retries - 1:
                    logger.error(f"❌ Failed to send message after {self.max_retries} attempts")
                    raise ServiceBusError(f"Failed to send message to {self.topic_name}: {e}") from e

                wait_time = self.retry_delay * (2 ** attempt)
                logger.debug(f"⏳ Waiting {wait_time} seconds before retry...")
                time.sleep(wait_time)

        # max_retries >= 1 is enforced by QueueConfig
        raise ServiceBusError(f"No send attempted for {self.topic_name}")

    def close(self) -> None:
        with self._lock:
            if self._sender is not None:
                self._sender.close()
                self._sender = None


class ServiceBusTopicSubscriber(IMessageSubscriber):
    """
    Pull loop on one topic subscription.
    """

    def __init__(
        self,
        topic_name: str,
        subscription_name: str,
        client: Optional[ServiceBusClient] = None,
        config: Optional[QueueConfig] = None,
        max_message_count: int = 10
    ):
        self.config = config or get_config().queues
        self.topic_name = topic_name
        self.subscription_name = subscription_name
        self.client = client or create_service_bus_client(self.config)
        self.max_wait_time = self.config.max_wait_time_seconds
        self.max_message_count = max_message_count

    def _settle(self, receiver, msg, handler_failed: bool) -> None:
        try:
            if handler_failed:
                receiver.abandon_message(msg)
            else:
                receiver.complete_message(msg)
        except AzureServiceBusError as e:
            # Lock lost or link detached; the broker redelivers after lock expiry
            logger.warning(f"⚠️ Could not settle message {msg.message_id}: {e}")

    def run(self, handler: Callable[[str], Any], stop_event: threading.Event) -> int:
        """
        Receive and dispatch messages until stop_event is set.

        Returns:
            Number of messages dispatched to the handler
        """
        dispatched = 0
        consecutive_errors = 0
        logger.info(f"📥 Subscribing to {self.topic_name}/{self.subscription_name}")

        with self.client.get_subscription_receiver(
            topic_name=self.topic_name,
            subscription_name=self.subscription_name,
        ) as receiver:
            while not stop_event.is_set():
                try:
                    messages = receiver.receive_messages(
                        max_message_count=self.max_message_count,
                        max_wait_time=self.max_wait_time
                    )
                    consecutive_errors = 0
                except AzureServiceBusError as e:
                    consecutive_errors += 1
                    delay = min(
                        self.config.retry_base_delay_seconds * (2 ** (consecutive_errors - 1)),
                        60
                    )
                    logger.error(f"❌ Receive failed on {self.subscription_name}: {e} (retry in {delay}s)")
                    stop_event.wait(delay)
                    continue

                for msg in messages:
                    dispatched += 1
                    handler_failed = False
                    try:
                        handler(str(msg))
                    except Exception as e:
                        handler_failed = True
                        logger.error(
                            f"❌ Handler failed for message {msg.message_id} "
                            f"(delivery {msg.delivery_count}): {type(e).__name__}: {e}"
                        )
                    self._settle(receiver, msg, handler_failed)

        logger.info(f"🛑 Subscriber stopped after {dispatched} messages")
        return dispatched


__all__ = [
    'create_service_bus_client',
    'ServiceBusTopicPublisher',
    'ServiceBusTopicSubscriber',
]
