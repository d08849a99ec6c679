"""
Pathways Event Bus.

Topic-side entry points of the service:

- subscribe(): pull loop on the validation subscription, feeding every
  message to the workflow processor (long-running worker mode)
- publish_upload(): announces a freshly uploaded pathways file on the
  upload topic so the validation stage picks it up

Exports:
    PathwaysEventBus
"""

import threading
from typing import Any, Dict, Optional

from config import get_config
from core.schema.queue import build_upload_message
from interfaces.repository import IMessagePublisher, IMessageSubscriber
from services.pathways_workflow import PathwaysWorkflowProcessor, create_workflow_processor
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "PathwaysEventBus")


class PathwaysEventBus:
    """Groups the inbound subscription and the upload announcement channel."""

    def __init__(
        self,
        processor: PathwaysWorkflowProcessor,
        subscriber: IMessageSubscriber,
        upload_publisher: IMessagePublisher
    ):
        self.processor = processor
        self.subscriber = subscriber
        self.upload_publisher = upload_publisher

    @classmethod
    def from_config(cls, config=None) -> "PathwaysEventBus":
        from infrastructure.service_bus import (
            ServiceBusTopicPublisher,
            ServiceBusTopicSubscriber,
            create_service_bus_client,
        )

        config = config or get_config()
        client = create_service_bus_client(config.queues)
        return cls(
            processor=create_workflow_processor(config),
            subscriber=ServiceBusTopicSubscriber(
                config.queues.validation_topic,
                config.queues.validation_subscription,
                client=client,
                config=config.queues,
            ),
            upload_publisher=ServiceBusTopicPublisher(
                config.queues.upload_topic,
                client=client,
                config=config.queues,
            ),
        )

    def subscribe(self, stop_event: threading.Event) -> int:
        """Block until stop_event is set; returns the number of messages handled."""
        return self.subscriber.run(self.processor.process_message, stop_event)

    def publish_upload(
        self,
        request: Dict[str, Any],
        record_id: str,
        file_upload_path: str,
        user_id: str,
        meta_file_path: Optional[str] = None
    ) -> str:
        """
        Announce an uploaded file.

        Raises:
            ServiceBusError: Announcement could not be sent
        """
        message = build_upload_message(request, record_id, file_upload_path, user_id, meta_file_path)
        message_id = self.upload_publisher.publish(message)
        logger.info(f"Published upload of {record_id} for {request.get('tdei_project_group_id')}")
        return message_id
