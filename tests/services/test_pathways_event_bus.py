"""
Event bus: upload announcements and subscription wiring.
"""

import threading
from unittest.mock import MagicMock

import pytest

from config.defaults import PathwaysDefaults
from exceptions import ServiceBusError
from infrastructure.auth import StaticRoleResolver
from interfaces.repository import IMessageSubscriber
from services.pathways_event_bus import PathwaysEventBus
from services.pathways_workflow import PathwaysWorkflowProcessor
from tests.factories.fakes import RecordingPublisher
from tests.factories.model_factories import make_message_body, make_pathways_request


class ListSubscriber(IMessageSubscriber):
    """Feeds a fixed list of bodies to the handler, settling like the real loop."""

    def __init__(self, bodies):
        self.bodies = list(bodies)
        self.completed = []
        self.abandoned = []

    def run(self, handler, stop_event: threading.Event) -> int:
        for body in self.bodies:
            if stop_event.is_set():
                break
            try:
                handler(body)
                self.completed.append(body)
            except Exception:
                self.abandoned.append(body)
        return len(self.bodies)


def make_bus(bodies=(), outcome_publisher=None, upload_publisher=None):
    processor = PathwaysWorkflowProcessor(
        publisher=outcome_publisher or RecordingPublisher(),
        role_resolver=StaticRoleResolver({}),
        polygon_validator=lambda fc: True,
    )
    return PathwaysEventBus(
        processor=processor,
        subscriber=ListSubscriber(bodies),
        upload_publisher=upload_publisher or RecordingPublisher(),
    )


class TestPublishUpload:
    def test_announces_upload(self):
        uploads = RecordingPublisher()
        bus = make_bus(upload_publisher=uploads)
        request = make_pathways_request(project_group_id="pg-7")

        message_id = bus.publish_upload(request, "rec-7", "https://blob/f.zip", "user-7", "https://blob/m.json")

        assert message_id == uploads.messages[0].message_id
        data = uploads.envelopes[0]
        assert data["stage"] == PathwaysDefaults.UPLOAD_STAGE
        assert data["orgId"] == "pg-7"
        assert data["response"]["message"] == "File uploaded for the organization: pg-7 with record id rec-7"

    def test_publish_error_propagates(self):
        bus = make_bus(upload_publisher=RecordingPublisher(fail_with=ServiceBusError("down")))
        with pytest.raises(ServiceBusError):
            bus.publish_upload(make_pathways_request(), "rec", "path", "user")


class TestSubscribe:
    def test_every_message_goes_through_processor(self):
        outcomes = RecordingPublisher()
        bodies = [make_message_body(), "junk", make_message_body()]
        bus = make_bus(bodies, outcome_publisher=outcomes)

        handled = bus.subscribe(threading.Event())

        assert handled == 3
        assert bus.subscriber.completed == bodies
        # two decodable envelopes, both unauthorized (no roles configured)
        assert len(outcomes.messages) == 2

    def test_publish_failure_abandons_message(self):
        bus = make_bus([make_message_body()], outcome_publisher=RecordingPublisher(fail_with=ServiceBusError("x")))

        bus.subscribe(threading.Event())

        assert len(bus.subscriber.abandoned) == 1

    def test_from_config_wires_topics(self, monkeypatch):
        import infrastructure.service_bus as service_bus

        client = MagicMock()
        monkeypatch.setattr(service_bus, "create_service_bus_client", lambda config=None: client)
        monkeypatch.setattr(service_bus.ServiceBusTopicPublisher, "__init__", _fake_publisher_init)

        bus = PathwaysEventBus.from_config()

        assert bus.subscriber.topic_name == "gtfs-pathways-validation"
        assert bus.subscriber.subscription_name == "gtfs-pathways-data-service"
        assert bus.upload_publisher.topic_name == "gtfs-pathways-upload"
        assert bus.processor.publisher.topic_name == "gtfs-pathways-data"


def _fake_publisher_init(self, topic_name, client=None, config=None):
    self.topic_name = topic_name
    self.client = client
