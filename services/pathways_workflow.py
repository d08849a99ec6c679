# ============================================================================
# PATHWAYS WORKFLOW PROCESSOR
# ============================================================================
# STATUS: Service - Message-driven workflow stage
# PURPOSE: Authorize and validate inbound envelopes, publish one outcome each
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: PathwaysWorkflowProcessor, WorkflowResult, create_workflow_processor
# DEPENDENCIES: core.schema.queue, core.logic, interfaces.repository
# ============================================================================
"""
Pathways Workflow Processor.

One pass per inbound envelope, no state kept between envelopes:

    RECEIVED ─┬─ body unreadable ──────────────► DECODE_FAILED (no publish)
              ├─ response.success is false ────► FILTERED_OUT  (no publish)
              ├─ no required role ─────────────► UNAUTHORIZED  (publish false)
              ├─ record has field errors ──────► INVALID       (publish false)
              ├─ anything unexpected ──────────► FAILED        (publish false)
              └─ otherwise ────────────────────► ACCEPTED      (publish true)

Every outcome except DECODE_FAILED and FILTERED_OUT publishes exactly one
message, with `stage` rewritten to this service's tag and `response`
overwritten. The outcome is decided first and published once afterwards,
so no gate can publish twice or leave the envelope silent.

A publish failure (ServiceBusError) is the only error that escapes
process_message: the message is then abandoned and redelivered by the
transport.

The accepted record is NOT persisted on this path. Direct registration with
overlap checking lives in services.pathways_version_service.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from config import get_config
from config.defaults import PathwaysDefaults
from core.logic.permissions import has_permission
from core.logic.record_validation import format_field_errors, parse_and_validate
from core.models.enums import WorkflowOutcome
from core.models.pathways import FieldError, PathwayVersion
from core.schema.queue import QueueMessageContent, build_outcome_message, decode_envelope
from exceptions import MessageDecodeError, UnauthorizedError, ValidationError
from interfaces.repository import IMessagePublisher, IRoleResolver
from util_logger import LoggerFactory, ComponentType, new_correlation_id

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "PathwaysWorkflowProcessor")


@dataclass
class WorkflowResult:
    """What happened to one inbound message."""
    outcome: WorkflowOutcome
    tdei_record_id: Optional[str] = None
    response_message: Optional[str] = None
    published_message_id: Optional[str] = None
    errors: List[FieldError] = field(default_factory=list)

    @property
    def published(self) -> bool:
        return self.published_message_id is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'outcome': self.outcome.value,
            'tdei_record_id': self.tdei_record_id,
            'response_message': self.response_message,
            'published_message_id': self.published_message_id,
            'errors': [e.model_dump() for e in self.errors],
        }


class PathwaysWorkflowProcessor:
    """
    Workflow stage "gtfs-pathways-data-service".

    Channels are injected; nothing here touches Azure or the database.
    """

    def __init__(
        self,
        publisher: IMessagePublisher,
        role_resolver: IRoleResolver,
        polygon_validator: Optional[Callable[[Dict[str, Any]], bool]] = None,
        required_roles: Sequence[str] = PathwaysDefaults.REQUIRED_ROLES
    ):
        self.publisher = publisher
        self.role_resolver = role_resolver
        self.polygon_validator = polygon_validator
        self.required_roles = tuple(required_roles)

    def process_message(self, body: Any, correlation_id: Optional[str] = None) -> WorkflowResult:
        """
        Process one raw inbound message body.

        Args:
            body: bytes, str or dict as delivered by the transport
            correlation_id: Invocation id for log lines (generated if None)

        Raises:
            ServiceBusError: The outcome could not be published
        """
        correlation_id = correlation_id or new_correlation_id()

        try:
            _, content = decode_envelope(body)
        except MessageDecodeError as e:
            logger.error(
                f"[{correlation_id}] ❌ Could not decode workflow message: {e}",
                extra={'custom_dimensions': {'checkpoint': 'WORKFLOW_DECODE_FAILED', 'correlation_id': correlation_id}}
            )
            return WorkflowResult(outcome=WorkflowOutcome.DECODE_FAILED, response_message=str(e))

        record_id = content.tdei_record_id
        dims = {'correlation_id': correlation_id, 'tdei_record_id': record_id}
        logger.info(
            f"[{correlation_id}] Received message for {record_id} (stage={content.stage})",
            extra={'custom_dimensions': {**dims, 'checkpoint': 'WORKFLOW_RECEIVED'}}
        )

        if not content.response.success:
            logger.warning(
                f"[{correlation_id}] Received failed workflow request for {record_id}, skipping",
                extra={'custom_dimensions': {**dims, 'checkpoint': 'WORKFLOW_FILTERED_OUT'}}
            )
            return WorkflowResult(outcome=WorkflowOutcome.FILTERED_OUT, tdei_record_id=record_id)

        errors: List[FieldError] = []
        try:
            self._authorize(content)
            self._validate(content)
            outcome, success, text = WorkflowOutcome.ACCEPTED, True, PathwaysDefaults.SUCCESS_MESSAGE

        except UnauthorizedError as e:
            logger.error(f"[{correlation_id}] Unauthorized request for {record_id} (user={e.user_id})")
            outcome, success, text = WorkflowOutcome.UNAUTHORIZED, False, PathwaysDefaults.UNAUTHORIZED_MESSAGE

        except ValidationError as e:
            errors = e.errors
            text = PathwaysDefaults.VALIDATION_FAILED_PREFIX + format_field_errors(errors)
            logger.error(f"[{correlation_id}] {text}")
            outcome, success = WorkflowOutcome.INVALID, False

        except Exception as e:
            logger.error(
                f"[{correlation_id}] ❌ Error while processing {record_id}: {type(e).__name__}: {e}",
                exc_info=True,
                extra={'custom_dimensions': {**dims, 'checkpoint': 'WORKFLOW_FAILED'}}
            )
            detail = str(e) or type(e).__name__
            outcome, success, text = WorkflowOutcome.FAILED, False, PathwaysDefaults.INTERNAL_ERROR_PREFIX + detail

        message_id = self.publisher.publish(build_outcome_message(content, success, text))
        logger.info(
            f"[{correlation_id}] Published {outcome.value} outcome for {record_id} (message {message_id})",
            extra={'custom_dimensions': {**dims, 'checkpoint': 'WORKFLOW_PUBLISHED', 'outcome': outcome.value}}
        )

        return WorkflowResult(
            outcome=outcome,
            tdei_record_id=record_id,
            response_message=text,
            published_message_id=message_id,
            errors=errors,
        )

    def _authorize(self, content: QueueMessageContent) -> None:
        project_group_id = content.org_id
        if not project_group_id and isinstance(content.request, dict):
            project_group_id = content.request.get('tdei_project_group_id')

        roles = self.role_resolver.resolve_roles(content.user_id, project_group_id)
        if not has_permission(roles, self.required_roles):
            raise UnauthorizedError(content.user_id, self.required_roles)

    def _validate(self, content: QueueMessageContent) -> PathwayVersion:
        # Identity and file location come from the envelope, never the payload
        overrides = {
            'tdei_record_id': content.tdei_record_id,
            'uploaded_by': content.user_id,
            'file_upload_path': content.meta.file_upload_path,
        }
        record, errors = parse_and_validate(content.request, overrides, self.polygon_validator)
        if errors:
            raise ValidationError(errors)
        return record


def create_workflow_processor(config=None) -> PathwaysWorkflowProcessor:
    """Processor wired to the configured data service topic and claims service."""
    from infrastructure.auth import get_role_resolver
    from infrastructure.service_bus import ServiceBusTopicPublisher

    config = config or get_config()
    publisher = ServiceBusTopicPublisher(config.queues.data_service_topic, config=config.queues)
    return PathwaysWorkflowProcessor(
        publisher=publisher,
        role_resolver=get_role_resolver(config.auth, debug_mode=config.debug_mode),
    )


__all__ = [
    'PathwaysWorkflowProcessor',
    'WorkflowResult',
    'create_workflow_processor',
]
