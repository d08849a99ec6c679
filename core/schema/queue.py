"""
Queue Message Schemas - Transport Boundary.

Wire formats for Service Bus topic messages of the pathways workflow.

Architecture:
    QueueMessage (wrapper: messageId, messageType, publishedDate, data)
        └── data: QueueMessageContent (the workflow envelope)

The envelope is camelCase JSON on the wire; Python attributes are snake_case
with aliases. Fields this service does not know about are kept
(extra='allow') and written back unchanged on republish.

Exports:
    QueueMessage: Outer wrapper for topic messages
    QueueMessageContent: Workflow envelope
    WorkflowResponse: Outcome slot of the envelope
    UploadMeta: File location pointers
    decode_envelope: Raw body -> (QueueMessage, QueueMessageContent)
    build_outcome_message: Envelope -> outbound wrapper for this stage
    build_upload_message: Upload announcement wrapper
"""

import json
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError as PydanticValidationError,
    field_validator,
)

from config.defaults import PathwaysDefaults
from exceptions import MessageDecodeError


_DATETIME = TypeAdapter(datetime)


# ============================================================================
# ENVELOPE MODELS
# ============================================================================

class UploadMeta(BaseModel):
    """Side-channel file location pointers."""
    model_config = ConfigDict(extra='allow')

    file_upload_path: Optional[str] = None
    meta_file_path: Optional[str] = None


class WorkflowResponse(BaseModel):
    """Outcome slot. Overwritten once by each stage that processes the envelope."""
    model_config = ConfigDict(extra='allow')

    success: bool
    message: str = ""


class QueueMessageContent(BaseModel):
    """
    Workflow envelope carried through the pathways pipeline.

    tdei_record_id is the correlation id for the whole job; it is assigned
    upstream and never regenerated. request is opaque here and decoded
    explicitly by core.logic.record_validation.
    """

    model_config = ConfigDict(populate_by_name=True, extra='allow')

    stage: Optional[str] = Field(default=None, description="Phase that last wrote the envelope")
    tdei_record_id: str = Field(..., alias='tdeiRecordId', min_length=1)
    user_id: Optional[str] = Field(default=None, alias='userId')
    org_id: Optional[str] = Field(default=None, alias='orgId')
    request: Any = Field(default=None, description="Candidate dataset version metadata")
    meta: UploadMeta = Field(default_factory=UploadMeta)
    response: WorkflowResponse

    @field_validator('meta', mode='before')
    @classmethod
    def coerce_null_meta(cls, v):
        return UploadMeta() if v is None else v

    def with_outcome(self, stage: str, success: bool, message: str) -> "QueueMessageContent":
        """Copy with stage rewritten and response replaced."""
        return self.model_copy(update={
            'stage': stage,
            'response': WorkflowResponse(success=success, message=message),
        })

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode='json')


class QueueMessage(BaseModel):
    """
    Outer wrapper of every topic message.

    messageId is a fresh UUID4 per publish; publishedDate is UTC now.
    An inbound publishedDate that does not parse is kept as None.
    """

    model_config = ConfigDict(populate_by_name=True, extra='allow')

    message_id: str = Field(default_factory=lambda: str(uuid.uuid4()), alias='messageId')
    message_type: Optional[str] = Field(default=None, alias='messageType')
    published_date: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        alias='publishedDate'
    )
    message: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)

    @field_validator('published_date', mode='before')
    @classmethod
    def lenient_published_date(cls, v):
        # Upstream stages may send dates pydantic cannot parse (JS Date.toString())
        try:
            return _DATETIME.validate_python(v) if v is not None else None
        except PydanticValidationError:
            return None

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode='json')

    def to_json(self) -> str:
        return json.dumps(self.to_wire())


# ============================================================================
# DECODE / BUILD
# ============================================================================

def decode_envelope(body: Union[bytes, str, Dict[str, Any]]) -> Tuple[QueueMessage, QueueMessageContent]:
    """
    Decode a raw topic message body.

    Raises:
        MessageDecodeError: Body is not JSON, not a wrapper object, or its
            data section is not a valid envelope
    """
    raw = body
    try:
        if isinstance(raw, (bytes, bytearray)):
            raw = raw.decode('utf-8')
        if isinstance(raw, str):
            raw = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MessageDecodeError(f"Message body is not valid JSON: {e}", raw_body=body) from e

    if not isinstance(raw, dict):
        raise MessageDecodeError(
            f"Message body must be a JSON object, got {type(raw).__name__}",
            raw_body=body
        )

    try:
        wrapper = QueueMessage.model_validate(raw)
        content = QueueMessageContent.model_validate(wrapper.data)
    except PydanticValidationError as e:
        raise MessageDecodeError(f"Message does not match the workflow envelope: {e}", raw_body=body) from e

    return wrapper, content


def build_outcome_message(content: QueueMessageContent, success: bool, message: str) -> QueueMessage:
    """Outbound wrapper for this stage: stage tag rewritten, response overwritten."""
    outcome = content.with_outcome(PathwaysDefaults.STAGE, success, message)
    return QueueMessage(
        message_type=PathwaysDefaults.MESSAGE_TYPE,
        message=PathwaysDefaults.OUTPUT_DESCRIPTION,
        data=outcome.to_wire(),
    )


def build_upload_message(
    request: Dict[str, Any],
    record_id: str,
    file_upload_path: str,
    user_id: str,
    meta_file_path: Optional[str] = None
) -> QueueMessage:
    """Announcement of a freshly uploaded pathways file."""
    project_group_id = request.get('tdei_project_group_id')
    content = QueueMessageContent(
        stage=PathwaysDefaults.UPLOAD_STAGE,
        tdei_record_id=record_id,
        user_id=user_id,
        org_id=project_group_id,
        request=request,
        meta=UploadMeta(file_upload_path=file_upload_path, meta_file_path=meta_file_path),
        response=WorkflowResponse(
            success=True,
            message=f"File uploaded for the organization: {project_group_id} with record id {record_id}",
        ),
    )
    return QueueMessage(
        message_type=PathwaysDefaults.UPLOAD_MESSAGE_TYPE,
        data=content.to_wire(),
    )


__all__ = [
    'QueueMessage',
    'QueueMessageContent',
    'WorkflowResponse',
    'UploadMeta',
    'decode_envelope',
    'build_outcome_message',
    'build_upload_message',
]
