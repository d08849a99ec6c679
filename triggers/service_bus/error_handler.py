# ============================================================================
# SERVICE BUS ERROR HANDLER
# ============================================================================
# STATUS: Trigger layer - Queue error handling utilities
# PURPOSE: Identify the record behind a message that could not be processed
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================
"""
Service Bus Error Handler Module.

When the validation handler fails before or outside the workflow processor
there is no decoded envelope to log against. These helpers recover the
record id from the raw body (JSON first, regex as fallback) so the failure
can still be traced to an upload.

Usage:
    from triggers.service_bus.error_handler import extract_record_id_from_raw_message

    record_id = extract_record_id_from_raw_message(message_body, correlation_id)
"""

import json
import re
from typing import Any, Dict, Optional

from core.errors import classify_exception, create_error_response
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "QueueErrorHandler")

_RECORD_ID_PATTERN = re.compile(r'"tdeiRecordId"\s*:\s*"([^"]+)"')


def extract_record_id_from_raw_message(
    message_content: str,
    correlation_id: str = "unknown"
) -> Optional[str]:
    """
    Try to extract tdeiRecordId from a potentially malformed message.

    Looks in the QueueMessage wrapper's `data` first and then at the top
    level, then falls back to a regex over the raw text.

    Returns:
        Record id if found, None otherwise
    """
    try:
        data = json.loads(message_content)
    except (TypeError, ValueError):
        data = None

    if isinstance(data, dict):
        envelope = data.get('data') if isinstance(data.get('data'), dict) else data
        record_id = envelope.get('tdeiRecordId')
        if isinstance(record_id, str) and record_id:
            logger.info(f"[{correlation_id}] Extracted tdeiRecordId via JSON: {record_id}")
            return record_id

    if isinstance(message_content, str):
        match = _RECORD_ID_PATTERN.search(message_content)
        if match:
            logger.info(f"[{correlation_id}] Extracted tdeiRecordId via regex: {match.group(1)}")
            return match.group(1)

    logger.warning(f"[{correlation_id}] Could not extract tdeiRecordId from message")
    return None


def build_error_result(e: Exception, correlation_id: str, record_id: Optional[str] = None) -> Dict[str, Any]:
    """Handler result dict for a processing exception, classified by core.errors."""
    return create_error_response(
        classify_exception(e),
        str(e),
        error_type=type(e).__name__,
        correlation_id=correlation_id,
        tdei_record_id=record_id,
    )


__all__ = ['extract_record_id_from_raw_message', 'build_error_result']
