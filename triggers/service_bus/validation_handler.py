# ============================================================================
# SERVICE BUS VALIDATION HANDLER
# ============================================================================
# STATUS: Trigger layer - Validation topic message processing
# PURPOSE: Feed gtfs-pathways-validation messages to the workflow processor
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================
"""
Validation Topic Message Handler Module.

Handles messages from the gtfs-pathways-validation topic subscription and
hands each body to PathwaysWorkflowProcessor, which publishes the outcome
on gtfs-pathways-data.

Settlement follows the Functions runtime: returning completes the message,
raising abandons it. Only a failed outcome publish is re-raised, so the
message is redelivered and the outcome is eventually published. Anything
else is logged and the message completed.

Usage:
    from triggers.service_bus import handle_validation_message

    @app.service_bus_topic_trigger(
        arg_name="msg",
        topic_name="%VALIDATION_TOPIC%",
        subscription_name="%VALIDATION_SUBSCRIPTION%",
        connection="ServiceBusConnection"
    )
    def process_pathways_validation(msg: func.ServiceBusMessage) -> None:
        handle_validation_message(msg, get_workflow_processor())
"""

import time
import traceback
from typing import Any, Dict

import azure.functions as func

from exceptions import ServiceBusError
from util_logger import LoggerFactory, ComponentType, new_correlation_id

from .error_handler import build_error_result, extract_record_id_from_raw_message

logger = LoggerFactory.create_logger(ComponentType.TRIGGER, "ValidationHandler")


def handle_validation_message(
    msg: func.ServiceBusMessage,
    processor: Any
) -> Dict[str, Any]:
    """
    Process one validation topic message.

    Args:
        msg: Service Bus message
        processor: PathwaysWorkflowProcessor instance

    Returns:
        Processing result dict with outcome and details

    Raises:
        ServiceBusError: Outcome publish failed (message is redelivered)
    """
    correlation_id = new_correlation_id()
    start_time = time.time()

    _log_message_received(msg, correlation_id)

    message_body = ''
    try:
        message_body = msg.get_body().decode('utf-8')
        logger.info(
            f"[{correlation_id}] Message size: {len(message_body)} bytes",
            extra={'custom_dimensions': {
                'checkpoint': 'VALIDATION_TRIGGER_RECEIVE_MESSAGE',
                'correlation_id': correlation_id,
                'message_size_bytes': len(message_body)
            }}
        )

        result = processor.process_message(message_body, correlation_id=correlation_id)

        elapsed = time.time() - start_time
        logger.info(f"[{correlation_id}] Processed in {elapsed:.3f}s: {result.outcome.value}")

        return {
            "success": True,
            "correlation_id": correlation_id,
            **result.to_dict(),
        }

    except ServiceBusError as e:
        logger.error(f"[{correlation_id}] ❌ Outcome publish failed, message will be redelivered: {e}")
        raise

    except Exception as e:
        return _handle_exception(e, message_body, correlation_id, start_time)


def _log_message_received(msg: func.ServiceBusMessage, correlation_id: str) -> None:
    logger.info(
        f"[{correlation_id}] SERVICE BUS MESSAGE RECEIVED (gtfs-pathways-validation)",
        extra={'custom_dimensions': {
            'checkpoint': 'MESSAGE_RECEIVED',
            'correlation_id': correlation_id,
            'message_id': msg.message_id,
            'sequence_number': msg.sequence_number,
            'delivery_count': msg.delivery_count,
            'enqueued_time': msg.enqueued_time_utc.isoformat() if msg.enqueued_time_utc else None,
            'content_type': msg.content_type,
        }}
    )


def _handle_exception(
    e: Exception,
    message_body: str,
    correlation_id: str,
    start_time: float
) -> Dict[str, Any]:
    elapsed = time.time() - start_time
    logger.error(f"[{correlation_id}] EXCEPTION in process_pathways_validation after {elapsed:.3f}s")
    logger.error(f"[{correlation_id}] Exception type: {type(e).__name__}")
    logger.error(f"[{correlation_id}] Exception message: {e}")
    logger.error(f"[{correlation_id}] Full traceback:\n{traceback.format_exc()}")

    record_id = extract_record_id_from_raw_message(message_body, correlation_id)
    if record_id:
        logger.error(f"[{correlation_id}] Record ID: {record_id}")

    logger.warning(f"[{correlation_id}] Function completing (exception logged but not re-raised)")
    return build_error_result(e, correlation_id, record_id)


__all__ = ['handle_validation_message']
