# ============================================================================
# SERVICE BUS HANDLERS MODULE
# ============================================================================
# STATUS: Trigger layer - Service Bus message handling
# PURPOSE: Handlers for Service Bus topic triggers
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================
"""
Service Bus Handlers Module.

- handle_validation_message: Process messages from the
  gtfs-pathways-validation subscription

Usage in function_app.py:
    from triggers.service_bus import handle_validation_message

Exports:
    handle_validation_message: Validation topic handler
    extract_record_id_from_raw_message: Record id from malformed message
"""

from .validation_handler import handle_validation_message
from .error_handler import extract_record_id_from_raw_message, build_error_result

__all__ = [
    'handle_validation_message',
    'extract_record_id_from_raw_message',
    'build_error_result',
]
