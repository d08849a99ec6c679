"""
Error Code Definitions and Classification.

Centralized error code management with retry logic and consistent
error responses for the workflow processor and admission control.

Key Features:
    - Explicit error codes for all failure modes
    - Retry classification (PERMANENT, TRANSIENT)
    - Mapping from exception classes to error codes

Exports:
    ErrorCode: Standardized error codes enum
    ErrorClassification: Error category enum
    is_retryable: Helper to check if error should be retried
    classify_exception: Exception -> ErrorCode
    get_http_status_code: ErrorCode -> HTTP status
    create_error_response: Standardized error dict
"""

from enum import Enum
from typing import Dict, Any

from exceptions import (
    DatabaseError,
    DuplicateError,
    IntegrityConflictError,
    MessageDecodeError,
    RoleResolutionError,
    ServiceBusError,
    UnauthorizedError,
    ValidationError,
)


class ErrorCode(str, Enum):
    """
    Standardized error codes for all application errors.
    """

    # ========================================================================
    # CLIENT ERRORS - NOT RETRYABLE
    # ========================================================================

    MESSAGE_DECODE_ERROR = "MESSAGE_DECODE_ERROR"  # Inbound envelope unreadable
    UNAUTHORIZED = "UNAUTHORIZED"  # Permission gate failed
    VALIDATION_ERROR = "VALIDATION_ERROR"  # Record field validation failed
    DUPLICATE_VERSION = "DUPLICATE_VERSION"  # Overlapping validity interval

    # ========================================================================
    # INFRASTRUCTURE ERRORS - RETRYABLE
    # ========================================================================

    DATABASE_ERROR = "DATABASE_ERROR"  # Database operation failed
    QUEUE_ERROR = "QUEUE_ERROR"  # Service Bus operation failed
    AUTH_SERVICE_ERROR = "AUTH_SERVICE_ERROR"  # Role lookup failed

    # ========================================================================
    # GENERIC ERRORS
    # ========================================================================

    INTERNAL_ERROR = "INTERNAL_ERROR"  # Unexpected exception


class ErrorClassification(str, Enum):
    """
    Error classification for retry logic.
    """

    PERMANENT = "PERMANENT"  # Never retry (client error, won't fix itself)
    TRANSIENT = "TRANSIENT"  # Retry with exponential backoff (temporary issue)


_ERROR_CLASSIFICATION: Dict[ErrorCode, ErrorClassification] = {
    ErrorCode.MESSAGE_DECODE_ERROR: ErrorClassification.PERMANENT,
    ErrorCode.UNAUTHORIZED: ErrorClassification.PERMANENT,
    ErrorCode.VALIDATION_ERROR: ErrorClassification.PERMANENT,
    ErrorCode.DUPLICATE_VERSION: ErrorClassification.PERMANENT,

    ErrorCode.DATABASE_ERROR: ErrorClassification.TRANSIENT,
    ErrorCode.QUEUE_ERROR: ErrorClassification.TRANSIENT,
    ErrorCode.AUTH_SERVICE_ERROR: ErrorClassification.TRANSIENT,
    ErrorCode.INTERNAL_ERROR: ErrorClassification.TRANSIENT,
}


def is_retryable(error_code: ErrorCode) -> bool:
    """
    Determine if an error code should trigger a retry.

    Example:
        >>> is_retryable(ErrorCode.DUPLICATE_VERSION)
        False
        >>> is_retryable(ErrorCode.DATABASE_ERROR)
        True
    """
    classification = _ERROR_CLASSIFICATION.get(error_code, ErrorClassification.TRANSIENT)
    return classification != ErrorClassification.PERMANENT


def get_error_classification(error_code: ErrorCode) -> ErrorClassification:
    """Get the classification for an error code."""
    return _ERROR_CLASSIFICATION.get(error_code, ErrorClassification.TRANSIENT)


def classify_exception(error: BaseException) -> ErrorCode:
    """
    Map an exception to its error code.

    Order matters: IntegrityConflictError is a DatabaseError but means
    the caller lost an admission race, so it reads as a duplicate.
    """
    if isinstance(error, MessageDecodeError):
        return ErrorCode.MESSAGE_DECODE_ERROR
    if isinstance(error, UnauthorizedError):
        return ErrorCode.UNAUTHORIZED
    if isinstance(error, ValidationError):
        return ErrorCode.VALIDATION_ERROR
    if isinstance(error, (DuplicateError, IntegrityConflictError)):
        return ErrorCode.DUPLICATE_VERSION
    if isinstance(error, DatabaseError):
        return ErrorCode.DATABASE_ERROR
    if isinstance(error, ServiceBusError):
        return ErrorCode.QUEUE_ERROR
    if isinstance(error, RoleResolutionError):
        return ErrorCode.AUTH_SERVICE_ERROR
    return ErrorCode.INTERNAL_ERROR


def get_http_status_code(error_code: ErrorCode) -> int:
    """
    Get the appropriate HTTP status code for an error code.

    Example:
        >>> get_http_status_code(ErrorCode.DUPLICATE_VERSION)
        409
    """
    if error_code in {ErrorCode.MESSAGE_DECODE_ERROR, ErrorCode.VALIDATION_ERROR}:
        return 400
    if error_code == ErrorCode.UNAUTHORIZED:
        return 401
    if error_code == ErrorCode.DUPLICATE_VERSION:
        return 409
    if error_code in {ErrorCode.QUEUE_ERROR, ErrorCode.AUTH_SERVICE_ERROR}:
        return 503
    return 500


def create_error_response(
    error_code: ErrorCode,
    message: str,
    **kwargs: Any
) -> Dict[str, Any]:
    """
    Create a standardized error response dictionary.

    Example:
        >>> create_error_response(
        ...     ErrorCode.DUPLICATE_VERSION,
        ...     "Record with the same time window already exists",
        ...     tdei_station_id="S1"
        ... )
        {
            "success": False,
            "error": "DUPLICATE_VERSION",
            "error_type": "DuplicateError",
            "message": "Record with the same time window already exists",
            "retryable": False,
            "http_status": 409,
            "tdei_station_id": "S1"
        }
    """
    response = {
        "success": False,
        "error": error_code.value,
        "error_type": kwargs.pop("error_type", "ValidationError"),
        "message": message,
        "retryable": is_retryable(error_code),
        "http_status": get_http_status_code(error_code),
        **kwargs
    }

    return response
