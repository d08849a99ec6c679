"""
Custom Exception Hierarchy

Distinguishes between:
1. Contract Violations (programming bugs that need fixing)
2. Business Logic Failures (expected runtime issues)

This separation ensures bugs are found quickly while the system
remains robust to expected failures. Callers of admission control can
tell "bad input" (ValidationError) apart from "conflicts with existing
data" (DuplicateError).
"""

from typing import TYPE_CHECKING, Any, List, Optional, Sequence

if TYPE_CHECKING:
    from core.models.pathways import FieldError


class ContractViolationError(TypeError):
    """
    Raised when component contracts are violated (programming bugs).

    These should NEVER be caught and handled - they indicate bugs
    that need to be fixed in the code.

    Examples:
        - Query builder receives a raw string instead of sql.Composed
        - Store returns a row without tdei_record_id
    """
    pass


class BusinessLogicError(Exception):
    """
    Base class for expected runtime business logic failures.

    These are normal failures that occur during system operation
    and should be handled gracefully without crashing.
    """
    pass


class MessageDecodeError(BusinessLogicError):
    """
    Inbound Service Bus message could not be decoded into an envelope.

    The message is logged and acknowledged; nothing is published.
    """

    def __init__(self, message: str, raw_body: Any = None):
        super().__init__(message)
        self.raw_body = raw_body


class UnauthorizedError(BusinessLogicError):
    """
    Caller holds none of the roles required for the operation.
    """

    def __init__(self, user_id: Optional[str], required_roles: Sequence[str]):
        super().__init__("Unauthorized request")
        self.user_id = user_id
        self.required_roles = list(required_roles)


class ValidationError(BusinessLogicError):
    """
    Dataset version metadata failed field validation.

    Carries every field-level violation, not just the first one.

    Examples:
        - collected_by missing or empty
        - valid_from not a date
        - polygon is not a single valid polygon feature
    """

    def __init__(self, errors: List["FieldError"], message: Optional[str] = None):
        self.errors = list(errors)
        super().__init__(message or "; ".join(str(e) for e in self.errors))


class DuplicateError(BusinessLogicError):
    """
    New dataset version conflicts with an existing one.

    Raised when the validity interval overlaps another version of the
    same (project group, station) scope, or when the store rejects the
    insert on a uniqueness/exclusion constraint.
    """

    def __init__(
        self,
        message: str,
        project_group_id: Optional[str] = None,
        station_id: Optional[str] = None,
        conflicting_record_ids: Optional[List[str]] = None
    ):
        super().__init__(message)
        self.project_group_id = project_group_id
        self.station_id = station_id
        self.conflicting_record_ids = list(conflicting_record_ids or [])


class ServiceBusError(BusinessLogicError):
    """
    Service Bus communication failures.

    Examples:
        - Service Bus unavailable
        - Topic not found
        - Message size exceeded
        - Authentication failure
    """
    pass


class DatabaseError(BusinessLogicError):
    """
    Database operation failures.

    Examples:
        - Connection lost
        - Query timeout
        - Transaction rollback
    """
    pass


class IntegrityConflictError(DatabaseError):
    """
    Store rejected a write on a unique or exclusion constraint.

    Admission control re-classifies this as DuplicateError.
    """

    def __init__(self, message: str, constraint_name: Optional[str] = None):
        super().__init__(message)
        self.constraint_name = constraint_name


class RoleResolutionError(BusinessLogicError):
    """
    Claims collaborator could not be reached or returned garbage.
    """
    pass


class ConfigurationError(Exception):
    """
    System configuration error.

    These are typically fatal and indicate misconfiguration
    that prevents the system from operating.

    Examples:
        - Missing required environment variables
        - Invalid connection strings
    """
    pass
