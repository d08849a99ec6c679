"""
Core Business Logic Package.

Contains business logic that operates on pure data models.
Separated from models to maintain clean architecture.

Exports:
    Intervals: intervals_overlap, find_overlapping, has_overlap
    Permissions: has_permission
    Record validation: parse_and_validate, format_field_errors
"""

# Interval checks
from .intervals import (
    intervals_overlap,
    find_overlapping,
    has_overlap
)

# Permissions
from .permissions import has_permission

# Record validation
from .record_validation import (
    parse_and_validate,
    format_field_errors
)

__all__ = [
    # Intervals
    'intervals_overlap',
    'find_overlapping',
    'has_overlap',

    # Permissions
    'has_permission',

    # Record validation
    'parse_and_validate',
    'format_field_errors'
]
