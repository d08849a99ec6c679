"""
Core Data Models Package.

Contains pure data structures without business logic.
All business logic is in the core.logic package.

Exports:
    PathwayVersion, ScopeKey, FieldError: Dataset version models
    WorkflowOutcome: Workflow terminal states
"""

from .enums import WorkflowOutcome
from .pathways import PathwayVersion, ScopeKey, FieldError

__all__ = [
    'WorkflowOutcome',
    'PathwayVersion',
    'ScopeKey',
    'FieldError',
]
