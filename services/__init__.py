"""
Services Package.

Business logic of the pathways data service. Services receive their
collaborators (publishers, subscribers, stores, role resolvers) through
their constructors and never build Azure or database clients themselves,
except in the explicit create_*/from_config factories.

Services:
    PathwaysWorkflowProcessor: Topic workflow stage (authorize, validate, publish outcome)
    PathwaysVersionService: Direct version registration with overlap admission control
    PathwaysEventBus: Validation subscription loop and upload announcements
"""

from .pathways_workflow import PathwaysWorkflowProcessor, WorkflowResult, create_workflow_processor
from .pathways_version_service import PathwaysVersionService
from .pathways_event_bus import PathwaysEventBus

__all__ = [
    'PathwaysWorkflowProcessor',
    'WorkflowResult',
    'create_workflow_processor',
    'PathwaysVersionService',
    'PathwaysEventBus',
]
