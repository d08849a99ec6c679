"""
Core Domain Components.

Pure building blocks of the pathways data service, free of transport and
database clients.

Structure:
    models/: Pure data structures (no business logic)
    logic/: Business logic separated from models
    schema/: Message schemas and SQL builders
    errors.py: Error codes and classification
"""

# Make subpackages available first (no circular dependencies)
from . import models
from . import schema
from . import logic

__all__ = [
    'models',
    'logic',
    'schema'
]
