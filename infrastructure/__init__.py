"""
Infrastructure Package - Lazy Loading Implementation.

Provides collaborator implementations with lazy loading to prevent
premature initialization of clients, loggers, and environment variable
reads.

Why Lazy Loading is Essential in Azure Functions:

    Cold Start -> Import Modules -> Runtime Init -> Ready for Triggers
         |              |                |               |
      ~500ms      NO ENV VARS!     ENV VARS SET    NOW SAFE TO USE

function_app.py is imported before the Functions host has finished
setting up app settings and managed identity. Importing
azure.servicebus / psycopg clients here would build them too early, so
every name is resolved through __getattr__ on first access instead.
"""

from typing import TYPE_CHECKING

# For type checking only - doesn't actually import at runtime
if TYPE_CHECKING:
    from .postgresql import PostgreSQLRepository as _PostgreSQLRepository
    from .pathways_repository import PostgreSQLPathwayVersionStore as _PostgreSQLPathwayVersionStore
    from .service_bus import ServiceBusTopicPublisher as _ServiceBusTopicPublisher
    from .service_bus import ServiceBusTopicSubscriber as _ServiceBusTopicSubscriber
    from .auth import HttpRoleResolver as _HttpRoleResolver
    from .validators import is_valid_polygon as _is_valid_polygon


_LAZY_IMPORTS = {
    "PostgreSQLRepository": ".postgresql",
    "PostgreSQLPathwayVersionStore": ".pathways_repository",
    "PostgreSQLUnitOfWork": ".pathways_repository",
    "scope_lock_key": ".pathways_repository",
    "ServiceBusTopicPublisher": ".service_bus",
    "ServiceBusTopicSubscriber": ".service_bus",
    "create_service_bus_client": ".service_bus",
    "HttpRoleResolver": ".auth",
    "StaticRoleResolver": ".auth",
    "get_role_resolver": ".auth",
    "is_valid_polygon": ".validators",
}


def __getattr__(name: str):
    """
    Lazy import mechanism - only imports when actually accessed.
    """
    if name in _LAZY_IMPORTS:
        from importlib import import_module
        module = import_module(_LAZY_IMPORTS[name], package=__name__)
        return getattr(module, name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = list(_LAZY_IMPORTS)
