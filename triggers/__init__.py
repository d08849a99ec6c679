"""
Triggers Package.

Azure Functions trigger implementations.

Service Bus:
    gtfs-pathways-validation / gtfs-pathways-data-service: workflow stage

Trigger functions should be imported directly from their modules.
"""
