"""
Azure Functions entry point for the GTFS Pathways Data Service.

Architecture:
    gtfs-pathways-validation ──► PathwaysWorkflowProcessor ──► gtfs-pathways-data
       (topic subscription)       |          |          |          (topic)
                             decode   authorize   validate
                            envelope  (claims)   (pydantic + shapely)

One trigger invocation = one message = at most one outcome published.

Exports:
    app: Azure Function App instance

Dependencies:
    azure.functions: Azure Functions SDK
    triggers.service_bus: Service Bus handler implementations
    services.pathways_workflow: Workflow processor

Environment Variables:
    ServiceBusConnection: Service Bus connection (or ServiceBusConnection__fullyQualifiedNamespace)
    VALIDATION_TOPIC: Inbound topic (binding expression)
    VALIDATION_SUBSCRIPTION: Inbound subscription (binding expression)
    DATA_SERVICE_TOPIC: Outbound topic
    AUTH_PERMISSION_URL: Claims service endpoint
    POSTGRES_*: pathway_versions store
"""

import logging
from typing import Optional

import azure.functions as func

# Suppress Azure Identity and Azure SDK authentication/HTTP logging
logging.getLogger("azure.identity").setLevel(logging.WARNING)
logging.getLogger("azure.core.pipeline.policies.http_logging_policy").setLevel(logging.WARNING)
logging.getLogger("azure.servicebus").setLevel(logging.WARNING)
logging.getLogger("azure.core").setLevel(logging.WARNING)
logging.getLogger("uamqp").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)

from config.env_validation import log_validation_results
from services.pathways_workflow import PathwaysWorkflowProcessor, create_workflow_processor
from triggers.service_bus import handle_validation_message
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.TRIGGER, "function_app")

# ========================================================================
# STARTUP VALIDATION
# ========================================================================
# Reported, not fatal: the host still starts so the failure shows up in logs
if not log_validation_results(logger):
    logger.warning("⚠️ Environment validation failed, see errors above")

# ========================================================================
# WORKFLOW PROCESSOR (built on first message, reused across invocations)
# ========================================================================
_processor: Optional[PathwaysWorkflowProcessor] = None


def get_workflow_processor() -> PathwaysWorkflowProcessor:
    global _processor
    if _processor is None:
        _processor = create_workflow_processor()
        logger.info("✅ PathwaysWorkflowProcessor initialized")
    return _processor


app = func.FunctionApp()


# ============================================================================
# SERVICE BUS TRIGGERS
# ============================================================================

@app.service_bus_topic_trigger(
    arg_name="msg",
    topic_name="%VALIDATION_TOPIC%",
    subscription_name="%VALIDATION_SUBSCRIPTION%",
    connection="ServiceBusConnection"
)
def process_pathways_validation(msg: func.ServiceBusMessage) -> None:
    """
    Workflow stage gtfs-pathways-data-service.

    Raises only when the outcome could not be published, so the runtime
    abandons the message and Service Bus redelivers it.
    """
    handle_validation_message(msg, get_workflow_processor())
