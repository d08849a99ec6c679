"""
Azure Service Bus Topic Configuration.

Provides configuration for:
    - Service Bus connection settings (connection string or managed identity)
    - Topic and subscription names for the pathways workflow
    - Retry and receive settings

Topic Architecture:
    - validation topic + subscription: inbound workflow envelopes
    - data service topic: outbound outcome envelopes from this stage
    - upload topic: announcements of freshly uploaded pathways files

Exports:
    QueueConfig: Pydantic queue configuration model
"""

import os
from typing import Optional
from pydantic import BaseModel, Field

from .defaults import QueueDefaults


# ============================================================================
# QUEUE CONFIGURATION
# ============================================================================

class QueueConfig(BaseModel):
    """
    Azure Service Bus topic configuration.

    Either connection_string (local development) or namespace (managed
    identity via DefaultAzureCredential) must be provided.
    """

    connection_string: Optional[str] = Field(
        default=None,
        repr=False,
        description="Service Bus connection string (ServiceBusConnection env var, shared with the Functions binding)"
    )

    namespace: Optional[str] = Field(
        default=None,
        description="Fully qualified Service Bus namespace for managed identity auth"
    )

    validation_topic: str = Field(
        default=QueueDefaults.VALIDATION_TOPIC,
        description="Topic delivering validated upload envelopes to this service"
    )

    validation_subscription: str = Field(
        default=QueueDefaults.VALIDATION_SUBSCRIPTION,
        description="Subscription on validation_topic owned by this service"
    )

    data_service_topic: str = Field(
        default=QueueDefaults.DATA_SERVICE_TOPIC,
        description="Topic receiving the outcome envelope of this stage"
    )

    upload_topic: str = Field(
        default=QueueDefaults.UPLOAD_TOPIC,
        description="Topic announcing freshly uploaded pathways files"
    )

    upload_subscription: str = Field(
        default=QueueDefaults.UPLOAD_SUBSCRIPTION,
        description="Subscription on upload_topic (used by the validation stage)"
    )

    retry_count: int = Field(
        default=QueueDefaults.RETRY_COUNT,
        ge=1,
        le=10,
        description="Number of send attempts for Service Bus operations"
    )

    retry_base_delay_seconds: float = Field(
        default=QueueDefaults.RETRY_BASE_DELAY_SECONDS,
        ge=0,
        description="Base delay for exponential backoff between send attempts"
    )

    max_wait_time_seconds: int = Field(
        default=QueueDefaults.MAX_WAIT_TIME_SECONDS,
        ge=1,
        le=300,
        description="Receive wait per pull in the subscriber loop"
    )

    @property
    def is_configured(self) -> bool:
        """True when either auth mode is available."""
        return bool(self.connection_string or self.namespace)

    def debug_dict(self) -> dict:
        """Debug output for logging (connection string masked)."""
        return {
            "connection": "***MASKED***" if self.connection_string else None,
            "namespace": self.namespace,
            "validation_topic": self.validation_topic,
            "validation_subscription": self.validation_subscription,
            "data_service_topic": self.data_service_topic,
            "upload_topic": self.upload_topic,
            "retry_count": self.retry_count,
        }

    @classmethod
    def from_environment(cls):
        """Load from environment variables."""
        return cls(
            connection_string=os.environ.get("ServiceBusConnection"),
            namespace=os.environ.get("SERVICE_BUS_NAMESPACE") or os.environ.get("ServiceBusConnection__fullyQualifiedNamespace"),
            validation_topic=os.environ.get("VALIDATION_TOPIC", QueueDefaults.VALIDATION_TOPIC),
            validation_subscription=os.environ.get("VALIDATION_SUBSCRIPTION", QueueDefaults.VALIDATION_SUBSCRIPTION),
            data_service_topic=os.environ.get("DATA_SERVICE_TOPIC", QueueDefaults.DATA_SERVICE_TOPIC),
            upload_topic=os.environ.get("UPLOAD_TOPIC", QueueDefaults.UPLOAD_TOPIC),
            upload_subscription=os.environ.get("UPLOAD_SUBSCRIPTION", QueueDefaults.UPLOAD_SUBSCRIPTION),
            retry_count=int(os.environ.get("SERVICE_BUS_RETRY_COUNT", str(QueueDefaults.RETRY_COUNT))),
            max_wait_time_seconds=int(os.environ.get("SERVICE_BUS_MAX_WAIT_TIME", str(QueueDefaults.MAX_WAIT_TIME_SECONDS))),
        )
