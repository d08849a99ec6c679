"""
Main Application Configuration.

Composes domain-specific configuration modules:
    - DatabaseConfig (PostgreSQL/PostGIS)
    - QueueConfig (Service Bus topics)
    - AuthConfig (claims service)

Exports:
    AppConfig: Main configuration class

Pattern:
    Composition over inheritance - domain configs are composed, not inherited.
"""

import os
from pydantic import BaseModel, Field

from .database_config import DatabaseConfig
from .queue_config import QueueConfig
from .auth_config import AuthConfig
from .defaults import AppDefaults


# ============================================================================
# APPLICATION CONFIGURATION
# ============================================================================

class AppConfig(BaseModel):
    """
    Application configuration - composition of domain configs.
    """

    # ========================================================================
    # Core Application Settings
    # ========================================================================

    app_name: str = Field(
        default=AppDefaults.APP_NAME,
        description="Service name reported in logs"
    )

    debug_mode: bool = Field(
        default=AppDefaults.DEBUG_MODE,
        description="Enable verbose diagnostics (payload logging). "
                    "Set DEBUG_MODE=true in environment to enable."
    )

    environment: str = Field(
        default=AppDefaults.ENVIRONMENT,
        description="Environment name (dev, stage, prod)"
    )

    log_level: str = Field(
        default=AppDefaults.LOG_LEVEL,
        description="Root log level"
    )

    # ========================================================================
    # Domain Configurations
    # ========================================================================

    database: DatabaseConfig
    queues: QueueConfig
    auth: AuthConfig

    @property
    def db_schema(self) -> str:
        """Shortcut used by repositories."""
        return self.database.db_schema

    @classmethod
    def from_environment(cls):
        """Load all configs from environment."""
        return cls(
            app_name=os.environ.get("APP_NAME", AppDefaults.APP_NAME),
            debug_mode=os.environ.get("DEBUG_MODE", str(AppDefaults.DEBUG_MODE).lower()).lower() == "true",
            environment=os.environ.get("ENVIRONMENT", AppDefaults.ENVIRONMENT),
            log_level=os.environ.get("LOG_LEVEL", AppDefaults.LOG_LEVEL),

            database=DatabaseConfig.from_environment(),
            queues=QueueConfig.from_environment(),
            auth=AuthConfig.from_environment(),
        )
