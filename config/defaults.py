"""
Configuration Defaults - Single source of truth for all default values.

Organization:
    - QueueDefaults: Service Bus topic/subscription names and retry policy
    - DatabaseDefaults: PostgreSQL connection defaults
    - AuthDefaults: Claims/permission service defaults
    - PathwaysDefaults: Workflow identity tags, required roles, response texts
    - AppDefaults: Application-wide defaults

Usage:
    from config.defaults import DatabaseDefaults, PathwaysDefaults

    # In Pydantic Field definitions:
    port: int = Field(default=DatabaseDefaults.PORT, ...)
"""


# =============================================================================
# SERVICE BUS DEFAULTS
# =============================================================================

class QueueDefaults:
    """
    Service Bus topic defaults.

    Topic flow:
        upload topic -> (validation service) -> validation topic
        validation topic / subscription -> THIS SERVICE -> data service topic
    """

    UPLOAD_TOPIC = "gtfs-pathways-upload"
    UPLOAD_SUBSCRIPTION = "upload-validation-processor"
    VALIDATION_TOPIC = "gtfs-pathways-validation"
    VALIDATION_SUBSCRIPTION = "gtfs-pathways-data-service"
    DATA_SERVICE_TOPIC = "gtfs-pathways-data"

    RETRY_COUNT = 3
    RETRY_BASE_DELAY_SECONDS = 1
    MAX_WAIT_TIME_SECONDS = 5
    MESSAGE_TTL_HOURS = 24


# =============================================================================
# DATABASE DEFAULTS
# =============================================================================

class DatabaseDefaults:
    """
    PostgreSQL defaults.
    """

    HOST = "localhost"
    PORT = 5432
    SCHEMA = "public"
    SSLMODE = "prefer"
    CONNECTION_TIMEOUT_SECONDS = 30
    TABLE_NAME = "pathway_versions"
    PAGE_SIZE = 10
    MAX_PAGE_SIZE = 100


# =============================================================================
# AUTH DEFAULTS
# =============================================================================

class AuthDefaults:
    """
    Claims collaborator defaults.
    """

    TIMEOUT_SECONDS = 10


# =============================================================================
# PATHWAYS WORKFLOW DEFAULTS
# =============================================================================

class PathwaysDefaults:
    """
    Identity and fixed texts of the pathways data service stage.
    """

    STAGE = "gtfs-pathways-data-service"
    MESSAGE_TYPE = "gtfs-pathways-data-service"
    OUTPUT_DESCRIPTION = "GTFS Pathways data service output"

    UPLOAD_STAGE = "pathways-upload"
    UPLOAD_MESSAGE_TYPE = "gtfs-pathways-upload"

    REQUIRED_ROLES = ("tdei-admin", "poc", "pathways_data_generator")

    SUCCESS_MESSAGE = "GTFS Pathways request processed successfully"
    UNAUTHORIZED_MESSAGE = "Unauthorized request"
    VALIDATION_FAILED_PREFIX = "Upload pathways file metadata information failed validation. errors: "
    INTERNAL_ERROR_PREFIX = "internal processing error: "


# =============================================================================
# APPLICATION DEFAULTS
# =============================================================================

class AppDefaults:
    """
    Application-wide defaults.
    """

    APP_NAME = "gtfs-pathways-data-service"
    DEBUG_MODE = False
    ENVIRONMENT = "dev"
    LOG_LEVEL = "INFO"
