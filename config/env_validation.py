# ============================================================================
# ENVIRONMENT VARIABLE VALIDATION
# ============================================================================
"""
Environment Variable Validation Module.

Validates environment variables at startup using regex patterns so that a
misconfigured Function App fails with a readable message instead of a
connection error on the first delivered envelope.

Imported at the top of function_app.py, before the Service Bus and
PostgreSQL clients are built.

Only Service Bus access is required at startup (connection string or
namespace). The POSTGRES_* credentials are needed only where a
PostgreSQLPathwayVersionStore is built, so they are checked for format
when set but never reported missing here.

Usage:
    from config.env_validation import validate_environment

    issues = validate_environment()
    for issue in issues:
        print(f"{issue.var_name}: {issue.message}")

Exports:
    ENV_VAR_RULES: Dict of all validation rules
    EnvVarIssue: Dataclass for validation findings
    validate_environment: Main validation function
    validate_single_var: Validate one variable
"""

import os
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Pattern, Any, Tuple

from .defaults import QueueDefaults, DatabaseDefaults, AuthDefaults, AppDefaults


# ============================================================================
# VALIDATION FINDING
# ============================================================================

@dataclass
class EnvVarIssue:
    """Result of a failed (or defaulted) environment variable check."""
    var_name: str
    message: str
    current_value: Optional[str]
    expected_pattern: str
    fix_suggestion: str
    severity: str = "error"  # error, warning

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for JSON serialization."""
        return {
            "var_name": self.var_name,
            "message": self.message,
            "current_value": self._mask_sensitive(self.current_value),
            "expected_pattern": self.expected_pattern,
            "fix_suggestion": self.fix_suggestion,
            "severity": self.severity,
        }

    def _mask_sensitive(self, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        sensitive_keywords = ["password", "secret", "key", "token", "connection"]
        if any(kw in self.var_name.lower() for kw in sensitive_keywords):
            return "***MASKED***"
        if len(value) > 30:
            return f"{value[:20]}...({len(value)} chars)"
        return value


# ============================================================================
# VALIDATION RULE DEFINITION
# ============================================================================

@dataclass
class EnvVarRule:
    """
    Validation rule for an environment variable.

    Attributes:
        pattern: Compiled regex pattern for validation
        pattern_description: Human-readable description of expected format
        required: Whether this variable must be set
        fix_suggestion: How to fix if validation fails
        example: Example valid value
        default_value: Default used when unset (reported as a warning)
        alternatives: Variables that satisfy a required rule when set instead
    """
    pattern: Pattern
    pattern_description: str
    required: bool
    fix_suggestion: str
    example: str
    default_value: Optional[str] = None
    alternatives: Tuple[str, ...] = ()

    def is_missing(self, value: Optional[str]) -> bool:
        if not self.required or value:
            return False
        return not any(os.environ.get(name) for name in self.alternatives)


_SERVICE_BUS_CONNECTION = re.compile(r"^Endpoint=sb://[^;]+;.+$", re.IGNORECASE)
_SERVICE_BUS_FQDN = re.compile(r"^[a-z0-9][a-z0-9-]*\.servicebus\.[a-z0-9.-]+$", re.IGNORECASE)
_ENTITY_NAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]{0,259}$")
_HOST = re.compile(r"^[A-Za-z0-9][A-Za-z0-9.-]*$")
_SCHEMA_NAME = re.compile(r"^[a-z_][a-z0-9_]{0,62}$")
_DATABASE_NAME = re.compile(r"^[a-zA-Z][a-zA-Z0-9_-]{0,62}$")
_HTTP_URL = re.compile(r"^https?://[^\s]+$", re.IGNORECASE)
_POSITIVE_INT = re.compile(r"^[1-9][0-9]*$")
_POSITIVE_NUMBER = re.compile(r"^([1-9][0-9]*|[0-9]*\.[0-9]+)$")
_BOOLEAN = re.compile(r"^(true|false|1|0|yes|no)$", re.IGNORECASE)
_SSLMODE = re.compile(r"^(disable|allow|prefer|require|verify-ca|verify-full)$")
_LOG_LEVEL = re.compile(r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$", re.IGNORECASE)


ENV_VAR_RULES: Dict[str, EnvVarRule] = {
    # =========================================================================
    # SERVICE BUS
    # =========================================================================
    "ServiceBusConnection": EnvVarRule(
        pattern=_SERVICE_BUS_CONNECTION,
        pattern_description="Service Bus connection string starting with Endpoint=sb://",
        required=True,
        fix_suggestion=(
            "Copy the connection string from the namespace's Shared access policies blade, "
            "or set SERVICE_BUS_NAMESPACE for managed identity"
        ),
        example="Endpoint=sb://tdei.servicebus.windows.net/;SharedAccessKeyName=...;SharedAccessKey=...",
        alternatives=("SERVICE_BUS_NAMESPACE", "ServiceBusConnection__fullyQualifiedNamespace"),
    ),
    "SERVICE_BUS_NAMESPACE": EnvVarRule(
        pattern=_SERVICE_BUS_FQDN,
        pattern_description="Full FQDN containing .servicebus.",
        required=False,
        fix_suggestion="Use the full FQDN, not just the namespace name",
        example="tdei.servicebus.windows.net",
    ),
    "VALIDATION_TOPIC": EnvVarRule(
        pattern=_ENTITY_NAME,
        pattern_description="Service Bus entity name",
        required=False,
        fix_suggestion="Set the topic this service subscribes to",
        example=QueueDefaults.VALIDATION_TOPIC,
        default_value=QueueDefaults.VALIDATION_TOPIC,
    ),
    "VALIDATION_SUBSCRIPTION": EnvVarRule(
        pattern=_ENTITY_NAME,
        pattern_description="Service Bus entity name",
        required=False,
        fix_suggestion="Set the subscription owned by this service",
        example=QueueDefaults.VALIDATION_SUBSCRIPTION,
        default_value=QueueDefaults.VALIDATION_SUBSCRIPTION,
    ),
    "DATA_SERVICE_TOPIC": EnvVarRule(
        pattern=_ENTITY_NAME,
        pattern_description="Service Bus entity name",
        required=False,
        fix_suggestion="Set the topic receiving this stage's outcome",
        example=QueueDefaults.DATA_SERVICE_TOPIC,
        default_value=QueueDefaults.DATA_SERVICE_TOPIC,
    ),
    "UPLOAD_TOPIC": EnvVarRule(
        pattern=_ENTITY_NAME,
        pattern_description="Service Bus entity name",
        required=False,
        fix_suggestion="Set the upload announcement topic",
        example=QueueDefaults.UPLOAD_TOPIC,
        default_value=QueueDefaults.UPLOAD_TOPIC,
    ),
    "SERVICE_BUS_RETRY_COUNT": EnvVarRule(
        pattern=_POSITIVE_INT,
        pattern_description="Positive integer",
        required=False,
        fix_suggestion="Use a small integer like 3",
        example="3",
        default_value=str(QueueDefaults.RETRY_COUNT),
    ),

    # =========================================================================
    # DATABASE
    # =========================================================================
    "POSTGRES_HOST": EnvVarRule(
        pattern=_HOST,
        pattern_description="Hostname or IP address",
        required=False,
        fix_suggestion="Use the server FQDN or 'localhost' for local dev",
        example="tdei-pg.postgres.database.azure.com",
        default_value=DatabaseDefaults.HOST,
    ),
    "POSTGRES_PORT": EnvVarRule(
        pattern=_POSITIVE_INT,
        pattern_description="Positive integer",
        required=False,
        fix_suggestion="Use a valid port number like 5432",
        example="5432",
        default_value=str(DatabaseDefaults.PORT),
    ),
    "POSTGRES_USER": EnvVarRule(
        pattern=re.compile(r"^\S+$"),
        pattern_description="Non-empty user name",
        required=False,
        fix_suggestion="Set the PostgreSQL login role",
        example="tdei_app",
    ),
    "POSTGRES_PASSWORD": EnvVarRule(
        pattern=re.compile(r"^.+$"),
        pattern_description="Non-empty password",
        required=False,
        fix_suggestion="Set the password for POSTGRES_USER",
        example="********",
    ),
    "POSTGRES_DB": EnvVarRule(
        pattern=_DATABASE_NAME,
        pattern_description="Alphanumeric database name (letters, numbers, underscore, hyphen)",
        required=False,
        fix_suggestion="Use a valid PostgreSQL database name",
        example="tdei",
    ),
    "POSTGRES_SCHEMA": EnvVarRule(
        pattern=_SCHEMA_NAME,
        pattern_description="Lowercase schema name (letters, numbers, underscore)",
        required=False,
        fix_suggestion="Set the schema holding pathway_versions",
        example="public",
        default_value=DatabaseDefaults.SCHEMA,
    ),
    "POSTGRES_SSLMODE": EnvVarRule(
        pattern=_SSLMODE,
        pattern_description="libpq sslmode value",
        required=False,
        fix_suggestion="Use 'require' against Azure Database for PostgreSQL",
        example="require",
        default_value=DatabaseDefaults.SSLMODE,
    ),

    # =========================================================================
    # AUTH
    # =========================================================================
    "AUTH_PERMISSION_URL": EnvVarRule(
        pattern=_HTTP_URL,
        pattern_description="http(s) URL",
        required=False,
        fix_suggestion="Point at the user-management permission endpoint",
        example="https://tdei-usermanagement.azurewebsites.net/api/v1/user-roles",
    ),
    "AUTH_TIMEOUT_SECONDS": EnvVarRule(
        pattern=_POSITIVE_NUMBER,
        pattern_description="Positive number of seconds",
        required=False,
        fix_suggestion="Use a value like 10",
        example="10",
        default_value=str(AuthDefaults.TIMEOUT_SECONDS),
    ),
    "AUTH_DEV_ROLES": EnvVarRule(
        pattern=re.compile(r"^\s*\{.*\}\s*$", re.DOTALL),
        pattern_description="JSON object mapping user id to a list of role names",
        required=False,
        fix_suggestion="Only read with DEBUG_MODE=true and no AUTH_PERMISSION_URL",
        example='{"local-user": ["poc"]}',
    ),

    # =========================================================================
    # APPLICATION
    # =========================================================================
    "DEBUG_MODE": EnvVarRule(
        pattern=_BOOLEAN,
        pattern_description="Boolean (true/false)",
        required=False,
        fix_suggestion="Use 'true' or 'false'",
        example="false",
        default_value=str(AppDefaults.DEBUG_MODE).lower(),
    ),
    "LOG_LEVEL": EnvVarRule(
        pattern=_LOG_LEVEL,
        pattern_description="Python logging level name",
        required=False,
        fix_suggestion="Use DEBUG, INFO, WARNING, ERROR or CRITICAL",
        example="INFO",
        default_value=AppDefaults.LOG_LEVEL,
    ),
}


# ============================================================================
# VALIDATION FUNCTIONS
# ============================================================================

def validate_single_var(
    var_name: str,
    rule: EnvVarRule,
    include_warnings: bool = True
) -> Optional[EnvVarIssue]:
    """
    Validate a single environment variable against its rule.

    Returns:
        EnvVarIssue if validation fails (or a warning when a default
        applies), None if it passes
    """
    value = os.environ.get(var_name)

    if rule.is_missing(value):
        return EnvVarIssue(
            var_name=var_name,
            message="Required environment variable not set",
            current_value=value,
            expected_pattern=rule.pattern_description,
            fix_suggestion=f"{rule.fix_suggestion}. Example: {rule.example}",
            severity="error",
        )

    if not value:
        if include_warnings and rule.default_value is not None:
            return EnvVarIssue(
                var_name=var_name,
                message="Not set, using default value",
                current_value=None,
                expected_pattern=f"Default: {rule.default_value}",
                fix_suggestion=f"Set explicitly or accept default. {rule.fix_suggestion}",
                severity="warning",
            )
        return None

    if not rule.pattern.match(value):
        return EnvVarIssue(
            var_name=var_name,
            message="Invalid format",
            current_value=value,
            expected_pattern=rule.pattern_description,
            fix_suggestion=f"{rule.fix_suggestion}. Example: {rule.example}",
            severity="error",
        )

    return None


def validate_environment(
    rules: Optional[Dict[str, EnvVarRule]] = None,
    include_warnings: bool = True
) -> List[EnvVarIssue]:
    """
    Validate all environment variables against their rules.

    Args:
        rules: Optional custom rules dict (defaults to ENV_VAR_RULES)
        include_warnings: Whether to include warnings for vars using defaults
    """
    if rules is None:
        rules = ENV_VAR_RULES

    results = []
    for var_name, rule in rules.items():
        result = validate_single_var(var_name, rule, include_warnings=include_warnings)
        if result:
            results.append(result)

    return results


def get_validation_summary(include_warnings: bool = True) -> Dict[str, Any]:
    """Summary of environment validation status, safe to log."""
    all_results = validate_environment(include_warnings=include_warnings)

    errors = [r for r in all_results if r.severity == "error"]
    warnings = [r for r in all_results if r.severity == "warning"]

    required_vars = [name for name, rule in ENV_VAR_RULES.items() if rule.required]
    missing_required = [name for name in required_vars if ENV_VAR_RULES[name].is_missing(os.environ.get(name))]

    return {
        "valid": len(errors) == 0,
        "error_count": len(errors),
        "warning_count": len(warnings),
        "required_vars": {
            "total": len(required_vars),
            "missing": missing_required,
        },
        "errors": [e.to_dict() for e in errors],
        "warnings": [w.to_dict() for w in warnings],
    }


def log_validation_results(logger) -> bool:
    """
    Log validation results at appropriate levels.

    Returns:
        True if no errors (warnings are OK), False otherwise
    """
    all_results = validate_environment(include_warnings=True)

    errors = [r for r in all_results if r.severity == "error"]
    warnings = [r for r in all_results if r.severity == "warning"]

    for error in errors:
        logger.error(f"ENV VAR ERROR: {error.var_name} - {error.message}")
        logger.error(f"  Expected: {error.expected_pattern}")
        logger.error(f"  Fix: {error.fix_suggestion}")

    if warnings:
        logger.warning(f"ENV VARS: {len(warnings)} optional variables using defaults")
        for warning in warnings:
            logger.warning(f"  {warning.var_name} -> {warning.expected_pattern.replace('Default: ', '')}")

    if errors:
        logger.error(f"STARTUP_FAILED: {len(errors)} environment variable errors")
        return False

    logger.info(f"Environment validation passed ({len(warnings)} vars using defaults)")
    return True


__all__ = [
    "ENV_VAR_RULES",
    "EnvVarRule",
    "EnvVarIssue",
    "validate_environment",
    "validate_single_var",
    "get_validation_summary",
    "log_validation_results",
]
