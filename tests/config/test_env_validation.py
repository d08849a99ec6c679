"""
Environment variable validation tests.

Tests regex patterns and required/optional handling of ENV_VAR_RULES.
"""

import logging

import pytest

from config.env_validation import (
    ENV_VAR_RULES,
    get_validation_summary,
    log_validation_results,
    validate_environment,
    validate_single_var,
)

REQUIRED = {"ServiceBusConnection"}


class TestRequiredVariables:
    def test_required_set(self):
        assert {name for name, rule in ENV_VAR_RULES.items() if rule.required} == REQUIRED

    def test_all_missing_reported(self, clean_env):
        errors = [r for r in validate_environment() if r.severity == "error"]
        assert {e.var_name for e in errors} == REQUIRED

    def test_summary_lists_missing(self, clean_env):
        summary = get_validation_summary()
        assert summary["valid"] is False
        assert set(summary["required_vars"]["missing"]) == REQUIRED

    @pytest.mark.parametrize("var", ["SERVICE_BUS_NAMESPACE", "ServiceBusConnection__fullyQualifiedNamespace"])
    def test_managed_identity_namespace_satisfies_service_bus(self, clean_env, var):
        clean_env.setenv(var, "tdei.servicebus.windows.net")

        errors = [r for r in validate_environment() if r.severity == "error"]

        assert errors == []
        assert get_validation_summary()["required_vars"]["missing"] == []
        assert log_validation_results(logging.getLogger("test")) is True

    def test_postgres_credentials_not_required_at_startup(self, clean_env):
        clean_env.setenv("ServiceBusConnection", "Endpoint=sb://x.servicebus.windows.net/;SharedAccessKeyName=a;SharedAccessKey=b")

        issues = validate_environment()

        assert not [r for r in issues if r.severity == "error"]
        assert not {"POSTGRES_USER", "POSTGRES_PASSWORD", "POSTGRES_DB"} & {r.var_name for r in issues}

    def test_postgres_db_format_still_checked(self, monkeypatch):
        monkeypatch.setenv("POSTGRES_DB", "9 bad name")
        result = validate_single_var("POSTGRES_DB", ENV_VAR_RULES["POSTGRES_DB"])
        assert result.severity == "error"


class TestServiceBusConnection:
    rule = ENV_VAR_RULES["ServiceBusConnection"]

    def test_connection_string_accepted(self, monkeypatch):
        monkeypatch.setenv("ServiceBusConnection", "Endpoint=sb://x.servicebus.windows.net/;SharedAccessKeyName=a;SharedAccessKey=b")
        assert validate_single_var("ServiceBusConnection", self.rule) is None

    def test_plain_namespace_rejected(self, monkeypatch):
        monkeypatch.setenv("ServiceBusConnection", "x.servicebus.windows.net")
        result = validate_single_var("ServiceBusConnection", self.rule)
        assert result is not None
        assert result.severity == "error"

    def test_secret_masked_in_dict(self, monkeypatch):
        monkeypatch.setenv("ServiceBusConnection", "not-a-connection-string-but-secret")
        result = validate_single_var("ServiceBusConnection", self.rule)
        assert "secret" not in str(result.to_dict()["current_value"])


class TestOptionalVariables:
    def test_default_reported_as_warning(self, clean_env):
        result = validate_single_var("VALIDATION_TOPIC", ENV_VAR_RULES["VALIDATION_TOPIC"])
        assert result.severity == "warning"

    def test_no_warning_when_disabled(self, clean_env):
        assert validate_single_var("VALIDATION_TOPIC", ENV_VAR_RULES["VALIDATION_TOPIC"], include_warnings=False) is None

    @pytest.mark.parametrize("var,value", [
        ("POSTGRES_PORT", "5432"),
        ("POSTGRES_SSLMODE", "require"),
        ("AUTH_PERMISSION_URL", "https://api.tdei.example/permission"),
        ("SERVICE_BUS_RETRY_COUNT", "5"),
        ("LOG_LEVEL", "debug"),
    ])
    def test_valid_values(self, monkeypatch, var, value):
        monkeypatch.setenv(var, value)
        assert validate_single_var(var, ENV_VAR_RULES[var]) is None

    @pytest.mark.parametrize("var,value", [
        ("POSTGRES_PORT", "abc"),
        ("POSTGRES_SSLMODE", "always"),
        ("AUTH_PERMISSION_URL", "claims-service"),
        ("SERVICE_BUS_RETRY_COUNT", "0"),
        ("POSTGRES_SCHEMA", "Bad-Schema"),
    ])
    def test_invalid_values(self, monkeypatch, var, value):
        monkeypatch.setenv(var, value)
        result = validate_single_var(var, ENV_VAR_RULES[var])
        assert result is not None
        assert result.severity == "error"


class TestLogValidationResults:
    def test_returns_true_when_configured(self):
        assert log_validation_results(logging.getLogger("test")) is True

    def test_returns_false_when_required_missing(self, clean_env):
        assert log_validation_results(logging.getLogger("test")) is False
