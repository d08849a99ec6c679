"""
Config test fixtures: clean environment via monkeypatch.
"""

import pytest

from config.env_validation import ENV_VAR_RULES


@pytest.fixture
def clean_env(monkeypatch):
    """Remove all env vars that config modules might read, for isolation."""
    env_vars_to_clear = list(ENV_VAR_RULES) + [
        "ServiceBusConnection__fullyQualifiedNamespace",
        "UPLOAD_SUBSCRIPTION", "SERVICE_BUS_MAX_WAIT_TIME",
        "POSTGRES_CONNECTION_TIMEOUT", "APP_NAME", "ENVIRONMENT", "AUTH_DEV_ROLES",
    ]
    for var in env_vars_to_clear:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch
