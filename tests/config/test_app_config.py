"""
Composed application configuration loaded from environment variables.
"""

import pytest
from pydantic import ValidationError

from config import AppConfig, QueueConfig, debug_config, get_config, get_postgres_connection_string
from config.database_config import DatabaseConfig


class TestAppConfig:
    def test_defaults(self, clean_env):
        clean_env.setenv("POSTGRES_DB", "tdei")
        config = AppConfig.from_environment()

        assert config.queues.validation_topic == "gtfs-pathways-validation"
        assert config.queues.validation_subscription == "gtfs-pathways-data-service"
        assert config.queues.data_service_topic == "gtfs-pathways-data"
        assert config.database.port == 5432
        assert config.db_schema == "public"
        assert config.auth.permission_url is None
        assert config.debug_mode is False

    def test_overrides(self, clean_env):
        clean_env.setenv("POSTGRES_DB", "tdei")
        clean_env.setenv("VALIDATION_TOPIC", "custom-validation")
        clean_env.setenv("SERVICE_BUS_RETRY_COUNT", "5")
        clean_env.setenv("POSTGRES_SCHEMA", "pathways")
        clean_env.setenv("DEBUG_MODE", "true")

        config = AppConfig.from_environment()

        assert config.queues.validation_topic == "custom-validation"
        assert config.queues.retry_count == 5
        assert config.db_schema == "pathways"
        assert config.debug_mode is True

    def test_namespace_from_functions_identity_setting(self, clean_env):
        clean_env.setenv("ServiceBusConnection__fullyQualifiedNamespace", "tdei.servicebus.windows.net")
        config = QueueConfig.from_environment()
        assert config.namespace == "tdei.servicebus.windows.net"
        assert config.is_configured

    def test_retry_count_bounds(self):
        with pytest.raises(ValidationError):
            QueueConfig(retry_count=0)

    def test_singleton(self):
        assert get_config() is get_config()


class TestDatabaseConfig:
    def test_connection_string_quotes_password(self):
        config = DatabaseConfig(host="db", user="tdei", password="p@ss word", database="tdei")
        conn = get_postgres_connection_string(config)

        assert conn.startswith("postgresql://tdei:p%40ss+word@db:5432/tdei?")
        assert "sslmode=prefer" in conn

    def test_password_not_in_repr(self):
        config = DatabaseConfig(host="db", user="tdei", password="hunter2", database="tdei")
        assert "hunter2" not in repr(config)
        assert config.debug_dict()["password"] == "***MASKED***"


class TestDebugConfig:
    def test_secrets_masked(self):
        info = debug_config()
        assert info["database"]["password"] == "***MASKED***"
        assert info["queues"]["connection"] == "***MASKED***"
        assert "test-password" not in str(info)
