"""
Root conftest.py: sys.path, env vars, shared fixtures.

Sets up the test environment so all production code can be imported
without database connections, Service Bus namespaces or a claims service.
"""

import os
import sys

import pytest

# Add project root to sys.path so 'core', 'services', 'config', etc. are importable
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# Set at import time: function_app and the config singleton read these
# while test modules are being collected.
MINIMAL_ENV = {
    "ServiceBusConnection": "Endpoint=sb://test.servicebus.windows.net/;SharedAccessKeyName=test;SharedAccessKey=dGVzdA==",
    "VALIDATION_TOPIC": "gtfs-pathways-validation",
    "VALIDATION_SUBSCRIPTION": "gtfs-pathways-data-service",
    "DATA_SERVICE_TOPIC": "gtfs-pathways-data",
    "POSTGRES_HOST": "localhost",
    "POSTGRES_USER": "tdei",
    "POSTGRES_PASSWORD": "test-password",
    "POSTGRES_DB": "tdei",
    "AUTH_PERMISSION_URL": "http://localhost:8080/api/v1/permission",
    "ENVIRONMENT": "dev",
}
for _key, _value in MINIMAL_ENV.items():
    os.environ.setdefault(_key, _value)


@pytest.fixture(autouse=True)
def fresh_config():
    """Drop the config singleton around every test so monkeypatched env vars apply."""
    from config import reset_config
    reset_config()
    yield
    reset_config()


@pytest.fixture
def accept_any_polygon():
    return lambda fc: True


@pytest.fixture
def reject_any_polygon():
    return lambda fc: False
