"""
Configuration Package - Domain-Specific Configuration Modules

Structure:
    config/
    ├── __init__.py              # This file - exports and singleton
    ├── app_config.py            # Main config (composes domain configs)
    ├── database_config.py       # PostgreSQL/PostGIS
    ├── queue_config.py          # Service Bus topics and subscriptions
    ├── auth_config.py           # Claims service
    ├── defaults.py              # Default values and fixed workflow texts
    └── env_validation.py        # Startup environment checks

Usage:
    from config import get_config
    config = get_config()
    topic = config.queues.data_service_topic

    from config import debug_config
    info = debug_config()  # Passwords masked
"""

from typing import Optional

from .database_config import DatabaseConfig, get_postgres_connection_string
from .queue_config import QueueConfig
from .auth_config import AuthConfig
from .app_config import AppConfig
from .defaults import PathwaysDefaults


# ============================================================================
# SINGLETON PATTERN
# ============================================================================

_config_instance: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Get global configuration singleton.

    Returns:
        AppConfig instance loaded from environment
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = AppConfig.from_environment()
    return _config_instance


def reset_config() -> None:
    """Drop the cached singleton (tests and settings reloads)."""
    global _config_instance
    _config_instance = None


def debug_config() -> dict:
    """
    Get sanitized configuration for debugging (masks sensitive values).
    """
    try:
        config = get_config()
        return {
            'app_name': config.app_name,
            'environment': config.environment,
            'debug_mode': config.debug_mode,
            'log_level': config.log_level,
            'database': config.database.debug_dict(),
            'queues': config.queues.debug_dict(),
            'auth': config.auth.debug_dict(),
        }
    except Exception as e:
        return {'error': f'Configuration validation failed: {e}'}


__all__ = [
    'AppConfig',
    'get_config',
    'reset_config',
    'debug_config',

    'DatabaseConfig',
    'get_postgres_connection_string',

    'QueueConfig',

    'AuthConfig',

    'PathwaysDefaults',
]
