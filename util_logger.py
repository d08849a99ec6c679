"""
Unified Logger System.

JSON structured logging for the pathways data service. Every line is one
JSON object on stdout; Application Insights lifts `customDimensions` into
queryable columns, so handlers pass checkpoint names and record ids there:

    logger.info(
        f"[{correlation_id}] Outcome published",
        extra={'custom_dimensions': {'checkpoint': 'OUTCOME_PUBLISHED',
                                     'tdei_record_id': record_id}}
    )

Exports:
    ComponentType: Layer a logger belongs to
    LogLevel: Enum for log levels
    LoggerFactory: Factory for creating loggers
    JSONFormatter: Formatter emitting one JSON object per record
    new_correlation_id: Short correlation id for per-message log filtering
"""

from enum import Enum
from typing import Dict
from datetime import datetime, timezone
import logging
import sys
import os
import json
import uuid


class ComponentType(Enum):
    """
    Service layers. Logger names are "<layer>.<component>".
    """
    SERVICE = "service"        # Workflow processor, admission control
    REPOSITORY = "repository"  # PostgreSQL, Service Bus
    TRIGGER = "trigger"        # Functions entry points
    ADAPTER = "adapter"        # Claims collaborator
    VALIDATOR = "validator"    # Polygon predicate


class LogLevel(Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    def to_python_level(self) -> int:
        return getattr(logging, self.value)

    @classmethod
    def from_string(cls, level: str) -> 'LogLevel':
        """Case-insensitive lookup, INFO for anything unknown."""
        try:
            return cls[level.upper()]
        except KeyError:
            return cls.INFO


def new_correlation_id() -> str:
    """Short id prefixed to every log line of one handler invocation."""
    return str(uuid.uuid4())[:8]


class JSONFormatter(logging.Formatter):
    """
    Outputs logs in a format that Application Insights can automatically parse.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name,
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        if hasattr(record, 'custom_dimensions'):
            log_obj['customDimensions'] = record.custom_dimensions

        if record.exc_info:
            log_obj['exception'] = {
                'type': record.exc_info[0].__name__ if record.exc_info[0] else None,
                'message': str(record.exc_info[1]) if record.exc_info[1] else None,
                'traceback': self.formatException(record.exc_info)
            }

        return json.dumps(log_obj, default=str)


class _ComponentFilter(logging.Filter):
    """Stamps component_type/component_name into custom_dimensions."""

    def __init__(self, component_type: ComponentType, name: str):
        super().__init__()
        self.component_type = component_type
        self.component_name = name

    def filter(self, record: logging.LogRecord) -> bool:
        dims = dict(getattr(record, 'custom_dimensions', None) or {})
        dims.setdefault('component_type', self.component_type.value)
        dims.setdefault('component_name', self.component_name)
        record.custom_dimensions = dims
        return True


class LoggerFactory:
    """
    Factory for creating component-specific loggers.

    Example:
        logger = LoggerFactory.create_logger(
            ComponentType.SERVICE,
            "PathwaysWorkflowProcessor"
        )
        logger.info("Processing message")
    """

    # Repositories always log at DEBUG so SQL and send attempts are traceable
    LEVEL_OVERRIDES: Dict[ComponentType, LogLevel] = {
        ComponentType.REPOSITORY: LogLevel.DEBUG,
    }

    @staticmethod
    def default_level() -> LogLevel:
        if os.getenv('DEBUG_LOGGING', '').lower() == 'true':
            return LogLevel.DEBUG
        return LogLevel.from_string(os.getenv('LOG_LEVEL', 'INFO'))

    @classmethod
    def create_logger(cls, component_type: ComponentType, name: str) -> logging.Logger:
        """
        Create (or fetch) the logger for one component.

        Safe to call repeatedly: the JSON handler and component filter are
        attached once per logger name.
        """
        logger = logging.getLogger(f"{component_type.value}.{name}")
        level = cls.LEVEL_OVERRIDES.get(component_type, cls.default_level()).to_python_level()
        logger.setLevel(level)

        if not any(isinstance(h.formatter, JSONFormatter) for h in logger.handlers):
            handler = logging.StreamHandler(sys.stdout)
            handler.setLevel(level)
            handler.setFormatter(JSONFormatter())
            logger.addHandler(handler)

        if not any(isinstance(f, _ComponentFilter) for f in logger.filters):
            logger.addFilter(_ComponentFilter(component_type, name))

        # Allow propagation to Azure's root logger for Application Insights
        logger.propagate = True
        return logger
