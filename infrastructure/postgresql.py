# ============================================================================
# POSTGRESQL BASE REPOSITORY
# ============================================================================
# STATUS: Infrastructure - PostgreSQL connection management
# PURPOSE: Connection/cursor context managers shared by PostgreSQL repositories
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================
"""
PostgreSQL Repository Base - Direct Database Access

Architecture:
    PostgreSQLRepository (this file - connection management)
        ↓
    PostgreSQLPathwayVersionStore (infrastructure.pathways_repository)

Key Features:
- Direct PostgreSQL access using psycopg3 with dict rows
- SQL composition for injection safety (psycopg.sql)
- One connection per operation; callers own the transaction
"""

from contextlib import contextmanager
from typing import Optional

import psycopg
from psycopg.rows import dict_row

from config import AppConfig, get_config
from exceptions import ConfigurationError
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, "PostgreSQLRepository")


class PostgreSQLRepository:
    """
    PostgreSQL base repository.

    Raises ConfigurationError when no connection string is given and
    POSTGRES_DB is unset.

    Configuration priority:
        1. Explicit parameters (connection_string, schema_name)
        2. Provided AppConfig object
        3. Global configuration from get_config()

    Thread Safety:
        Each operation opens its own connection, so one instance can be
        shared across threads.
    """

    def __init__(
        self,
        connection_string: Optional[str] = None,
        schema_name: Optional[str] = None,
        config: Optional[AppConfig] = None
    ):
        self.config = config or get_config()
        self.schema_name = schema_name or self.config.database.db_schema
        if not connection_string and not self.config.database.database:
            raise ConfigurationError(
                "PostgreSQL not configured: set POSTGRES_DB (and POSTGRES_USER/POSTGRES_PASSWORD)"
            )
        self.conn_string = connection_string or self.config.database.connection_string
        logger.info(f"✅ {type(self).__name__} initialized with schema: {self.schema_name}")

    @contextmanager
    def _get_connection(self):
        """
        Context manager for PostgreSQL database connections.

        Autocommit is OFF: the caller commits. Any exception raised in the
        block rolls back the open transaction; the connection is always
        closed.

        Yields:
            psycopg.Connection with dict_row row factory
        """
        conn = None
        try:
            conn = psycopg.connect(self.conn_string, row_factory=dict_row)
            yield conn
        except psycopg.OperationalError as e:
            logger.error(f"❌ PostgreSQL connection error: {type(e).__name__}: {e}")
            if conn is not None and not conn.closed:
                conn.rollback()
            raise
        except Exception:
            if conn is not None and not conn.closed:
                conn.rollback()
            raise
        finally:
            if conn is not None:
                conn.close()

    @contextmanager
    def _get_cursor(self, conn=None):
        """
        Cursor context manager.

        With an existing conn the caller controls the transaction; without
        one a fresh connection is opened and committed on success.
        """
        if conn is not None:
            with conn.cursor() as cursor:
                yield cursor
        else:
            with self._get_connection() as conn:
                with conn.cursor() as cursor:
                    yield cursor
                conn.commit()
