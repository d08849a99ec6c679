"""
PostgreSQL/PostGIS Database Configuration.

Provides configuration for the pathway_versions store used by the
admission-control path (direct version registration with overlap
rejection).

Exports:
    DatabaseConfig: Database configuration
    get_postgres_connection_string: Connection string factory
"""

import os
from typing import Optional
from urllib.parse import quote_plus
from pydantic import BaseModel, Field

from .defaults import DatabaseDefaults


# ============================================================================
# DATABASE CONFIGURATION
# ============================================================================

class DatabaseConfig(BaseModel):
    """
    PostgreSQL/PostGIS configuration (password authentication).
    """

    host: str = Field(
        default=DatabaseDefaults.HOST,
        description="PostgreSQL server hostname",
        examples=["tdei-pg.postgres.database.azure.com"]
    )

    port: int = Field(
        default=DatabaseDefaults.PORT,
        description="PostgreSQL server port number"
    )

    user: Optional[str] = Field(
        default=None,
        description="PostgreSQL username (POSTGRES_USER)"
    )

    password: Optional[str] = Field(
        default=None,
        repr=False,
        description="PostgreSQL password (POSTGRES_PASSWORD)"
    )

    database: str = Field(
        ...,
        description="PostgreSQL database name (POSTGRES_DB)",
        examples=["tdei"]
    )

    db_schema: str = Field(
        default=DatabaseDefaults.SCHEMA,
        description="Schema holding the pathway_versions table"
    )

    sslmode: str = Field(
        default=DatabaseDefaults.SSLMODE,
        description="libpq sslmode (disable, prefer, require, verify-full)"
    )

    connection_timeout_seconds: int = Field(
        default=DatabaseDefaults.CONNECTION_TIMEOUT_SECONDS,
        description="Connection timeout in seconds"
    )

    @property
    def connection_string(self) -> str:
        """
        Build a libpq URI.

        The password is URL-quoted; never log the result.
        """
        credentials = ""
        if self.user:
            credentials = quote_plus(self.user)
            if self.password:
                credentials += f":{quote_plus(self.password)}"
            credentials += "@"
        return (
            f"postgresql://{credentials}{self.host}:{self.port}/{self.database}"
            f"?sslmode={self.sslmode}&connect_timeout={self.connection_timeout_seconds}"
        )

    def debug_dict(self) -> dict:
        """Debug output for logging (password masked)."""
        return {
            "host": self.host,
            "port": self.port,
            "user": self.user,
            "password": "***MASKED***" if self.password else None,
            "database": self.database,
            "db_schema": self.db_schema,
            "sslmode": self.sslmode,
        }

    @classmethod
    def from_environment(cls) -> "DatabaseConfig":
        """Load DatabaseConfig from environment variables."""
        return cls(
            host=os.environ.get("POSTGRES_HOST", DatabaseDefaults.HOST),
            port=int(os.environ.get("POSTGRES_PORT", str(DatabaseDefaults.PORT))),
            user=os.environ.get("POSTGRES_USER"),
            password=os.environ.get("POSTGRES_PASSWORD"),
            database=os.environ.get("POSTGRES_DB", ""),
            db_schema=os.environ.get("POSTGRES_SCHEMA", DatabaseDefaults.SCHEMA),
            sslmode=os.environ.get("POSTGRES_SSLMODE", DatabaseDefaults.SSLMODE),
            connection_timeout_seconds=int(os.environ.get(
                "POSTGRES_CONNECTION_TIMEOUT", str(DatabaseDefaults.CONNECTION_TIMEOUT_SECONDS)
            )),
        )


def get_postgres_connection_string(config: Optional[DatabaseConfig] = None) -> str:
    """
    Get PostgreSQL connection string.

    Args:
        config: Optional DatabaseConfig instance. If None, creates from environment.

    Returns:
        PostgreSQL connection string
    """
    if config is None:
        config = DatabaseConfig.from_environment()

    return config.connection_string
