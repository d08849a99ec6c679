# ============================================================================
# PATHWAY VERSION REPOSITORY
# ============================================================================
# STATUS: Infrastructure - pathway_versions persistence
# PURPOSE: Transactional unit of work for admission control
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: PostgreSQLPathwayVersionStore, PostgreSQLUnitOfWork, scope_lock_key
# DEPENDENCIES: psycopg, core.schema.pathways_sql
# ============================================================================
"""
Pathway Version Repository.

Executes the prepared queries of core.schema.pathways_sql inside one
transaction per admission.

Race safety for (project group, station) scopes has two layers:
    1. pg_advisory_xact_lock on a hash of the scope serializes
       check-then-insert for the same scope. Released on commit/rollback.
    2. The EXCLUDE USING gist constraint on the table rejects an
       overlapping row at insert/commit if a writer bypassed the lock.

Unique and exclusion violations become IntegrityConflictError; every
other psycopg error becomes DatabaseError.

Exports:
    PostgreSQLPathwayVersionStore: IPathwayVersionStore implementation
    PostgreSQLUnitOfWork: One open transaction
    scope_lock_key: Advisory lock key for a scope
"""

import hashlib
import json
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, List, Optional

import psycopg
from psycopg import sql
from psycopg.errors import ExclusionViolation, UniqueViolation

from config.defaults import DatabaseDefaults
from core.schema.pathways_sql import PreparedQuery, build_list_query, build_select_by_id_query, build_table_ddl
from exceptions import ContractViolationError, DatabaseError, IntegrityConflictError
from interfaces.repository import IPathwayVersionStore, IPathwayVersionUnitOfWork
from util_logger import LoggerFactory, ComponentType
from .postgresql import PostgreSQLRepository

logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, "PathwayVersionStore")


def scope_lock_key(project_group_id: str, station_id: str) -> int:
    """
    Advisory lock key for a scope.

    First 15 hex chars of MD5(project_group_id|station_id) as an integer;
    15 hex chars fit safely in PostgreSQL's bigint range.
    """
    identity_key = f"{project_group_id}|{station_id}"
    return int(hashlib.md5(identity_key.encode()).hexdigest()[:15], 16)


def _decode_row(row) -> Dict[str, Any]:
    row = dict(row)
    if row.get('polygon'):
        row['polygon'] = json.loads(row['polygon'])
    return row


def _integrity_conflict(error: psycopg.Error) -> IntegrityConflictError:
    constraint = getattr(error.diag, 'constraint_name', None) if getattr(error, 'diag', None) else None
    return IntegrityConflictError(
        f"{type(error).__name__}: {error}",
        constraint_name=constraint
    )


class PostgreSQLUnitOfWork(IPathwayVersionUnitOfWork):
    """One open transaction on a psycopg connection."""

    def __init__(self, conn, schema: str):
        self.conn = conn
        self.schema = schema

    @staticmethod
    def _require_prepared(query) -> None:
        if not isinstance(query, PreparedQuery):
            raise ContractViolationError(
                f"Expected PreparedQuery, got {type(query).__name__}"
            )

    def lock_scope(self, project_group_id: str, station_id: str) -> None:
        lock_key = scope_lock_key(project_group_id, station_id)
        logger.debug(f"Acquiring scope lock {project_group_id}/{station_id} (lock={lock_key})")
        with self.conn.cursor() as cur:
            cur.execute(sql.SQL("SELECT pg_advisory_xact_lock(%s)"), (lock_key,))

    def execute_query(self, query: PreparedQuery) -> List[Dict[str, Any]]:
        self._require_prepared(query)
        try:
            with self.conn.cursor() as cur:
                cur.execute(query.statement, query.params)
                return list(cur.fetchall())
        except psycopg.Error as e:
            raise DatabaseError(f"Query failed: {type(e).__name__}: {e}") from e

    def execute_insert(self, query: PreparedQuery) -> int:
        self._require_prepared(query)
        try:
            with self.conn.cursor() as cur:
                cur.execute(query.statement, query.params)
                return cur.rowcount
        except (UniqueViolation, ExclusionViolation) as e:
            raise _integrity_conflict(e) from e
        except psycopg.Error as e:
            raise DatabaseError(f"Insert failed: {type(e).__name__}: {e}") from e


class PostgreSQLPathwayVersionStore(PostgreSQLRepository, IPathwayVersionStore):
    """
    pathway_versions store backed by PostgreSQL/PostGIS.

    Table: {schema}.pathway_versions
    """

    @contextmanager
    def transaction(self):
        """
        Yield a PostgreSQLUnitOfWork.

        Commits when the block exits normally; a constraint violation at
        commit time (deferred checks) raises IntegrityConflictError.
        """
        try:
            with self._get_connection() as conn:
                yield PostgreSQLUnitOfWork(conn, self.schema_name)
                try:
                    conn.commit()
                except (UniqueViolation, ExclusionViolation) as e:
                    logger.warning(f"Constraint violation at commit: {e}")
                    raise _integrity_conflict(e) from e
        except psycopg.Error as e:
            raise DatabaseError(f"Transaction failed: {type(e).__name__}: {e}") from e

    def get_version(self, record_id: str) -> Optional[Dict[str, Any]]:
        """Fetch one version by tdei_record_id (polygon as GeoJSON dict)."""
        query = build_select_by_id_query(record_id, schema=self.schema_name)
        with self.transaction() as uow:
            rows = uow.execute_query(query)

        if not rows:
            return None
        return _decode_row(rows[0])

    def list_versions(
        self,
        project_group_id: Optional[str] = None,
        station_id: Optional[str] = None,
        valid_at: Optional[datetime] = None,
        page_no: int = 1,
        page_size: int = DatabaseDefaults.PAGE_SIZE
    ) -> List[Dict[str, Any]]:
        """Filtered page of versions (see build_list_query)."""
        query = build_list_query(
            project_group_id=project_group_id,
            station_id=station_id,
            valid_at=valid_at,
            page_no=page_no,
            page_size=page_size,
            schema=self.schema_name,
        )
        with self.transaction() as uow:
            rows = uow.execute_query(query)
        return [_decode_row(row) for row in rows]

    def ensure_schema(self) -> None:
        """Create extensions, schema and table if missing."""
        logger.info(f"Ensuring pathway_versions table in schema {self.schema_name}")
        try:
            with self._get_cursor() as cur:
                for statement in build_table_ddl(self.schema_name):
                    cur.execute(statement)
        except psycopg.Error as e:
            raise DatabaseError(f"Schema setup failed: {type(e).__name__}: {e}") from e


__all__ = [
    'PostgreSQLPathwayVersionStore',
    'PostgreSQLUnitOfWork',
    'scope_lock_key',
]
