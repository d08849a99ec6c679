# ============================================================================
# PATHWAY VERSION SQL BUILDERS
# ============================================================================
# STATUS: Core - Pure query construction (nothing executed here)
# PURPOSE: psycopg.sql composition for the pathway_versions table
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================
"""
Pathway Version SQL Builders.

Pure builders consumed by the persistence collaborator
(infrastructure.pathways_repository). Every value travels as a named
placeholder; identifiers are composed with sql.Identifier. The polygon
geometry is passed as GeoJSON text through ST_GeomFromGeoJSON.

Overlap semantics are half-open: [a_from, a_to) and [b_from, b_to) overlap
iff a_from < b_to AND b_from < a_to. Touching boundaries do not overlap.
(SQL OVERLAPS is avoided; it treats zero-length periods differently.)

Exports:
    PreparedQuery: Statement plus named parameters
    build_insert_query: INSERT for one PathwayVersion
    build_overlap_query: Conflicting record ids for a scope/interval
    build_select_by_id_query: Single row by tdei_record_id
    build_list_query: Filtered, paged listing of versions
    build_table_ddl: Table, exclusion constraint and extensions
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from psycopg import sql

from config.defaults import DatabaseDefaults
from core.models.pathways import PathwayVersion, ScopeKey


TABLE_NAME = DatabaseDefaults.TABLE_NAME
OVERLAP_CONSTRAINT = "pathway_versions_no_overlap"

# Column order for INSERT (polygon appended only when present)
_INSERT_COLUMNS = (
    "tdei_record_id",
    "confidence_level",
    "tdei_project_group_id",
    "tdei_station_id",
    "file_upload_path",
    "uploaded_by",
    "collected_by",
    "collection_date",
    "collection_method",
    "valid_from",
    "valid_to",
    "data_source",
    "pathways_schema_version",
)


@dataclass(frozen=True)
class PreparedQuery:
    """A composed statement and its named parameters (%(name)s style)."""
    statement: sql.Composed
    params: Dict[str, Any] = field(default_factory=dict)


def _table(schema: str) -> sql.Composed:
    return sql.SQL("{}.{}").format(sql.Identifier(schema), sql.Identifier(TABLE_NAME))


def build_insert_query(record: PathwayVersion, schema: str = DatabaseDefaults.SCHEMA) -> PreparedQuery:
    """
    Build the INSERT for one record.

    confidence_level is written as the literal 0 regardless of the model
    value.
    """
    params: Dict[str, Any] = {
        "tdei_record_id": record.tdei_record_id,
        "tdei_project_group_id": record.tdei_project_group_id,
        "tdei_station_id": record.tdei_station_id,
        "file_upload_path": record.file_upload_path,
        "uploaded_by": record.uploaded_by,
        "collected_by": record.collected_by,
        "collection_date": record.collection_date,
        "collection_method": record.collection_method,
        "valid_from": record.valid_from,
        "valid_to": record.valid_to,
        "data_source": record.data_source,
        "pathways_schema_version": record.pathways_schema_version,
    }

    columns = list(_INSERT_COLUMNS)
    values = [
        sql.Literal(0) if name == "confidence_level" else sql.Placeholder(name)
        for name in columns
    ]

    geometry = record.polygon_geometry
    if geometry is not None:
        columns.append("polygon")
        values.append(sql.SQL("ST_GeomFromGeoJSON({})").format(sql.Placeholder("polygon")))
        params["polygon"] = json.dumps(geometry)

    statement = sql.SQL("INSERT INTO {} ({}) VALUES ({})").format(
        _table(schema),
        sql.SQL(", ").join(sql.Identifier(c) for c in columns),
        sql.SQL(", ").join(values),
    )
    return PreparedQuery(statement=statement, params=params)


def build_overlap_query(
    scope: ScopeKey,
    valid_from: datetime,
    valid_to: datetime,
    schema: str = DatabaseDefaults.SCHEMA
) -> PreparedQuery:
    """Select tdei_record_id of every row in scope whose interval overlaps."""
    statement = sql.SQL("""
        SELECT tdei_record_id FROM {}
        WHERE tdei_project_group_id = {}
          AND tdei_station_id = {}
          AND valid_from < {}
          AND {} < valid_to
        ORDER BY valid_from
    """).format(
        _table(schema),
        sql.Placeholder("project_group_id"),
        sql.Placeholder("station_id"),
        sql.Placeholder("valid_to"),
        sql.Placeholder("valid_from"),
    )
    return PreparedQuery(
        statement=statement,
        params={
            "project_group_id": scope.project_group_id,
            "station_id": scope.station_id,
            "valid_from": valid_from,
            "valid_to": valid_to,
        },
    )


_SELECT_COLUMNS = sql.SQL("""
        tdei_record_id, confidence_level, tdei_project_group_id, tdei_station_id,
        file_upload_path, uploaded_by, collected_by, collection_date,
        collection_method, valid_from, valid_to, data_source,
        pathways_schema_version, ST_AsGeoJSON(polygon) AS polygon
""")


def build_select_by_id_query(record_id: str, schema: str = DatabaseDefaults.SCHEMA) -> PreparedQuery:
    statement = sql.SQL("SELECT {} FROM {} WHERE tdei_record_id = {}").format(
        _SELECT_COLUMNS, _table(schema), sql.Placeholder("tdei_record_id")
    )
    return PreparedQuery(statement=statement, params={"tdei_record_id": record_id})


def build_list_query(
    project_group_id: Optional[str] = None,
    station_id: Optional[str] = None,
    valid_at: Optional[datetime] = None,
    page_no: int = 1,
    page_size: int = DatabaseDefaults.PAGE_SIZE,
    schema: str = DatabaseDefaults.SCHEMA
) -> PreparedQuery:
    """
    Filtered, paged listing, newest validity window first.

    Args:
        project_group_id: Only versions of this project group
        station_id: Only versions of this station
        valid_at: Only versions whose [valid_from, valid_to) contains it
        page_no: 1-based page; values below 1 read page 1
        page_size: Rows per page, clamped to [1, MAX_PAGE_SIZE]
    """
    page_no = max(1, page_no)
    page_size = min(max(1, page_size), DatabaseDefaults.MAX_PAGE_SIZE)

    conditions: List[sql.Composable] = []
    params: Dict[str, Any] = {
        "limit": page_size,
        "offset": (page_no - 1) * page_size,
    }

    if project_group_id is not None:
        conditions.append(sql.SQL("tdei_project_group_id = {}").format(sql.Placeholder("project_group_id")))
        params["project_group_id"] = project_group_id
    if station_id is not None:
        conditions.append(sql.SQL("tdei_station_id = {}").format(sql.Placeholder("station_id")))
        params["station_id"] = station_id
    if valid_at is not None:
        conditions.append(sql.SQL("valid_from <= {0} AND {0} < valid_to").format(sql.Placeholder("valid_at")))
        params["valid_at"] = valid_at

    where = sql.SQL("WHERE {}").format(sql.SQL(" AND ").join(conditions)) if conditions else sql.SQL("")

    statement = sql.SQL("SELECT {} FROM {} {} ORDER BY valid_from DESC, tdei_record_id LIMIT {} OFFSET {}").format(
        _SELECT_COLUMNS,
        _table(schema),
        where,
        sql.Placeholder("limit"),
        sql.Placeholder("offset"),
    )
    return PreparedQuery(statement=statement, params=params)


def build_table_ddl(schema: str = DatabaseDefaults.SCHEMA) -> List[sql.Composed]:
    """
    DDL for the pathway_versions table.

    The exclusion constraint rejects overlapping intervals within a scope at
    commit time even when two admissions race past the overlap query.
    It is partial: tstzrange cannot hold an inverted interval, and such rows
    are governed by the overlap query alone.
    Requires the postgis and btree_gist extensions.
    """
    return [
        sql.SQL("CREATE EXTENSION IF NOT EXISTS postgis").format(),
        sql.SQL("CREATE EXTENSION IF NOT EXISTS btree_gist").format(),
        sql.SQL("CREATE SCHEMA IF NOT EXISTS {}").format(sql.Identifier(schema)),
        sql.SQL("""
            CREATE TABLE IF NOT EXISTS {} (
                tdei_record_id TEXT PRIMARY KEY,
                confidence_level INTEGER NOT NULL DEFAULT 0,
                tdei_project_group_id TEXT NOT NULL,
                tdei_station_id TEXT NOT NULL,
                file_upload_path TEXT NOT NULL,
                uploaded_by TEXT NOT NULL,
                collected_by TEXT NOT NULL,
                collection_date TIMESTAMPTZ NOT NULL,
                collection_method TEXT NOT NULL,
                valid_from TIMESTAMPTZ NOT NULL,
                valid_to TIMESTAMPTZ NOT NULL,
                data_source TEXT NOT NULL,
                pathways_schema_version TEXT NOT NULL,
                polygon GEOMETRY,
                created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
                CONSTRAINT {} EXCLUDE USING gist (
                    tdei_project_group_id WITH =,
                    tdei_station_id WITH =,
                    tstzrange(valid_from, valid_to, '[)') WITH &&
                ) WHERE (valid_from < valid_to)
            )
        """).format(_table(schema), sql.Identifier(OVERLAP_CONSTRAINT)),
    ]


__all__ = [
    'PreparedQuery',
    'TABLE_NAME',
    'OVERLAP_CONSTRAINT',
    'build_insert_query',
    'build_overlap_query',
    'build_select_by_id_query',
    'build_list_query',
    'build_table_ddl',
]
