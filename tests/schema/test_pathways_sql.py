"""
pathway_versions query builders.

Statements are rendered with as_string(None) (no connection needed) and
checked for named placeholders only: no value may be interpolated.
"""

import json
from datetime import datetime, timezone

from psycopg import sql

from core.models.pathways import PathwayVersion, ScopeKey
from core.schema.pathways_sql import (
    OVERLAP_CONSTRAINT,
    PreparedQuery,
    build_insert_query,
    build_overlap_query,
    build_list_query,
    build_select_by_id_query,
    build_table_ddl,
)
from tests.factories.model_factories import make_feature_collection, make_pathways_request
from tests.factories.fakes import InMemoryPathwayVersionStore


def render(query: PreparedQuery) -> str:
    return query.statement.as_string(None)


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class TestBuildInsertQuery:
    def test_named_placeholders_for_every_value(self):
        record = PathwayVersion.model_validate(make_pathways_request())
        query = build_insert_query(record)
        text = render(query)

        assert isinstance(query.statement, sql.Composed)
        assert '"public"."pathway_versions"' in text
        for name in query.params:
            assert f"%({name})s" in text
        assert record.collected_by not in text
        assert record.tdei_record_id not in text

    def test_confidence_level_is_literal_zero(self):
        record = PathwayVersion.model_validate(make_pathways_request())
        record = record.model_copy(update={"confidence_level": 80})
        query = build_insert_query(record)

        assert "confidence_level" not in query.params
        assert "%(confidence_level)s" not in render(query)
        values = render(query).split("VALUES", 1)[1]
        assert "(%(tdei_record_id)s, 0, " in values

    def test_polygon_passed_as_geojson_text(self):
        fc = make_feature_collection()
        record = PathwayVersion.model_validate(make_pathways_request(polygon=fc))
        query = build_insert_query(record)

        assert "ST_GeomFromGeoJSON(%(polygon)s)" in render(query)
        assert json.loads(query.params["polygon"]) == fc["features"][0]["geometry"]

    def test_no_polygon_column_without_polygon(self):
        record = PathwayVersion.model_validate(make_pathways_request())
        query = build_insert_query(record)

        assert "polygon" not in query.params
        assert '"polygon"' not in render(query)

    def test_schema_identifier(self):
        record = PathwayVersion.model_validate(make_pathways_request())
        assert '"tdei"."pathway_versions"' in render(build_insert_query(record, schema="tdei"))


class TestBuildOverlapQuery:
    def test_half_open_predicate(self):
        query = build_overlap_query(ScopeKey("g", "s"), utc(2023, 1, 1), utc(2023, 6, 1))
        text = " ".join(render(query).split())

        assert "valid_from < %(valid_to)s" in text
        assert "%(valid_from)s < valid_to" in text
        assert "OVERLAPS" not in text

    def test_params(self):
        query = build_overlap_query(ScopeKey("g", "s"), utc(2023, 1, 1), utc(2023, 6, 1))
        assert query.params == {
            "project_group_id": "g",
            "station_id": "s",
            "valid_from": utc(2023, 1, 1),
            "valid_to": utc(2023, 6, 1),
        }

    def test_inserted_record_overlaps_itself(self):
        """A stored record is always found by the overlap query built from its own interval."""
        record = PathwayVersion.model_validate(make_pathways_request())
        store = InMemoryPathwayVersionStore()

        with store.transaction() as uow:
            uow.execute_insert(build_insert_query(record))

        with store.transaction() as uow:
            rows = uow.execute_query(build_overlap_query(record.scope, record.valid_from, record.valid_to))

        assert [r["tdei_record_id"] for r in rows] == [record.tdei_record_id]


class TestOtherBuilders:
    def test_select_by_id(self):
        query = build_select_by_id_query("abc")
        assert query.params == {"tdei_record_id": "abc"}
        assert "ST_AsGeoJSON(polygon)" in render(query)

    def test_ddl_has_exclusion_constraint(self):
        statements = [s.as_string(None) for s in build_table_ddl("tdei")]
        table_ddl = " ".join(statements[-1].split())

        assert any("btree_gist" in s for s in statements)
        assert f'CONSTRAINT "{OVERLAP_CONSTRAINT}" EXCLUDE USING gist' in table_ddl
        assert "tstzrange(valid_from, valid_to, '[)') WITH &&" in table_ddl
        assert "WITH && ) WHERE (valid_from < valid_to)" in table_ddl
        assert "tdei_record_id TEXT PRIMARY KEY" in table_ddl


class TestBuildListQuery:
    def test_no_filters(self):
        query = build_list_query()
        text = " ".join(render(query).split())

        assert "WHERE" not in text
        assert "ORDER BY valid_from DESC, tdei_record_id LIMIT %(limit)s OFFSET %(offset)s" in text
        assert query.params == {"limit": 10, "offset": 0}

    def test_all_filters_are_placeholders(self):
        at = utc(2023, 5, 1)
        query = build_list_query("g1", "s1", valid_at=at, page_no=3, page_size=20, schema="tdei")
        text = " ".join(render(query).split())

        assert '"tdei"."pathway_versions"' in text
        assert "tdei_project_group_id = %(project_group_id)s" in text
        assert "tdei_station_id = %(station_id)s" in text
        assert "valid_from <= %(valid_at)s AND %(valid_at)s < valid_to" in text
        assert "g1" not in text and "s1" not in text
        assert query.params == {
            "project_group_id": "g1",
            "station_id": "s1",
            "valid_at": at,
            "limit": 20,
            "offset": 40,
        }

    def test_single_filter(self):
        text = " ".join(render(build_list_query(station_id="s9")).split())
        assert "WHERE tdei_station_id = %(station_id)s ORDER BY" in text

    def test_page_bounds_clamped(self):
        assert build_list_query(page_no=0, page_size=0).params == {"limit": 1, "offset": 0}
        assert build_list_query(page_size=10_000).params["limit"] == 100
