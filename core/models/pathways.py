# ============================================================================
# CORE MODELS - PATHWAY VERSION
# ============================================================================
# STATUS: Core data models - Dataset version entity
# PURPOSE: Pydantic model for one uploaded GTFS pathways dataset version
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================
"""
Pathway Version Models.

A PathwayVersion is one uploaded GTFS pathways dataset, valid for the
half-open interval [valid_from, valid_to) within a scope of
(tdei_project_group_id, tdei_station_id). Two versions of the same scope
must never have overlapping intervals.

No business logic here - parsing lives in core.logic.record_validation,
query construction in core.schema.pathways_sql.

Exports:
    PathwayVersion: Dataset version entity
    ScopeKey: (project group, station) partition key
    FieldError: One field-level validation failure
"""

from datetime import date, datetime, timezone
from typing import Any, Dict, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ScopeKey(NamedTuple):
    """Partition for validity-interval uniqueness."""
    project_group_id: str
    station_id: str

    def __str__(self) -> str:
        return f"{self.project_group_id}/{self.station_id}"


class FieldError(BaseModel):
    """
    One field-level validation failure.

    str() gives the human-readable form used in outbound response messages.
    """

    model_config = ConfigDict(frozen=True)

    field: str
    message: str

    def __str__(self) -> str:
        return self.message


def _as_utc_datetime(value: Any) -> Any:
    # Date-only strings ("2023-01-01") and date objects mean midnight UTC
    if isinstance(value, str) and len(value) == 10:
        try:
            value = date.fromisoformat(value)
        except ValueError:
            return value
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    return value


class PathwayVersion(BaseModel):
    """
    Dataset version record.

    Descriptive fields are required and non-empty (whitespace is stripped
    first). confidence_level is always 0 at creation; callers cannot set it
    through the request payload. valid_from < valid_to is not enforced here,
    the overlap check alone governs admission.

    Naive datetimes are treated as UTC so intervals are always comparable.
    """

    model_config = ConfigDict(str_strip_whitespace=True, extra='ignore')

    tdei_record_id: str = Field(..., min_length=1)
    confidence_level: int = Field(default=0)
    tdei_project_group_id: str = Field(..., min_length=1)
    tdei_station_id: str = Field(..., min_length=1)
    file_upload_path: str = Field(..., min_length=1)
    uploaded_by: str = Field(..., min_length=1)
    collected_by: str = Field(..., min_length=1)
    collection_date: datetime
    collection_method: str = Field(..., min_length=1)
    valid_from: datetime
    valid_to: datetime
    data_source: str = Field(..., min_length=1)
    pathways_schema_version: str = Field(..., min_length=1)
    polygon: Optional[Dict[str, Any]] = Field(
        default=None,
        description="GeoJSON FeatureCollection with a single polygon feature"
    )

    @field_validator('collection_date', 'valid_from', 'valid_to', mode='before')
    @classmethod
    def _parse_dates(cls, v):
        return _as_utc_datetime(v)

    @field_validator('collection_date', 'valid_from', 'valid_to')
    @classmethod
    def _ensure_timezone(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @property
    def scope(self) -> ScopeKey:
        return ScopeKey(self.tdei_project_group_id, self.tdei_station_id)

    @property
    def polygon_geometry(self) -> Optional[Dict[str, Any]]:
        """Geometry of the single polygon feature, or None."""
        if not self.polygon:
            return None
        features = self.polygon.get('features') or []
        if not features:
            return None
        return features[0].get('geometry')


__all__ = ['PathwayVersion', 'ScopeKey', 'FieldError']
