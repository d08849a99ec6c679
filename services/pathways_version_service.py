# ============================================================================
# PATHWAYS VERSION SERVICE
# ============================================================================
# STATUS: Service - Admission control for dataset versions
# PURPOSE: Validate, overlap-check and insert a version in one transaction
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: PathwaysVersionService
# DEPENDENCIES: core.logic, core.schema.pathways_sql, interfaces.repository
# ============================================================================
"""
Pathways Version Service - Admission Control.

Registers a new dataset version directly (not via the topic workflow):

    1. parse + validate the payload       -> ValidationError
    2. lock the (project group, station) scope for this transaction
    3. run the overlap query               -> DuplicateError
    4. insert, commit
    5. store unique/exclusion violation    -> DuplicateError

get_version and list_versions read stored versions back.

Steps 2-4 run on one unit of work. The scope lock makes concurrent
admissions for the same scope queue up behind each other; the table's
exclusion constraint rejects anything that still slips through, and that
rejection is reported as a duplicate rather than an internal error.
"""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from config.defaults import DatabaseDefaults
from core.logic.intervals import find_overlapping
from core.logic.record_validation import parse_and_validate
from core.schema.pathways_sql import build_insert_query
from exceptions import DuplicateError, IntegrityConflictError, ValidationError
from interfaces.repository import IPathwayVersionStore
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "PathwaysVersionService")


class PathwaysVersionService:
    """Admission control over an IPathwayVersionStore."""

    def __init__(
        self,
        store: IPathwayVersionStore,
        polygon_validator: Optional[Callable[[Dict[str, Any]], bool]] = None
    ):
        self.store = store
        self.polygon_validator = polygon_validator

    def create_version(self, payload: Any, user_id: Optional[str] = None) -> str:
        """
        Register one dataset version.

        Args:
            payload: Version metadata (JSON object)
            user_id: Authenticated uploader; overrides payload uploaded_by

        Returns:
            tdei_record_id of the stored version

        Raises:
            ValidationError: Field errors in payload
            DuplicateError: Interval overlaps an existing version of the
                scope, or the record id already exists
            DatabaseError: Store failure
        """
        overrides = {'uploaded_by': user_id} if user_id else None
        record, errors = parse_and_validate(payload, overrides, self.polygon_validator)
        if errors:
            logger.warning(f"Version rejected, {len(errors)} field errors")
            raise ValidationError(errors)

        scope = record.scope
        logger.info(
            f"Admitting {record.tdei_record_id} for {scope} "
            f"[{record.valid_from.isoformat()}, {record.valid_to.isoformat()})"
        )

        try:
            with self.store.transaction() as uow:
                uow.lock_scope(scope.project_group_id, scope.station_id)

                conflicts = find_overlapping(uow, scope, record.valid_from, record.valid_to)
                if conflicts:
                    raise DuplicateError(
                        f"Pathways version for project group {scope.project_group_id} and station "
                        f"{scope.station_id} overlaps existing version(s): {', '.join(conflicts)}",
                        project_group_id=scope.project_group_id,
                        station_id=scope.station_id,
                        conflicting_record_ids=conflicts,
                    )

                uow.execute_insert(build_insert_query(record, schema=uow.schema))

        except IntegrityConflictError as e:
            logger.warning(f"Store rejected {record.tdei_record_id}: {e} (constraint={e.constraint_name})")
            raise DuplicateError(
                f"Pathways version {record.tdei_record_id} conflicts with existing data for project group "
                f"{scope.project_group_id} and station {scope.station_id}",
                project_group_id=scope.project_group_id,
                station_id=scope.station_id,
            ) from e

        logger.info(f"✅ Stored version {record.tdei_record_id}")
        return record.tdei_record_id

    def get_version(self, record_id: str) -> Optional[Dict[str, Any]]:
        return self.store.get_version(record_id)

    def list_versions(
        self,
        project_group_id: Optional[str] = None,
        station_id: Optional[str] = None,
        valid_at: Optional[datetime] = None,
        page_no: int = 1,
        page_size: int = DatabaseDefaults.PAGE_SIZE
    ) -> List[Dict[str, Any]]:
        """
        Filtered page of stored versions, newest valid_from first.

        valid_at selects versions whose [valid_from, valid_to) contains it;
        a naive datetime is taken as UTC.
        """
        if valid_at is not None and valid_at.tzinfo is None:
            valid_at = valid_at.replace(tzinfo=timezone.utc)
        rows = self.store.list_versions(
            project_group_id=project_group_id,
            station_id=station_id,
            valid_at=valid_at,
            page_no=page_no,
            page_size=page_size,
        )
        logger.debug(f"Listed {len(rows)} versions (page {page_no}, size {page_size})")
        return rows


__all__ = ['PathwaysVersionService']
