"""
Validity Interval Checks.

Half-open interval semantics: [from, to). Touching boundaries
(a.to == b.from) do not overlap.

Exports:
    intervals_overlap: Pure predicate for two intervals
    find_overlapping: Conflicting record ids within the caller's transaction
    has_overlap: Boolean form of find_overlapping
"""

from datetime import datetime
from typing import List

from core.models.pathways import ScopeKey
from core.schema.pathways_sql import build_overlap_query


def intervals_overlap(a_from: datetime, a_to: datetime, b_from: datetime, b_to: datetime) -> bool:
    """True iff [a_from, a_to) and [b_from, b_to) intersect."""
    return a_from < b_to and b_from < a_to


def find_overlapping(uow, scope: ScopeKey, valid_from: datetime, valid_to: datetime) -> List[str]:
    """
    Record ids in scope whose interval overlaps [valid_from, valid_to).

    Must run on the same unit of work as any following insert. Returns an
    empty list when the scope has no rows.

    Args:
        uow: Open unit of work (IPathwayVersionUnitOfWork)
        scope: (project group, station) partition
        valid_from: Candidate interval start (inclusive)
        valid_to: Candidate interval end (exclusive)
    """
    query = build_overlap_query(scope, valid_from, valid_to, schema=uow.schema)
    rows = uow.execute_query(query)
    return [row["tdei_record_id"] for row in rows]


def has_overlap(uow, scope: ScopeKey, valid_from: datetime, valid_to: datetime) -> bool:
    return bool(find_overlapping(uow, scope, valid_from, valid_to))
