"""
Permission Evaluation.

Only the intersection predicate lives here; fetching roles is the job of
an IRoleResolver (infrastructure.auth).
"""

from typing import Iterable, Optional


def has_permission(roles: Optional[Iterable[str]], required_roles: Iterable[str]) -> bool:
    """
    True iff the caller holds at least one of required_roles (logical OR).

    An empty or missing role set never grants permission.
    """
    if not roles:
        return False
    return not set(roles).isdisjoint(required_roles)
