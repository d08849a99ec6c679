# ============================================================================
# ROLE RESOLVERS
# ============================================================================
# STATUS: Infrastructure - Claims collaborator clients
# PURPOSE: Resolve a submitter's role names within a project group
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: HttpRoleResolver, StaticRoleResolver, get_role_resolver
# DEPENDENCIES: httpx, config
# ============================================================================
"""
Role Resolvers.

The workflow processor only evaluates the role intersection
(core.logic.permissions). Fetching roles is delegated here.

HttpRoleResolver calls the user-management service:

    GET {AUTH_PERMISSION_URL}?userId=<user>&projectGroupId=<group>

and accepts either a JSON list of role names or an object with a "roles"
list. Any transport error, non-2xx status or unexpected body raises
RoleResolutionError.

Usage:
    from infrastructure.auth import get_role_resolver

    resolver = get_role_resolver()
    roles = resolver.resolve_roles(user_id, project_group_id)
"""

from typing import Dict, Iterable, Optional, Set

import httpx

from config import AuthConfig, get_config
from exceptions import ConfigurationError, RoleResolutionError
from interfaces.repository import IRoleResolver
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.ADAPTER, "RoleResolver")


class HttpRoleResolver(IRoleResolver):
    """
    Role lookups against the user-management HTTP API.

    A shared httpx.Client is kept for connection reuse; pass one in to
    substitute the transport (httpx.MockTransport in tests).
    """

    def __init__(
        self,
        permission_url: str,
        timeout_seconds: float = 10.0,
        client: Optional[httpx.Client] = None
    ):
        self._url = permission_url
        self._client = client or httpx.Client(timeout=timeout_seconds)

    def resolve_roles(self, user_id: Optional[str], project_group_id: Optional[str]) -> Set[str]:
        if not user_id:
            return set()

        params = {"userId": user_id}
        if project_group_id:
            params["projectGroupId"] = project_group_id

        try:
            response = self._client.get(self._url, params=params)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            raise RoleResolutionError(
                f"Role lookup for {user_id} failed with HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise RoleResolutionError(f"Role lookup for {user_id} failed: {e}") from e
        except ValueError as e:
            raise RoleResolutionError(f"Role lookup for {user_id} returned invalid JSON") from e

        if isinstance(body, dict):
            body = body.get("roles")
        if not isinstance(body, list) or not all(isinstance(r, str) for r in body):
            raise RoleResolutionError(f"Role lookup for {user_id} returned unexpected body")

        logger.debug(f"Resolved {len(body)} roles for {user_id} in {project_group_id}")
        return set(body)

    def close(self) -> None:
        self._client.close()


class StaticRoleResolver(IRoleResolver):
    """
    Fixed user -> roles mapping.

    Local development: returned by get_role_resolver when DEBUG_MODE is on
    and AUTH_PERMISSION_URL is unset, loaded from AUTH_DEV_ROLES.
    """

    def __init__(self, roles_by_user: Optional[Dict[str, Iterable[str]]] = None):
        self._roles = {user: set(roles) for user, roles in (roles_by_user or {}).items()}

    def resolve_roles(self, user_id: Optional[str], project_group_id: Optional[str]) -> Set[str]:
        return set(self._roles.get(user_id or "", set()))


def get_role_resolver(config: Optional[AuthConfig] = None, debug_mode: bool = False) -> IRoleResolver:
    """
    Resolver for the configured environment.

    Raises:
        ConfigurationError: AUTH_PERMISSION_URL not set outside debug mode
    """
    config = config or get_config().auth
    if not config.permission_url:
        if debug_mode:
            logger.warning(
                f"AUTH_PERMISSION_URL not set, using static roles for {len(config.dev_roles)} users (DEBUG_MODE)"
            )
            return StaticRoleResolver(config.dev_roles)
        raise ConfigurationError("AUTH_PERMISSION_URL is not set")
    return HttpRoleResolver(config.permission_url, timeout_seconds=config.timeout_seconds)
