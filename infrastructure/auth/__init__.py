"""
Authorization Module.

Clients for the claims collaborator used by the workflow permission gate.

Exports:
    HttpRoleResolver: User-management HTTP API client
    StaticRoleResolver: Fixed mapping (local development)
    get_role_resolver: Resolver for the configured environment
"""

from .roles import HttpRoleResolver, StaticRoleResolver, get_role_resolver

__all__ = [
    'HttpRoleResolver',
    'StaticRoleResolver',
    'get_role_resolver',
]
