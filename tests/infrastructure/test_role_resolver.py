"""
Claims collaborator clients, exercised through httpx.MockTransport.
"""

import httpx
import pytest

from config import AuthConfig
from exceptions import ConfigurationError, RoleResolutionError
from infrastructure.auth import HttpRoleResolver, StaticRoleResolver, get_role_resolver

URL = "http://claims.test/api/v1/permission"


def resolver_for(handler) -> HttpRoleResolver:
    return HttpRoleResolver(URL, client=httpx.Client(transport=httpx.MockTransport(handler)))


class TestHttpRoleResolver:
    def test_list_body(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json=["poc", "member"])

        roles = resolver_for(handler).resolve_roles("alice", "pg-1")

        assert roles == {"poc", "member"}
        assert requests[0].url.params["userId"] == "alice"
        assert requests[0].url.params["projectGroupId"] == "pg-1"

    def test_object_body(self):
        roles = resolver_for(lambda r: httpx.Response(200, json={"roles": ["tdei-admin"]})).resolve_roles("a", "g")
        assert roles == {"tdei-admin"}

    def test_project_group_optional(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json=[])

        assert resolver_for(handler).resolve_roles("alice", None) == set()
        assert "projectGroupId" not in requests[0].url.params

    def test_no_user_skips_lookup(self):
        def handler(request):
            raise AssertionError("no request expected")

        assert resolver_for(handler).resolve_roles(None, "pg") == set()

    @pytest.mark.parametrize("status", [401, 404, 500, 503])
    def test_http_error_status(self, status):
        with pytest.raises(RoleResolutionError, match=str(status)):
            resolver_for(lambda r: httpx.Response(status)).resolve_roles("alice", "pg")

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(RoleResolutionError):
            resolver_for(handler).resolve_roles("alice", "pg")

    def test_invalid_json(self):
        with pytest.raises(RoleResolutionError):
            resolver_for(lambda r: httpx.Response(200, text="<html>")).resolve_roles("alice", "pg")

    @pytest.mark.parametrize("body", [{"other": 1}, "poc", [1, 2], {"roles": "poc"}])
    def test_unexpected_body(self, body):
        with pytest.raises(RoleResolutionError):
            resolver_for(lambda r: httpx.Response(200, json=body)).resolve_roles("alice", "pg")


class TestStaticRoleResolver:
    def test_known_and_unknown_users(self):
        resolver = StaticRoleResolver({"alice": ["poc"]})
        assert resolver.resolve_roles("alice", "any") == {"poc"}
        assert resolver.resolve_roles("bob", "any") == set()
        assert resolver.resolve_roles(None, None) == set()

    def test_returns_copy(self):
        resolver = StaticRoleResolver({"alice": ["poc"]})
        resolver.resolve_roles("alice", None).add("tdei-admin")
        assert resolver.resolve_roles("alice", None) == {"poc"}


class TestGetRoleResolver:
    def test_configured_url(self):
        resolver = get_role_resolver(AuthConfig(permission_url=URL, timeout_seconds=3))
        assert isinstance(resolver, HttpRoleResolver)
        resolver.close()

    def test_missing_url(self):
        with pytest.raises(ConfigurationError):
            get_role_resolver(AuthConfig(permission_url=None))

    def test_debug_mode_without_url_uses_static_roles(self):
        config = AuthConfig(permission_url=None, dev_roles={"alice": ["poc"]})

        resolver = get_role_resolver(config, debug_mode=True)

        assert isinstance(resolver, StaticRoleResolver)
        assert resolver.resolve_roles("alice", "pg") == {"poc"}
        assert resolver.resolve_roles("bob", "pg") == set()

    def test_url_wins_over_debug_mode(self):
        resolver = get_role_resolver(AuthConfig(permission_url=URL, dev_roles={"alice": ["poc"]}), debug_mode=True)
        assert isinstance(resolver, HttpRoleResolver)
        resolver.close()

    def test_dev_roles_from_environment(self, monkeypatch):
        monkeypatch.delenv("AUTH_PERMISSION_URL", raising=False)
        monkeypatch.setenv("AUTH_DEV_ROLES", '{"alice": ["tdei-admin"]}')

        resolver = get_role_resolver(AuthConfig.from_environment(), debug_mode=True)

        assert resolver.resolve_roles("alice", None) == {"tdei-admin"}
