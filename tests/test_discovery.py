"""Tests for element discovery and the built-in registry."""

import json

import pytest
from pydantic import ValidationError

from platform_audit.discovery.discoverer import (
    api_test_id,
    discover_page,
    discover_platform,
    page_test_id,
    service_test_id,
    slugify_path,
)
from platform_audit.errors import PageNotFoundError
from platform_audit.models.audit import TargetKind
from platform_audit.models.registry import PlatformRegistry, RegistryApi, RegistryPage
from platform_audit.registry.default_registry import DEFAULT_REGISTRY, load_registry


class TestTestIds:
    def test_slugify_replaces_slashes_and_colons(self):
        assert slugify_path("/editor/:id") == "-editor--id"

    def test_page_id(self):
        assert page_test_id("/pricing") == "page--pricing"
        assert page_test_id("/") == "page--"

    def test_service_id(self):
        assert service_test_id("/projects", "/api/projects") == "service--projects--api-projects"

    def test_api_id_lowercases_method(self):
        assert api_test_id("POST", "/api/auth/login") == "api-post--api-auth-login"


class TestDiscoverPlatform:
    def test_emits_pages_services_and_apis_in_order(self, small_registry):
        targets = discover_platform(small_registry)
        assert [t.test_id for t in targets] == [
            "page--",
            "page--projects",
            "service--projects--api-projects",
            "page--editor--id",
            "service--editor--id--api-projects--id",
            "page--owner-dashboard",
            "service--owner-dashboard--api-owner-dashboard",
            "api-get--api-plans",
            "api-post--api-auth-login",
        ]

    def test_service_targets_reference_owning_page(self, small_registry):
        targets = {t.test_id: t for t in discover_platform(small_registry)}
        service = targets["service--projects--api-projects"]
        assert service.type is TargetKind.SERVICE
        assert service.parent_test_id == "page--projects"
        assert service.api_endpoint == "/api/projects"
        assert service.name == "Projects Service"
        assert service.name_ar == "خدمة المشاريع"

    def test_required_role_carried(self, small_registry):
        targets = {t.test_id: t for t in discover_platform(small_registry)}
        assert targets["page--owner-dashboard"].required_role == "owner"
        assert targets["service--owner-dashboard--api-owner-dashboard"].required_role == "owner"
        assert targets["page--projects"].required_role is None

    def test_api_targets(self, small_registry):
        targets = {t.test_id: t for t in discover_platform(small_registry)}
        login = targets["api-post--api-auth-login"]
        assert login.type is TargetKind.API
        assert login.api_method == "POST"
        assert login.path == "/api/auth/login"

    def test_rediscovery_is_deterministic(self, small_registry):
        first = [t.test_id for t in discover_platform(small_registry)]
        second = [t.test_id for t in discover_platform(small_registry)]
        assert first == second
        assert len(set(first)) == len(first)

    def test_duplicate_entries_collapsed(self):
        registry = PlatformRegistry(
            pages=(RegistryPage(path="/a", name="A", name_ar="أ"),
                   RegistryPage(path="/a", name="A again", name_ar="أ")),
            apis=(),
        )
        targets = discover_platform(registry)
        assert len(targets) == 1
        assert targets[0].name == "A"

    def test_default_registry_ids_unique(self):
        ids = [t.test_id for t in discover_platform(DEFAULT_REGISTRY)]
        assert len(ids) == len(set(ids))
        assert len(DEFAULT_REGISTRY.pages) == 20
        assert len(DEFAULT_REGISTRY.apis) == 15


class TestDiscoverPage:
    def test_page_and_its_services_only(self, small_registry):
        targets = discover_page(small_registry, "/projects")
        assert [t.test_id for t in targets] == [
            "page--projects", "service--projects--api-projects",
        ]

    def test_page_without_services(self, small_registry):
        targets = discover_page(small_registry, "/")
        assert len(targets) == 1
        assert targets[0].type is TargetKind.PAGE

    def test_unknown_page(self, small_registry):
        with pytest.raises(PageNotFoundError, match="Page not found: /nope"):
            discover_page(small_registry, "/nope")


class TestLoadRegistry:
    def test_none_returns_default(self):
        assert load_registry() is DEFAULT_REGISTRY

    def test_loads_json_file(self, tmp_path):
        path = tmp_path / "registry.json"
        path.write_text(json.dumps({
            "pages": [{"path": "/x", "name": "X", "name_ar": "س",
                       "api_endpoints": ["/api/x"]}],
            "apis": [{"endpoint": "/api/y", "method": "DELETE", "name": "Y", "name_ar": "ص"}],
        }), encoding="utf-8")
        registry = load_registry(path)
        assert registry.pages[0].api_endpoints == ("/api/x",)
        assert registry.apis[0].method == "DELETE"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_registry(tmp_path / "nope.json")

    def test_rejects_relative_service_endpoint(self, tmp_path):
        path = tmp_path / "registry.json"
        path.write_text(json.dumps({
            "pages": [{"path": "/pricing", "name": "Pricing", "name_ar": "الأسعار",
                       "api_endpoints": ["api/plans"]}],
        }), encoding="utf-8")
        with pytest.raises(ValidationError, match="must start with '/'"):
            load_registry(path)


class TestRegistryEndpoints:
    def test_api_endpoint_needs_leading_slash(self):
        with pytest.raises(ValidationError):
            RegistryApi(endpoint="api/plans", name="Plans", name_ar="الخطط")

    def test_page_endpoints_need_leading_slash(self):
        with pytest.raises(ValidationError):
            RegistryPage(path="/pricing", name="Pricing", name_ar="الأسعار",
                         api_endpoints=("/api/plans", "api/usage"))

    def test_dynamic_endpoint_accepted(self):
        api = RegistryApi(endpoint="/api/projects/:id", name="Project", name_ar="مشروع")
        assert api.endpoint == "/api/projects/:id"
