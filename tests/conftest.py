"""Pytest configuration and shared fixtures."""

from typing import Callable

import httpx
import pytest

from platform_audit.models.audit import (
    CheckResult,
    DiscoveredTarget,
    ElementTestResults,
    TargetKind,
)
from platform_audit.models.config import AuditConfig
from platform_audit.models.registry import PlatformRegistry, RegistryApi, RegistryPage
from platform_audit.storage.memory import InMemoryAuditStore

BASE_URL = "http://platform.test"


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def audit_config(tmp_path) -> AuditConfig:
    """Create a test audit configuration."""
    return AuditConfig(
        base_url=BASE_URL,
        probe_timeout_seconds=0.5,
        max_parallel_probes=4,
        store_path=str(tmp_path / "store.json"),
        report_output_dir=str(tmp_path / "reports"),
    )


# ============================================================================
# Registry Fixtures
# ============================================================================


@pytest.fixture
def pricing_registry() -> PlatformRegistry:
    """One page without services and one raw API check."""
    return PlatformRegistry(
        pages=(RegistryPage(path="/pricing", name="Pricing", name_ar="الأسعار"),),
        apis=(RegistryApi(endpoint="/api/plans", method="GET",
                          name="Subscription Plans", name_ar="خطط الاشتراك"),),
    )


@pytest.fixture
def small_registry() -> PlatformRegistry:
    """Pages with services, a dynamic route and two API checks."""
    return PlatformRegistry(
        pages=(
            RegistryPage(path="/", name="Home", name_ar="الرئيسية"),
            RegistryPage(path="/projects", name="Projects", name_ar="المشاريع",
                         api_endpoints=("/api/projects",)),
            RegistryPage(path="/editor/:id", name="Code Editor", name_ar="محرر الكود",
                         api_endpoints=("/api/projects/:id",)),
            RegistryPage(path="/owner-dashboard", name="Owner Dashboard",
                         name_ar="لوحة المالك", api_endpoints=("/api/owner/dashboard",),
                         required_role="owner"),
        ),
        apis=(
            RegistryApi(endpoint="/api/plans", method="GET",
                        name="Subscription Plans", name_ar="خطط الاشتراك"),
            RegistryApi(endpoint="/api/auth/login", method="POST",
                        name="Login", name_ar="تسجيل الدخول"),
        ),
    )


# ============================================================================
# Target / Result Fixtures
# ============================================================================


@pytest.fixture
def api_target() -> DiscoveredTarget:
    return DiscoveredTarget(
        test_id="api-get--api-plans",
        name="Subscription Plans",
        name_ar="خطط الاشتراك",
        type=TargetKind.API,
        path="/api/plans",
        api_endpoint="/api/plans",
        api_method="GET",
    )


@pytest.fixture
def make_results() -> Callable[..., ElementTestResults]:
    """Factory for check results; every check passes unless named as failing."""
    def _make(*failing: str) -> ElementTestResults:
        names = (
            "ui_presence", "functional_action", "backend_binding",
            "business_logic", "data_integrity", "error_handling",
        )
        unknown = set(failing) - set(names)
        assert not unknown, f"unknown checks: {unknown}"
        return ElementTestResults(**{
            n: CheckResult(passed=n not in failing, details=n) for n in names
        })
    return _make


# ============================================================================
# Storage / HTTP Fixtures
# ============================================================================


@pytest.fixture
def store() -> InMemoryAuditStore:
    return InMemoryAuditStore()


@pytest.fixture
def mock_client() -> Callable[[Callable], httpx.AsyncClient]:
    """Build an AsyncClient whose requests are answered by ``handler``."""
    def _make(handler) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return _make


@pytest.fixture
def status_client(mock_client):
    """AsyncClient answering with a fixed status per path (default 200)."""
    def _make(statuses: dict[str, int] | None = None, seen: list | None = None):
        statuses = statuses or {}

        def handler(request: httpx.Request) -> httpx.Response:
            if seen is not None:
                seen.append((request.method, request.url.path))
            return httpx.Response(statuses.get(request.url.path, 200))
        return mock_client(handler)
    return _make
