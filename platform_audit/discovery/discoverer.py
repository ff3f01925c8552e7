"""Element discovery — expands the registry into typed, uniquely identified targets."""

from __future__ import annotations

import logging
import re

from platform_audit.errors import PageNotFoundError
from platform_audit.models.audit import DiscoveredTarget, TargetKind
from platform_audit.models.registry import PlatformRegistry, RegistryApi, RegistryPage

logger = logging.getLogger(__name__)

_SEPARATORS = re.compile(r"[/:]")


def slugify_path(path: str) -> str:
    """Replace every ``/`` and ``:`` with ``-``."""
    return _SEPARATORS.sub("-", path)


def page_test_id(path: str) -> str:
    return f"page-{slugify_path(path)}"


def service_test_id(page_path: str, endpoint: str) -> str:
    return f"service-{slugify_path(page_path)}-{slugify_path(endpoint)}"


def api_test_id(method: str, endpoint: str) -> str:
    return f"api-{method.lower()}-{slugify_path(endpoint)}"


def discover_page_targets(page: RegistryPage) -> list[DiscoveredTarget]:
    """One page target followed by one service target per declared endpoint."""
    page_id = page_test_id(page.path)
    targets = [DiscoveredTarget(
        test_id=page_id,
        name=page.name,
        name_ar=page.name_ar,
        type=TargetKind.PAGE,
        path=page.path,
        required_role=page.required_role,
    )]
    for endpoint in page.api_endpoints:
        targets.append(DiscoveredTarget(
            test_id=service_test_id(page.path, endpoint),
            name=f"{page.name} Service",
            name_ar=f"خدمة {page.name_ar}",
            type=TargetKind.SERVICE,
            path=page.path,
            api_endpoint=endpoint,
            parent_test_id=page_id,
            required_role=page.required_role,
        ))
    return targets


def _api_target(api: RegistryApi) -> DiscoveredTarget:
    return DiscoveredTarget(
        test_id=api_test_id(api.method, api.endpoint),
        name=api.name,
        name_ar=api.name_ar,
        type=TargetKind.API,
        path=api.endpoint,
        api_endpoint=api.endpoint,
        api_method=api.method.upper(),
    )


def discover_platform(registry: PlatformRegistry) -> list[DiscoveredTarget]:
    """Discover every page, service dependency and raw API endpoint."""
    candidates: list[DiscoveredTarget] = []
    for page in registry.pages:
        candidates.extend(discover_page_targets(page))
    for api in registry.apis:
        candidates.append(_api_target(api))

    # First declaration of a test id wins
    targets: list[DiscoveredTarget] = []
    seen: set[str] = set()
    for target in candidates:
        if target.test_id in seen:
            logger.warning("Duplicate registry entry skipped: %s", target.test_id)
            continue
        seen.add(target.test_id)
        targets.append(target)

    logger.info("Discovered %d targets (%d pages, %d apis)",
                len(targets), len(registry.pages), len(registry.apis))
    return targets


def discover_page(registry: PlatformRegistry, page_path: str) -> list[DiscoveredTarget]:
    """Discover a single page and its service dependencies."""
    page = registry.find_page(page_path)
    if page is None:
        raise PageNotFoundError(page_path)
    targets = discover_page_targets(page)
    logger.info("Discovered %d targets for page %s", len(targets), page_path)
    return targets
