"""Built-in platform registry and JSON registry loading."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from platform_audit.models.registry import PlatformRegistry, RegistryApi, RegistryPage

logger = logging.getLogger(__name__)

OWNER = "owner"

PLATFORM_PAGES: tuple[RegistryPage, ...] = (
    RegistryPage(path="/", name="Home", name_ar="الرئيسية"),
    RegistryPage(path="/projects", name="Projects", name_ar="المشاريع",
                 api_endpoints=("/api/projects",)),
    RegistryPage(path="/auth", name="Authentication", name_ar="التسجيل والدخول",
                 api_endpoints=("/api/auth/login", "/api/auth/register")),
    RegistryPage(path="/pricing", name="Pricing", name_ar="الأسعار",
                 api_endpoints=("/api/plans",)),
    RegistryPage(path="/settings", name="Settings", name_ar="الإعدادات",
                 api_endpoints=("/api/user/profile",)),
    RegistryPage(path="/editor/:id", name="Code Editor", name_ar="محرر الكود",
                 api_endpoints=("/api/projects/:id",)),
    RegistryPage(path="/owner-dashboard", name="Owner Dashboard", name_ar="لوحة المالك",
                 api_endpoints=("/api/owner/dashboard",), required_role=OWNER),
    RegistryPage(path="/owner-integrations", name="Service Providers", name_ar="مزودي الخدمات",
                 api_endpoints=("/api/owner/providers",), required_role=OWNER),
    RegistryPage(path="/api-keys", name="API Keys", name_ar="مفاتيح API",
                 api_endpoints=("/api/owner/api-keys",), required_role=OWNER),
    RegistryPage(path="/payments-dashboard", name="Payments Dashboard", name_ar="لوحة المدفوعات",
                 api_endpoints=("/api/payments/dashboard",), required_role=OWNER),
    RegistryPage(path="/admin/subscriptions", name="Subscription Management",
                 name_ar="إدارة الاشتراكات", api_endpoints=("/api/plans",), required_role=OWNER),
    RegistryPage(path="/domains", name="Domain Management", name_ar="إدارة النطاقات",
                 api_endpoints=("/api/domains",), required_role=OWNER),
    RegistryPage(path="/ai-copilot", name="AI Copilot", name_ar="مساعد الذكاء",
                 api_endpoints=("/api/ai/chat",)),
    RegistryPage(path="/collaboration", name="Collaboration", name_ar="التعاون",
                 api_endpoints=("/api/collaboration",)),
    RegistryPage(path="/marketplace", name="Marketplace", name_ar="المتجر",
                 api_endpoints=("/api/marketplace",)),
    RegistryPage(path="/testing", name="Testing", name_ar="الاختبارات",
                 api_endpoints=("/api/tests",)),
    RegistryPage(path="/deployments", name="Deployments", name_ar="النشر",
                 api_endpoints=("/api/deployments",)),
    RegistryPage(path="/support/tickets", name="Support Tickets", name_ar="تذاكر الدعم",
                 api_endpoints=("/api/support/tickets",)),
    RegistryPage(path="/support/agent", name="Support Agent", name_ar="وكيل الدعم",
                 api_endpoints=("/api/support/agent",)),
    RegistryPage(path="/owner/deletion-management", name="Deletion Management",
                 name_ar="إدارة الحذف", api_endpoints=("/api/owner/deleted-items",),
                 required_role=OWNER),
)

PLATFORM_APIS: tuple[RegistryApi, ...] = (
    RegistryApi(endpoint="/api/auth/login", method="POST", name="Login", name_ar="تسجيل الدخول"),
    RegistryApi(endpoint="/api/auth/register", method="POST", name="Register", name_ar="إنشاء حساب"),
    RegistryApi(endpoint="/api/auth/me", method="GET", name="Current User", name_ar="المستخدم الحالي"),
    RegistryApi(endpoint="/api/auth/logout", method="POST", name="Logout", name_ar="تسجيل الخروج"),
    RegistryApi(endpoint="/api/auth/methods", method="GET", name="Auth Methods", name_ar="طرق المصادقة"),
    RegistryApi(endpoint="/api/projects", method="GET", name="List Projects", name_ar="قائمة المشاريع"),
    RegistryApi(endpoint="/api/plans", method="GET", name="Subscription Plans", name_ar="خطط الاشتراك"),
    RegistryApi(endpoint="/api/user/profile", method="PATCH", name="Update Profile",
                name_ar="تحديث الملف الشخصي"),
    RegistryApi(endpoint="/api/owner/dashboard", method="GET", name="Owner Dashboard Data",
                name_ar="بيانات لوحة المالك"),
    RegistryApi(endpoint="/api/owner/providers", method="GET", name="Service Providers",
                name_ar="مزودي الخدمات"),
    RegistryApi(endpoint="/api/payments/dashboard", method="GET", name="Payments Dashboard",
                name_ar="لوحة المدفوعات"),
    RegistryApi(endpoint="/api/stripe/products", method="GET", name="Stripe Products",
                name_ar="منتجات Stripe"),
    RegistryApi(endpoint="/api/ai/chat", method="POST", name="AI Chat", name_ar="محادثة AI"),
    RegistryApi(endpoint="/api/domains", method="GET", name="List Domains", name_ar="قائمة النطاقات"),
    RegistryApi(endpoint="/api/support/tickets", method="GET", name="Support Tickets",
                name_ar="تذاكر الدعم"),
)

DEFAULT_REGISTRY = PlatformRegistry(pages=PLATFORM_PAGES, apis=PLATFORM_APIS)


def load_registry(path: str | Path | None = None) -> PlatformRegistry:
    """Load a registry from a JSON file, or return the built-in one.

    The file holds ``{"pages": [...], "apis": [...]}`` using the field
    names of :class:`RegistryPage` and :class:`RegistryApi`.
    """
    if path is None:
        return DEFAULT_REGISTRY
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Registry file not found: {path}")
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    registry = PlatformRegistry.model_validate(data)
    logger.debug("Loaded registry from %s: %d pages, %d apis",
                 path, len(registry.pages), len(registry.apis))
    return registry
