"""Bilingual failure reasons and remediation recommendations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from platform_audit.models.audit import (
    Classification,
    DiscoveredTarget,
    ElementTestResults,
    Priority,
    RecommendationType,
)


@dataclass
class Recommendation:
    failure_reason: Optional[str] = None
    failure_reason_ar: Optional[str] = None
    recommendation: Optional[str] = None
    recommendation_ar: Optional[str] = None
    recommendation_type: Optional[RecommendationType] = None
    priority: Priority = "low"


def generate_recommendation(
    target: DiscoveredTarget,
    results: ElementTestResults,
    classification: Classification,
) -> Recommendation:
    """Build the single recommendation attached to a finding.

    The first failing check in precedence order decides the message:
    backend binding, then functional action, then business logic or data
    integrity, then a generic review.
    """
    if classification is Classification.FULLY_OPERATIONAL:
        return Recommendation()

    failed = results.failed_labels()
    rec = Recommendation(
        failure_reason=f"Failed tests: {', '.join(failed)}",
        failure_reason_ar=f"الاختبارات الفاشلة: {'، '.join(failed)}",
    )

    if not results.backend_binding.passed:
        rec.recommendation = f"Connect {target.name} to a real backend service"
        rec.recommendation_ar = f"ربط {target.name_ar} بخدمة خلفية حقيقية"
        rec.recommendation_type = "bind"
        rec.priority = "critical"
    elif not results.functional_action.passed:
        rec.recommendation = f"Implement functional logic for {target.name}"
        rec.recommendation_ar = f"تنفيذ المنطق الوظيفي لـ {target.name_ar}"
        rec.recommendation_type = "fix"
        rec.priority = "high"
    elif not results.business_logic.passed or not results.data_integrity.passed:
        rec.recommendation = f"Improve business logic and data handling for {target.name}"
        rec.recommendation_ar = f"تحسين منطق الأعمال ومعالجة البيانات لـ {target.name_ar}"
        rec.recommendation_type = "improve"
        rec.priority = "medium"
    else:
        rec.recommendation = f"Review and enhance {target.name}"
        rec.recommendation_ar = f"مراجعة وتحسين {target.name_ar}"
        rec.recommendation_type = "improve"
        rec.priority = "low"
    return rec
