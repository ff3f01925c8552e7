"""Score and classify a target from its check results."""

from __future__ import annotations

from platform_audit.models.audit import CHECK_LABELS, Classification, ElementTestResults

FULLY_OPERATIONAL_MIN = 80.0
PARTIALLY_OPERATIONAL_MIN = 40.0


def calculate_score(results: ElementTestResults) -> float:
    """Share of passing checks as a 0-100 score."""
    return (results.passed_count / len(CHECK_LABELS)) * 100


def classify_score(score: float) -> Classification:
    # Lower edge of each band is inclusive
    if score >= FULLY_OPERATIONAL_MIN:
        return Classification.FULLY_OPERATIONAL
    if score >= PARTIALLY_OPERATIONAL_MIN:
        return Classification.PARTIALLY_OPERATIONAL
    return Classification.NON_OPERATIONAL


def classify(results: ElementTestResults) -> tuple[Classification, float]:
    score = calculate_score(results)
    return classify_score(score), score
