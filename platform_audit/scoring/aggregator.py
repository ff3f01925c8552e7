"""Run aggregation — folds per-target findings into run-level totals."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from platform_audit.models.audit import (
    AuditFinding,
    Classification,
    RunBreakdown,
    TargetKind,
)

logger = logging.getLogger(__name__)

PARTIAL_CREDIT = 0.5

# Kinds without a category of their own are tallied as pages
BREAKDOWN_CATEGORY: dict[TargetKind, str] = {
    TargetKind.PAGE: "pages",
    TargetKind.SERVICE: "services",
    TargetKind.API: "apis",
    TargetKind.BUTTON: "buttons",
    TargetKind.ICON: "icons",
    TargetKind.FORM: "forms",
    TargetKind.TABLE: "pages",
    TargetKind.CARD: "pages",
    TargetKind.WIDGET: "pages",
    TargetKind.TOGGLE: "pages",
    TargetKind.MODAL: "pages",
    TargetKind.CELL: "pages",
}


@dataclass
class RunTotals:
    total: int = 0
    passed: int = 0
    failed: int = 0
    partial: int = 0
    readiness_score: float = 0.0
    breakdown: RunBreakdown = field(default_factory=RunBreakdown)


def readiness_score(passed: int, partial: int, total: int) -> float:
    """Weighted 0-100 readiness, giving half credit to partial targets."""
    if total == 0:
        return 0.0
    return ((passed + partial * PARTIAL_CREDIT) / total) * 100


def calculate_breakdown(
    findings: list[AuditFinding],
    kinds: dict[str, TargetKind],
) -> RunBreakdown:
    """Tally findings per category.

    ``kinds`` maps every target id of the run to its kind; it supplies the
    per-category totals, and findings are joined against it by target id.
    """
    breakdown = RunBreakdown()
    for kind in kinds.values():
        getattr(breakdown, BREAKDOWN_CATEGORY[kind]).total += 1

    for finding in findings:
        kind = kinds.get(finding.target_id)
        if kind is None:
            logger.debug("Finding %s has no known target, skipped in breakdown", finding.id)
            continue
        counts = getattr(breakdown, BREAKDOWN_CATEGORY[kind])
        if finding.classification is Classification.FULLY_OPERATIONAL:
            counts.passed += 1
        elif finding.classification is Classification.NON_OPERATIONAL:
            counts.failed += 1
        else:
            counts.partial += 1
    return breakdown


def aggregate_run(
    findings: list[AuditFinding],
    kinds: dict[str, TargetKind],
) -> RunTotals:
    """Single aggregation pass over a run's findings.

    Only call once every target of the run has been probed and recorded.
    """
    passed = sum(1 for f in findings if f.classification is Classification.FULLY_OPERATIONAL)
    failed = sum(1 for f in findings if f.classification is Classification.NON_OPERATIONAL)
    partial = sum(
        1 for f in findings if f.classification is Classification.PARTIALLY_OPERATIONAL
    )
    total = len(kinds)
    return RunTotals(
        total=total,
        passed=passed,
        failed=failed,
        partial=partial,
        readiness_score=readiness_score(passed, partial, total),
        breakdown=calculate_breakdown(findings, kinds),
    )
