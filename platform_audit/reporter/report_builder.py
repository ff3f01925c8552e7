"""Run reports and run-to-run comparison."""

from __future__ import annotations

import logging

from platform_audit.errors import RunNotFoundError
from platform_audit.models.audit import RunBreakdown
from platform_audit.models.report import AuditReportSummary, FindingDetail, RunComparison
from platform_audit.storage.base import AuditStore

logger = logging.getLogger(__name__)


def build_report(store: AuditStore, run_id: str) -> AuditReportSummary:
    """Join a run with its findings and targets into a flat summary.

    Findings are recorded as probes finish; the summary lists them in target
    registration order instead, so repeated reports of a run read the same.
    """
    run = store.get_run(run_id)
    if run is None:
        raise RunNotFoundError(run_id)

    all_targets = store.get_all_targets()
    targets = {t.id: t for t in all_targets}
    position = {t.id: i for i, t in enumerate(all_targets)}
    findings = sorted(
        store.get_findings_by_run(run_id),
        key=lambda f: position.get(f.target_id, len(position)),
    )

    details = []
    for finding in findings:
        target = targets.get(finding.target_id)
        if target is None:
            logger.warning("Finding %s references missing target %s",
                           finding.id, finding.target_id)
        details.append(FindingDetail(
            test_id=target.test_id if target else "",
            name=target.name if target else "",
            name_ar=target.name_ar if target else "",
            type=target.type if target else None,
            path=target.path if target else "",
            classification=finding.classification,
            score=finding.score,
            failure_reason=finding.failure_reason,
            failure_reason_ar=finding.failure_reason_ar,
            recommendation=finding.recommendation,
            recommendation_ar=finding.recommendation_ar,
            recommendation_type=finding.recommendation_type,
            priority=finding.priority,
        ))

    return AuditReportSummary(
        run_id=run.id,
        run_number=run.run_number,
        run_type=run.run_type,
        scope=run.scope,
        status=run.status,
        timestamp=run.created_at.isoformat(),
        readiness_score=run.readiness_score,
        change_from_previous=run.change_from_previous,
        total_targets=run.total_targets,
        passed=run.passed_targets,
        failed=run.failed_targets,
        partial=run.partial_targets,
        breakdown=run.breakdown or RunBreakdown(),
        findings=details,
    )


def compare_reports(
    baseline: AuditReportSummary, current: AuditReportSummary,
) -> RunComparison:
    """Diff two reports. ``baseline`` is the earlier run."""
    baseline_failing = baseline.failing_test_ids()
    current_failing = current.failing_test_ids()
    baseline_set = set(baseline_failing)
    current_set = set(current_failing)

    comparison = RunComparison(
        run1=baseline,
        run2=current,
        score_change=current.readiness_score - baseline.readiness_score,
        new_issues=[t for t in current_failing if t not in baseline_set],
        resolved_issues=[t for t in baseline_failing if t not in current_set],
    )
    if comparison.new_issues:
        logger.warning("Run #%d has %d new issues since run #%d",
                       current.run_number, len(comparison.new_issues), baseline.run_number)
    return comparison


def compare_runs(store: AuditStore, baseline_run_id: str, current_run_id: str) -> RunComparison:
    return compare_reports(
        build_report(store, baseline_run_id),
        build_report(store, current_run_id),
    )
