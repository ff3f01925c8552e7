"""Report generation orchestration."""

from __future__ import annotations

import logging
from pathlib import Path

from platform_audit.models.audit import Classification
from platform_audit.models.config import AuditConfig
from platform_audit.models.report import AuditReportSummary, RunComparison

from .json_report import generate_json_comparison, generate_json_report

logger = logging.getLogger(__name__)

_PRIORITY_ORDER = {"critical": 0, "high": 1, "medium": 2, "low": 3}


class Reporter:
    """Writes run reports and comparisons in the configured formats."""

    def __init__(self, config: AuditConfig):
        self.config = config

    def generate_reports(
        self, report: AuditReportSummary, output_dir: Path | None = None,
    ) -> dict[str, str]:
        """Generate all configured report formats. Returns format -> file path."""
        out_dir = output_dir or Path(self.config.report_output_dir)
        generated = {}

        if "json" in self.config.report_formats:
            path = generate_json_report(report, out_dir)
            generated["json"] = str(path)
            logger.info("JSON report: %s", path)

        return generated

    def generate_comparison(
        self, comparison: RunComparison, output_dir: Path | None = None,
    ) -> dict[str, str]:
        out_dir = output_dir or Path(self.config.report_output_dir)
        generated = {}
        if "json" in self.config.report_formats:
            path = generate_json_comparison(comparison, out_dir)
            generated["json"] = str(path)
            logger.info("JSON comparison: %s", path)
        return generated


def summarize(report: AuditReportSummary, top: int = 5) -> str:
    """Plain-text summary with the highest-priority issues first."""
    parts = [
        f"Run #{report.run_number} ({report.run_type.value}"
        + (f" {report.scope}" if report.scope else "")
        + f"): readiness {report.readiness_score:.2f}%.",
        f"Targets: {report.total_targets} total, {report.passed} operational, "
        f"{report.partial} partial, {report.failed} non-operational.",
    ]
    if report.change_from_previous is not None:
        parts.append(f"Change from previous run: {report.change_from_previous:+.2f}.")
    issues = sorted(
        (f for f in report.findings
         if f.classification is not Classification.FULLY_OPERATIONAL),
        key=lambda f: (_PRIORITY_ORDER[f.priority], f.score),
    )
    if issues:
        parts.append(
            "Top issues: " + "; ".join(
                f"[{f.priority}] {f.test_id}: {f.recommendation}" for f in issues[:top]
            )
        )
    return " ".join(parts)
