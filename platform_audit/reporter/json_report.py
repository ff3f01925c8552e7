"""JSON report output."""

from __future__ import annotations

import json
from pathlib import Path

from platform_audit.models.report import AuditReportSummary, RunComparison


def _write(data: dict, output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False, default=str)


def generate_json_report(report: AuditReportSummary, output_dir: Path) -> Path:
    """Write a machine-readable run report. Returns the file path."""
    path = output_dir / f"report_run_{report.run_number}.json"
    _write(report.model_dump(mode="json"), path)
    return path


def generate_json_comparison(comparison: RunComparison, output_dir: Path) -> Path:
    path = output_dir / (
        f"compare_run_{comparison.run1.run_number}_run_{comparison.run2.run_number}.json"
    )
    _write(comparison.model_dump(mode="json"), path)
    return path
