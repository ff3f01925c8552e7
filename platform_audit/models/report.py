"""Report data structures produced by the reporter."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from platform_audit.models.audit import (
    Classification,
    Priority,
    RecommendationType,
    RunBreakdown,
    RunStatus,
    RunType,
    TargetKind,
)


class FindingDetail(BaseModel):
    test_id: str
    name: str
    name_ar: str = ""
    type: Optional[TargetKind] = None
    path: str = ""
    classification: Classification
    score: float
    failure_reason: Optional[str] = None
    failure_reason_ar: Optional[str] = None
    recommendation: Optional[str] = None
    recommendation_ar: Optional[str] = None
    recommendation_type: Optional[RecommendationType] = None
    priority: Priority = "low"


class AuditReportSummary(BaseModel):
    run_id: str
    run_number: int
    run_type: RunType = RunType.FULL
    scope: Optional[str] = None
    status: RunStatus
    timestamp: str
    readiness_score: float = 0.0
    change_from_previous: Optional[float] = None
    total_targets: int = 0
    passed: int = 0
    failed: int = 0
    partial: int = 0
    breakdown: RunBreakdown = Field(default_factory=RunBreakdown)
    findings: list[FindingDetail] = Field(default_factory=list)

    def failing_test_ids(self) -> list[str]:
        """Test ids of findings that are not fully operational, in report order."""
        seen: dict[str, None] = {}
        for f in self.findings:
            if f.classification is not Classification.FULLY_OPERATIONAL:
                seen.setdefault(f.test_id, None)
        return list(seen)


class RunComparison(BaseModel):
    run1: AuditReportSummary
    run2: AuditReportSummary
    score_change: float
    new_issues: list[str] = Field(default_factory=list)
    resolved_issues: list[str] = Field(default_factory=list)
