"""Audit data structures: targets, findings, runs."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Literal, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

HISTORY_CAPACITY = 10

RecommendationType = Literal["bind", "fix", "improve"]
Priority = Literal["low", "medium", "high", "critical"]
FixStatus = Literal["fixed", "pending"]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TargetKind(str, Enum):
    PAGE = "page"
    SERVICE = "service"
    BUTTON = "button"
    ICON = "icon"
    FORM = "form"
    TABLE = "table"
    CARD = "card"
    WIDGET = "widget"
    TOGGLE = "toggle"
    MODAL = "modal"
    API = "api"
    CELL = "cell"


class Classification(str, Enum):
    FULLY_OPERATIONAL = "FULLY_OPERATIONAL"
    PARTIALLY_OPERATIONAL = "PARTIALLY_OPERATIONAL"
    NON_OPERATIONAL = "NON_OPERATIONAL"


class RunStatus(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not RunStatus.RUNNING


class RunType(str, Enum):
    FULL = "full"
    PAGE = "page"


class CheckResult(BaseModel):
    """Outcome of one check in the test battery."""
    passed: bool
    details: str = ""
    api_status: Optional[int] = None


# Battery order; also the order failed checks are listed in failure reasons
CHECK_LABELS: dict[str, str] = {
    "ui_presence": "UI Presence",
    "functional_action": "Functional Action",
    "backend_binding": "Backend Binding",
    "business_logic": "Business Logic",
    "data_integrity": "Data Integrity",
    "error_handling": "Error Handling",
}


class ElementTestResults(BaseModel):
    ui_presence: CheckResult
    functional_action: CheckResult
    backend_binding: CheckResult
    business_logic: CheckResult
    data_integrity: CheckResult
    error_handling: CheckResult

    def checks(self) -> list[tuple[str, CheckResult]]:
        return [(name, getattr(self, name)) for name in CHECK_LABELS]

    @property
    def passed_count(self) -> int:
        return sum(1 for _, check in self.checks() if check.passed)

    def failed_labels(self) -> list[str]:
        return [CHECK_LABELS[name] for name, check in self.checks() if not check.passed]


class DiscoveredTarget(BaseModel):
    """A target produced by discovery, before it is persisted."""
    model_config = ConfigDict(frozen=True)

    test_id: str
    name: str
    name_ar: str
    type: TargetKind
    path: str
    selector: Optional[str] = None
    api_endpoint: Optional[str] = None
    api_method: Optional[str] = None
    parent_test_id: Optional[str] = None
    required_role: Optional[str] = None


class HistoryEntry(BaseModel):
    run_id: str
    classification: Classification
    score: float
    timestamp: datetime = Field(default_factory=utcnow)


def _cap_history(entries: list[HistoryEntry]) -> list[HistoryEntry]:
    return entries[:HISTORY_CAPACITY]


# Newest entry first, never longer than HISTORY_CAPACITY
TestHistory = Annotated[list[HistoryEntry], AfterValidator(_cap_history)]


class AuditTarget(BaseModel):
    id: str
    test_id: str
    name: str
    name_ar: str = ""
    type: TargetKind
    path: str = ""
    selector: Optional[str] = None
    api_endpoint: Optional[str] = None
    api_method: Optional[str] = None
    parent_test_id: Optional[str] = None  # lookup only, the page that declared it
    required_role: Optional[str] = None
    current_classification: Classification = Classification.NON_OPERATIONAL
    current_score: float = 0.0
    last_tested_at: Optional[datetime] = None
    test_history: TestHistory = Field(default_factory=list)
    is_active: bool = True

    def record_result(self, entry: HistoryEntry) -> None:
        """Push a run result onto the front of the capped history."""
        self.test_history = _cap_history([entry, *self.test_history])
        self.current_classification = entry.classification
        self.current_score = entry.score
        self.last_tested_at = entry.timestamp


class AuditFinding(BaseModel):
    """Result of the test battery for one target in one run. Never mutated."""
    model_config = ConfigDict(frozen=True)

    id: str
    run_id: str
    target_id: str
    classification: Classification
    score: float
    test_results: ElementTestResults
    failure_reason: Optional[str] = None
    failure_reason_ar: Optional[str] = None
    recommendation: Optional[str] = None
    recommendation_ar: Optional[str] = None
    recommendation_type: Optional[RecommendationType] = None
    priority: Priority = "low"
    fix_status: FixStatus = "pending"
    created_at: datetime = Field(default_factory=utcnow)


class CategoryCounts(BaseModel):
    total: int = 0
    passed: int = 0
    failed: int = 0
    partial: int = 0


class RunBreakdown(BaseModel):
    pages: CategoryCounts = Field(default_factory=CategoryCounts)
    services: CategoryCounts = Field(default_factory=CategoryCounts)
    buttons: CategoryCounts = Field(default_factory=CategoryCounts)
    icons: CategoryCounts = Field(default_factory=CategoryCounts)
    apis: CategoryCounts = Field(default_factory=CategoryCounts)
    forms: CategoryCounts = Field(default_factory=CategoryCounts)


class AuditRun(BaseModel):
    id: str
    run_number: int
    run_type: RunType = RunType.FULL
    scope: Optional[str] = None  # page path for page-scoped runs
    status: RunStatus = RunStatus.RUNNING
    initiated_by: str = ""
    started_at: datetime = Field(default_factory=utcnow)
    completed_at: Optional[datetime] = None
    duration_ms: Optional[int] = None
    total_targets: int = 0
    tested_targets: int = 0
    passed_targets: int = 0
    failed_targets: int = 0
    partial_targets: int = 0
    readiness_score: float = 0.0
    breakdown: Optional[RunBreakdown] = None
    change_from_previous: Optional[float] = None
    previous_run_id: Optional[str] = None
    error_message: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal
