"""In-memory audit store."""

from __future__ import annotations

from typing import Any

from platform_audit.models.audit import AuditFinding, AuditRun, AuditTarget

from .base import AuditStore, new_id


class InMemoryAuditStore(AuditStore):
    def __init__(self):
        self.runs: dict[str, AuditRun] = {}
        self.targets: dict[str, AuditTarget] = {}
        self.findings: list[AuditFinding] = []

    def create_run(self, **fields: Any) -> AuditRun:
        run = AuditRun(id=new_id("run"), **fields)
        self.runs[run.id] = run
        return run.model_copy(deep=True)

    def get_run(self, run_id: str) -> AuditRun | None:
        run = self.runs.get(run_id)
        return run.model_copy(deep=True) if run else None

    def get_latest_run(self) -> AuditRun | None:
        runs = self.list_runs()
        return runs[0] if runs else None

    def list_runs(self) -> list[AuditRun]:
        return [
            r.model_copy(deep=True)
            for r in sorted(self.runs.values(), key=lambda r: r.run_number, reverse=True)
        ]

    def _save_run(self, run: AuditRun) -> None:
        self.runs[run.id] = run.model_copy(deep=True)

    def create_target(self, **fields: Any) -> AuditTarget:
        target = AuditTarget(id=new_id("tgt"), **fields)
        self.targets[target.id] = target
        return target.model_copy(deep=True)

    def update_target(self, target: AuditTarget) -> AuditTarget:
        if target.id not in self.targets:
            raise KeyError(f"Unknown target: {target.id}")
        self.targets[target.id] = target.model_copy(deep=True)
        return target

    def get_target_by_test_id(self, test_id: str) -> AuditTarget | None:
        for target in self.targets.values():
            if target.test_id == test_id:
                return target.model_copy(deep=True)
        return None

    def get_all_targets(self) -> list[AuditTarget]:
        return [t.model_copy(deep=True) for t in self.targets.values()]

    def create_finding(self, **fields: Any) -> AuditFinding:
        finding = AuditFinding(id=new_id("fnd"), **fields)
        self.findings.append(finding)
        return finding

    def get_findings_by_run(self, run_id: str) -> list[AuditFinding]:
        return [f for f in self.findings if f.run_id == run_id]
