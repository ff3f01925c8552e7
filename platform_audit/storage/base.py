"""Persistence interface consumed by the audit engine."""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from typing import Any

from platform_audit.errors import RunNotFoundError, RunStateError
from platform_audit.models.audit import AuditFinding, AuditRun, AuditTarget


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


class AuditStore(ABC):
    """Create/update access to runs, targets and findings.

    Every call is atomic on its own; no call spans more than one entity.
    Runs in a terminal status reject further updates.
    """

    # Runs

    @abstractmethod
    def create_run(self, **fields: Any) -> AuditRun: ...

    @abstractmethod
    def get_run(self, run_id: str) -> AuditRun | None: ...

    @abstractmethod
    def get_latest_run(self) -> AuditRun | None:
        """The run with the highest run number."""

    @abstractmethod
    def list_runs(self) -> list[AuditRun]:
        """All runs, newest first."""

    @abstractmethod
    def _save_run(self, run: AuditRun) -> None: ...

    def update_run(self, run_id: str, **fields: Any) -> AuditRun:
        run = self.get_run(run_id)
        if run is None:
            raise RunNotFoundError(run_id)
        if run.is_terminal:
            raise RunStateError(
                f"Run {run_id} is {run.status.value}; refusing update of {sorted(fields)}"
            )
        updated = AuditRun.model_validate({**run.model_dump(), **fields})
        self._save_run(updated)
        return updated

    # Targets

    @abstractmethod
    def create_target(self, **fields: Any) -> AuditTarget: ...

    @abstractmethod
    def update_target(self, target: AuditTarget) -> AuditTarget: ...

    @abstractmethod
    def get_target_by_test_id(self, test_id: str) -> AuditTarget | None: ...

    @abstractmethod
    def get_all_targets(self) -> list[AuditTarget]: ...

    # Findings

    @abstractmethod
    def create_finding(self, **fields: Any) -> AuditFinding: ...

    @abstractmethod
    def get_findings_by_run(self, run_id: str) -> list[AuditFinding]:
        """Findings of a run in creation order."""
