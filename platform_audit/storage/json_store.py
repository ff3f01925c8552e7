"""JSON file audit store — persists runs, targets and findings to disk."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from platform_audit.models.audit import AuditFinding, AuditRun, AuditTarget

from .memory import InMemoryAuditStore

logger = logging.getLogger(__name__)


class StoreDocument(BaseModel):
    runs: list[AuditRun] = Field(default_factory=list)
    targets: list[AuditTarget] = Field(default_factory=list)
    findings: list[AuditFinding] = Field(default_factory=list)


class JsonAuditStore(InMemoryAuditStore):
    """Keeps the whole store in one JSON document, rewritten after every write."""

    def __init__(self, path: str | Path):
        super().__init__()
        self.path = Path(path)
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            return
        try:
            with open(self.path, encoding="utf-8") as f:
                doc = StoreDocument.model_validate(json.load(f))
        except Exception as e:
            logger.warning("Failed to load audit store %s: %s. Starting empty.", self.path, e)
            return
        self.runs = {r.id: r for r in doc.runs}
        self.targets = {t.id: t for t in doc.targets}
        self.findings = list(doc.findings)
        logger.debug("Loaded audit store from %s: %d runs, %d targets, %d findings",
                     self.path, len(self.runs), len(self.targets), len(self.findings))

    def _flush(self) -> None:
        doc = StoreDocument(
            runs=list(self.runs.values()),
            targets=list(self.targets.values()),
            findings=self.findings,
        )
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(doc.model_dump(mode="json"), f, indent=2, ensure_ascii=False)
        tmp.replace(self.path)

    def create_run(self, **fields: Any) -> AuditRun:
        run = super().create_run(**fields)
        self._flush()
        return run

    def _save_run(self, run: AuditRun) -> None:
        super()._save_run(run)
        self._flush()

    def create_target(self, **fields: Any) -> AuditTarget:
        target = super().create_target(**fields)
        self._flush()
        return target

    def update_target(self, target: AuditTarget) -> AuditTarget:
        updated = super().update_target(target)
        self._flush()
        return updated

    def create_finding(self, **fields: Any) -> AuditFinding:
        finding = super().create_finding(**fields)
        self._flush()
        return finding
