"""Audit orchestrator — coordinates discover, probe, classify, record and aggregate stages."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable

import httpx

from platform_audit.discovery.discoverer import discover_page, discover_platform
from platform_audit.errors import AuditCancelledError
from platform_audit.models.audit import (
    AuditRun,
    AuditTarget,
    Classification,
    DiscoveredTarget,
    ElementTestResults,
    HistoryEntry,
    RunStatus,
    RunType,
    TargetKind,
    utcnow,
)
from platform_audit.models.config import AuditConfig
from platform_audit.models.registry import PlatformRegistry
from platform_audit.models.report import AuditReportSummary, RunComparison
from platform_audit.probe.runner import ProbeRunner
from platform_audit.registry.default_registry import load_registry
from platform_audit.reporter.report_builder import build_report, compare_runs
from platform_audit.scoring.aggregator import aggregate_run
from platform_audit.scoring.classifier import classify
from platform_audit.scoring.recommendations import generate_recommendation
from platform_audit.storage.base import AuditStore
from platform_audit.storage.json_store import JsonAuditStore

logger = logging.getLogger(__name__)


class AuditOrchestrator:
    """Runs audits end to end and answers report/diff queries.

    Each call threads its own run record through the pipeline; nothing
    about an in-progress run is kept on the orchestrator.
    """

    def __init__(
        self,
        config: AuditConfig,
        store: AuditStore | None = None,
        registry: PlatformRegistry | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.config = config
        self.store = store if store is not None else JsonAuditStore(config.store_path)
        self.registry = registry if registry is not None else load_registry(config.registry_path)
        self.probe_runner = ProbeRunner(config, client=client)

    # Exposed operations

    async def start_full_audit(self, initiated_by: str) -> AuditRun:
        """Audit every registered surface. Returns the terminal run record."""
        previous = self.store.get_latest_run()
        run = self._create_run(RunType.FULL, initiated_by, previous)
        return await self._execute(run, previous, lambda: discover_platform(self.registry))

    async def start_page_audit(self, initiated_by: str, page_path: str) -> AuditRun:
        """Audit one registered page and its services.

        Raises PageNotFoundError before anything is persisted when the path
        is not registered.
        """
        targets = discover_page(self.registry, page_path)
        previous = self.store.get_latest_run()
        run = self._create_run(RunType.PAGE, initiated_by, previous, scope=page_path)
        return await self._execute(run, previous, lambda: targets)

    def generate_report(self, run_id: str) -> AuditReportSummary:
        return build_report(self.store, run_id)

    def compare_runs(self, baseline_run_id: str, current_run_id: str) -> RunComparison:
        return compare_runs(self.store, baseline_run_id, current_run_id)

    # Sync entry points

    def run_full_audit(self, initiated_by: str | None = None) -> AuditRun:
        return asyncio.run(self.start_full_audit(initiated_by or self.config.initiated_by))

    def run_page_audit(self, page_path: str, initiated_by: str | None = None) -> AuditRun:
        return asyncio.run(
            self.start_page_audit(initiated_by or self.config.initiated_by, page_path)
        )

    # Lifecycle

    def _create_run(
        self,
        run_type: RunType,
        initiated_by: str,
        previous: AuditRun | None,
        scope: str | None = None,
    ) -> AuditRun:
        return self.store.create_run(
            run_number=(previous.run_number if previous else 0) + 1,
            run_type=run_type,
            scope=scope,
            status=RunStatus.RUNNING,
            initiated_by=initiated_by,
            started_at=utcnow(),
            previous_run_id=previous.id if previous else None,
        )

    async def _execute(
        self,
        run: AuditRun,
        previous: AuditRun | None,
        discover: Callable[[], list[DiscoveredTarget]],
    ) -> AuditRun:
        start = time.time()
        logger.info("=== Starting %s audit run #%d%s ===", run.run_type.value, run.run_number,
                    f" for {run.scope}" if run.scope else "")
        try:
            logger.info("--- Stage 1: Discover ---")
            targets = discover()
            run = self.store.update_run(run.id, total_targets=len(targets))
            rows = {d.test_id: self._upsert_target(d) for d in targets}
            kinds: dict[str, TargetKind] = {rows[d.test_id].id: d.type for d in targets}

            logger.info("--- Stage 2: Probe and record (%d targets) ---", len(targets))
            stage_start = time.time()
            recorded = 0

            def _record_one(discovered: DiscoveredTarget, checks: ElementTestResults) -> None:
                nonlocal recorded
                target = self._record(run, rows[discovered.test_id], discovered, checks)
                recorded += 1
                logger.info("[%s] %s (%.2f) [%d/%d]",
                            target.current_classification.value, discovered.test_id,
                            target.current_score, recorded, len(targets))

            await self.probe_runner.run_all(targets, on_result=_record_one)
            logger.info("--- Stage 2 complete in %.1fs ---", time.time() - stage_start)

            logger.info("--- Stage 3: Aggregate ---")
            completed = self._complete(run, previous, kinds)
        except asyncio.CancelledError:
            self._fail(run, AuditCancelledError())
            raise
        except Exception as e:
            self._fail(run, e)
            raise

        logger.info("=== Audit run #%d complete: readiness %.2f%% in %.1fs ===",
                    completed.run_number, completed.readiness_score, time.time() - start)
        return completed

    def _record(
        self,
        run: AuditRun,
        target: AuditTarget,
        discovered: DiscoveredTarget,
        checks: ElementTestResults,
    ) -> AuditTarget:
        """Append this run's finding for a probed target and update its history."""
        classification, score = classify(checks)
        rec = generate_recommendation(discovered, checks, classification)
        self.store.create_finding(
            run_id=run.id,
            target_id=target.id,
            classification=classification,
            score=score,
            test_results=checks,
            failure_reason=rec.failure_reason,
            failure_reason_ar=rec.failure_reason_ar,
            recommendation=rec.recommendation,
            recommendation_ar=rec.recommendation_ar,
            recommendation_type=rec.recommendation_type,
            priority=rec.priority,
            fix_status="fixed" if classification is Classification.FULLY_OPERATIONAL else "pending",
        )

        target.record_result(HistoryEntry(
            run_id=run.id, classification=classification, score=score,
        ))
        return self.store.update_target(target)

    def _upsert_target(self, discovered: DiscoveredTarget) -> AuditTarget:
        """Create or refresh the persistent row for a discovered target."""
        descriptive = discovered.model_dump(exclude={"test_id"})
        target = self.store.get_target_by_test_id(discovered.test_id)
        if target is None:
            logger.debug("New target %s", discovered.test_id)
            return self.store.create_target(test_id=discovered.test_id, **descriptive)
        # Registry wording and wiring may have changed since the last run
        return self.store.update_target(
            target.model_copy(update={**descriptive, "is_active": True})
        )

    def _complete(
        self, run: AuditRun, previous: AuditRun | None, kinds: dict[str, TargetKind],
    ) -> AuditRun:
        findings = self.store.get_findings_by_run(run.id)
        totals = aggregate_run(findings, kinds)
        completed_at = utcnow()
        change = (
            totals.readiness_score - previous.readiness_score
            if previous is not None else None
        )
        return self.store.update_run(
            run.id,
            status=RunStatus.COMPLETED,
            completed_at=completed_at,
            duration_ms=int((completed_at - run.started_at).total_seconds() * 1000),
            total_targets=totals.total,
            tested_targets=totals.total,
            passed_targets=totals.passed,
            failed_targets=totals.failed,
            partial_targets=totals.partial,
            readiness_score=totals.readiness_score,
            breakdown=totals.breakdown,
            change_from_previous=change,
        )

    def _fail(self, run: AuditRun, error: BaseException) -> None:
        message = str(error) or type(error).__name__
        logger.error("Audit run #%d failed: %s", run.run_number, message)
        completed_at = utcnow()
        try:
            self.store.update_run(
                run.id,
                status=RunStatus.FAILED,
                completed_at=completed_at,
                duration_ms=int((completed_at - run.started_at).total_seconds() * 1000),
                error_message=message,
            )
        except Exception:
            # The original error is re-raised by the caller
            logger.exception("Could not mark audit run #%d as failed", run.run_number)
