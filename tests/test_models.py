"""Tests for configuration and audit data models."""

import json
from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from platform_audit.models.audit import (
    HISTORY_CAPACITY,
    AuditRun,
    AuditTarget,
    Classification,
    HistoryEntry,
    RunStatus,
    TargetKind,
)
from platform_audit.models.config import DEFAULT_BASE_URL, AuditConfig


@pytest.fixture
def clean_env(monkeypatch):
    for var in ("PLATFORM_AUDIT_BASE_URL", "REPL_SLUG", "REPL_OWNER"):
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


class TestAuditConfig:
    """Tests for AuditConfig model."""

    def test_default_values(self, clean_env):
        config = AuditConfig()
        assert config.base_url == DEFAULT_BASE_URL
        assert config.probe_timeout_seconds == 5.0
        assert config.optimistic_on_unreachable is True
        assert config.report_formats == ["json"]
        assert config.registry_path is None

    def test_base_url_from_explicit_env(self, clean_env):
        clean_env.setenv("PLATFORM_AUDIT_BASE_URL", "https://staging.example.com/")
        assert AuditConfig().base_url == "https://staging.example.com"

    def test_base_url_from_repl_env(self, clean_env):
        clean_env.setenv("REPL_SLUG", "myapp")
        clean_env.setenv("REPL_OWNER", "alice")
        assert AuditConfig().base_url == "https://myapp.alice.repl.co"

    def test_base_url_env_reference(self, clean_env):
        clean_env.setenv("MY_PLATFORM", "http://10.0.0.5:8080")
        assert AuditConfig(base_url="env:MY_PLATFORM").base_url == "http://10.0.0.5:8080"

    def test_base_url_env_reference_missing(self, clean_env):
        with pytest.raises(ValidationError, match="MY_PLATFORM"):
            AuditConfig(base_url="env:MY_PLATFORM")

    def test_rejects_non_positive_timeout(self):
        with pytest.raises(ValidationError):
            AuditConfig(base_url="http://x", probe_timeout_seconds=0)

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "nested" / "audit-config.json"
        config = AuditConfig(base_url="http://platform.test", max_parallel_probes=2)
        config.save(path)
        loaded = AuditConfig.load(path)
        assert loaded.base_url == "http://platform.test"
        assert loaded.max_parallel_probes == 2

    def test_save_keeps_environment_base_url_unresolved(self, clean_env, tmp_path):
        path = tmp_path / "audit-config.json"
        clean_env.setenv("PLATFORM_AUDIT_BASE_URL", "https://staging.example.com")
        AuditConfig().save(path)
        assert json.loads(path.read_text())["base_url"] == ""

        clean_env.setenv("PLATFORM_AUDIT_BASE_URL", "https://prod.example.com")
        assert AuditConfig.load(path).base_url == "https://prod.example.com"

    def test_save_keeps_env_reference(self, clean_env, tmp_path):
        path = tmp_path / "audit-config.json"
        clean_env.setenv("MY_PLATFORM", "http://10.0.0.5:8080")
        AuditConfig(base_url="env:MY_PLATFORM").save(path)
        assert json.loads(path.read_text())["base_url"] == "env:MY_PLATFORM"

    def test_save_writes_overridden_base_url(self, clean_env, tmp_path):
        path = tmp_path / "audit-config.json"
        config = AuditConfig()
        config.base_url = "http://override.test"
        config.save(path)
        assert json.loads(path.read_text())["base_url"] == "http://override.test"

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            AuditConfig.load(tmp_path / "missing.json")


def _entry(n: int) -> HistoryEntry:
    return HistoryEntry(
        run_id=f"run_{n}",
        classification=Classification.PARTIALLY_OPERATIONAL,
        score=50.0,
        timestamp=datetime(2026, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=n),
    )


class TestAuditTargetHistory:
    """The target history is a capped buffer, newest first."""

    def _target(self, **kwargs) -> AuditTarget:
        return AuditTarget(id="tgt_1", test_id="page--", name="Home",
                           type=TargetKind.PAGE, **kwargs)

    def test_record_pushes_to_front(self):
        target = self._target()
        target.record_result(_entry(1))
        target.record_result(_entry(2))
        assert [e.run_id for e in target.test_history] == ["run_2", "run_1"]

    def test_record_updates_current_state(self):
        target = self._target()
        entry = HistoryEntry(run_id="run_9",
                             classification=Classification.FULLY_OPERATIONAL, score=83.3)
        target.record_result(entry)
        assert target.current_classification is Classification.FULLY_OPERATIONAL
        assert target.current_score == 83.3
        assert target.last_tested_at == entry.timestamp

    def test_history_capped(self):
        target = self._target()
        for n in range(HISTORY_CAPACITY + 5):
            target.record_result(_entry(n))
        assert len(target.test_history) == HISTORY_CAPACITY
        assert target.test_history[0].run_id == f"run_{HISTORY_CAPACITY + 4}"
        assert target.test_history[-1].run_id == "run_5"

    def test_validation_truncates_oversized_history(self):
        target = self._target(test_history=[_entry(n) for n in range(15)])
        assert len(target.test_history) == HISTORY_CAPACITY

    def test_new_target_defaults(self):
        target = self._target()
        assert target.current_classification is Classification.NON_OPERATIONAL
        assert target.current_score == 0.0
        assert target.is_active is True


class TestRunStatus:
    def test_terminal_states(self):
        assert not RunStatus.RUNNING.is_terminal
        assert RunStatus.COMPLETED.is_terminal
        assert RunStatus.FAILED.is_terminal

    def test_run_is_terminal(self):
        run = AuditRun(id="run_1", run_number=1)
        assert not run.is_terminal
        assert AuditRun(id="run_2", run_number=2, status="failed").is_terminal
