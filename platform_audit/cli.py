"""CLI entry point for the platform audit engine."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from platform_audit.errors import AuditError
from platform_audit.models.audit import AuditRun, Classification
from platform_audit.models.config import AuditConfig
from platform_audit.models.report import AuditReportSummary
from platform_audit.orchestrator import AuditOrchestrator
from platform_audit.reporter.reporter import Reporter, summarize

console = Console()

_CLASSIFICATION_STYLE = {
    Classification.FULLY_OPERATIONAL: "green",
    Classification.PARTIALLY_OPERATIONAL: "yellow",
    Classification.NON_OPERATIONAL: "red",
}


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _load_config(config: str) -> AuditConfig:
    try:
        return AuditConfig.load(config)
    except FileNotFoundError:
        console.print(f"[red]Config file not found: {config}[/red]")
        console.print("Run 'platform-audit init' to create a default config.")
        sys.exit(1)


def _print_run(run: AuditRun) -> None:
    table = Table(title=f"Audit Run #{run.run_number}")
    table.add_column("Metric", style="bold")
    table.add_column("Value")
    table.add_row("Run ID", run.id)
    table.add_row("Type", run.run_type.value + (f" ({run.scope})" if run.scope else ""))
    table.add_row("Status", run.status.value)
    table.add_row("Duration", f"{(run.duration_ms or 0) / 1000:.1f}s")
    table.add_row("Targets", str(run.total_targets))
    table.add_row("Operational", f"[green]{run.passed_targets}[/green]")
    table.add_row("Partial", f"[yellow]{run.partial_targets}[/yellow]")
    table.add_row("Non-operational", f"[red]{run.failed_targets}[/red]")
    table.add_row("Readiness", f"{run.readiness_score:.2f}%")
    if run.change_from_previous is not None:
        table.add_row("Change", f"{run.change_from_previous:+.2f}")
    console.print(table)


def _print_findings(report: AuditReportSummary) -> None:
    table = Table(title="Findings")
    table.add_column("Test ID")
    table.add_column("Type")
    table.add_column("Classification")
    table.add_column("Score", justify="right")
    table.add_column("Priority")
    table.add_column("Recommendation")
    for f in report.findings:
        style = _CLASSIFICATION_STYLE[f.classification]
        table.add_row(
            f.test_id,
            f.type.value if f.type else "",
            f"[{style}]{f.classification.value}[/{style}]",
            f"{f.score:.2f}",
            f.priority,
            f.recommendation or "",
        )
    console.print(table)


def _finish(orchestrator: AuditOrchestrator, cfg: AuditConfig, run: AuditRun) -> None:
    _print_run(run)
    report = orchestrator.generate_report(run.id)
    for fmt, path in Reporter(cfg).generate_reports(report).items():
        console.print(f"  {fmt.upper()} report: [blue]{path}[/blue]")


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Platform Readiness Audit Engine"""
    setup_logging(verbose)


@cli.command()
@click.option("--base-url", "-u", default="", help="Live platform base URL")
@click.option("--config", "-c", default="audit-config.json", help="Config file path")
def init(base_url: str, config: str) -> None:
    """Create a default configuration file."""
    config_path = Path(config)
    if config_path.exists():
        if not click.confirm(f"{config} already exists. Overwrite?"):
            return
    cfg = AuditConfig(base_url=base_url)
    cfg.save(config_path)
    console.print(f"[green]Created {config_path}[/green] (base URL: {cfg.base_url})")


@cli.command()
@click.option("--config", "-c", default="audit-config.json", help="Config file path")
@click.option("--initiated-by", default=None, help="Recorded as the run initiator")
def run(config: str, initiated_by: str | None) -> None:
    """Run a full-platform audit: discover → probe → classify → aggregate."""
    cfg = _load_config(config)
    orchestrator = AuditOrchestrator(cfg)
    try:
        result = orchestrator.run_full_audit(initiated_by)
    except AuditError as e:
        console.print(f"[red]Audit failed: {e}[/red]")
        sys.exit(1)
    _finish(orchestrator, cfg, result)


@cli.command()
@click.argument("path")
@click.option("--config", "-c", default="audit-config.json", help="Config file path")
@click.option("--initiated-by", default=None, help="Recorded as the run initiator")
def page(path: str, config: str, initiated_by: str | None) -> None:
    """Audit a single registered page and its services."""
    cfg = _load_config(config)
    orchestrator = AuditOrchestrator(cfg)
    try:
        result = orchestrator.run_page_audit(path, initiated_by)
    except AuditError as e:
        console.print(f"[red]Audit failed: {e}[/red]")
        sys.exit(1)
    _finish(orchestrator, cfg, result)


@cli.command()
@click.argument("run_id")
@click.option("--config", "-c", default="audit-config.json", help="Config file path")
def report(run_id: str, config: str) -> None:
    """Show the report for a run."""
    cfg = _load_config(config)
    orchestrator = AuditOrchestrator(cfg)
    try:
        summary = orchestrator.generate_report(run_id)
    except AuditError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    _print_findings(summary)
    console.print(summarize(summary))


@cli.command()
@click.argument("baseline_run_id")
@click.argument("current_run_id")
@click.option("--config", "-c", default="audit-config.json", help="Config file path")
def compare(baseline_run_id: str, current_run_id: str, config: str) -> None:
    """Compare two runs (baseline first) for new and resolved issues."""
    cfg = _load_config(config)
    orchestrator = AuditOrchestrator(cfg)
    try:
        comparison = orchestrator.compare_runs(baseline_run_id, current_run_id)
    except AuditError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    console.print(
        f"Run #{comparison.run1.run_number} → #{comparison.run2.run_number}: "
        f"score change {comparison.score_change:+.2f}"
    )
    for test_id in comparison.new_issues:
        console.print(f"  [red]+ {test_id}[/red]")
    for test_id in comparison.resolved_issues:
        console.print(f"  [green]- {test_id}[/green]")
    for fmt, path in Reporter(cfg).generate_comparison(comparison).items():
        console.print(f"  {fmt.upper()} comparison: [blue]{path}[/blue]")


@cli.command()
@click.option("--config", "-c", default="audit-config.json", help="Config file path")
def runs(config: str) -> None:
    """List recorded audit runs, newest first."""
    cfg = _load_config(config)
    orchestrator = AuditOrchestrator(cfg)
    all_runs = orchestrator.store.list_runs()
    if not all_runs:
        console.print("[yellow]No audit runs recorded[/yellow]")
        return
    table = Table(title="Audit Runs")
    for col in ("#", "Run ID", "Type", "Status", "Readiness", "Started"):
        table.add_column(col)
    for r in all_runs:
        table.add_row(
            str(r.run_number), r.id,
            r.run_type.value + (f" {r.scope}" if r.scope else ""),
            r.status.value, f"{r.readiness_score:.2f}%",
            r.started_at.strftime("%Y-%m-%d %H:%M:%S"),
        )
    console.print(table)


if __name__ == "__main__":
    cli()
