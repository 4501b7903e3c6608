"""
Plan command for HostAlloc CLI

Computes an allocation plan and renders it as Rich tables, a plain-text
operator summary or JSON.
"""

from __future__ import annotations

import json
import logging
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from hostalloc_engine.config import BudgetMode
from hostalloc_engine.error_catalog import DiagnosticCatalog, get_diagnostic_catalog
from hostalloc_engine.exceptions import (
    AllocationAbortedError,
    ConfigError,
    HostAllocError,
)
from hostalloc_engine.logger import configure_logging
from hostalloc_engine.planning import compute_allocation
from hostalloc_engine.reports import PlanReporter
from hostalloc_engine.resources import AllocationPlan

from ..utils.config_helpers import (
    find_default_config,
    load_config,
    resolve_hardware,
    resolve_tenant_count,
)

console = Console()
logger = logging.getLogger("hostalloc_engine.cli")

EXIT_OK = 0
EXIT_WARNINGS = 1
EXIT_CONFIG_ERROR = 2
EXIT_ABORTED = 3

OUTPUT_FORMATS = ("table", "text", "json")

_SEVERITY_STYLES = {
    "info": "dim",
    "warning": "yellow",
    "fatal": "bold red",
}


def run_plan(
    ram_mb: Optional[int] = None,
    cores: Optional[int] = None,
    detect: bool = False,
    tenants: Optional[int] = None,
    sites_file: Optional[str] = None,
    config: Optional[str] = None,
    profile: Optional[str] = None,
    mode: Optional[str] = None,
    output_format: str = "table",
    fail_on_warning: bool = False,
    log_level: str = "WARNING",
    log_file: Optional[str] = None,
) -> None:
    """Compute and print an allocation plan, exiting with the plan's status code."""
    if output_format not in OUTPUT_FORMATS:
        console.print(f"❌ [red]Unknown format: {output_format}[/red] (choose from {', '.join(OUTPUT_FORMATS)})")
        raise typer.Exit(EXIT_CONFIG_ERROR)

    modes = [m.value for m in BudgetMode]
    if mode is not None and mode not in modes:
        console.print(f"❌ [red]Unknown budget mode: {mode}[/red] (choose from {', '.join(modes)})")
        raise typer.Exit(EXIT_CONFIG_ERROR)

    configure_logging(level=log_level, log_file=log_file)
    verbose = log_level.upper() == "DEBUG"
    catalog = get_diagnostic_catalog()
    policy_source = config
    if policy_source is None:
        default_path = find_default_config()
        policy_source = str(default_path) if default_path.exists() else "built-in defaults"
    profile_name = profile

    try:
        cfg = load_config(config)
        if profile:
            cfg = cfg.model_copy(update={"profile": profile})
        profile_name = cfg.profile

        cli_layer = {"budget_mode": BudgetMode(mode) if mode else None}
        policy = cfg.build_policy(cli_layer)

        facts = resolve_hardware(cfg, ram_mb, cores, detect)
        tenant_count = resolve_tenant_count(cfg, tenants, sites_file)
        plan = compute_allocation(facts, policy, tenant_count)

    except FileNotFoundError as e:
        console.print(f"❌ [red]{e}[/red]")
        raise typer.Exit(EXIT_CONFIG_ERROR)
    except ConfigError as e:
        _print_config_error(e)
        _print_error_details(e, policy_source, profile_name, verbose)
        raise typer.Exit(EXIT_CONFIG_ERROR)
    except AllocationAbortedError as e:
        console.print("❌ [bold red]Allocation aborted[/bold red]")
        for diagnostic in e.diagnostics:
            console.print(f"   [{diagnostic.code}] {diagnostic.message}", markup=False)
            for hint in catalog.find_resolution_hints(diagnostic):
                console.print(f"   💡 {hint.title}: {hint.description}", style="dim", markup=False)
        _print_error_details(e, policy_source, profile_name, verbose)
        _log_hint_statistics(catalog)
        raise typer.Exit(EXIT_ABORTED)
    except HostAllocError as e:
        console.print(f"❌ [red]{e.message}[/red]")
        _print_error_details(e, policy_source, profile_name, verbose)
        raise typer.Exit(EXIT_CONFIG_ERROR)

    if output_format == "json":
        typer.echo(json.dumps(plan.to_dict(), indent=2))
    elif output_format == "text":
        typer.echo(PlanReporter.format_plan(plan, catalog))
        _log_hint_statistics(catalog)
    else:
        _print_plan_tables(plan)

    if fail_on_warning and plan.has_warnings:
        raise typer.Exit(EXIT_WARNINGS)


def _print_error_details(
    error: HostAllocError,
    policy_source: str,
    profile: Optional[str],
    verbose: bool,
) -> None:
    """Print the planning context; the full diagnostic report at DEBUG level."""
    if error.context.policy_source is None:
        error.context.policy_source = policy_source
    if error.context.profile is None:
        error.context.profile = profile
    logger.debug("Planning failed", extra={"extra_data": error.to_dict()})

    if verbose:
        console.print(error.format_diagnostic_message(), markup=False, highlight=False)
    else:
        console.print(f"   {error.context.format_summary()}", style="dim", markup=False, highlight=False)


def _log_hint_statistics(catalog: DiagnosticCatalog) -> None:
    lookups = {code: count for code, count in catalog.get_pattern_statistics().items() if count}
    if lookups:
        logger.debug(f"Resolution hint lookups: {lookups}", extra={"extra_data": {"hint_lookups": lookups}})


def _print_config_error(error: ConfigError) -> None:
    console.print("❌ [bold red]Configuration error[/bold red]")
    if error.problems:
        for problem in error.problems:
            console.print(f"   • {problem}", markup=False)
    else:
        console.print(f"   {error.message}", markup=False)


def _print_plan_tables(plan: AllocationPlan) -> None:
    console.print(
        f"🖥️  [bold blue]{plan.facts.ram_mb}MB RAM / {plan.facts.cores} cores[/bold blue] "
        f"for {plan.tenant_count} tenant(s), budget mode [cyan]{plan.budget_mode}[/cyan] "
        f"({plan.available_mb}MB source)"
    )
    if not plan.auto_tune:
        console.print("⚙️  [yellow]Auto-tuning disabled: static sizes applied[/yellow]")

    table = Table(show_header=True, header_style="bold blue", title="Allocation Plan")
    table.add_column("Service")
    table.add_column("Setting")
    table.add_column("Value", justify="right")

    wp = plan.worker_pool
    table.add_row("workers", "max_children", str(wp.max_children))
    table.add_row("", "start_servers", str(wp.start_servers))
    table.add_row("", "min_spare", str(wp.min_spare))
    table.add_row("", "max_spare", str(wp.max_spare))
    table.add_row("", "tier rule", wp.tier_rule or "-")

    db = plan.database
    table.add_row("database", "budget", f"{db.budget_mb} MB")
    table.add_row("", "buffer_pool", f"{db.buffer_pool_mb} MB")
    table.add_row("", "buffer_pool_instances", str(db.buffer_pool_instances))
    table.add_row("", "log_file", f"{db.log_file_mb} MB")
    table.add_row("", "query_cache", f"{db.query_cache_mb} MB")
    table.add_row("", "tmp_table_size", f"{db.tmp_table_size_mb} MB")
    table.add_row("", "max_connections", str(db.max_connections))
    table.add_row("", "thread_cache_size", str(db.thread_cache_size))
    table.add_row("", "table_open_cache", str(db.table_open_cache))

    cache = plan.cache
    table.add_row("cache", "max_memory", f"{cache.max_memory_mb} MB")
    table.add_row("", "max_clients", str(cache.max_clients))
    table.add_row("", "tcp_backlog", str(cache.tcp_backlog))
    console.print(table)

    fp = plan.footprint
    style = "red" if fp.overshoot_mb else "green"
    console.print(
        f"📊 Footprint: workers {fp.worker_total_mb}MB + database {fp.database_mb}MB + "
        f"cache {fp.cache_mb}MB + headroom {fp.headroom_mb}MB = "
        f"[{style}]{fp.total_mb}MB[/{style}] of {fp.ram_mb}MB"
    )

    if not plan.diagnostics:
        console.print("✅ [green]No diagnostics[/green]")
        return

    diag_table = Table(show_header=True, header_style="bold blue", title="Diagnostics")
    diag_table.add_column("Severity")
    diag_table.add_column("Code")
    diag_table.add_column("Message")
    for diagnostic in plan.diagnostics:
        severity = diagnostic.severity.value
        style = _SEVERITY_STYLES.get(severity, "")
        diag_table.add_row(f"[{style}]{severity.upper()}[/{style}]", diagnostic.code, diagnostic.message)
    console.print(diag_table)
