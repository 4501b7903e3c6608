#!/usr/bin/env python3
"""
HostAlloc CLI

Rich-based CLI for HostAlloc Engine. Wraps the allocation planners with
terminal tables and scriptable exit codes.
"""

from __future__ import annotations

import sys
from typing import Optional

import typer
from rich.console import Console

from .commands.plan import run_plan
from .commands.profiles import list_profiles
from .commands.validate import validate_policy

# Initialize Rich console
console = Console()

# Main app
app = typer.Typer(
    name="hostalloc",
    help="HostAlloc Engine CLI - RAM and CPU allocation planning for shared hosts",
    rich_markup_mode="rich",
    no_args_is_help=True,
    add_completion=True,
)

# Add version callback
def version_callback(value: bool):
    if value:
        from hostalloc_cli import get_full_version, get_version_dict
        info = get_version_dict()
        console.print(f"HostAlloc Engine v{get_full_version()}")
        console.print(f"[dim]Released {info['release_date']}[/dim]")
        raise typer.Exit()

@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version information"
    ),
):
    """
    [bold blue]HostAlloc Engine CLI[/bold blue]

    Partition a host's RAM and CPU between the application worker pool,
    the database and the cache.

    [dim]Examples:[/dim]
        hostalloc plan --ram-mb 8192 --cores 4 --tenants 2
        hostalloc plan --detect --sites-file config/sites.json --format json
        hostalloc validate --config config/tuning_policy.yaml
    """
    pass

# Plan command
@app.command("plan")
def plan(
    ram_mb: Optional[int] = typer.Option(None, "--ram-mb", help="Total system RAM in MB (skips probing when --cores is also given)"),
    cores: Optional[int] = typer.Option(None, "--cores", help="CPU core count"),
    detect: bool = typer.Option(False, "--detect", help="Probe the running host for RAM and cores"),
    tenants: Optional[int] = typer.Option(None, "--tenants", "-t", help="Number of active tenants"),
    sites_file: Optional[str] = typer.Option(None, "--sites-file", help="Tenant registry (sites.json); enabled sites are counted"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to tuning policy YAML"),
    profile: Optional[str] = typer.Option(None, "--profile", "-p", help="Policy profile (see 'hostalloc profiles')"),
    mode: Optional[str] = typer.Option(None, "--mode", help="Budget mode: remaining or reserve_slice"),
    output_format: str = typer.Option("table", "--format", "-f", help="Output format (table, text, json)"),
    fail_on_warning: bool = typer.Option(False, "--fail-on-warning", help="Exit with status 1 when the plan has warnings"),
    log_level: str = typer.Option("WARNING", "--log-level", help="Log level (DEBUG, INFO, WARNING, ERROR)"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Write structured JSON logs to this file"),
):
    """🧮 Compute worker, database and cache allocations for this host."""
    run_plan(
        ram_mb=ram_mb,
        cores=cores,
        detect=detect,
        tenants=tenants,
        sites_file=sites_file,
        config=config,
        profile=profile,
        mode=mode,
        output_format=output_format,
        fail_on_warning=fail_on_warning,
        log_level=log_level,
        log_file=log_file,
    )

# Validate command
@app.command("validate")
def validate(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to tuning policy YAML"),
    profile: Optional[str] = typer.Option(None, "--profile", "-p", help="Policy profile to validate with"),
):
    """✅ Validate the tuning policy without computing a plan."""
    validate_policy(config=config, profile=profile)

# Profiles command
@app.command("profiles")
def profiles():
    """📋 List policy profiles and their overrides."""
    list_profiles()


def cli_main():
    """Entry point for the CLI."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n🛑 [yellow]Operation cancelled by user[/yellow]")
        sys.exit(130)
    except Exception as e:
        console.print(f"\n❌ [bold red]Error:[/bold red] {e}")
        sys.exit(1)

if __name__ == "__main__":
    cli_main()
