"""
Validate command for HostAlloc CLI

Checks a tuning policy without computing a plan.
"""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from hostalloc_engine.exceptions import ConfigError

from ..utils.config_helpers import load_config
from .plan import EXIT_CONFIG_ERROR

console = Console()


def validate_policy(config: Optional[str] = None, profile: Optional[str] = None) -> None:
    """Load and compose the policy, then report every problem found."""
    try:
        cfg = load_config(config)
        if profile:
            cfg = cfg.model_copy(update={"profile": profile})
        policy = cfg.build_policy()
    except FileNotFoundError as e:
        console.print(f"❌ [red]{e}[/red]")
        raise typer.Exit(EXIT_CONFIG_ERROR)
    except ConfigError as e:
        console.print("❌ [bold red]Configuration error[/bold red]")
        console.print(f"   {e.message}", markup=False)
        raise typer.Exit(EXIT_CONFIG_ERROR)

    problems = policy.problems()
    if problems:
        table = Table(show_header=True, header_style="bold red", title="Policy Problems")
        table.add_column("#", justify="right")
        table.add_column("Problem")
        for i, problem in enumerate(problems, 1):
            table.add_row(str(i), problem)
        console.print(table)
        console.print(f"❌ [bold red]Policy is invalid ({len(problems)} problem(s))[/bold red]")
        raise typer.Exit(EXIT_CONFIG_ERROR)

    console.print(
        f"✅ [green]Policy is valid[/green] "
        f"(profile: {cfg.profile or 'none'}, budget mode: {policy.budget_mode.value})"
    )
