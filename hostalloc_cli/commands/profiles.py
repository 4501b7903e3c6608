"""
Profiles command for HostAlloc CLI

Lists the named policy profiles and the fields each one overrides.
"""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from hostalloc_engine.config import DEFAULT_PROFILE, POLICY_PROFILES

console = Console()


def list_profiles() -> None:
    table = Table(show_header=True, header_style="bold blue", title="Policy Profiles")
    table.add_column("Profile")
    table.add_column("Overrides")

    for name, overrides in POLICY_PROFILES.items():
        label = f"{name} (default)" if name == DEFAULT_PROFILE else name
        if overrides:
            text = "\n".join(f"{key} = {value}" for key, value in overrides.items())
        else:
            text = "[dim]built-in defaults[/dim]"
        table.add_row(label, text)

    console.print(table)
