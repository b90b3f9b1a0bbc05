"""modes command: list the available review modes."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

console = Console()


@click.command("modes")
def modes_cmd():
    """List review modes accepted by `codelens review --mode`."""
    from codelens_core.modes import REVIEW_MODES

    table = Table(title="Review Modes", show_header=True, header_style="bold cyan")
    table.add_column("Mode", style="bold")
    table.add_column("Name")
    table.add_column("Description")
    table.add_column("Whole repo", justify="center")

    for mode in REVIEW_MODES:
        table.add_row(mode.value, mode.label, mode.description, "yes" if mode.repo_compatible else "[red]no[/red]")

    console.print(table)
