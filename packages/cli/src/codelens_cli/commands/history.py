"""history commands: list, show and clear past reviews."""

from __future__ import annotations

import click
from rich.console import Console
from rich.markdown import Markdown
from rich.syntax import Syntax
from rich.table import Table

console = Console()

_KIND_STYLE = {"file": "cyan", "repo": "magenta"}


@click.group("history")
def history_cmd():
    """Browse the local history of completed reviews (newest first, last 50 kept)."""


@history_cmd.command("list")
@click.option(
    "--limit",
    type=click.IntRange(min=1),
    default=20,
    show_default=True,
    help="Maximum number of records to show.",
)
@click.pass_context
def list_cmd(ctx, limit: int):
    """List past reviews."""
    items = ctx.obj["history"].load()
    if not items:
        console.print("[yellow]No review history yet.[/yellow]")
        return

    table = Table(title="Review History", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="bold", width=8)
    table.add_column("Reviewed At", width=19)
    table.add_column("File", max_width=50)
    table.add_column("Language", width=12)
    table.add_column("Mode", width=16)
    table.add_column("Kind", width=6)

    for item in items[:limit]:
        style = _KIND_STYLE.get(item.kind, "white")
        table.add_row(
            item.id[:8],
            item.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            item.file_name,
            item.language,
            item.mode,
            f"[{style}]{item.kind}[/{style}]",
        )

    console.print(table)


@history_cmd.command("show")
@click.argument("item_id")
@click.option("--code", "show_code", is_flag=True, help="Also print the reviewed code.")
@click.pass_context
def show_cmd(ctx, item_id: str, show_code: bool):
    """Show one past review. ITEM_ID may be a unique prefix of the id."""
    from codelens_core.languages import find_language

    item = ctx.obj["history"].get(item_id)
    if item is None:
        raise click.ClickException(f"No history entry matches {item_id!r}.")

    console.print(
        f"[bold cyan]{item.file_name}[/bold cyan]  [dim]{item.language} · {item.mode} · "
        f"{item.created_at:%Y-%m-%d %H:%M:%S}[/dim]\n"
    )
    if show_code:
        language = find_language(item.language)
        lexer = language.value if language and item.kind == "file" else "text"
        console.print(Syntax(item.code, lexer, line_numbers=item.kind == "file"))
        console.print()
    console.print(Markdown(item.feedback))


@history_cmd.command("clear")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation.")
@click.pass_context
def clear_cmd(ctx, yes: bool):
    """Delete all review history."""
    if not yes and not click.confirm("Delete all review history?"):
        return
    ctx.obj["history"].clear()
    console.print("[green]Review history cleared.[/green]")
