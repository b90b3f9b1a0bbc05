"""CLI entry point for codelens.

Commands:
  review   AI review of a snippet, a local file, a repository file or a whole repository
  history  list, show or clear past reviews
  modes    list the available review modes
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from codelens_cli.commands.history import history_cmd
from codelens_cli.commands.modes import modes_cmd
from codelens_cli.commands.review import review_cmd

console = Console()
logger = logging.getLogger(__name__)


def _build_store(config: dict):
    """Instantiate the configured key-value store from .codelens.yml settings.

    Store selection:
      store: sqlite → SQLiteStore (store_path, default .codelens.db)
      store: memory → MemoryStore (history lasts for one command)

    History is a convenience: if the SQLite file cannot be opened the CLI
    falls back to memory rather than refusing to review.
    """
    from codelens_store.memory import MemoryStore

    store_type = config.get("store", "sqlite")

    if store_type == "sqlite":
        from codelens_store.sqlite import SQLiteStore

        db_path = config.get("store_path") or ".codelens.db"
        try:
            return SQLiteStore(db_path=db_path)
        except Exception as e:
            logger.warning("PersistenceFailed: could not open %s (%s); history will not be kept.", db_path, e)
            return MemoryStore()

    if store_type != "memory":
        console.print(f"[yellow]Unknown store {store_type!r}. Falling back to in-memory history.[/yellow]")
    return MemoryStore()


def _configure_logging(verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
    )


@click.group()
@click.version_option(
    version=importlib.metadata.version("codelens"),
    prog_name="codelens",
)
@click.option(
    "--config",
    "config_path",
    default=".codelens.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="CODELENS_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Log debug output to stderr.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """AI code review for snippets, local folders and GitHub repositories."""
    from codelens_core.config import load_config
    from codelens_cli.auth import resolve_github_token
    from codelens_store.history import HistoryCache

    _configure_logging(verbose)
    ctx.ensure_object(dict)

    config = load_config(config_path)

    token = resolve_github_token()
    if token:
        config["github_token"] = token

    store = _build_store(config)
    ctx.obj["store"] = store
    ctx.obj["history"] = HistoryCache(store)
    ctx.obj["config"] = config
    ctx.call_on_close(store.close)


main.add_command(review_cmd)
main.add_command(history_cmd)
main.add_command(modes_cmd)
