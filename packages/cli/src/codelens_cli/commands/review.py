"""review command: run an AI review on a snippet, a local file or a GitHub repository."""

from __future__ import annotations

import click
from rich.console import Console

from codelens_core.errors import CodeLensError, InvalidInput, LocalReadFailed
from codelens_core.fs.directory import PathPicker, open_directory
from codelens_core.gh.repository import get_repo, list_files, parse_repo_ref
from codelens_core.modes import get_mode, mode_values
from codelens_core.providers import PROVIDERS, get_provider
from codelens_core.reviewer import (
    ReviewResult,
    compute_diff,
    ensure_repo_mode,
    print_diff,
    print_feedback,
    revise_from_feedback,
    run_file_review,
    run_repo_review,
    save_feedback,
)
from codelens_core.session import ReviewSession
from codelens_store.models import HistoryItem, new_history_item

console = Console()


def _result_to_item(result: ReviewResult) -> HistoryItem:
    """Map a ReviewResult returned by the core to a HistoryItem for the cache.

    The CLI owns this mapping: codelens_core has no store knowledge and
    codelens_store has no core knowledge. The CLI bridges the two.
    """
    return new_history_item(
        file_name=result.file_name,
        language=result.language,
        feedback=result.feedback,
        code=result.code,
        mode=result.mode,
        kind=result.kind,
        created_at=result.reviewed_at,
    )


def _choose_file(session: ReviewSession) -> str:
    console.print(f"\n{len(session.files)} code file(s) found:")
    for i, f in enumerate(session.files, 1):
        console.print(f"  [bold]{i:>3}[/bold]  {f.path} [dim]({f.language.label})[/dim]")
    index = click.prompt("\nEnter the file number", type=click.IntRange(1, len(session.files)))
    return session.files[index - 1].path


def _load_source(session: ReviewSession, config: dict, repo_url, directory, snippet) -> bool:
    """Fill the session from the chosen source. Returns False when there is nothing to review."""
    if snippet is not None:
        try:
            text = snippet.read()
        except (OSError, UnicodeDecodeError) as e:
            source = getattr(snippet, "name", "stdin")
            raise LocalReadFailed(f"Failed to read the snippet from {source}: it must be UTF-8 text.") from e
        session.use_snippet(text)
        return True

    if directory is not None:
        picker = PathPicker(directory or None)
        files = open_directory(picker, exclude=config.get("exclude_dirs") or ())
        if not files:
            console.print("[yellow]No code files found (or folder selection was cancelled).[/yellow]")
            return False
        session.set_files(files)
        return True

    repo_ref = parse_repo_ref(repo_url)
    if repo_ref is None:
        raise InvalidInput("Invalid GitHub repository URL.")
    repo = get_repo(repo_ref, token=config.get("github_token"))
    files = list_files(repo)
    if not files:
        console.print(f"[yellow]No reviewable code files found in {repo_ref}.[/yellow]")
        return False
    console.print(f"[dim]Loaded {len(files)} code file(s) from {repo_ref}.[/dim]")
    session.set_files(files, repo_ref=repo_ref, repo=repo)
    return True


@click.command("review")
@click.option("--repo", "repo_url", default=None, help="GitHub repository URL, e.g. https://github.com/owner/repo.")
@click.option(
    "--dir",
    "directory",
    is_flag=False,
    flag_value="",
    default=None,
    help="Local folder to scan. Pass --dir without a value to be prompted for one.",
)
@click.option(
    "--file",
    "snippet",
    type=click.File("r", encoding="utf-8"),
    default=None,
    help="Review a code snippet read from a file ('-' reads stdin).",
)
@click.option("--path", "file_path", default=None, help="File within the folder/repository to review.")
@click.option("--whole-repo", is_flag=True, help="Review every code file of the repository in one request.")
@click.option("--mode", type=click.Choice(mode_values()), default=None, help="Review mode. Overrides config file.")
@click.option("--prompt", "custom_prompt", default=None, help="Extra instructions for this review.")
@click.option("--language", default=None, help="Override the detected language (value or label).")
@click.option(
    "--model",
    type=click.Choice(PROVIDERS),
    default=None,
    help="AI model provider. Overrides config file.",
)
@click.option("--diff", "show_diff", is_flag=True, help="Also ask for revised code and show a diff.")
@click.option("--save", is_flag=True, help="Write the review to <file>.review.md in the current directory.")
@click.pass_context
def review_cmd(
    ctx,
    repo_url: str | None,
    directory: str | None,
    snippet,
    file_path: str | None,
    whole_repo: bool,
    mode: str | None,
    custom_prompt: str | None,
    language: str | None,
    model: str | None,
    show_diff: bool,
    save: bool,
):
    """AI-powered code review.

    Pick exactly one source: a GitHub repository (--repo), a local folder
    (--dir) or a snippet (--file). For folders and repositories, choose the
    file with --path or interactively; --whole-repo reviews a repository in
    one request.

    \b
    Environment variables:
      GITHUB_TOKEN         Optional; raises the GitHub rate limit (or use gh CLI)
      ANTHROPIC_API_KEY    Required when using --model anthropic
      OPENAI_API_KEY       Required when using --model openai
    """
    from codelens_core.config import load_instructions, merge_instructions

    config = dict(ctx.obj["config"])
    for key, value in (("model", model), ("mode", mode)):
        if value is not None:
            config[key] = value

    sources = [s for s in (repo_url, directory, snippet) if s is not None]
    if len(sources) != 1:
        raise click.UsageError("Choose exactly one source: --repo URL, --dir [PATH] or --file PATH.")
    if whole_repo and repo_url is None:
        raise click.UsageError("--whole-repo requires --repo.")
    if whole_repo and (show_diff or file_path):
        raise click.UsageError("--whole-repo cannot be combined with --diff or --path.")
    if file_path and snippet is not None:
        raise click.UsageError("--path cannot be combined with --file.")

    if config["model"] not in PROVIDERS:
        choices = ", ".join(PROVIDERS)
        raise click.UsageError(f"Unknown model provider: {config['model']!r}. Choose one of: {choices}.")
    if config["model"] == "anthropic" and not config.get("anthropic_api_key"):
        raise click.UsageError("ANTHROPIC_API_KEY environment variable is not set.")
    if config["model"] == "openai" and not config.get("openai_api_key"):
        raise click.UsageError("OPENAI_API_KEY environment variable is not set.")

    history = ctx.obj["history"]

    try:
        get_mode(config["mode"])
        if whole_repo:
            ensure_repo_mode(config["mode"])

        session = ReviewSession(
            mode=config["mode"],
            custom_instructions=merge_instructions(load_instructions(config), custom_prompt),
            language_override=language,
            default_language=config.get("default_language") or "typescript",
        )
        provider = get_provider(config)

        if not _load_source(session, config, repo_url, directory, snippet):
            return

        if whole_repo:
            result = run_repo_review(
                provider,
                session.repo,
                session.repo_ref,
                session.files,
                session.custom_instructions,
                session.mode,
                max_workers=config.get("max_workers", 8),
            )
        else:
            if snippet is None:
                session.select(file_path or _choose_file(session))
            console.print(f"\nReviewing [bold cyan]{session.file_name}[/bold cyan] ({session.language_label})...")
            result = run_file_review(
                provider,
                session.file_name,
                session.code,
                session.language_tag,
                session.language_label,
                session.custom_instructions,
                session.mode,
            )

        session.feedback = result.feedback
        history.record(_result_to_item(result))
        print_feedback(f"Review of {result.file_name}", result.feedback)

        if save:
            try:
                target = save_feedback(result.feedback, result.file_name)
            except OSError as e:
                raise click.ClickException(f"Could not save the review: {e}") from e
            console.print(f"[green]Review saved to {target}[/green]")

        if show_diff:
            console.print("[dim]Generating revised code...[/dim]")
            session.revised = revise_from_feedback(provider, session.code, session.language_label, session.feedback)
            print_diff(compute_diff(session.code, session.revised, session.file_name))
    except (CodeLensError, OSError, ImportError) as e:
        raise click.ClickException(str(e))
