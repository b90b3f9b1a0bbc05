"""Core review orchestration.

Three request shapes go to the text-generation provider: a single file,
a whole repository, and the "revise from feedback" request behind the diff
view. Each one either returns text or raises; there is no partial result
and no retry at this layer.
"""

from __future__ import annotations

import difflib
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from rich.console import Console
from rich.markdown import Markdown
from rich.rule import Rule
from rich.syntax import Syntax

from codelens_core.errors import InvalidInput
from codelens_core.gh.repository import fetch_all
from codelens_core.models import RepoRef, SourceFile
from codelens_core.modes import DEFAULT_MODE, ReviewMode, get_mode
from codelens_core.prompts import (
    REVISE_SYSTEM_PROMPT,
    build_file_prompt,
    build_repo_prompt,
    build_revise_prompt,
    build_system_prompt,
)
from codelens_core.providers.base import BaseProvider

console = Console()
logger = logging.getLogger(__name__)

_FENCE_OPEN_RE = re.compile(r"^```[\w+#.-]*[ \t]*\n")
_FENCE_CLOSE_RE = re.compile(r"\n?```\s*$")


@dataclass
class ReviewResult:
    """Result of a completed review. Carries enough data for the CLI to record history.

    Decoupled from codelens_store: the CLI converts this to a HistoryItem.
    """

    file_name: str
    language: str  # language label, or "Repository" for whole-repo reviews
    feedback: str
    code: str
    mode: str
    kind: str  # "file" | "repo"
    reviewed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def ensure_repo_mode(mode: str) -> ReviewMode:
    """Refuse modes that cannot run across a whole repository."""
    review_mode = get_mode(mode)
    if not review_mode.repo_compatible:
        raise InvalidInput(f"{review_mode.label} is not available for repository-wide reviews.")
    return review_mode


def review_one(
    provider: BaseProvider,
    code: str,
    language: str,
    custom_instructions: str = "",
    mode: str = DEFAULT_MODE,
) -> str:
    """Review a single piece of code. Empty code is rejected before any request."""
    if not code.strip():
        raise InvalidInput("Cannot review empty code.")
    review_mode = get_mode(mode)
    logger.debug("Requesting %s review of %d chars of %s", review_mode.value, len(code), language)
    return provider.complete(build_system_prompt(review_mode), build_file_prompt(code, language, custom_instructions))


def review_many(
    provider: BaseProvider,
    files: list[SourceFile],
    repo_ref: RepoRef,
    custom_instructions: str = "",
    mode: str = DEFAULT_MODE,
) -> str:
    """Review a set of fetched repository files in one request."""
    review_mode = ensure_repo_mode(mode)
    logger.debug("Requesting %s review of %d file(s) in %s", review_mode.value, len(files), repo_ref)
    return provider.complete(
        build_system_prompt(review_mode), build_repo_prompt(files, repo_ref, custom_instructions)
    )


def strip_code_fence(text: str) -> str:
    """Remove a single Markdown fence wrapped around the whole response."""
    stripped = text.strip()
    if not stripped.startswith("```"):
        return text
    stripped = _FENCE_OPEN_RE.sub("", stripped, count=1)
    return _FENCE_CLOSE_RE.sub("", stripped, count=1)


def revise_from_feedback(provider: BaseProvider, original_code: str, language_label: str, feedback: str) -> str:
    """Ask the provider for the full code with the review's suggestions applied."""
    if not original_code.strip():
        raise InvalidInput("There is no original code to revise.")
    if not feedback.strip():
        raise InvalidInput("There is no review feedback to apply.")
    raw = provider.complete(REVISE_SYSTEM_PROMPT, build_revise_prompt(original_code, language_label, feedback))
    return strip_code_fence(raw)


def compute_diff(original: str, revised: str, path: str = "code") -> list[str]:
    """Unified line diff between the original and the revised code."""
    return list(
        difflib.unified_diff(
            original.splitlines(),
            revised.splitlines(),
            fromfile=f"a/{path}",
            tofile=f"b/{path}",
            lineterm="",
        )
    )


def run_file_review(
    provider: BaseProvider,
    file_name: str,
    code: str,
    language_value: str,
    language_label: str,
    custom_instructions: str = "",
    mode: str = DEFAULT_MODE,
) -> ReviewResult:
    feedback = review_one(provider, code, language_value, custom_instructions, mode)
    return ReviewResult(
        file_name=file_name,
        language=language_label,
        feedback=feedback,
        code=code,
        mode=mode,
        kind="file",
    )


def run_repo_review(
    provider: BaseProvider,
    repo,
    repo_ref: RepoRef,
    files: list,
    custom_instructions: str = "",
    mode: str = DEFAULT_MODE,
    max_workers: int = 8,
) -> ReviewResult:
    """Fetch every file, then review them together.

    The mode is checked before anything is fetched. If any single fetch
    fails the whole review fails and nothing is returned.
    """
    ensure_repo_mode(mode)
    console.print(f"[dim]Fetching {len(files)} file(s) from {repo_ref}...[/dim]")
    fetched = fetch_all(repo, files, max_workers=max_workers)
    console.print(f"[dim]Reviewing {len(fetched)} file(s)...[/dim]")
    feedback = review_many(provider, fetched, repo_ref, custom_instructions, mode)
    return ReviewResult(
        file_name=repo_ref.full_name,
        language="Repository",
        feedback=feedback,
        code="\n".join(f.path for f in fetched),
        mode=mode,
        kind="repo",
    )


def print_feedback(title: str, feedback: str) -> None:
    console.print(Rule(f"[bold]{title}[/bold]"))
    console.print(Markdown(feedback))
    console.print()


def print_diff(diff_lines: list[str]) -> None:
    if not diff_lines:
        console.print("[green]No changes suggested.[/green]")
        return
    console.print(Rule("[bold]Suggested changes[/bold]"))
    console.print(Syntax("\n".join(diff_lines), "diff", theme="ansi_dark", word_wrap=True))


def save_feedback(feedback: str, file_name: str, directory: str = ".") -> Path:
    """Write the feedback next to ``directory`` as ``<basename>.review.md``."""
    base = file_name.rstrip("/").rsplit("/", 1)[-1] or "review"
    target = Path(directory) / f"{base}.review.md"
    target.write_text(feedback, encoding="utf-8")
    return target
