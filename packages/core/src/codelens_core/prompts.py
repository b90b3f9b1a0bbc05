"""Prompt construction for the text-generation service.

The wording here is not load-bearing: the orchestrator only needs "send a
review request, receive prose" and "send a revise request, receive code".
Keeping every template in one module makes them easy to swap.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from codelens_core.models import RepoRef, SourceFile
    from codelens_core.modes import ReviewMode


def build_system_prompt(mode: ReviewMode) -> str:
    return f"""You are an expert senior software engineer performing a code review.

Task: {mode.label}
{mode.instruction}

Rules:
- Be specific: quote the relevant code and explain why it matters.
- Give concrete, actionable fixes with corrected code snippets.
- Format the answer as GitHub-flavored Markdown with headings per topic.
- Wrap code in triple-backtick fences with a language tag."""


def _instructions_section(custom_instructions: str) -> str:
    if not custom_instructions.strip():
        return ""
    return f"\n## Additional Instructions\n{custom_instructions.strip()}\n"


def build_file_prompt(code: str, language: str, custom_instructions: str) -> str:
    return f"""Review the following {language} code.
{_instructions_section(custom_instructions)}
## Code
```{language}
{code}
```"""


def build_repo_prompt(files: list[SourceFile], repo_ref: RepoRef, custom_instructions: str) -> str:
    sections = []
    for f in files:
        sections.append(f"### File: `{f.path}`\n```\n{f.content}\n```")
    body = "\n\n".join(sections) if sections else "_The repository contains no reviewable files._"
    return f"""Review the entire repository `{repo_ref.full_name}` ({repo_ref.url}).
Start with a high-level summary of the architecture, then list findings grouped by file.
{_instructions_section(custom_instructions)}
## Files ({len(files)})
{body}"""


REVISE_SYSTEM_PROMPT = """You are an expert software engineer. You apply code review feedback precisely.
Return only the complete revised source file, with no explanations and no Markdown fences."""


def build_revise_prompt(original_code: str, language_label: str, feedback: str) -> str:
    return f"""Apply every suggestion from the review below to the {language_label} code and return
the full, updated file. Keep everything the review does not ask to change exactly as it is.

## Review
{feedback}

## Original Code
```
{original_code}
```"""
