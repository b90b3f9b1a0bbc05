"""Review modes: the task variants that shape the review prompt.

The table is configuration data. The only behaviour attached to it is
``repo_compatible``: modes that make no sense across a whole repository
(test generation) must be refused before a repository review starts.
"""

from __future__ import annotations

from dataclasses import dataclass

from codelens_core.errors import InvalidInput

DEFAULT_MODE = "comprehensive"


@dataclass(frozen=True)
class ReviewMode:
    value: str
    label: str
    description: str
    instruction: str
    repo_compatible: bool = True


REVIEW_MODES: tuple[ReviewMode, ...] = (
    ReviewMode(
        value="comprehensive",
        label="Comprehensive",
        description="A full review covering bugs, security, performance and style.",
        instruction=(
            "Perform a comprehensive code review. Cover correctness and potential bugs, "
            "security vulnerabilities, performance, readability and maintainability, "
            "and adherence to the idioms of the language."
        ),
    ),
    ReviewMode(
        value="bugs",
        label="Bug Hunt",
        description="Focus on logic errors, edge cases and crashes.",
        instruction=(
            "Focus exclusively on finding bugs: logic errors, unhandled edge cases, "
            "off-by-one mistakes, null/undefined handling and race conditions."
        ),
    ),
    ReviewMode(
        value="security",
        label="Security Audit",
        description="Look for vulnerabilities and unsafe patterns.",
        instruction=(
            "Act as a security auditor. Identify vulnerabilities such as injection, "
            "unsafe deserialization, secrets in code, missing input validation and "
            "broken access control. Rate each finding by severity."
        ),
    ),
    ReviewMode(
        value="performance",
        label="Performance",
        description="Find inefficient algorithms, allocations and I/O.",
        instruction=(
            "Focus on performance: algorithmic complexity, unnecessary allocations, "
            "redundant I/O or network calls, and opportunities for caching."
        ),
    ),
    ReviewMode(
        value="readability",
        label="Readability",
        description="Naming, structure and clarity.",
        instruction=(
            "Focus on readability and maintainability: naming, function size, "
            "duplication, comments and overall structure."
        ),
    ),
    ReviewMode(
        value="best_practices",
        label="Best Practices",
        description="Idiomatic usage of the language and its ecosystem.",
        instruction=(
            "Review the code against the established best practices and idioms of its "
            "language and ecosystem, suggesting idiomatic alternatives."
        ),
    ),
    ReviewMode(
        value="test_generation",
        label="Test Generation",
        description="Write unit tests for the code (single files only).",
        instruction=(
            "Do not review the code. Instead, write a thorough suite of unit tests for it "
            "using the most common testing framework for the language, covering normal "
            "cases, edge cases and error paths."
        ),
        repo_compatible=False,
    ),
)

_BY_VALUE = {m.value: m for m in REVIEW_MODES}


def get_mode(value: str) -> ReviewMode:
    try:
        return _BY_VALUE[value]
    except KeyError:
        choices = ", ".join(_BY_VALUE)
        raise InvalidInput(f"Unknown review mode: {value!r}. Choose one of: {choices}.")


def mode_values() -> list[str]:
    return [m.value for m in REVIEW_MODES]
