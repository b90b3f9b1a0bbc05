"""Explicit application state for one interactive review.

The CLI builds a ReviewSession and passes it through each step (load a
source, select a file, review, revise) instead of keeping module-level
state. Loading a file replaces the selected CodeFile with a Loaded copy; the
session is the only owner of that text.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from codelens_core.errors import InvalidInput
from codelens_core.fs.directory import read_content
from codelens_core.gh.repository import fetch_content
from codelens_core.languages import Language, find_language
from codelens_core.models import CodeFile, Loaded, RepoRef
from codelens_core.modes import DEFAULT_MODE


@dataclass
class ReviewSession:
    mode: str = DEFAULT_MODE
    custom_instructions: str = ""
    language_override: str | None = None
    default_language: str = "typescript"

    repo_ref: RepoRef | None = None
    repo: object | None = None
    files: list[CodeFile] = field(default_factory=list)
    selected: CodeFile | None = None
    code: str = ""

    feedback: str = ""
    revised: str | None = None

    def set_files(self, files: list[CodeFile], repo_ref: RepoRef | None = None, repo=None) -> None:
        """Replace the current source; clears any selection and previous review."""
        self.files = files
        self.repo_ref = repo_ref
        self.repo = repo
        self.selected = None
        self.code = ""
        self.reset_review()

    def reset_review(self) -> None:
        self.feedback = ""
        self.revised = None

    def find(self, path: str) -> CodeFile:
        for f in self.files:
            if f.path == path:
                return f
        raise InvalidInput(f"File not found in the loaded source: {path}")

    def select(self, path: str) -> CodeFile:
        """Load ``path``'s content (locally or from GitHub) and make it current."""
        file = self.find(path)
        if isinstance(file.content, Loaded):
            text = file.content.text
        elif file.is_local:
            text = read_content(file)
        elif self.repo is not None:
            text = fetch_content(self.repo, file.path)
        else:
            raise InvalidInput(f"No source available to load {path}.")
        self.selected = file.with_content(text)
        self.code = text
        self.reset_review()
        return self.selected

    def use_snippet(self, code: str) -> None:
        self.set_files([])
        self.code = code

    @property
    def language(self) -> Language | None:
        """The effective language: override, then the selected file's, then the default."""
        if self.language_override:
            override = find_language(self.language_override)
            if override is not None:
                return override
        if self.selected is not None:
            return self.selected.language
        return find_language(self.default_language)

    @property
    def language_tag(self) -> str:
        if self.language_override and find_language(self.language_override) is None:
            return self.language_override
        lang = self.language
        return lang.value if lang else self.default_language

    @property
    def language_label(self) -> str:
        if self.language_override and find_language(self.language_override) is None:
            return self.language_override
        lang = self.language
        return lang.label if lang else self.default_language

    @property
    def file_name(self) -> str:
        return self.selected.path if self.selected is not None else "snippet"
