"""Plain data types shared by the scanner, the GitHub client and the CLI."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from codelens_core.fs.directory import FileEntry
    from codelens_core.languages import Language


@dataclass(frozen=True)
class Unloaded:
    """Content has not been fetched yet."""


@dataclass(frozen=True)
class Loaded:
    text: str


ContentState = Union[Unloaded, Loaded]

UNLOADED = Unloaded()


@dataclass(frozen=True)
class CodeFile:
    """One discovered file in a local directory or remote repository.

    ``path`` is slash-separated and relative to the loaded source, so it is
    only unique within that source. ``handle`` is set for local files only.
    """

    path: str
    language: Language
    content: ContentState = UNLOADED
    handle: FileEntry | None = None

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    @property
    def is_local(self) -> bool:
        return self.handle is not None

    def with_content(self, text: str) -> CodeFile:
        return replace(self, content=Loaded(text))


@dataclass(frozen=True)
class RepoRef:
    owner: str
    repo: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def url(self) -> str:
        return f"https://github.com/{self.full_name}"

    def __str__(self) -> str:
        return self.full_name


@dataclass(frozen=True)
class SourceFile:
    """A file path paired with its fetched text, as sent in a repo review."""

    path: str
    content: str
