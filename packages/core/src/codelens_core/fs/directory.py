"""Local directory intake: pick a folder, scan it for code files, read one.

Scanning is a plain recursive function over an abstract walker
(DirectoryEntry / FileEntry) so tests can feed it an in-memory tree and the
CLI can feed it the real file system. Content is never read during the scan;
each CodeFile carries a handle and is loaded on demand by read_content().
"""

from __future__ import annotations

import logging
import sys
from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path

from rich.prompt import Prompt

from codelens_core.config import DEFAULT_EXCLUDED_DIRS
from codelens_core.errors import LocalReadFailed, UnsupportedPlatform, UserCancelled
from codelens_core.languages import classify
from codelens_core.models import CodeFile

logger = logging.getLogger(__name__)


class FileEntry(ABC):
    name: str

    @abstractmethod
    def read_text(self) -> str:
        """Return the whole file decoded as UTF-8."""


class DirectoryEntry(ABC):
    name: str

    @abstractmethod
    def entries(self) -> Iterable[FileEntry | DirectoryEntry]:
        """Yield the direct children of this directory."""


class LocalFile(FileEntry):
    def __init__(self, path: Path):
        self.path = path
        self.name = path.name

    def read_text(self) -> str:
        return self.path.read_text(encoding="utf-8")

    def __repr__(self) -> str:
        return f"LocalFile({str(self.path)!r})"


class LocalDirectory(DirectoryEntry):
    def __init__(self, path: Path):
        self.path = path
        self.name = path.name

    def entries(self) -> Iterable[FileEntry | DirectoryEntry]:
        for child in sorted(self.path.iterdir(), key=lambda p: p.name):
            # Symlinked directories are not followed; they can form cycles.
            if child.is_dir() and not child.is_symlink():
                yield LocalDirectory(child)
            elif child.is_file():
                yield LocalFile(child)

    def __repr__(self) -> str:
        return f"LocalDirectory({str(self.path)!r})"


class BasePicker(ABC):
    """The directory-access capability: asks the user for a folder."""

    def is_available(self) -> bool:
        return True

    @abstractmethod
    def pick(self) -> DirectoryEntry:
        """Return the chosen directory, or raise UserCancelled on dismissal."""


class PathPicker(BasePicker):
    """Picks a directory from an explicit path, or prompts for one.

    Prompting needs an interactive terminal; without a path and without a
    TTY the capability is reported as unavailable.
    """

    def __init__(self, path: str | None = None):
        self._path = path

    def is_available(self) -> bool:
        return self._path is not None or sys.stdin.isatty()

    def pick(self) -> DirectoryEntry:
        raw = self._path
        if raw is None:
            try:
                raw = Prompt.ask("Directory to review (leave empty to cancel)", default="", show_default=False)
            except (KeyboardInterrupt, EOFError):
                raise UserCancelled()
        if not raw.strip():
            raise UserCancelled()
        path = Path(raw.strip()).expanduser()
        if not path.is_dir():
            raise NotADirectoryError(f"Not a directory: {path}")
        return LocalDirectory(path)


def scan(
    directory: DirectoryEntry,
    prefix: str = "",
    exclude: Iterable[str] = DEFAULT_EXCLUDED_DIRS,
) -> list[CodeFile]:
    """Recursively collect code files below ``directory``.

    Directories named in ``exclude`` are skipped at every depth. Paths are
    built from ancestor names joined with "/", starting at ``prefix``.
    """
    excluded = frozenset(exclude)
    files: list[CodeFile] = []
    for entry in directory.entries():
        nested_path = f"{prefix}{entry.name}"
        if isinstance(entry, DirectoryEntry):
            if entry.name in excluded:
                logger.debug("Skipping excluded directory %s", nested_path)
                continue
            files.extend(scan(entry, f"{nested_path}/", excluded))
        else:
            language = classify(entry.name)
            if language is not None:
                files.append(CodeFile(path=nested_path, language=language, handle=entry))
    return files


def open_directory(picker: BasePicker | None, exclude: Iterable[str] = DEFAULT_EXCLUDED_DIRS) -> list[CodeFile]:
    """Ask the picker for a directory and scan it.

    Returns [] when the user dismisses the picker. Raises UnsupportedPlatform
    when no picker is usable, and LocalReadFailed for any other failure.
    """
    if picker is None or not picker.is_available():
        raise UnsupportedPlatform(
            "Interactive folder selection needs a terminal. Pass the directory path explicitly with --dir PATH."
        )
    try:
        directory = picker.pick()
        return scan(directory, exclude=exclude)
    except UserCancelled:
        logger.debug("Directory picker dismissed by the user.")
        return []
    except OSError as e:
        logger.debug("Error opening directory: %s", e)
        raise LocalReadFailed(f"Failed to open directory ({e}). Please grant the necessary permissions.") from e


def read_content(file: CodeFile) -> str:
    """Read a local file's text. The caller owns (and may cache) the result."""
    if file.handle is None:
        raise LocalReadFailed("No file handle available for this local file.")
    try:
        return file.handle.read_text()
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("Error reading file content of %s: %s", file.path, e)
        raise LocalReadFailed(f"Failed to read content of {file.path}.") from e
