"""Static language registry and extension-based classification.

The registry is an ordered tuple and lookups return the *first* entry whose
extension set matches, so entries that share an extension must be ordered
deliberately: C claims ``.h`` before C++ does.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Language:
    value: str
    label: str
    extensions: frozenset[str]


def _lang(value: str, label: str, *extensions: str) -> Language:
    return Language(value=value, label=label, extensions=frozenset(extensions))


LANGUAGES: tuple[Language, ...] = (
    _lang("typescript", "TypeScript", ".ts", ".tsx"),
    _lang("javascript", "JavaScript", ".js", ".jsx", ".mjs", ".cjs"),
    _lang("python", "Python", ".py", ".pyw"),
    _lang("java", "Java", ".java"),
    _lang("c", "C", ".c", ".h"),
    _lang("cpp", "C++", ".cpp", ".cc", ".cxx", ".hpp", ".hh", ".h"),
    _lang("csharp", "C#", ".cs"),
    _lang("go", "Go", ".go"),
    _lang("rust", "Rust", ".rs"),
    _lang("ruby", "Ruby", ".rb"),
    _lang("php", "PHP", ".php"),
    _lang("swift", "Swift", ".swift"),
    _lang("kotlin", "Kotlin", ".kt", ".kts"),
    _lang("scala", "Scala", ".scala"),
    _lang("shell", "Shell", ".sh", ".bash", ".zsh"),
    _lang("sql", "SQL", ".sql"),
    _lang("html", "HTML", ".html", ".htm"),
    _lang("css", "CSS", ".css", ".scss", ".sass", ".less"),
    _lang("json", "JSON", ".json"),
    _lang("yaml", "YAML", ".yml", ".yaml"),
    _lang("markdown", "Markdown", ".md", ".markdown"),
)


def classify(file_name: str) -> Language | None:
    """Return the language registered for ``file_name``'s extension, or None.

    Only the text after the last dot counts, compared case-insensitively.
    Names without a dot have no extension and are never classified.
    """
    base = file_name.rsplit("/", 1)[-1]
    if "." not in base:
        return None
    extension = "." + base.rsplit(".", 1)[-1].lower()
    for language in LANGUAGES:
        if extension in language.extensions:
            return language
    return None


def find_language(name: str) -> Language | None:
    """Resolve a language by its value or label (case-insensitive)."""
    wanted = name.strip().lower()
    for language in LANGUAGES:
        if wanted in (language.value, language.label.lower()):
            return language
    return None
