"""Discovery of bibliography files referenced by a document."""

from __future__ import annotations

from pathlib import Path
import re


_DIRECTIVE_RE = re.compile(r"#?\bbibliography\s*\((?P<args>[^)]*)\)")
_QUOTED_RE = re.compile(r'"(?P<path>[^"\n]*)"')


def iter_bibliography_references(text: str, *, extension: str = ".bib") -> list[str]:
    """Return the quoted bibliography paths named by ``bibliography(...)`` calls.

    Paths are returned in directive order, then in argument order. Duplicates are kept.
    """
    suffix = extension.lower()
    references: list[str] = []
    for directive in _DIRECTIVE_RE.finditer(text):
        for quoted in _QUOTED_RE.finditer(directive.group("args")):
            candidate = quoted.group("path")
            if candidate.lower().endswith(suffix) and len(candidate) > len(suffix):
                references.append(candidate)
    return references


def locate_bibliographies(
    text: str,
    base_dir: Path | str,
    *,
    extension: str = ".bib",
) -> list[Path]:
    """Resolve bibliography references against ``base_dir`` and keep existing files."""
    base = Path(base_dir)
    resolved: list[Path] = []
    for reference in iter_bibliography_references(text, extension=extension):
        candidate = Path(reference).expanduser()
        if not candidate.is_absolute():
            candidate = base / candidate
        candidate = candidate.resolve()
        if candidate.is_file():
            resolved.append(candidate)
    return resolved


__all__ = ["iter_bibliography_references", "locate_bibliographies"]
