"""Merge labels and bibliography entries into ranked completion candidates."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .bibliography.locator import locate_bibliographies
from .bibliography.parsing import BibEntry, load_bibliography
from .diagnostics import DiagnosticEmitter, NullEmitter
from .labels import (
    LABEL_CATALOG,
    IconCategory,
    LabelOccurrence,
    LabelTypeDescriptor,
    describe_label_type,
    extract_labels,
)


LABEL_GROUP = 0
BIBLIOGRAPHY_GROUP = 1


class CandidateKind(str, Enum):
    """Source of a completion candidate."""

    LABEL = "label"
    BIBLIOGRAPHY = "bibliography"


@dataclass(frozen=True, slots=True)
class CandidateItem:
    """Completion candidate ready to hand to a completion surface."""

    kind: CandidateKind
    label: str
    detail: str
    documentation: str
    insert_text: str
    sort_key: tuple[int | str, ...]
    icon: IconCategory
    source: LabelOccurrence | BibEntry

    @property
    def sort_text(self) -> str:
        """Return the sort key flattened for surfaces that sort strings."""
        return "\x00".join(str(part) for part in self.sort_key)


def label_candidate(
    occurrence: LabelOccurrence,
    catalog: Sequence[LabelTypeDescriptor] = LABEL_CATALOG,
) -> CandidateItem:
    """Convert a label occurrence into a completion candidate."""
    descriptor = describe_label_type(occurrence.type, catalog)
    if descriptor is not None:
        human_type = descriptor.description
        documentation = descriptor.detail
        icon = descriptor.kind
    else:
        human_type = "Label"
        documentation = "Reference to a label"
        icon = IconCategory.REFERENCE
    return CandidateItem(
        kind=CandidateKind.LABEL,
        label=occurrence.name,
        detail=f"{human_type} (line {occurrence.line + 1})",
        documentation=documentation,
        insert_text=occurrence.name,
        sort_key=(LABEL_GROUP, occurrence.type, occurrence.name),
        icon=icon,
        source=occurrence,
    )


def _author_summary(entry: BibEntry) -> str | None:
    names = list(entry.authors)
    if not names:
        return None
    summary = ", ".join(names[:2])
    if len(names) > 2:
        summary += ", et al."
    return summary


def bibliography_detail(entry: BibEntry) -> str:
    """Return ``[type] first authors, year`` for a bibliography candidate."""
    parts = [f"[{entry.type}]"]
    tail: list[str] = []
    authors = _author_summary(entry)
    if authors:
        tail.append(authors)
    if entry.year:
        tail.append(entry.year)
    if tail:
        parts.append(", ".join(tail))
    return " ".join(parts)


def venue_line(entry: BibEntry) -> str | None:
    """Return the venue summary, preferring journal, then booktitle, then year."""
    year_suffix = f" ({entry.year})" if entry.year else ""
    if entry.journal:
        return f"{entry.journal}{year_suffix}"
    if entry.booktitle:
        return f"In: {entry.booktitle}{year_suffix}"
    if entry.year:
        return entry.year
    return None


def bibliography_documentation(entry: BibEntry) -> str:
    """Compose the Markdown documentation block for a bibliography entry."""
    blocks: list[str] = []
    if entry.title:
        blocks.append(f"**{entry.title}**")
    if entry.author:
        blocks.append(f"*{entry.author}*")
    venue = venue_line(entry)
    if venue:
        blocks.append(venue)
    blocks.append(f"Source: {entry.source_file.name}")
    return "\n\n".join(blocks)


def bibliography_candidate(entry: BibEntry) -> CandidateItem:
    """Convert a bibliography entry into a completion candidate."""
    return CandidateItem(
        kind=CandidateKind.BIBLIOGRAPHY,
        label=entry.key,
        detail=bibliography_detail(entry),
        documentation=bibliography_documentation(entry),
        insert_text=entry.key,
        sort_key=(BIBLIOGRAPHY_GROUP, entry.key),
        icon=IconCategory.REFERENCE,
        source=entry,
    )


def collect_bibliography_entries(
    text: str,
    base_dir: Path | str,
    *,
    extension: str = ".bib",
    emitter: DiagnosticEmitter | None = None,
) -> list[BibEntry]:
    """Return entries from every bibliography file referenced by ``text``."""
    entries: list[BibEntry] = []
    for path in locate_bibliographies(text, base_dir, extension=extension):
        entries.extend(load_bibliography(path, emitter=emitter))
    return entries


def build_candidates(
    text: str,
    base_dir: Path | str,
    *,
    extension: str = ".bib",
    catalog: Iterable[LabelTypeDescriptor] = LABEL_CATALOG,
    emitter: DiagnosticEmitter | None = None,
) -> list[CandidateItem]:
    """Return label candidates followed by bibliography candidates.

    Labels are ordered by ``(0, type, name)`` and entries by ``(1, key)``.
    Every call re-reads the bibliography files.
    """
    emitter = emitter or NullEmitter()
    descriptors = tuple(catalog)
    labels = sorted(
        (label_candidate(occurrence, descriptors) for occurrence in extract_labels(text, descriptors)),
        key=lambda item: item.sort_key,
    )
    entries = collect_bibliography_entries(text, base_dir, extension=extension, emitter=emitter)
    references = sorted(
        (bibliography_candidate(entry) for entry in entries),
        key=lambda item: item.sort_key,
    )
    return [*labels, *references]


def build_candidates_for_path(
    document: Path | str,
    *,
    extension: str = ".bib",
    emitter: DiagnosticEmitter | None = None,
) -> list[CandidateItem]:
    """Read ``document`` from disk and build candidates relative to its directory."""
    path = Path(document)
    text = path.read_text(encoding="utf-8")
    return build_candidates(text, path.resolve().parent, extension=extension, emitter=emitter)


__all__ = [
    "BIBLIOGRAPHY_GROUP",
    "LABEL_GROUP",
    "CandidateItem",
    "CandidateKind",
    "bibliography_candidate",
    "bibliography_detail",
    "bibliography_documentation",
    "build_candidates",
    "build_candidates_for_path",
    "collect_bibliography_entries",
    "label_candidate",
    "venue_line",
]
