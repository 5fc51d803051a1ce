"""Tolerant BibTeX scanner used by the completion index.

The scanner walks the file once and tracks brace depth, so field values may
contain nested braces or literal ``@`` characters without ending the entry.
Malformed fragments are skipped; nothing in this module raises on bad input.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
import re

from novatype.core.diagnostics import DiagnosticEmitter, NullEmitter


logger = logging.getLogger(__name__)

PSEUDO_ENTRY_TYPES = frozenset({"comment", "string", "preamble"})

_ENTRY_START_RE = re.compile(r"@\s*(?P<type>[A-Za-z][A-Za-z0-9_-]*)\s*(?P<open>[{(])")
_LINE_ENTRY_RE = re.compile(r"^[ \t]*@\s*[A-Za-z][A-Za-z0-9_-]*\s*[{(]", re.MULTILINE)
_FIELD_NAME_RE = re.compile(r"\s*(?P<name>[A-Za-z_][A-Za-z0-9_:.+-]*)\s*=\s*")
_BARE_VALUE_RE = re.compile(r"[^\s,#{}\"()]+")
_YEAR_RE = re.compile(r'\s*[{"]?\s*(?P<year>\d{4})(?!\d)')
_AUTHOR_SEPARATOR_RE = re.compile(r"\s+and\s+")
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True, slots=True)
class BibEntry:
    """Citable record extracted from a bibliography file."""

    key: str
    type: str
    source_file: Path
    title: str | None = None
    author: str | None = None
    year: str | None = None
    journal: str | None = None
    booktitle: str | None = None
    doi: str | None = None
    authors: tuple[str, ...] = ()


@dataclass(slots=True)
class _RawField:
    text: str
    delimited: bool
    raw: str


@dataclass(slots=True)
class _RawEntry:
    type: str
    body: str


def _match_closing(text: str, start: int, opener: str) -> int | None:
    """Return the index of the delimiter closing the entry opened at ``start``."""
    closer = "}" if opener == "{" else ")"
    depth = 0
    index = start + 1
    length = len(text)
    while index < length:
        char = text[index]
        if char == "{":
            depth += 1
        elif char == "}":
            if depth == 0:
                return index if closer == "}" else None
            depth -= 1
        elif char == ")" and closer == ")" and depth == 0:
            return index
        index += 1
    return None


def _scan_entries(text: str) -> list[_RawEntry]:
    entries: list[_RawEntry] = []
    position = 0
    while True:
        match = _ENTRY_START_RE.search(text, position)
        if match is None:
            break
        opener_index = match.end() - 1
        closing = _match_closing(text, opener_index, match.group("open"))
        if closing is None:
            # Unbalanced entry: stop at the next line that opens a new entry.
            following = _LINE_ENTRY_RE.search(text, match.end())
            end = following.start() if following else len(text)
            body = text[opener_index + 1 : end]
            position = end
        else:
            body = text[opener_index + 1 : closing]
            position = closing + 1
        entries.append(_RawEntry(type=match.group("type").lower(), body=body))
    return entries


def _read_braced(body: str, start: int) -> tuple[str, int]:
    depth = 0
    index = start
    while index < len(body):
        char = body[index]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return body[start + 1 : index], index + 1
        index += 1
    return body[start + 1 :], len(body)


def _read_quoted(body: str, start: int) -> tuple[str, int]:
    depth = 0
    index = start + 1
    while index < len(body):
        char = body[index]
        if char == "{":
            depth += 1
        elif char == "}":
            depth = max(depth - 1, 0)
        elif char == '"' and depth == 0 and body[index - 1] != "\\":
            return body[start + 1 : index], index + 1
        index += 1
    return body[start + 1 :], len(body)


def _read_value(body: str, start: int) -> tuple[_RawField | None, int]:
    """Read a possibly ``#``-concatenated field value starting at ``start``."""
    pieces: list[str] = []
    delimited = False
    index = start
    while True:
        while index < len(body) and body[index].isspace():
            index += 1
        if index >= len(body):
            break
        char = body[index]
        if char == "{":
            piece, index = _read_braced(body, index)
            delimited = True
        elif char == '"':
            piece, index = _read_quoted(body, index)
            delimited = True
        else:
            bare = _BARE_VALUE_RE.match(body, index)
            if bare is None:
                break
            piece, index = bare.group(0), bare.end()
        pieces.append(piece)
        while index < len(body) and body[index].isspace():
            index += 1
        if index < len(body) and body[index] == "#":
            index += 1
            continue
        break
    if not pieces:
        return None, index
    return _RawField(text="".join(pieces), delimited=delimited, raw=body[start:index]), index


def _parse_fields(body: str) -> dict[str, _RawField]:
    fields: dict[str, _RawField] = {}
    index = 0
    while index < len(body):
        match = _FIELD_NAME_RE.match(body, index)
        if match is None:
            next_comma = body.find(",", index)
            if next_comma == -1:
                break
            index = next_comma + 1
            continue
        value, index = _read_value(body, match.end())
        name = match.group("name").lower()
        if value is not None and name not in fields:
            fields[name] = value
        next_comma = body.find(",", index)
        if next_comma == -1:
            break
        index = next_comma + 1
    return fields


def _clean_text(value: str) -> str:
    return _WHITESPACE_RE.sub(" ", value.replace("{", "").replace("}", "")).strip()


def _delimited_text(fields: dict[str, _RawField], name: str) -> str | None:
    field = fields.get(name)
    if field is None or not field.delimited:
        return None
    text = _clean_text(field.text)
    return text or None


def _year(fields: dict[str, _RawField]) -> str | None:
    field = fields.get("year")
    if field is None:
        return None
    match = _YEAR_RE.match(field.raw)
    return match.group("year") if match else None


def _build_entry(raw: _RawEntry, source: Path) -> BibEntry | None:
    key_text, separator, remainder = raw.body.partition(",")
    key = key_text.strip()
    if not key or any(char.isspace() for char in key) or "=" in key:
        return None
    fields = _parse_fields(remainder) if separator else {}

    author_text = _delimited_text(fields, "author")
    authors: tuple[str, ...] = ()
    author: str | None = None
    if author_text:
        authors = tuple(name.strip() for name in _AUTHOR_SEPARATOR_RE.split(author_text) if name.strip())
        author = _AUTHOR_SEPARATOR_RE.sub(", ", author_text).strip()

    return BibEntry(
        key=key,
        type=raw.type,
        source_file=source,
        title=_delimited_text(fields, "title"),
        author=author,
        year=_year(fields),
        journal=_delimited_text(fields, "journal"),
        booktitle=_delimited_text(fields, "booktitle"),
        doi=_delimited_text(fields, "doi"),
        authors=authors,
    )


def parse_bibtex(text: str, *, source: Path | str = Path("<memory>")) -> list[BibEntry]:
    """Extract citable entries from BibTeX ``text`` in file order.

    ``@comment``, ``@string`` and ``@preamble`` blocks are skipped, as are
    entries without a usable citation key.
    """
    source_path = Path(source)
    entries: list[BibEntry] = []
    for raw in _scan_entries(text):
        if raw.type in PSEUDO_ENTRY_TYPES:
            continue
        entry = _build_entry(raw, source_path)
        if entry is None:
            logger.debug("Skipping malformed @%s entry in %s", raw.type, source_path)
            continue
        entries.append(entry)
    return entries


def load_bibliography(
    path: Path | str,
    *,
    emitter: DiagnosticEmitter | None = None,
) -> list[BibEntry]:
    """Read and parse one bibliography file, returning no entries on failure."""
    emitter = emitter or NullEmitter()
    file_path = Path(path)
    try:
        text = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        emitter.event("bibliography_unreadable", {"path": str(file_path), "reason": str(exc)})
        return []
    return parse_bibtex(text, source=file_path)


__all__ = ["PSEUDO_ENTRY_TYPES", "BibEntry", "load_bibliography", "parse_bibtex"]
