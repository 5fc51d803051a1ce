"""Validation and layout of BibTeX records fetched from remote services."""

from __future__ import annotations

from dataclasses import dataclass
import io
import re

from pybtex.database.input import bibtex
from pybtex.exceptions import PybtexError

from novatype.core.exceptions import InvalidRecordError


INDENT = "  "

_HEADER_RE = re.compile(r"^@\s*[A-Za-z][A-Za-z0-9_-]*\s*[{(][^,]*,$")
_CLOSING_RE = re.compile(r"^[})]$")


@dataclass(frozen=True, slots=True)
class RecordSummary:
    """Key and entry type of a validated BibTeX record."""

    key: str
    type: str


def inspect_record(payload: str) -> RecordSummary:
    """Parse ``payload`` with pybtex and require exactly one entry."""
    parser = bibtex.Parser()
    try:
        parsed = parser.parse_stream(io.StringIO(payload))
    except (OSError, PybtexError) as exc:
        raise InvalidRecordError(f"Fetched record is not valid BibTeX: {exc}") from exc

    entries = list(parsed.entries.items())
    if not entries:
        raise InvalidRecordError("Fetched record does not contain a BibTeX entry.")
    if len(entries) > 1:
        raise InvalidRecordError("Fetched record must contain a single BibTeX entry.")

    key, entry = entries[0]
    return RecordSummary(key=key, type=entry.type.lower())


def _split_top_level(record: str) -> list[str]:
    """Break a single-line record at the commas separating its fields."""
    lines: list[str] = []
    depth = 0
    in_quotes = False
    start = 0
    for index, char in enumerate(record):
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0 and not in_quotes:
                lines.append(record[start:index])
                lines.append(record[index:])
                return [line for line in (part.strip() for part in lines) if line]
        elif char == '"' and depth == 1:
            in_quotes = not in_quotes
        elif char == "," and depth == 1 and not in_quotes:
            lines.append(record[start : index + 1])
            start = index + 1
    lines.append(record[start:])
    return [line for line in (part.strip() for part in lines) if line]


def format_record(payload: str) -> str:
    """Lay out a record with an unindented header and closing brace.

    Every other non-blank line is indented by two spaces. Single-line payloads,
    as returned by DOI content negotiation, are first split into one field per line.
    """
    stripped = payload.strip()
    raw_lines = [line.strip() for line in stripped.splitlines() if line.strip()]
    if len(raw_lines) == 1:
        raw_lines = _split_top_level(raw_lines[0])

    formatted: list[str] = []
    for line in raw_lines:
        if _HEADER_RE.match(line) or _CLOSING_RE.match(line):
            formatted.append(line)
        else:
            formatted.append(f"{INDENT}{line}")
    return "\n".join(formatted) + "\n"


__all__ = ["INDENT", "RecordSummary", "format_record", "inspect_record"]
