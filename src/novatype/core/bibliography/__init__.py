"""Bibliography discovery, parsing and ingestion.

Architecture
: `locate_bibliographies` finds the `.bib` files a document pulls in through
  `#bibliography(...)` calls, and `parse_bibtex` turns each file into
  `BibEntry` records with a tolerant brace-depth scanner. Both are pure and
  re-run on every request.
: `MetadataService` wraps the remote side: Crossref search, DOI content
  negotiation, and appending fetched records to a `BibliographyStore` with
  DOI-based deduplication.

Usage Example

```pycon
>>> from novatype.core.bibliography import parse_bibtex
>>> entries = parse_bibtex("@article{doe2020, title = {A Study}, year = {2020}}")
>>> entries[0].key, entries[0].title, entries[0].year
('doe2020', 'A Study', '2020')
```
"""

from __future__ import annotations

from .crossref import CrossRefAuthor, CrossRefClient, CrossRefWork
from .doi import DoiResolver, normalise_doi
from .locator import iter_bibliography_references, locate_bibliographies
from .parsing import PSEUDO_ENTRY_TYPES, BibEntry, load_bibliography, parse_bibtex
from .records import RecordSummary, format_record, inspect_record
from .service import MetadataService
from .store import (
    BibliographyStore,
    InsertOutcome,
    InsertResult,
    TargetChooser,
    TargetKind,
    TargetSelection,
    discover_targets,
    resolve_target,
)


__all__ = [
    "PSEUDO_ENTRY_TYPES",
    "BibEntry",
    "BibliographyStore",
    "CrossRefAuthor",
    "CrossRefClient",
    "CrossRefWork",
    "DoiResolver",
    "InsertOutcome",
    "InsertResult",
    "MetadataService",
    "RecordSummary",
    "TargetChooser",
    "TargetKind",
    "TargetSelection",
    "discover_targets",
    "format_record",
    "inspect_record",
    "iter_bibliography_references",
    "load_bibliography",
    "locate_bibliographies",
    "normalise_doi",
    "parse_bibtex",
    "resolve_target",
]
