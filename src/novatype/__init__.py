"""Reference intelligence for NovaType documents."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as _pkg_version

from novatype.core.bibliography import (
    BibEntry,
    BibliographyStore,
    CrossRefWork,
    InsertOutcome,
    InsertResult,
    MetadataService,
    TargetKind,
    TargetSelection,
    discover_targets,
    format_record,
    locate_bibliographies,
    parse_bibtex,
    resolve_target,
)
from novatype.core.completion import CandidateItem, CandidateKind, build_candidates
from novatype.core.config import MetadataConfig, NovatypeConfig, load_config
from novatype.core.diagnostics import DiagnosticEmitter, LoggingEmitter, NullEmitter
from novatype.core.exceptions import (
    BibliographyWriteError,
    CrossRefSearchError,
    DoiLookupError,
    MetadataServiceError,
    NovatypeError,
    QueryValidationError,
)
from novatype.core.labels import (
    LABEL_CATALOG,
    LabelOccurrence,
    LabelTypeDescriptor,
    classify_label,
    extract_labels,
)
from novatype.core.session import ReferenceSession


try:
    __version__ = _pkg_version("novatype-refs")
except PackageNotFoundError:  # pragma: no cover - source checkout
    __version__ = "0.0.0"


__all__ = [
    "LABEL_CATALOG",
    "BibEntry",
    "BibliographyStore",
    "BibliographyWriteError",
    "CandidateItem",
    "CandidateKind",
    "CrossRefSearchError",
    "CrossRefWork",
    "DiagnosticEmitter",
    "DoiLookupError",
    "InsertOutcome",
    "InsertResult",
    "LabelOccurrence",
    "LabelTypeDescriptor",
    "LoggingEmitter",
    "MetadataConfig",
    "MetadataService",
    "MetadataServiceError",
    "NovatypeConfig",
    "NovatypeError",
    "NullEmitter",
    "QueryValidationError",
    "ReferenceSession",
    "TargetKind",
    "TargetSelection",
    "__version__",
    "build_candidates",
    "classify_label",
    "discover_targets",
    "extract_labels",
    "format_record",
    "load_config",
    "locate_bibliographies",
    "parse_bibtex",
    "resolve_target",
]
