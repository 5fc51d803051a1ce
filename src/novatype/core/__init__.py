"""Core reference index: labels, bibliographies and completion ranking."""

from __future__ import annotations

from .completion import CandidateItem, CandidateKind, build_candidates, build_candidates_for_path
from .config import MetadataConfig, NovatypeConfig, load_config
from .labels import (
    LABEL_CATALOG,
    UNKNOWN_LABEL_TYPE,
    IconCategory,
    LabelOccurrence,
    LabelTypeDescriptor,
    classify_label,
    extract_labels,
)
from .session import ReferenceSession


__all__ = [
    "LABEL_CATALOG",
    "UNKNOWN_LABEL_TYPE",
    "CandidateItem",
    "CandidateKind",
    "IconCategory",
    "LabelOccurrence",
    "LabelTypeDescriptor",
    "MetadataConfig",
    "NovatypeConfig",
    "ReferenceSession",
    "build_candidates",
    "build_candidates_for_path",
    "classify_label",
    "extract_labels",
    "load_config",
]
