"""Exception hierarchy shared by the reference index and metadata services."""

from __future__ import annotations


class NovatypeError(RuntimeError):
    """Base exception for NovaType reference tooling failures."""


class ConfigError(NovatypeError):
    """Raised when a configuration file cannot be loaded or validated."""


class QueryValidationError(NovatypeError, ValueError):
    """Raised when user input is rejected before any network call."""


class MetadataServiceError(NovatypeError):
    """Base class for failures talking to remote metadata services."""


class CrossRefSearchError(MetadataServiceError):
    """Raised when a scholarly-works search request fails."""


class DoiLookupError(MetadataServiceError):
    """Raised when resolving a DOI to a BibTeX payload fails."""


class RedirectLimitError(DoiLookupError):
    """Raised when a DOI resolution exceeds the configured redirect budget."""


class InvalidRecordError(MetadataServiceError):
    """Raised when a fetched payload is not a single BibTeX entry."""


class BibliographyWriteError(NovatypeError):
    """Raised when a bibliography file cannot be updated."""


class TargetSelectionError(NovatypeError):
    """Raised when no bibliography file could be selected for an insert."""


def exception_messages(exc: BaseException) -> list[str]:
    """Return the collected message chain for an exception and its causes."""
    messages: list[str] = []
    visited: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        text = str(current).strip()
        if text:
            first_line = text.splitlines()[0].strip()
            if first_line:
                messages.append(first_line)
        current = current.__cause__ or current.__context__
    return messages


def exception_hint(exc: BaseException) -> str | None:
    """Return the most specific message available for an exception chain."""
    messages = exception_messages(exc)
    return messages[-1] if messages else None


__all__ = [
    "BibliographyWriteError",
    "ConfigError",
    "CrossRefSearchError",
    "DoiLookupError",
    "InvalidRecordError",
    "MetadataServiceError",
    "NovatypeError",
    "QueryValidationError",
    "RedirectLimitError",
    "TargetSelectionError",
    "exception_hint",
    "exception_messages",
]
