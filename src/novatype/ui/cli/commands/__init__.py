"""CLI command implementations."""

from __future__ import annotations

from .add import add
from .index import bibliography, complete, labels
from .search import search


__all__ = ["add", "bibliography", "complete", "labels", "search"]
