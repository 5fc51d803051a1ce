"""Search, DOI resolution and dedupe-on-insert behind one asynchronous facade.

Network calls run in worker threads so hosts can await them without blocking
their event loop. Concurrent calls are independent; callers that issue
overlapping searches handle superseded results themselves.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from novatype.core.exceptions import QueryValidationError
from novatype.core.session import ReferenceSession

from .crossref import CrossRefClient, CrossRefWork
from .doi import DoiResolver, normalise_doi
from .records import format_record, inspect_record
from .store import BibliographyStore, InsertOutcome, InsertResult


class MetadataService:
    """Entry point used by hosts for user-initiated search and insert actions."""

    def __init__(self, session: ReferenceSession) -> None:
        self._session = session

    @property
    def session(self) -> ReferenceSession:
        return self._session

    def _crossref(self) -> CrossRefClient:
        return CrossRefClient(
            session=self._session.http,
            config=self._session.config.metadata,
            emitter=self._session.emitter,
        )

    def _resolver(self) -> DoiResolver:
        return DoiResolver(
            session=self._session.http,
            config=self._session.config.metadata,
            emitter=self._session.emitter,
        )

    def store(self, target: Path | str) -> BibliographyStore:
        return BibliographyStore(target, emitter=self._session.emitter)

    async def search(self, query: str) -> list[CrossRefWork]:
        """Return search hits for ``query``; blank queries fail without a request."""
        if not isinstance(query, str) or not query.strip():
            raise QueryValidationError("Search query is empty.")
        return await asyncio.to_thread(self._crossref().search, query)

    async def resolve_doi(self, doi: str) -> str:
        """Return the raw BibTeX record registered for ``doi``."""
        normalised = normalise_doi(doi)
        return await asyncio.to_thread(self._resolver().resolve, normalised)

    def insert(self, record: str, *, doi: str, target: Path | str) -> InsertResult:
        """Validate, lay out and append ``record`` unless ``doi`` is already stored."""
        normalised = normalise_doi(doi)
        store = self.store(target)
        if store.contains_doi(normalised):
            return store.append(record, doi=normalised)
        summary = inspect_record(record)
        return store.append(format_record(record), doi=normalised, key=summary.key)

    async def add(self, doi: str, *, target: Path | str) -> InsertResult:
        """Fetch ``doi`` and insert it into ``target``.

        The network is skipped when the DOI is already present in the file.
        """
        normalised = normalise_doi(doi)
        store = self.store(target)
        if store.contains_doi(normalised):
            self._session.emitter.event(
                "bibliography_duplicate", {"doi": normalised, "target": str(store.path)}
            )
            return InsertResult(InsertOutcome.ALREADY_PRESENT, store.path, normalised)
        record = await self.resolve_doi(normalised)
        return self.insert(record, doi=normalised, target=store.path)


__all__ = ["MetadataService"]
