"""Client for the Crossref scholarly-works search API."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
import requests

from novatype.core.config import SEARCH_ROWS_LIMIT, MetadataConfig
from novatype.core.diagnostics import DiagnosticEmitter, NullEmitter
from novatype.core.exceptions import CrossRefSearchError, QueryValidationError


if TYPE_CHECKING:  # pragma: no cover - typing only
    from requests import Session as RequestsSession
else:
    RequestsSession = Any


logger = logging.getLogger(__name__)

_SELECT_FIELDS = "DOI,title,author,container-title,published,type,publisher"


class CrossRefAuthor(BaseModel):
    """Contributor name as reported by Crossref."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    given: str | None = None
    family: str | None = None

    @property
    def display_name(self) -> str:
        return " ".join(part for part in (self.given, self.family) if part)


class CrossRefWork(BaseModel):
    """A single search hit returned by the scholarly-works API."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    doi: str = Field(alias="DOI")
    title: tuple[str, ...] = ()
    authors: tuple[CrossRefAuthor, ...] = Field(default=(), alias="author")
    container_title: tuple[str, ...] = Field(default=(), alias="container-title")
    published_year: int | None = Field(default=None, alias="published")
    work_type: str = Field(default="unknown", alias="type")
    publisher: str | None = None

    @field_validator("published_year", mode="before")
    @classmethod
    def _extract_year(cls, value: Any) -> int | None:
        if value is None or isinstance(value, int):
            return value
        if isinstance(value, dict):
            parts = value.get("date-parts") or []
            if parts and parts[0] and parts[0][0] is not None:
                return int(parts[0][0])
            return None
        raise ValueError("published must be a date-parts object")

    @property
    def display_title(self) -> str:
        return self.title[0] if self.title else "(untitled)"

    @property
    def author_summary(self) -> str:
        """Return up to three author names, abbreviated with ``et al.``."""
        names = [author.display_name for author in self.authors if author.display_name]
        if len(names) > 3:
            return f"{', '.join(names[:3])}, et al."
        return ", ".join(names)

    @property
    def venue(self) -> str | None:
        return self.container_title[0] if self.container_title else None


class _SearchMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    items: list[CrossRefWork] = Field(default_factory=list)


class _SearchResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: _SearchMessage


class CrossRefClient:
    """Run free-text searches against the Crossref works endpoint."""

    def __init__(
        self,
        *,
        session: RequestsSession,
        config: MetadataConfig | None = None,
        emitter: DiagnosticEmitter | None = None,
    ) -> None:
        self._session = session
        self._config = config or MetadataConfig()
        self._emitter = emitter or NullEmitter()

    def search(self, query: str) -> list[CrossRefWork]:
        """Return works matching ``query`` in the order the service ranks them."""
        text = query.strip() if isinstance(query, str) else ""
        if not text:
            raise QueryValidationError("Search query is empty.")

        rows = min(self._config.search_rows, SEARCH_ROWS_LIMIT)
        params: dict[str, str | int] = {
            "query": text,
            "rows": rows,
            "select": _SELECT_FIELDS,
        }
        if self._config.mailto:
            params["mailto"] = self._config.mailto
        headers = {"Accept": "application/json", "User-Agent": self._config.user_agent}

        try:
            response = self._session.get(
                self._config.crossref_url,
                params=params,
                headers=headers,
                timeout=self._config.timeout,
            )
        except requests.RequestException as exc:
            raise CrossRefSearchError(f"Search request failed: {exc}") from exc

        if not 200 <= response.status_code < 300:
            raise CrossRefSearchError(f"Search request failed: HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise CrossRefSearchError(f"Search response is not valid JSON: {exc}") from exc

        try:
            parsed = _SearchResponse.model_validate(payload)
        except ValidationError as exc:
            raise CrossRefSearchError(f"Unexpected search response: {exc}") from exc

        works = parsed.message.items[:rows]
        self._emitter.event("crossref_search", {"query": text, "count": len(works)})
        return works


__all__ = ["CrossRefAuthor", "CrossRefClient", "CrossRefWork"]
