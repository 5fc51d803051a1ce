"""Helpers for resolving DOIs to BibTeX payloads."""

from __future__ import annotations

from collections.abc import Mapping
import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import quote, urljoin

import requests

from novatype.core.config import MetadataConfig
from novatype.core.diagnostics import DiagnosticEmitter, NullEmitter
from novatype.core.exceptions import DoiLookupError, QueryValidationError, RedirectLimitError


if TYPE_CHECKING:  # pragma: no cover - typing only
    from requests import Session as RequestsSession
else:
    RequestsSession = Any


logger = logging.getLogger(__name__)

BIBTEX_ACCEPT = "application/x-bibtex"
REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})

_DOI_PREFIXES = (
    "https://doi.org/",
    "http://doi.org/",
    "https://dx.doi.org/",
    "http://dx.doi.org/",
)


def normalise_doi(value: str) -> str:
    """Return a canonical representation for DOI strings."""
    if not isinstance(value, str):
        raise QueryValidationError("DOI must be provided as a string.")
    candidate = value.strip()
    if not candidate:
        raise QueryValidationError("DOI value is empty.")

    lowered = candidate.lower()
    for prefix in _DOI_PREFIXES:
        if lowered.startswith(prefix):
            candidate = candidate[len(prefix) :]
            break

    candidate = candidate.strip()
    if candidate.lower().startswith("doi:"):
        candidate = candidate.split(":", 1)[1]

    candidate = candidate.strip().strip("/")
    if not candidate:
        raise QueryValidationError("DOI value is empty.")
    return candidate


class DoiResolver:
    """Retrieve BibTeX records for DOIs through content negotiation.

    Redirects are followed by hand so the ``Accept`` header survives every hop,
    and the chain is bounded by ``max_redirects``.
    """

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

    def resolve(self, value: str) -> str:
        """Return the raw BibTeX text registered for ``value``."""
        doi = normalise_doi(value)
        url = f"{self._config.doi_resolver_url}{quote(doi, safe='/:;()')}"
        headers = {"Accept": BIBTEX_ACCEPT, "User-Agent": self._config.user_agent}
        redirects = 0

        while True:
            response = self._get(url, headers, doi)
            status = response.status_code
            if status in REDIRECT_STATUSES:
                location = _header(response.headers, "Location")
                if not location:
                    raise DoiLookupError(
                        f"Unable to resolve DOI '{doi}': HTTP {status} without a Location header"
                    )
                redirects += 1
                if redirects > self._config.max_redirects:
                    raise RedirectLimitError(
                        f"Unable to resolve DOI '{doi}': more than "
                        f"{self._config.max_redirects} redirects"
                    )
                url = urljoin(url, location)
                logger.debug("Following redirect for %s to %s", doi, url)
                continue
            if not 200 <= status < 300:
                raise DoiLookupError(f"Unable to resolve DOI '{doi}': HTTP {status} from {url}")
            content = response.text.strip()
            if not content:
                raise DoiLookupError(f"Unable to resolve DOI '{doi}': empty response from {url}")
            self._emitter.event("doi_fetch", {"doi": doi, "url": url, "redirects": redirects})
            return content

    def _get(self, url: str, headers: Mapping[str, str], doi: str) -> Any:
        try:
            return self._session.get(
                url,
                headers=dict(headers),
                timeout=self._config.timeout,
                allow_redirects=False,
            )
        except requests.RequestException as exc:
            raise DoiLookupError(f"Unable to resolve DOI '{doi}': {exc}") from exc


def _header(headers: Mapping[str, str] | None, name: str) -> str | None:
    if not headers:
        return None
    value = headers.get(name)
    if value is None:
        value = headers.get(name.lower())
    return value


__all__ = ["BIBTEX_ACCEPT", "DoiResolver", "normalise_doi"]
