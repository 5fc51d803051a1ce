"""Configuration models for the reference index and metadata services.

MetadataConfig

`crossref_url` (`str`)
: Endpoint of the scholarly-works search API. Queries are sent as
  `?query=<text>&rows=<search_rows>`.

`doi_resolver_url` (`str`)
: Base URL of the DOI resolver used for content negotiation. The DOI is
  appended to this prefix.

`search_rows` (`int`)
: Maximum number of search results requested from the remote service, at
  most 15.

`timeout` (`float`)
: Per-request timeout in seconds.

`user_agent` (`str`)
: `User-Agent` header sent with every request.

`mailto` (`str | None`)
: Contact address forwarded to the search API so requests are routed to its
  polite pool.

`max_redirects` (`int`)
: Upper bound on the redirect chain followed while resolving a DOI.

NovatypeConfig

`metadata` (`MetadataConfig`)
: Remote service settings.

`bibliography_extension` (`str`)
: File suffix recognised as a bibliography database.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
import yaml

from .exceptions import ConfigError


CONFIG_ENV_VAR = "NOVATYPE_CONFIG"
SEARCH_ROWS_LIMIT = 15


class MetadataConfig(BaseModel):
    """Settings for the remote metadata services."""

    model_config = ConfigDict(extra="forbid")

    crossref_url: str = "https://api.crossref.org/works"
    doi_resolver_url: str = "https://doi.org/"
    search_rows: int = Field(default=SEARCH_ROWS_LIMIT, ge=1, le=SEARCH_ROWS_LIMIT)
    timeout: float = Field(default=10.0, gt=0)
    user_agent: str = "novatype-reference-tools"
    mailto: str | None = None
    max_redirects: int = Field(default=10, ge=0)

    @field_validator("doi_resolver_url")
    @classmethod
    def _ensure_trailing_slash(cls, value: str) -> str:
        return value if value.endswith("/") else f"{value}/"


class NovatypeConfig(BaseModel):
    """Top-level configuration for the reference tooling."""

    model_config = ConfigDict(extra="forbid")

    metadata: MetadataConfig = Field(default_factory=MetadataConfig)
    bibliography_extension: str = ".bib"

    @field_validator("bibliography_extension")
    @classmethod
    def _normalise_extension(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("bibliography_extension must not be empty")
        return value if value.startswith(".") else f".{value}"


def load_config(path: Path | str | None = None) -> NovatypeConfig:
    """Load configuration from YAML, falling back to defaults.

    When `path` is omitted the `NOVATYPE_CONFIG` environment variable is
    consulted. A missing variable yields the default configuration.
    """
    if path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if not env_path:
            return NovatypeConfig()
        path = env_path

    config_path = Path(path).expanduser()
    try:
        raw = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Unable to read configuration '{config_path}': {exc}") from exc

    try:
        payload: Any = yaml.safe_load(raw) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in '{config_path}': {exc}") from exc

    if not isinstance(payload, dict):
        raise ConfigError(f"Configuration '{config_path}' must contain a mapping.")

    try:
        return NovatypeConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration in '{config_path}': {exc}") from exc


__all__ = [
    "CONFIG_ENV_VAR",
    "SEARCH_ROWS_LIMIT",
    "MetadataConfig",
    "NovatypeConfig",
    "load_config",
]
