"""Explicitly owned network session shared by the metadata services."""

from __future__ import annotations

import logging
from types import TracebackType

import requests

from .config import NovatypeConfig
from .diagnostics import DiagnosticEmitter, NullEmitter
from .exceptions import NovatypeError


logger = logging.getLogger(__name__)


class ReferenceSession:
    """Own the HTTP session, configuration and diagnostics for one host.

    A session supplied by the caller is borrowed and never closed here.
    """

    def __init__(
        self,
        config: NovatypeConfig | None = None,
        *,
        http: requests.Session | None = None,
        emitter: DiagnosticEmitter | None = None,
    ) -> None:
        self.config = config or NovatypeConfig()
        self.emitter = emitter or NullEmitter()
        self._http = http
        self._owns_http = http is None
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def http(self) -> requests.Session:
        if not self._open or self._http is None:
            raise NovatypeError("Reference session is not open.")
        return self._http

    def open(self) -> ReferenceSession:
        if self._open:
            return self
        if self._http is None:
            self._http = requests.Session()
            self._owns_http = True
        self._open = True
        logger.debug("Opened reference session")
        return self

    def close(self) -> None:
        if not self._open:
            return
        if self._owns_http and self._http is not None:
            self._http.close()
            self._http = None
        self._open = False
        logger.debug("Closed reference session")

    def __enter__(self) -> ReferenceSession:
        return self.open()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


__all__ = ["ReferenceSession"]
