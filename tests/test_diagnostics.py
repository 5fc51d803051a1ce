import logging

import pytest

from novatype.core.diagnostics import (
    DiagnosticEmitter,
    LoggingEmitter,
    NullEmitter,
    RecordingEmitter,
    format_event_message,
)
from novatype.core.exceptions import (
    DoiLookupError,
    MetadataServiceError,
    NovatypeError,
    QueryValidationError,
    RedirectLimitError,
    exception_hint,
    exception_messages,
)


@pytest.mark.parametrize(
    ("name", "payload", "expected"),
    [
        (
            "bibliography_unreadable",
            {"path": "refs.bib", "reason": "permission denied"},
            "Skipping unreadable bibliography refs.bib (permission denied)",
        ),
        ("crossref_search", {"query": "graphs", "count": 3}, "Search 'graphs' returned 3 result(s)"),
        (
            "doi_fetch",
            {"doi": "10.1/x", "url": "https://example.org/x", "redirects": 2},
            "Resolved DOI 10.1/x (https://example.org/x, 2 redirect(s))",
        ),
        (
            "bibliography_insert",
            {"key": "doe2020", "target": "refs.bib"},
            "Added entry 'doe2020' to refs.bib",
        ),
        (
            "bibliography_duplicate",
            {"doi": "10.1/x", "target": "refs.bib"},
            "DOI 10.1/x already present in refs.bib",
        ),
    ],
)
def test_format_event_message(name: str, payload: dict, expected: str) -> None:
    assert format_event_message(name, payload) == expected


def test_unknown_events_have_no_summary() -> None:
    assert format_event_message("something_else", {}) is None


def test_logging_emitter_routes_to_logger(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("novatype.tests")
    emitter = LoggingEmitter(logger_obj=logger)

    with caplog.at_level(logging.DEBUG, logger="novatype.tests"):
        emitter.warning("careful")
        emitter.error("broken")
        emitter.event("crossref_search", {"query": "q", "count": 0})
        emitter.event("custom", {"value": 1})

    records = [(record.levelno, record.getMessage()) for record in caplog.records]
    assert records == [
        (logging.WARNING, "careful"),
        (logging.ERROR, "broken"),
        (logging.INFO, "Search 'q' returned 0 result(s)"),
        (logging.DEBUG, "diagnostic event custom: {'value': 1}"),
    ]


def test_emitters_satisfy_protocol() -> None:
    for emitter in (NullEmitter(), LoggingEmitter(), RecordingEmitter()):
        assert isinstance(emitter, DiagnosticEmitter)


def test_recording_emitter_keeps_everything() -> None:
    emitter = RecordingEmitter()
    emitter.warning("w")
    emitter.error("e")
    emitter.event("doi_fetch", {"doi": "10.1/x"})

    assert emitter.warnings == ["w"]
    assert emitter.errors == ["e"]
    assert emitter.events == [("doi_fetch", {"doi": "10.1/x"})]


def test_exception_hierarchy() -> None:
    assert issubclass(RedirectLimitError, DoiLookupError)
    assert issubclass(DoiLookupError, MetadataServiceError)
    assert issubclass(MetadataServiceError, NovatypeError)
    assert issubclass(QueryValidationError, ValueError)


def test_exception_messages_walk_the_cause_chain() -> None:
    try:
        try:
            raise OSError("connection reset")
        except OSError as inner:
            raise DoiLookupError("Unable to resolve DOI '10.1/x'") from inner
    except DoiLookupError as exc:
        messages = exception_messages(exc)
        hint = exception_hint(exc)

    assert messages == ["Unable to resolve DOI '10.1/x'", "connection reset"]
    assert hint == "connection reset"
