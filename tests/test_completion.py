from pathlib import Path
import textwrap

from novatype.core.bibliography import BibEntry
from novatype.core.completion import (
    BIBLIOGRAPHY_GROUP,
    LABEL_GROUP,
    CandidateKind,
    bibliography_candidate,
    bibliography_detail,
    bibliography_documentation,
    build_candidates,
    build_candidates_for_path,
    venue_line,
)
from novatype.core.diagnostics import RecordingEmitter
from novatype.core.labels import IconCategory


def _write(tmp_path: Path, filename: str, payload: str) -> Path:
    file_path = tmp_path / filename
    file_path.write_text(textwrap.dedent(payload).strip() + "\n", encoding="utf-8")
    return file_path


def _entry(**overrides: object) -> BibEntry:
    values: dict[str, object] = {
        "key": "doe2020",
        "type": "article",
        "source_file": Path("/tmp/refs.bib"),
    }
    values.update(overrides)
    return BibEntry(**values)  # type: ignore[arg-type]


def test_build_candidates_places_labels_before_bibliography(tmp_path: Path) -> None:
    _write(
        tmp_path,
        "refs.bib",
        """
        @article{aaa, title = {First}, year = {2001}}
        @book{zzz, title = {Last}}
        """,
    )
    text = '#bibliography("refs.bib")\n<sec:zeta>\n<eq:alpha> <fig:beta>\n<zzz_unknown>'

    candidates = build_candidates(text, tmp_path)

    assert [candidate.label for candidate in candidates] == [
        "eq:alpha",
        "fig:beta",
        "sec:zeta",
        "zzz_unknown",
        "aaa",
        "zzz",
    ]
    labels = [c for c in candidates if c.kind is CandidateKind.LABEL]
    references = [c for c in candidates if c.kind is CandidateKind.BIBLIOGRAPHY]
    assert max(c.sort_key for c in labels) < min(c.sort_key for c in references)
    assert labels[0].sort_key == (LABEL_GROUP, "eq", "eq:alpha")
    assert references[0].sort_key == (BIBLIOGRAPHY_GROUP, "aaa")
    assert candidates == sorted(candidates, key=lambda c: c.sort_key)


def test_label_candidate_detail_and_icon() -> None:
    [candidate] = build_candidates("\n\n<tab:results>", Path("."))

    assert candidate.detail == "Table (line 3)"
    assert candidate.insert_text == "tab:results"
    assert candidate.icon is IconCategory.TABLE
    assert candidate.documentation == "Reference to a table"


def test_unknown_label_candidate_uses_generic_description() -> None:
    [candidate] = build_candidates("<anchor>", Path("."))

    assert candidate.detail == "Label (line 1)"
    assert candidate.sort_key == (LABEL_GROUP, "unknown", "anchor")
    assert candidate.icon is IconCategory.REFERENCE


def test_bibliography_candidates_follow_file_resolution_order(tmp_path: Path) -> None:
    _write(tmp_path, "one.bib", "@misc{dup, title = {One}}")
    _write(tmp_path, "two.bib", "@misc{dup, title = {Two}}\n@misc{alpha, title = {A}}")
    text = '#bibliography(("one.bib", "two.bib"))'

    candidates = build_candidates(text, tmp_path)

    assert [(c.label, c.source.source_file.name) for c in candidates] == [
        ("alpha", "two.bib"),
        ("dup", "one.bib"),
        ("dup", "two.bib"),
    ]


def test_build_candidates_survives_unreadable_bibliography(tmp_path: Path) -> None:
    (tmp_path / "bad.bib").write_bytes(b"\xff\xff\xff")
    _write(tmp_path, "good.bib", "@misc{good, title = {Good}}")
    emitter = RecordingEmitter()

    candidates = build_candidates(
        '#bibliography("bad.bib")\n#bibliography("good.bib")', tmp_path, emitter=emitter
    )

    assert [c.label for c in candidates] == ["good"]
    assert emitter.names() == ["bibliography_unreadable"]


def test_bibliography_detail_lists_two_authors_then_et_al() -> None:
    entry = _entry(authors=("Doe, Jane", "Smith, John", "Roe, Rick"), year="2020")

    assert bibliography_detail(entry) == "[article] Doe, Jane, Smith, John, et al., 2020"
    assert bibliography_detail(_entry(authors=("Doe, Jane",))) == "[article] Doe, Jane"
    assert bibliography_detail(_entry(year="1999")) == "[article] 1999"
    assert bibliography_detail(_entry()) == "[article]"


def test_venue_line_priority() -> None:
    assert venue_line(_entry(journal="Nature", booktitle="Proc", year="2020")) == "Nature (2020)"
    assert venue_line(_entry(journal="Nature")) == "Nature"
    assert venue_line(_entry(booktitle="Proc", year="2020")) == "In: Proc (2020)"
    assert venue_line(_entry(year="2020")) == "2020"
    assert venue_line(_entry()) is None


def test_bibliography_documentation_composition() -> None:
    entry = _entry(title="A Study", author="Doe, Jane, Smith, John", journal="Nature", year="2020")

    assert bibliography_documentation(entry) == (
        "**A Study**\n\n*Doe, Jane, Smith, John*\n\nNature (2020)\n\nSource: refs.bib"
    )
    assert bibliography_documentation(_entry()) == "Source: refs.bib"


def test_bibliography_candidate_fields() -> None:
    candidate = bibliography_candidate(_entry(title="T"))

    assert candidate.kind is CandidateKind.BIBLIOGRAPHY
    assert candidate.label == "doe2020"
    assert candidate.insert_text == "doe2020"
    assert candidate.sort_key == (BIBLIOGRAPHY_GROUP, "doe2020")
    assert candidate.sort_text.startswith("1")


def test_build_candidates_for_path_reads_document(tmp_path: Path) -> None:
    _write(tmp_path, "refs.bib", "@misc{key, title = {Title}}")
    document = _write(tmp_path, "paper.typ", '#bibliography("refs.bib")\n<fig:one>')

    candidates = build_candidates_for_path(document)

    assert [c.label for c in candidates] == ["fig:one", "key"]


def test_build_candidates_rereads_files_on_each_call(tmp_path: Path) -> None:
    bib = _write(tmp_path, "refs.bib", "@misc{old, title = {Old}}")
    text = '#bibliography("refs.bib")'

    assert [c.label for c in build_candidates(text, tmp_path)] == ["old"]
    bib.write_text("@misc{new, title = {New}}\n", encoding="utf-8")
    assert [c.label for c in build_candidates(text, tmp_path)] == ["new"]
