from collections.abc import Sequence
import gc
import os
from pathlib import Path
import stat

import pytest

from novatype.core.bibliography import (
    BibliographyStore,
    InsertOutcome,
    TargetKind,
    TargetSelection,
    discover_targets,
    resolve_target,
)
from novatype.core.bibliography import store as store_module
from novatype.core.bibliography.store import TARGET_HANDLERS
from novatype.core.diagnostics import RecordingEmitter
from novatype.core.exceptions import BibliographyWriteError, TargetSelectionError


class ScriptedChooser:
    def __init__(self, *, create: bool = True, choice: Path | None = None) -> None:
        self.create = create
        self.choice = choice
        self.prompts: list[str] = []

    def confirm_create(self, path: Path) -> bool:
        self.prompts.append(f"create:{path.name}")
        return self.create

    def choose(self, candidates: Sequence[Path]) -> Path | None:
        self.prompts.append("choose:" + ",".join(path.name for path in candidates))
        return self.choice


RECORD = "@article{doe2020,\n  doi = {10.1000/XYZ},\n  title = {A}\n}\n"


def test_append_writes_record_to_empty_file(tmp_path: Path) -> None:
    target = tmp_path / "refs.bib"
    emitter = RecordingEmitter()
    store = BibliographyStore(target, emitter=emitter)

    result = store.append(RECORD, doi="10.1000/xyz", key="doe2020")

    assert result.outcome is InsertOutcome.INSERTED
    assert result.inserted
    assert result.message == "Added 'doe2020' to refs.bib"
    assert target.read_text(encoding="utf-8") == RECORD
    assert emitter.names() == ["bibliography_insert"]
    assert [entry.key for entry in store.entries()] == ["doe2020"]


def test_append_separates_from_existing_entries(tmp_path: Path) -> None:
    target = tmp_path / "refs.bib"
    target.write_text("@misc{old, title = {Old}}", encoding="utf-8")

    BibliographyStore(target).append(RECORD, doi="10.1000/xyz")

    assert target.read_text(encoding="utf-8") == "@misc{old, title = {Old}}\n\n" + RECORD
    assert [entry.key for entry in BibliographyStore(target).entries()] == ["old", "doe2020"]


def test_append_skips_duplicate_doi_case_insensitively(tmp_path: Path) -> None:
    target = tmp_path / "refs.bib"
    original = "@article{x,\n  DOI = {10.1000/ABC.Def}\n}\n"
    target.write_text(original, encoding="utf-8")
    before = target.read_bytes()
    emitter = RecordingEmitter()

    result = BibliographyStore(target, emitter=emitter).append(RECORD, doi="10.1000/abc.def")

    assert result.outcome is InsertOutcome.ALREADY_PRESENT
    assert not result.inserted
    assert "already exists" in result.message
    assert target.read_bytes() == before
    assert emitter.names() == ["bibliography_duplicate"]


def test_append_leaves_no_temporary_files(tmp_path: Path) -> None:
    target = tmp_path / "refs.bib"

    BibliographyStore(target).append(RECORD, doi="10.1000/xyz")

    assert sorted(path.name for path in tmp_path.iterdir()) == ["refs.bib"]


def test_contains_doi_on_missing_file(tmp_path: Path) -> None:
    assert not BibliographyStore(tmp_path / "absent.bib").contains_doi("10.1/x")


def test_discover_targets_with_no_bibliography_suggests_document_name(tmp_path: Path) -> None:
    document = tmp_path / "thesis.typ"
    document.write_text("", encoding="utf-8")

    selection = discover_targets(document)

    assert selection.kind is TargetKind.CREATE
    assert selection.candidates == ()
    assert selection.suggested == tmp_path.resolve() / "thesis.bib"


def test_zero_bibliographies_require_explicit_creation(tmp_path: Path) -> None:
    document = tmp_path / "thesis.typ"
    document.write_text("", encoding="utf-8")
    selection = discover_targets(document)

    with pytest.raises(TargetSelectionError):
        resolve_target(selection, ScriptedChooser(create=False))
    assert not (tmp_path / "thesis.bib").exists()

    chooser = ScriptedChooser(create=True)
    path = resolve_target(selection, chooser)
    assert path.exists()
    assert chooser.prompts == ["create:thesis.bib"]


def test_single_bibliography_is_selected_without_prompting(tmp_path: Path) -> None:
    document = tmp_path / "paper.typ"
    document.write_text("", encoding="utf-8")
    only = tmp_path / "library.bib"
    only.write_text("", encoding="utf-8")
    chooser = ScriptedChooser()

    selection = discover_targets(document)

    assert selection.kind is TargetKind.SINGLE
    assert resolve_target(selection, chooser) == only.resolve()
    assert chooser.prompts == []


def test_multiple_bibliographies_require_a_choice(tmp_path: Path) -> None:
    document = tmp_path / "paper.typ"
    document.write_text("", encoding="utf-8")
    for name in ("b.bib", "a.bib"):
        (tmp_path / name).write_text("", encoding="utf-8")
    selection = discover_targets(document)

    assert selection.kind is TargetKind.CHOOSE
    assert [path.name for path in selection.candidates] == ["a.bib", "b.bib"]

    chooser = ScriptedChooser(choice=tmp_path / "b.bib")
    assert resolve_target(selection, chooser) == (tmp_path / "b.bib").resolve()
    assert chooser.prompts == ["choose:a.bib,b.bib"]

    with pytest.raises(TargetSelectionError):
        resolve_target(selection, ScriptedChooser(choice=None))
    with pytest.raises(TargetSelectionError):
        resolve_target(selection, ScriptedChooser(choice=tmp_path / "other.bib"))


def test_every_target_kind_has_a_handler() -> None:
    assert set(TARGET_HANDLERS) == set(TargetKind)


def test_create_without_suggestion_is_rejected() -> None:
    with pytest.raises(TargetSelectionError):
        resolve_target(TargetSelection(TargetKind.CREATE), ScriptedChooser())


@pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
def test_append_keeps_existing_file_permissions(tmp_path: Path) -> None:
    target = tmp_path / "refs.bib"
    target.write_text("@misc{old, title = {Old}}\n", encoding="utf-8")
    target.chmod(0o640)

    BibliographyStore(target).append(RECORD, doi="10.1000/xyz")

    assert stat.S_IMODE(target.stat().st_mode) == 0o640


@pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
def test_append_creates_new_file_with_umask_permissions(tmp_path: Path) -> None:
    target = tmp_path / "refs.bib"
    umask = os.umask(0o022)
    try:
        BibliographyStore(target).append(RECORD, doi="10.1000/xyz")
    finally:
        os.umask(umask)

    assert stat.S_IMODE(target.stat().st_mode) == 0o644


def test_failed_replace_removes_temporary_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    target = tmp_path / "refs.bib"
    target.write_text("", encoding="utf-8")

    def refuse(src: object, dst: object) -> None:
        raise PermissionError("read-only directory")

    monkeypatch.setattr(store_module.os, "replace", refuse)

    with pytest.raises(BibliographyWriteError, match="read-only directory"):
        BibliographyStore(target).append(RECORD, doi="10.1000/xyz")
    assert sorted(path.name for path in tmp_path.iterdir()) == ["refs.bib"]
    assert target.read_text(encoding="utf-8") == ""


def test_unused_file_locks_are_released(tmp_path: Path) -> None:
    path = (tmp_path / "refs.bib").resolve()
    lock = store_module._lock_for(path)
    assert store_module._lock_for(path) is lock

    del lock
    gc.collect()

    assert path not in store_module._LOCKS
