"""Append-only access to bibliography files and insert target selection."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
import logging
import os
from pathlib import Path
import shutil
import tempfile
from threading import Lock
from typing import Protocol
import weakref

from novatype.core.diagnostics import DiagnosticEmitter, NullEmitter
from novatype.core.exceptions import BibliographyWriteError, TargetSelectionError

from .parsing import BibEntry, parse_bibtex


logger = logging.getLogger(__name__)

# Entries disappear once no writer holds the lock.
_LOCKS: weakref.WeakValueDictionary[Path, Lock] = weakref.WeakValueDictionary()
_LOCKS_GUARD = Lock()


def _lock_for(path: Path) -> Lock:
    with _LOCKS_GUARD:
        lock = _LOCKS.get(path)
        if lock is None:
            lock = _LOCKS[path] = Lock()
        return lock


class InsertOutcome(str, Enum):
    """Result of an insert request."""

    INSERTED = "inserted"
    ALREADY_PRESENT = "already_present"


@dataclass(frozen=True, slots=True)
class InsertResult:
    """Outcome of appending a record to a bibliography file."""

    outcome: InsertOutcome
    target: Path
    doi: str
    key: str | None = None

    @property
    def inserted(self) -> bool:
        return self.outcome is InsertOutcome.INSERTED

    @property
    def message(self) -> str:
        if self.outcome is InsertOutcome.ALREADY_PRESENT:
            return f"DOI {self.doi} already exists in {self.target.name}"
        label = f"'{self.key}'" if self.key else f"DOI {self.doi}"
        return f"Added {label} to {self.target.name}"


class BibliographyStore:
    """A ``.bib`` file treated as an ordered, append-only list of records."""

    def __init__(self, path: Path | str, *, emitter: DiagnosticEmitter | None = None) -> None:
        self.path = Path(path).resolve()
        self._emitter = emitter or NullEmitter()

    def read(self) -> str:
        """Return the full file contents, or an empty string for a missing file."""
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return ""
        except (OSError, UnicodeDecodeError) as exc:
            raise BibliographyWriteError(f"Unable to read '{self.path}': {exc}") from exc

    def entries(self) -> list[BibEntry]:
        """Return the citable entries currently stored in the file."""
        return parse_bibtex(self.read(), source=self.path)

    def contains_doi(self, doi: str) -> bool:
        """Return whether ``doi`` appears anywhere in the file, ignoring case."""
        return _contains(self.read(), doi)

    def append(self, record: str, *, doi: str, key: str | None = None) -> InsertResult:
        """Append ``record`` unless ``doi`` is already present in the file."""
        with _lock_for(self.path):
            existing = self.read()
            if _contains(existing, doi):
                self._emitter.event(
                    "bibliography_duplicate", {"doi": doi, "target": str(self.path)}
                )
                return InsertResult(InsertOutcome.ALREADY_PRESENT, self.path, doi, key)

            payload = record if record.endswith("\n") else f"{record}\n"
            if existing.strip():
                separator = "\n" if existing.endswith("\n") else "\n\n"
                content = f"{existing}{separator}{payload}"
            else:
                content = payload
            self._write(content)

        self._emitter.event(
            "bibliography_insert", {"key": key, "doi": doi, "target": str(self.path)}
        )
        return InsertResult(InsertOutcome.INSERTED, self.path, doi, key)

    def _write(self, content: str) -> None:
        directory = self.path.parent
        temp_path: Path | None = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=directory,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                temp_path = Path(handle.name)
                handle.write(content)
            # The temporary file is created 0600; keep the permissions of the target.
            if self.path.exists():
                shutil.copymode(self.path, temp_path)
            else:
                os.chmod(temp_path, _new_file_mode())
            os.replace(temp_path, self.path)
        except OSError as exc:
            raise BibliographyWriteError(f"Unable to write '{self.path}': {exc}") from exc
        finally:
            if temp_path is not None and temp_path.exists():
                temp_path.unlink(missing_ok=True)


def _new_file_mode() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def _contains(content: str, doi: str) -> bool:
    needle = doi.strip().lower()
    return bool(needle) and needle in content.lower()


class TargetKind(str, Enum):
    """Situation found when looking for a bibliography next to a document."""

    CREATE = "create"
    SINGLE = "single"
    CHOOSE = "choose"


@dataclass(frozen=True, slots=True)
class TargetSelection:
    """Bibliography files available for an insert, tagged by situation."""

    kind: TargetKind
    candidates: tuple[Path, ...] = ()
    suggested: Path | None = None


class TargetChooser(Protocol):
    """Callbacks through which a host resolves ambiguous target selections."""

    def confirm_create(self, path: Path) -> bool: ...

    def choose(self, candidates: Sequence[Path]) -> Path | None: ...


def discover_targets(document: Path | str, *, extension: str = ".bib") -> TargetSelection:
    """Inspect the document directory for bibliography files."""
    document_path = Path(document).resolve()
    directory = document_path.parent
    found = tuple(
        sorted(path for path in directory.glob(f"*{extension}") if path.is_file())
    )
    if not found:
        return TargetSelection(
            TargetKind.CREATE, suggested=directory / f"{document_path.stem}{extension}"
        )
    if len(found) == 1:
        return TargetSelection(TargetKind.SINGLE, candidates=found, suggested=found[0])
    return TargetSelection(TargetKind.CHOOSE, candidates=found)


def _resolve_create(selection: TargetSelection, chooser: TargetChooser) -> Path:
    path = selection.suggested
    if path is None:
        raise TargetSelectionError("No bibliography file name was suggested.")
    if not chooser.confirm_create(path):
        raise TargetSelectionError(f"Creation of '{path.name}' was declined.")
    try:
        path.touch(exist_ok=True)
    except OSError as exc:
        raise BibliographyWriteError(f"Unable to create '{path}': {exc}") from exc
    return path


def _resolve_single(selection: TargetSelection, chooser: TargetChooser) -> Path:
    return selection.candidates[0]


def _resolve_choose(selection: TargetSelection, chooser: TargetChooser) -> Path:
    choice = chooser.choose(selection.candidates)
    if choice is None:
        raise TargetSelectionError("No bibliography file was selected.")
    resolved = Path(choice).resolve()
    if resolved not in selection.candidates:
        raise TargetSelectionError(f"'{choice}' is not one of the available bibliography files.")
    return resolved


TARGET_HANDLERS: Mapping[TargetKind, Callable[[TargetSelection, TargetChooser], Path]] = {
    TargetKind.CREATE: _resolve_create,
    TargetKind.SINGLE: _resolve_single,
    TargetKind.CHOOSE: _resolve_choose,
}


def resolve_target(selection: TargetSelection, chooser: TargetChooser) -> Path:
    """Turn a selection into a concrete file, consulting ``chooser`` when needed."""
    return TARGET_HANDLERS[selection.kind](selection, chooser)


__all__ = [
    "TARGET_HANDLERS",
    "BibliographyStore",
    "InsertOutcome",
    "InsertResult",
    "TargetChooser",
    "TargetKind",
    "TargetSelection",
    "discover_targets",
    "resolve_target",
]
