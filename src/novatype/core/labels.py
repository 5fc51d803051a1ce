"""Label catalog and inline label extraction.

Labels are written as ``<prefix:name>`` anchors. The catalog maps prefixes to
descriptive metadata; classification picks the first catalog entry whose
prefix starts the label name, so catalog order defines priority between
overlapping prefixes.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
import re


UNKNOWN_LABEL_TYPE = "unknown"

_LABEL_RE = re.compile(r"<(?P<name>[A-Za-z_][A-Za-z0-9_:-]*)>")


class IconCategory(str, Enum):
    """Icon family a completion surface should use for a label type."""

    IMAGE = "image"
    TABLE = "table"
    FORMULA = "formula"
    SECTION = "section"
    CODE = "code"
    STATEMENT = "statement"
    REFERENCE = "reference"


@dataclass(frozen=True, slots=True)
class LabelTypeDescriptor:
    """Metadata describing a recognised label prefix."""

    prefix: str
    description: str
    kind: IconCategory
    detail: str

    @property
    def name(self) -> str:
        """Return the type identifier, i.e. the prefix without its colon."""
        return self.prefix.rstrip(":")


@dataclass(frozen=True, slots=True)
class LabelOccurrence:
    """A label found in a document, with its zero-based line index."""

    name: str
    line: int
    type: str


LABEL_CATALOG: tuple[LabelTypeDescriptor, ...] = (
    LabelTypeDescriptor("fig:", "Figure", IconCategory.IMAGE, "Reference to a figure"),
    LabelTypeDescriptor("tab:", "Table", IconCategory.TABLE, "Reference to a table"),
    LabelTypeDescriptor("eq:", "Equation", IconCategory.FORMULA, "Reference to an equation"),
    LabelTypeDescriptor("sec:", "Section", IconCategory.SECTION, "Reference to a section"),
    LabelTypeDescriptor("ch:", "Chapter", IconCategory.SECTION, "Reference to a chapter"),
    LabelTypeDescriptor("lst:", "Listing", IconCategory.CODE, "Reference to a code listing"),
    LabelTypeDescriptor("alg:", "Algorithm", IconCategory.CODE, "Reference to an algorithm"),
    LabelTypeDescriptor("thm:", "Theorem", IconCategory.STATEMENT, "Reference to a theorem"),
    LabelTypeDescriptor("lem:", "Lemma", IconCategory.STATEMENT, "Reference to a lemma"),
    LabelTypeDescriptor("def:", "Definition", IconCategory.STATEMENT, "Reference to a definition"),
    LabelTypeDescriptor("cor:", "Corollary", IconCategory.STATEMENT, "Reference to a corollary"),
    LabelTypeDescriptor(
        "prop:", "Proposition", IconCategory.STATEMENT, "Reference to a proposition"
    ),
    LabelTypeDescriptor("app:", "Appendix", IconCategory.SECTION, "Reference to an appendix"),
)


def classify_label(
    name: str,
    catalog: Iterable[LabelTypeDescriptor] = LABEL_CATALOG,
) -> str:
    """Return the type of the first catalog prefix matching ``name``."""
    for descriptor in catalog:
        if name.startswith(descriptor.prefix):
            return descriptor.name
    return UNKNOWN_LABEL_TYPE


def describe_label_type(
    label_type: str,
    catalog: Iterable[LabelTypeDescriptor] = LABEL_CATALOG,
) -> LabelTypeDescriptor | None:
    """Return the descriptor registered for ``label_type`` if any."""
    for descriptor in catalog:
        if descriptor.name == label_type:
            return descriptor
    return None


def extract_labels(
    text: str,
    catalog: Iterable[LabelTypeDescriptor] = LABEL_CATALOG,
) -> list[LabelOccurrence]:
    """Scan ``text`` for ``<label>`` anchors in order of appearance.

    Repeated labels are reported once per occurrence.
    """
    descriptors = tuple(catalog)
    occurrences: list[LabelOccurrence] = []
    for index, line in enumerate(text.split("\n")):
        for match in _LABEL_RE.finditer(line):
            name = match.group("name")
            occurrences.append(
                LabelOccurrence(name=name, line=index, type=classify_label(name, descriptors))
            )
    return occurrences


__all__ = [
    "LABEL_CATALOG",
    "UNKNOWN_LABEL_TYPE",
    "IconCategory",
    "LabelOccurrence",
    "LabelTypeDescriptor",
    "classify_label",
    "describe_label_type",
    "extract_labels",
]
