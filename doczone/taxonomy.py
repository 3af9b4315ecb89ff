"""
Zone and label taxonomies.

Each labeling model tags units with a small closed set of labels; each
label maps to one opening/closing markup element pair. The reconstructor
only ever looks labels up here, so a taxonomy is the single place where a
model's output vocabulary and its markup are kept in correspondence.

Built-in taxonomies:
    segmenter: coarse document zones (front, body, back, annex, other)
    monograph: fine-grained zones of a book or catalogue
    body: entries of a catalogue body

Example:
    >>> from doczone.taxonomy import get_taxonomy
    >>> body = get_taxonomy("body")
    >>> body["<other>"].open
    '<note type="other">'
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional


def normalize_label(name: str) -> str:
    """Label name with angle brackets, as found in label streams."""
    name = name.strip()
    if not name.startswith("<"):
        name = f"<{name}>"
    return name


@dataclass(frozen=True)
class Label:
    """A zone label and the markup element it renders to.

    A silent label renders its text without any element around it.
    """
    name: str
    element: str = ""
    attributes: str = ""
    description: str = ""
    silent: bool = False

    @property
    def open(self) -> str:
        if self.silent:
            return ""
        if self.attributes:
            return f"<{self.element} {self.attributes}>"
        return f"<{self.element}>"

    @property
    def close(self) -> str:
        if self.silent:
            return ""
        return f"</{self.element}>"


class Taxonomy:
    """Table of labels keyed by label name."""

    def __init__(self, name: str, labels: Iterable[Label]):
        self.name = name
        self._labels: dict[str, Label] = {}
        for label in labels:
            self._labels[normalize_label(label.name)] = label

    def get(self, name: str) -> Optional[Label]:
        return self._labels.get(normalize_label(name))

    def __getitem__(self, name: str) -> Label:
        label = self.get(name)
        if label is None:
            raise KeyError(f"Label {name!r} is not part of the {self.name} taxonomy")
        return label

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None

    def __iter__(self) -> Iterator[Label]:
        return iter(self._labels.values())

    def __len__(self) -> int:
        return len(self._labels)

    @property
    def names(self) -> list[str]:
        return list(self._labels)


def _label(name: str, description: str, **kwargs) -> Label:
    return Label(name=f"<{name}>", element=kwargs.pop("element", name),
                 description=description, **kwargs)


SEGMENTER = Taxonomy("segmenter", [
    _label("front", "Front matter"),
    _label("body", "Body"),
    _label("back", "Back matter"),
    _label("annex", "Annex"),
    _label("other", "Unclassified content", silent=True),
])

MONOGRAPH = Taxonomy("monograph", [
    _label("cover", "Cover page"),
    _label("title", "Title page"),
    _label("publisher", "Publisher information"),
    _label("summary", "Summary"),
    _label("biography", "Biography"),
    _label("advertising", "Advertising"),
    _label("toc", "Table of contents"),
    _label("table", "Table of figures"),
    _label("preface", "Preface"),
    _label("dedication", "Dedication"),
    _label("unit", "Unit"),
    _label("reference", "References"),
    _label("annex", "Annex"),
    _label("index", "Index"),
    _label("glossary", "Glossary"),
    _label("back", "Back cover"),
    _label("other", "Unclassified content", silent=True),
])

BODY = Taxonomy("body", [
    _label("entry", "Catalogue entry"),
    _label("title", "Title"),
    _label("titledesc", "Title description"),
    _label("other", "Unclassified content", element="note", attributes='type="other"'),
])

TAXONOMIES = {
    "segmenter": SEGMENTER,
    "monograph": MONOGRAPH,
    "body": BODY,
}


def get_taxonomy(name: str) -> Taxonomy:
    """Return a built-in taxonomy by name."""
    try:
        return TAXONOMIES[name.lower()]
    except KeyError:
        raise KeyError(
            f"Unknown taxonomy: {name}. Available: {', '.join(sorted(TAXONOMIES))}"
        )
