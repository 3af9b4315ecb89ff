"""
Sequence labeler interface and implementations.

This module defines:
- Abstract SequenceLabeler interface wrapping an external tagging model
- DummyLabeler for testing (tags every unit with one label)
- CallableLabeler for plugging in any function (CRF bindings, rules)
- FileLabeler for replaying a label stream produced offline

Design Philosophy:
- The model is opaque: it receives the feature stream and returns one
  tag per line, nothing else is assumed about it
- Labelers are stateless between calls
- The line count is checked here so that every consumer can trust it
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Sequence

from doczone.errors import LabelingError
from doczone.labeling.stream import BEGIN_PREFIX, base_tag

logger = logging.getLogger(__name__)


def feature_lines(features: str) -> list[str]:
    """Non-empty lines of a feature stream."""
    return [line for line in features.splitlines() if line.strip()]


class SequenceLabeler(ABC):
    """Abstract base class for all labeling backends.

    All labelers must implement:
    - tag(): Return one tag per feature line

    label() appends the tags to the feature lines and produces the label
    stream consumed by the reconstructor.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the labeler name (e.g., 'dummy', 'file')."""
        pass

    @abstractmethod
    def tag(self, lines: Sequence[str]) -> list[str]:
        """Tag feature lines.

        Args:
            lines: Feature vectors, one per unit, without line terminators

        Returns:
            One tag per line, optionally prefixed with "I-"
        """
        pass

    def label(self, features: str) -> str:
        """Label a feature stream.

        Raises:
            LabelingError: If the labeler returns a different number of tags
        """
        lines = feature_lines(features)
        if not lines:
            return ""
        tags = self.tag(lines)
        if len(tags) != len(lines):
            raise LabelingError(
                f"{self.name} returned {len(tags)} tags for {len(lines)} units"
            )
        logger.debug("%s labelled %d units", self.name, len(lines))
        return "".join(f"{line} {tag}\n" for line, tag in zip(lines, tags))


class DummyLabeler(SequenceLabeler):
    """A labeler for testing: every unit gets the same label.

    The first unit is marked as beginning the span.
    """

    def __init__(self, label: str = "<body>"):
        self.label_name = label

    @property
    def name(self) -> str:
        return f"dummy-{self.label_name}"

    def tag(self, lines: Sequence[str]) -> list[str]:
        return [
            (BEGIN_PREFIX + self.label_name) if i == 0 else self.label_name
            for i in range(len(lines))
        ]


class CallableLabeler(SequenceLabeler):
    """Wrap a function mapping feature lines to tags.

    Tags returned without a begin prefix get one wherever the label changes.
    """

    def __init__(self, func: Callable[[Sequence[str]], Sequence[str]], name: str = "callable"):
        self.func = func
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def tag(self, lines: Sequence[str]) -> list[str]:
        tags = []
        previous = None
        for tag in self.func(lines):
            current = base_tag(tag)
            if current != previous and not tag.startswith(BEGIN_PREFIX):
                tag = BEGIN_PREFIX + tag
            tags.append(tag)
            previous = current
        return tags


class FileLabeler(SequenceLabeler):
    """Replay the tags of a label stream saved by an external tagger.

    The last field of every non-empty line of the file is taken as the tag.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)

    @property
    def name(self) -> str:
        return f"file-{self.path.name}"

    def tag(self, lines: Sequence[str]) -> list[str]:
        stored = feature_lines(self.path.read_text(encoding="utf-8"))
        return [line.split()[-1] for line in stored]


def create_labeler(backend: str, **kwargs) -> SequenceLabeler:
    """Factory function to create a labeler by name.

    Args:
        backend: Labeler backend name ('dummy', 'callable', 'file')
        **kwargs: Backend-specific arguments

    Returns:
        Configured SequenceLabeler instance

    Supported backends and aliases:
        - dummy, constant, test: Same label for every unit (label=...)
        - callable, function: Wrap a function (func=..., name=...)
        - file, replay: Tags from a saved label stream (path=...)
    """
    backend_lower = backend.lower().replace("_", "-")

    if backend_lower in ("dummy", "constant", "test"):
        return DummyLabeler(label=kwargs.get("label", "<body>"))

    elif backend_lower in ("callable", "function"):
        func = kwargs.get("func")
        if func is None:
            raise ValueError("The callable labeler needs func=...")
        return CallableLabeler(func, name=kwargs.get("name", "callable"))

    elif backend_lower in ("file", "replay"):
        path = kwargs.get("path")
        if path is None:
            raise ValueError("The file labeler needs path=...")
        return FileLabeler(path)

    raise ValueError(
        f"Unknown labeler backend: {backend}. "
        "Available: dummy, callable, file"
    )
