"""
Label-to-markup reconstruction.

Turns a label stream back into markup by walking it in lock-step with the
original units:

- Token mode: each record is matched against the tokens retained by the
  token encoder, which tells where spaces and line breaks were
- Line mode: each record gets the next original line of the blocks,
  re-derived with the same splitting the line encoder used

Each maximal run of records with the same label (ignoring the "I-" begin
prefix) becomes one element of the active taxonomy. Synchronisation
problems never abort the pass; they are collected as warnings.

Example:
    >>> from doczone.reconstruct import MarkupReconstructor
    >>> from doczone.taxonomy import get_taxonomy
    >>> rebuilt = MarkupReconstructor(get_taxonomy("segmenter")).reconstruct_tokens(
    ...     "Introduction <front>\\nto <front>\\nthe <body>\\n")
    >>> rebuilt.markup
    '<front>Introduction to</front>\\n\\n<body>the</body>'
"""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional

from doczone.features.lines import iter_block_lines
from doczone.labeling.stream import LabelRecord, parse_label_stream
from doczone.models import Block, Token
from doczone.taxonomy import Label, Taxonomy

logger = logging.getLogger(__name__)

BULLET_MARKER = "@BULLET"
SPAN_SEPARATOR = "\n\n"
LINE_BREAK = "<lb/>"


def prepare_text(text: str) -> str:
    """Substitute bullet markers and escape text for markup."""
    text = text.replace(BULLET_MARKER, "•")
    return html.escape(text, quote=False).replace('"', "&quot;")


def _is_space(text: str) -> bool:
    return bool(text) and text != "\n" and not text.strip()


@dataclass
class _Unit:
    record: LabelRecord
    text: str
    new_line: bool = False
    add_space: bool = False


@dataclass
class Reconstruction:
    """Markup rebuilt from a label stream."""
    markup: str
    warnings: list[str] = field(default_factory=list)
    records: list[LabelRecord] = field(default_factory=list)

    @property
    def labels(self) -> list[str]:
        """Base label of every record, in stream order."""
        return [record.base_tag for record in self.records]


class MarkupReconstructor:
    """Rebuild markup from label streams with a given taxonomy.

    Args:
        taxonomy: Labels and their elements
        indent: Number of tabs written before each opening element
    """

    def __init__(self, taxonomy: Taxonomy, indent: int = 0):
        self.taxonomy = taxonomy
        self.indent = indent

    def reconstruct_tokens(
        self, labelled: str, tokens: Optional[list[Token]] = None
    ) -> Reconstruction:
        """Rebuild markup from a token-level label stream.

        Args:
            labelled: Label stream, one token per line
            tokens: Tokens retained by the token encoder; without them,
                continuation tokens are joined with a single space
        """
        records, warnings = parse_label_stream(labelled)
        units = []
        cursor = 0
        for record in records:
            unit = _Unit(record, prepare_text(record.unit))
            unit.new_line = "LINESTART" in record.features
            if tokens is None:
                unit.add_space = True
            else:
                cursor = self._sync_token(record, tokens, cursor, unit, warnings)
            units.append(unit)
        return self._render(units, records, warnings)

    def _sync_token(
        self,
        record: LabelRecord,
        tokens: list[Token],
        cursor: int,
        unit: _Unit,
        warnings: list[str],
    ) -> int:
        """Advance the token cursor past the token matching the record."""
        add_space = False
        new_line = False
        p = cursor
        while p < len(tokens):
            text = tokens[p].text
            p += 1
            if _is_space(text):
                add_space = True
            elif text == "\n":
                new_line = True
            elif "".join(text.split()) == record.unit:
                unit.add_space = add_space
                unit.new_line = unit.new_line or new_line
                return p
        message = (
            f"line {record.line_number}: token {record.unit!r} not found "
            f"after position {cursor}"
        )
        logger.warning("Lost token synchronisation: %s", message)
        warnings.append(message)
        unit.add_space = True
        return cursor

    def reconstruct_lines(self, labelled: str, blocks: Iterable[Block]) -> Reconstruction:
        """Rebuild markup from a line-level label stream.

        Each record takes the next original line of the blocks. When the
        blocks run out of lines first, an empty line is used and a warning
        is recorded.
        """
        records, warnings = parse_label_stream(labelled)
        lines = self._iter_lines(blocks)
        units = []
        for record in records:
            line = next(lines, None)
            if line is None:
                message = f"line {record.line_number}: no original line left for {record.unit!r}"
                logger.warning("Lost line synchronisation: %s", message)
                warnings.append(message)
                line = ""
            units.append(_Unit(record, prepare_text(line), new_line=True))
        return self._render(units, records, warnings)

    @staticmethod
    def _iter_lines(blocks: Iterable[Block]) -> Iterator[str]:
        for block in blocks:
            for _, line, _ in iter_block_lines(block):
                yield line

    def _label(self, name: str, unknown: set[str], warnings: list[str]) -> Label:
        label = self.taxonomy.get(name)
        if label is not None:
            return label
        if name not in unknown:
            unknown.add(name)
            message = f"label {name!r} is not part of the {self.taxonomy.name} taxonomy"
            logger.warning("Unknown label: %s", message)
            warnings.append(message)
        return Label(name=name, silent=True)

    def _render(
        self, units: list[_Unit], records: list[LabelRecord], warnings: list[str]
    ) -> Reconstruction:
        buffer: list[str] = []
        unknown: set[str] = set()
        last_tag: Optional[str] = None
        open_label: Optional[Label] = None

        for i, unit in enumerate(units):
            current = unit.record.base_tag
            if current != last_tag:
                if open_label is not None:
                    buffer.append(open_label.close)
                    buffer.append(SPAN_SEPARATOR)
                open_label = self._label(current, unknown, warnings)
                buffer.append("\t" * self.indent)
                buffer.append(open_label.open)
                buffer.append(unit.text)
            else:
                if unit.new_line and i > 0:
                    buffer.append(LINE_BREAK)
                elif unit.add_space:
                    buffer.append(" ")
                buffer.append(unit.text)
            last_tag = current

        if open_label is not None:
            buffer.append(open_label.close)

        return Reconstruction(markup="".join(buffer), warnings=warnings, records=records)
