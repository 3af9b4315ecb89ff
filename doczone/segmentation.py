"""
Zone assignment: from line labels back to document pieces.

The segmenter labels lines; later stages work on token ranges. Each run of
consecutive lines with the same label becomes one DocumentPiece running
from the first token of its first line to the token just before the next
run, so every token of the document ends up in exactly one zone.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence, Union

from doczone.features.lines import LineUnit
from doczone.labeling.stream import LabelRecord, parse_label_stream
from doczone.models import Document, DocumentPiece
from doczone.taxonomy import Taxonomy, normalize_label

logger = logging.getLogger(__name__)


@dataclass
class ZoneAssignment:
    """Pieces assigned to each label, plus any warnings."""
    parts: dict[str, list[DocumentPiece]] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    @property
    def labels(self) -> list[str]:
        return sorted(self.parts)


def line_start_position(doc: Document, unit: LineUnit) -> int:
    """Document position of the first token of an encoded line."""
    block = doc.blocks[unit.block_index]
    ranges = block.line_token_ranges()
    if len(ranges) == len(block.lines()) and unit.line_index < len(ranges):
        return block.start_token + ranges[unit.line_index][0]
    return block.start_token


def assign_zones(
    doc: Document,
    labelled: Union[str, Sequence[LabelRecord]],
    units: Sequence[LineUnit],
    taxonomy: Taxonomy,
) -> ZoneAssignment:
    """Map line labels to DocumentPieces and store them on the document.

    Args:
        doc: Document the lines were encoded from
        labelled: Label stream, or records already parsed from it
        units: LineUnits of the encoded lines, in stream order
        taxonomy: Taxonomy used to normalise and check the labels

    Returns:
        ZoneAssignment; doc.document_parts is updated with the same pieces
    """
    result = ZoneAssignment()
    if isinstance(labelled, str):
        records, warnings = parse_label_stream(labelled)
        result.warnings.extend(warnings)
    else:
        records = list(labelled)

    if len(records) != len(units):
        message = f"{len(records)} labels for {len(units)} lines, using the first {min(len(records), len(units))}"
        logger.warning("Label/line count mismatch: %s", message)
        result.warnings.append(message)

    count = min(len(records), len(units))
    if count == 0 or not doc.tokenizations:
        return result

    runs: list[tuple[str, int]] = []
    for record, unit in zip(records[:count], units[:count]):
        label = normalize_label(record.base_tag)
        known = taxonomy.get(label)
        if known is None:
            result.warnings.append(f"label {label!r} is not part of the {taxonomy.name} taxonomy")
        else:
            label = known.name
        if runs and runs[-1][0] == label:
            continue
        start = 0 if not runs else line_start_position(doc, unit)
        runs.append((label, start))

    last_token = len(doc.tokenizations) - 1
    for i, (label, start) in enumerate(runs):
        end = runs[i + 1][1] - 1 if i + 1 < len(runs) else last_token
        if end < start:
            logger.debug("Empty %s run at token %d", label, start)
            continue
        result.parts.setdefault(label, []).append(doc.piece(start, end))

    doc.document_parts.clear()
    for label, pieces in result.parts.items():
        doc.set_document_part(label, pieces)
        logger.debug("Zone %s: %d pieces", label, len(pieces))
    return result
