"""
Line-level feature encoder.

The segmentation model works on lines rather than tokens: each line of a
block's text becomes one unit, represented by its first word, while the
layout features come from the first token of that line. Line vectors
extend the token vector with the second word, year, month, e-mail and
web address flags, and whether the block opens or closes its page.

Both this encoder and the line-mode reconstructor split blocks through
iter_block_lines(), so the n-th record of the stream and the n-th line
re-derived at reconstruction time always refer to the same text.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional

from doczone.config import EncoderConfig
from doczone.features.encoder import check_size
from doczone.features.lexical import (
    capitalisation,
    digit_class,
    filter_line,
    first_word,
    is_email,
    is_http,
    is_month,
    is_year,
    linear_scaling,
    punctuation_profile,
    punctuation_type,
    second_word,
)
from doczone.features.patterns import PatternTable
from doczone.features.state import ScanState, block_context
from doczone.features.vector import LineFeatureRecord
from doczone.models import Block, Document, DocumentPiece, Token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LineUnit:
    """Position of an encoded line in the document."""
    block_index: int
    line_index: int
    text: str


@dataclass
class EncodedLines:
    """Feature stream of a document at line granularity."""
    features: str
    records: list[LineFeatureRecord] = field(default_factory=list)
    units: list[LineUnit] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.records


def iter_block_lines(block: Block) -> Iterator[tuple[int, str, str]]:
    """Yield (line index, line, first word) for every encodable line of a block.

    Blocks without tokens or whose text fails filter_line() yield nothing;
    lines without a word, or failing filter_line(), are skipped.
    """
    if not block.tokens or filter_line(block.text):
        return
    for index, line in enumerate(block.lines()):
        if filter_line(line):
            continue
        word = first_word(line)
        if word is None:
            continue
        yield index, line, word


def line_token(block: Block, line_index: int) -> Token:
    """First layout token of a line, or of the block when lines and tokens disagree."""
    ranges = block.line_token_ranges()
    if len(ranges) == len(block.lines()) and line_index < len(ranges):
        return block.tokens[ranges[line_index][0]]
    return block.tokens[0]


def selected_blocks(pieces: Iterable[DocumentPiece]) -> set[int]:
    """Indexes of every block touched by the pieces."""
    selected = set()
    for piece in pieces:
        selected.update(range(piece.start.block_ptr, piece.end.block_ptr + 1))
    return selected


def encode_lines(
    doc: Document,
    config: Optional[EncoderConfig] = None,
    pieces: Optional[Iterable[DocumentPiece]] = None,
) -> Optional[EncodedLines]:
    """Encode a document, or the blocks of some pieces, one line per unit.

    Args:
        doc: Document to encode; statistics are produced if missing
        config: Encoder settings, defaults to EncoderConfig()
        pieces: Optional zone restriction; an empty list means an empty zone

    Returns:
        EncodedLines, or None when there is nothing to encode

    Raises:
        DocumentTooLargeError: If the document is over a size ceiling
    """
    config = config or EncoderConfig()
    check_size(doc, config)

    selected = None
    if pieces is not None:
        selected = selected_blocks(pieces)
        if not selected:
            return None
    if not doc.blocks:
        return None

    walk = []
    total = 0
    for index, page, block in doc.iter_blocks():
        if selected is not None and index not in selected:
            continue
        lines = list(iter_block_lines(block))
        walk.append((index, page, block, lines))
        total += sum(len(line) + 1 for _, line, _ in lines)

    stats = doc.statistics or doc.produce_statistics()
    patterns = PatternTable.from_document(doc)
    state = ScanState()
    records: list[LineFeatureRecord] = []
    units: list[LineUnit] = []

    for index, page, block, lines in walk:
        state.enter_page(page.number)
        spacing = state.enter_block(doc, block)
        if not lines:
            logger.debug("Skipping block %d: no usable lines", index)
            continue

        ctx = block_context(page, block, spacing)
        first_page_block = block is page.blocks[0]
        last_page_block = block is page.blocks[-1]
        max_line_length = max(len(line) for line in block.lines())

        for k, (line_index, line, word) in enumerate(lines):
            token = line_token(block, line_index)
            record = LineFeatureRecord(string=word, token=token, line=line)
            record.second_string = second_word(line)
            record.first_page_block = first_page_block
            record.last_page_block = last_page_block
            record.line_status = "LINESTART"
            if k == 0:
                record.block_status = "BLOCKSTART"
            elif k == len(lines) - 1:
                record.block_status = "BLOCKEND"
            else:
                record.block_status = "BLOCKIN"

            token_text = token.text.strip() or token.text
            if token_text:
                state.update_indentation(token.x, token.width / len(token_text))

            record.page_status = state.page_status()
            record.single_char = len(word) == 1
            record.capitalisation = capitalisation(word)
            record.digit = digit_class(word)
            record.punct_type = punctuation_type(word)
            record.year = is_year(word)
            record.month = is_month(word)
            record.email = is_email(word)
            record.http = is_http(word)
            record.font_status = state.font_status(token.font)
            record.font_size = state.font_size_status(token.font_size)
            record.bold = token.bold
            record.italic = token.italic
            record.relative_document_position = linear_scaling(
                state.document_position, total, config.nbbins_position
            )
            record.relative_page_position = ctx.page_position_bin(token.y, config.nbbins_position)
            record.punctuation_profile = punctuation_profile(line)
            record.line_length = linear_scaling(len(line), max_line_length, config.line_scale)
            record.repetitive_pattern, record.first_repetitive_pattern = patterns.line_lookup(
                block, line
            )
            record.bitmap_around = ctx.bitmap_around
            record.vector_around = ctx.vector_around
            record.in_main_area = ctx.in_main_area
            record.indented = state.indented
            record.spacing_with_previous_block = ctx.spacing_bin(stats, config.nbbins_space)
            record.character_density = ctx.density_bin(stats, config.nbbins_density)

            state.push(record)
            records.append(record)
            units.append(LineUnit(index, line_index, line))
            state.advance(len(line) + 1)

        state.leave_block(block)

    return EncodedLines(features=state.flush(), records=records, units=units)
