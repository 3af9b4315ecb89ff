"""
Token-level feature encoder.

Walks the blocks of a selected zone (a sorted set of DocumentPieces) token
by token and emits one feature vector per substantive token:

    zone pieces -> admission control -> pattern table -> walk -> stream

The walk keeps its running values in a ScanState and holds each record in
a one-slot look-behind buffer, so that the block/line boundary of record
i-1 can still be corrected once record i is known.

Usage:
    >>> from doczone.features.encoder import encode_tokens
    >>> zone = encode_tokens(doc, doc.get_document_part("<body>"))
    >>> if zone is not None:
    ...     print(zone.features)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from doczone.config import EncoderConfig
from doczone.errors import TOO_MANY_BLOCKS, TOO_MANY_TOKENS, DocumentTooLargeError
from doczone.features.lexical import (
    capitalisation,
    digit_class,
    filter_line,
    is_trivial,
    linear_scaling,
    punctuation_type,
)
from doczone.features.patterns import PatternTable
from doczone.features.state import BlockContext, ScanState, block_context
from doczone.features.vector import FeatureRecord
from doczone.models import Document, DocumentPiece, DocumentStatistics, Token

logger = logging.getLogger(__name__)


@dataclass
class EncodedZone:
    """Feature stream of a zone plus the tokens walked to build it."""
    features: str
    records: list[FeatureRecord] = field(default_factory=list)
    tokens: list[Token] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.records


def check_size(doc: Document, config: EncoderConfig) -> None:
    """Refuse documents over the configured block/token ceilings."""
    if len(doc.blocks) > config.max_blocks:
        raise DocumentTooLargeError(TOO_MANY_BLOCKS, len(doc.blocks), config.max_blocks)
    if len(doc.tokenizations) > config.max_tokens:
        raise DocumentTooLargeError(TOO_MANY_TOKENS, len(doc.tokenizations), config.max_tokens)


def zone_length(doc: Document, pieces: Iterable[DocumentPiece]) -> int:
    """Number of characters carried by the tokens of the pieces."""
    total = 0
    count = len(doc.tokenizations)
    for piece in pieces:
        for i in range(piece.start.token_doc_pos, min(piece.end.token_doc_pos + 1, count)):
            total += len(doc.tokenizations[i].text)
    return total


def _look_ahead(tokens: list[Token], n: int) -> tuple[str, str]:
    """Line and block status of token n from the tokens that follow it."""
    for token in tokens[n + 1:]:
        if token.is_newline:
            return "LINEEND", "BLOCKIN"
        if not is_trivial(token.text):
            return "LINEIN", "BLOCKIN"
    return "LINEEND", "BLOCKEND"


def _unit_text(text: str) -> str:
    return "".join(text.split())


def _encode_token(
    state: ScanState,
    ctx: BlockContext,
    tokens: list[Token],
    n: int,
    unit: str,
    first_in_block: bool,
    stats: DocumentStatistics,
    total: int,
    config: EncoderConfig,
) -> FeatureRecord:
    token = tokens[n]
    record = FeatureRecord(string=unit, token=token)

    if state.newline:
        state.newline = False
        state.update_indentation(token.x, token.width / len(unit))
        record.line_status = "LINESTART"
        if state.pending is not None and state.pending.line_status != "LINESTART":
            state.pending.line_status = "LINEEND"

    if first_in_block:
        record.line_status = "LINESTART"
        record.block_status = "BLOCKSTART"
        if state.pending is not None and state.pending.line_status != "LINESTART":
            state.pending.line_status = "LINEEND"
        state.line_start_x = token.x
    elif n == len(tokens) - 1:
        record.line_status = "LINEEND"
        record.block_status = "BLOCKEND"
    else:
        line_status, block_status = _look_ahead(tokens, n)
        if record.line_status != "LINESTART":
            record.line_status = line_status
        record.block_status = block_status

    record.page_status = state.page_status()
    record.single_char = len(unit) == 1
    record.capitalisation = capitalisation(unit)
    record.digit = digit_class(unit)
    record.punct_type = punctuation_type(unit)
    record.font_status = state.font_status(token.font)
    record.font_size = state.font_size_status(token.font_size)
    record.bold = token.bold
    record.italic = token.italic
    record.relative_document_position = linear_scaling(
        state.document_position, total, config.nbbins_position
    )
    record.relative_page_position = ctx.page_position_bin(token.y, config.nbbins_position)
    record.spacing_with_previous_block = ctx.spacing_bin(stats, config.nbbins_space)
    record.character_density = ctx.density_bin(stats, config.nbbins_density)
    record.in_main_area = ctx.in_main_area
    record.bitmap_around = ctx.bitmap_around
    record.vector_around = ctx.vector_around
    record.indented = state.indented
    return record


def encode_tokens(
    doc: Document,
    pieces: Optional[Iterable[DocumentPiece]],
    config: Optional[EncoderConfig] = None,
) -> Optional[EncodedZone]:
    """Encode the tokens of a zone as a feature-vector stream.

    Args:
        doc: Document to encode; statistics are produced if missing
        pieces: Sorted pieces of the zone (e.g. doc.get_document_part("<body>"))
        config: Encoder settings, defaults to EncoderConfig()

    Returns:
        EncodedZone, or None when the zone is empty or absent

    Raises:
        DocumentTooLargeError: If the document is over a size ceiling
    """
    config = config or EncoderConfig()
    check_size(doc, config)

    pieces = sorted(pieces or [])
    if not pieces or not doc.blocks:
        logger.debug("No zone content to encode in document %s", doc.doc_id)
        return None

    stats = doc.statistics or doc.produce_statistics()
    total = zone_length(doc, pieces)
    patterns = PatternTable.from_document(doc)
    state = ScanState()
    records: list[FeatureRecord] = []
    retained: list[Token] = []

    for piece in pieces:
        for block_index in range(piece.start.block_ptr, piece.end.block_ptr + 1):
            block = doc.blocks[block_index]
            page = doc.page_of(block)
            state.enter_page(page.number)
            spacing = state.enter_block(doc, block)
            state.newline = False

            if filter_line(block.text) or not block.tokens:
                logger.debug("Skipping block %d: no usable text", block_index)
                continue

            ctx = block_context(page, block, spacing)
            repetitive, first_repetitive = patterns.block_lookup(block)
            tokens = block.tokens

            n = piece.start.token_block_pos if block_index == piece.start.block_ptr else 0
            last = len(tokens)
            if block_index == piece.end.block_ptr:
                last = piece.end.token_block_pos + 1
                if last > len(tokens):
                    logger.warning(
                        "Piece end points to token %d of block %d, which has %d tokens",
                        piece.end.token_block_pos, block_index, len(tokens),
                    )
                    last = len(tokens)

            first_in_block = True
            while n < last:
                token = tokens[n]
                retained.append(token)
                text = token.text
                n += 1
                if not text:
                    continue
                if token.is_newline:
                    state.newline = True
                    state.advance(len(text))
                    continue
                unit = _unit_text(text)
                if not unit:
                    state.advance(len(text))
                    continue
                if filter_line(unit):
                    continue

                record = _encode_token(
                    state, ctx, tokens, n - 1, unit, first_in_block, stats, total, config
                )
                record.repetitive_pattern = repetitive
                record.first_repetitive_pattern = first_repetitive and first_in_block
                first_in_block = False

                state.push(record)
                records.append(record)
                state.advance(len(text))

            state.leave_block(block)

    return EncodedZone(features=state.flush(), records=records, tokens=retained)
