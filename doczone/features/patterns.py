"""
Running header/footer detection.

The first two and last two blocks of every page are where running heads,
page numbers and footers live. A line pattern seen more than once across
those positions is marked repetitive; its first occurrence in the walk is
flagged separately so the labeler can tell it apart.
"""

from __future__ import annotations

from collections import Counter

from doczone.features.lexical import get_pattern
from doczone.models import Block, Document

# Shorter patterns are too generic to identify a running header
MIN_PATTERN_LENGTH = 8

# Number of blocks at each end of a page that contribute patterns
EDGE_BLOCKS = 2


def is_edge_index(index: int, count: int) -> bool:
    """Whether the block at index is one of the first/last two of its page."""
    return index < EDGE_BLOCKS or index >= count - EDGE_BLOCKS


def line_pattern(line: str) -> str | None:
    """Pattern of a line, None when too short to be meaningful."""
    pattern = get_pattern(line)
    if len(pattern) <= MIN_PATTERN_LENGTH:
        return None
    return pattern


def block_pattern(block: Block) -> str | None:
    """Pattern of the first text line of a block."""
    lines = block.lines()
    if not lines:
        return None
    return line_pattern(lines[0])


class PatternTable:
    """Frequency table of page-edge line patterns for one document.

    Created per encoder call; lookup() records first occurrences, so a table
    must not be shared between two passes.
    """

    def __init__(self, counts: Counter | None = None, edge_blocks: set[int] | None = None):
        self.counts: Counter = counts if counts is not None else Counter()
        self._edge_blocks = edge_blocks if edge_blocks is not None else set()
        self._seen: set[str] = set()

    @classmethod
    def from_document(cls, doc: Document) -> PatternTable:
        counts: Counter = Counter()
        edge_blocks = set()
        for page in doc.pages:
            for index, block in enumerate(page.blocks):
                if not is_edge_index(index, len(page.blocks)):
                    continue
                edge_blocks.add(id(block))
                pattern = block_pattern(block)
                if pattern is not None:
                    counts[pattern] += 1
        return cls(counts, edge_blocks)

    def is_edge(self, block: Block) -> bool:
        return id(block) in self._edge_blocks

    def is_repetitive(self, pattern: str | None) -> bool:
        return pattern is not None and self.counts.get(pattern, 0) > 1

    def lookup(self, pattern: str | None) -> tuple[bool, bool]:
        """Return (repetitive, first_repetitive) for a pattern.

        The first call for a repetitive pattern returns first_repetitive=True,
        every later call False.
        """
        if not self.is_repetitive(pattern):
            return False, False
        if pattern in self._seen:
            return True, False
        self._seen.add(pattern)
        return True, True

    def block_lookup(self, block: Block) -> tuple[bool, bool]:
        """lookup() for the first line of a block, (False, False) off the page edges."""
        if not self.is_edge(block):
            return False, False
        return self.lookup(block_pattern(block))

    def line_lookup(self, block: Block, line: str) -> tuple[bool, bool]:
        if not self.is_edge(block):
            return False, False
        return self.lookup(line_pattern(line))
