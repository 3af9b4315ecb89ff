"""
Running state of a feature encoding pass.

ScanState is created per call and threaded through the per-block and
per-unit steps of both encoders, so that two documents (or two passes over
the same document) never share anything mutable.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional

from doczone.features.lexical import linear_scaling
from doczone.features.vector import FeatureRecord
from doczone.models import (
    Block,
    Document,
    DocumentStatistics,
    GraphicType,
    Page,
    block_density,
)


@dataclass
class BlockContext:
    """Per-block values shared by every unit of the block."""
    block: Block
    page: Page
    spacing: float
    density: float
    in_main_area: bool
    bitmap_around: bool
    vector_around: bool

    def spacing_bin(self, stats: DocumentStatistics, nbins: int) -> int:
        if self.spacing == 0.0:
            return 0
        return linear_scaling(
            self.spacing - stats.min_block_spacing,
            stats.max_block_spacing - stats.min_block_spacing,
            nbins,
        )

    def density_bin(self, stats: DocumentStatistics, nbins: int) -> int:
        return linear_scaling(
            self.density - stats.min_character_density,
            stats.max_character_density - stats.min_character_density,
            nbins,
        )

    def page_position_bin(self, y: float, nbins: int) -> int:
        return min(linear_scaling(y, self.page.height, nbins), nbins)


def block_context(page: Page, block: Block, spacing: float) -> BlockContext:
    """Collect the block-level features of a block."""
    main_area = page.main_area
    box = block.bbox
    in_main_area = main_area is not None and (
        main_area.contains(box) or main_area.intersects(box)
    )
    bitmap = any(g.type == GraphicType.BITMAP for g in block.graphics)
    vector = any(g.type in (GraphicType.VECTOR, GraphicType.VECTOR_BOX) for g in block.graphics)
    return BlockContext(
        block=block,
        page=page,
        spacing=spacing,
        density=block_density(block),
        in_main_area=in_main_area,
        bitmap_around=bitmap,
        vector_around=vector,
    )


@dataclass
class ScanState:
    """Mutable state of one encoder pass."""
    current_page: int = 0
    new_page: bool = True
    document_position: int = 0
    lowest_y: float = 0.0
    spacing: float = 0.0
    current_font: Optional[str] = None
    current_font_size: int = -1
    line_start_x: float = math.nan
    indented: bool = False
    newline: bool = False
    pending: Optional[FeatureRecord] = None
    output: list[str] = field(default_factory=list)

    def enter_page(self, page_number: int) -> bool:
        """Reset the page-level layout values when the walk reaches a new page."""
        if page_number == self.current_page:
            return False
        self.current_page = page_number
        self.new_page = True
        self.lowest_y = 0.0
        self.spacing = 0.0
        return True

    def enter_block(self, doc: Document, block: Block) -> float:
        """Compute the spacing between the previous block and this one."""
        if self.lowest_y > block.y:
            # column change or other layout discontinuity
            max_spacing = doc.statistics.max_block_spacing if doc.statistics else 0.0
            self.spacing = max_spacing / 5.0
        else:
            self.spacing = block.y - self.lowest_y
        return self.spacing

    def leave_block(self, block: Block) -> None:
        self.lowest_y = block.y + block.height

    def advance(self, length: int) -> None:
        self.document_position += length

    def font_status(self, font: str) -> str:
        """NEWFONT on the first font and on every change, else SAMEFONT."""
        if self.current_font is None or self.current_font != font:
            self.current_font = font
            return "NEWFONT"
        return "SAMEFONT"

    def font_size_status(self, font_size: float) -> str:
        size = int(font_size)
        if self.current_font_size == -1 or self.current_font_size < size:
            self.current_font_size = size
            return "HIGHERFONT"
        if self.current_font_size == size:
            return "SAMEFONTSIZE"
        self.current_font_size = size
        return "LOWERFONT"

    def update_indentation(self, x: float, char_width: float) -> None:
        """Track indentation at a line start.

        Indented when the line starts more than one character width to the
        right of the previous line start; cleared when more than one
        character width to the left; otherwise unchanged.
        """
        previous = self.line_start_x
        self.line_start_x = x
        if math.isnan(previous):
            return
        if previous - x > char_width:
            self.indented = False
        elif x - previous > char_width:
            self.indented = True

    def page_status(self) -> str:
        """PAGESTART for the first unit of a page (the pending one ends it)."""
        if self.new_page:
            self.new_page = False
            if self.pending is not None:
                self.pending.page_status = "PAGEEND"
            return "PAGESTART"
        return "PAGEIN"

    def push(self, record: FeatureRecord) -> None:
        """Buffer a completed record and flush the one before it.

        A record opening a block promotes a pending BLOCKIN record to
        BLOCKEND, which covers blocks whose trailing tokens are whitespace.
        """
        pending = self.pending
        if pending is not None:
            if record.block_status == "BLOCKSTART" and pending.block_status == "BLOCKIN":
                pending.block_status = "BLOCKEND"
                pending.line_status = "LINEEND"
            self.output.append(pending.to_vector())
        self.pending = record

    def flush(self) -> str:
        """Emit the last buffered record and return the whole stream."""
        if self.pending is not None:
            self.output.append(self.pending.to_vector())
            self.pending = None
        return "".join(self.output)
