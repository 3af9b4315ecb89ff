"""
Core layout data models for DocZone.

These models describe a document as produced by a layout extractor:
pages made of blocks, blocks made of positioned, styled tokens. The
document also owns the flat token sequence (the "tokenization") that every
other component uses as its canonical position reference.

Design Philosophy:
- Read-only during feature extraction: indexes are built once in reindex()
- Serializable: all models can be converted to/from JSON for debugging
- Three projections kept in sync: document token offsets, page offsets and
  block/token positions (DocumentPointer)
"""

from __future__ import annotations

import bisect
import json
import re
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional


class GraphicType(Enum):
    """Kinds of graphical objects a layout extractor reports."""
    BITMAP = "bitmap"
    VECTOR = "vector"
    VECTOR_BOX = "vector_box"


@dataclass
class BoundingBox:
    """Bounding box in PDF points from a top-left origin."""
    x0: float
    y0: float
    x1: float
    y1: float
    page: int = 0

    @classmethod
    def from_point_and_dimensions(
        cls, page: int, x: float, y: float, width: float, height: float
    ) -> BoundingBox:
        return cls(x0=x, y0=y, x1=x + width, y1=y + height, page=page)

    @property
    def width(self) -> float:
        return self.x1 - self.x0

    @property
    def height(self) -> float:
        return self.y1 - self.y0

    def contains(self, other: BoundingBox) -> bool:
        """Whether other lies entirely inside this box."""
        return (
            self.x0 <= other.x0 and self.y0 <= other.y0
            and other.x1 <= self.x1 and other.y1 <= self.y1
        )

    def intersects(self, other: BoundingBox) -> bool:
        """Whether the two boxes overlap (touching edges do not count)."""
        return (
            self.x0 < other.x1 and other.x0 < self.x1
            and self.y0 < other.y1 and other.y0 < self.y1
        )

    def to_dict(self) -> dict:
        return {"x0": self.x0, "y0": self.y0, "x1": self.x1, "y1": self.y1, "page": self.page}

    @classmethod
    def from_dict(cls, d: dict) -> BoundingBox:
        return cls(x0=d["x0"], y0=d["y0"], x1=d["x1"], y1=d["y1"], page=d.get("page", 0))


@dataclass
class Token:
    """An atomic layout token: text plus position and typography."""
    text: str
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    font: str = ""
    font_size: float = 0.0
    bold: bool = False
    italic: bool = False

    @property
    def is_newline(self) -> bool:
        return self.text == "\n"

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "font": self.font,
            "font_size": self.font_size,
            "bold": self.bold,
            "italic": self.italic,
        }

    @classmethod
    def from_dict(cls, d: dict) -> Token:
        return cls(
            text=d["text"],
            x=d.get("x", 0.0),
            y=d.get("y", 0.0),
            width=d.get("width", 0.0),
            height=d.get("height", 0.0),
            font=d.get("font", ""),
            font_size=d.get("font_size", 0.0),
            bold=d.get("bold", False),
            italic=d.get("italic", False),
        )


@dataclass
class GraphicObject:
    """A bitmap or vector graphic connected to a block."""
    type: GraphicType
    bbox: BoundingBox

    def to_dict(self) -> dict:
        return {"type": self.type.value, "bbox": self.bbox.to_dict()}

    @classmethod
    def from_dict(cls, d: dict) -> GraphicObject:
        return cls(type=GraphicType(d["type"]), bbox=BoundingBox.from_dict(d["bbox"]))


_LINE_SPLIT = re.compile(r"[\n\r]")


@dataclass
class Block:
    """A layout block: an ordered run of tokens with a bounding box.

    The raw text may contain line breaks. Walking lines() and walking the
    tokens must reach line boundaries at the same points; line_token_ranges()
    exposes the token side of that correspondence.

    page_number, start_token and end_token are filled by Document.reindex().
    """
    tokens: list[Token] = field(default_factory=list)
    text: Optional[str] = None
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    graphics: list[GraphicObject] = field(default_factory=list)
    page_number: int = 0
    start_token: int = 0
    end_token: int = -1

    def __post_init__(self):
        if self.text is None:
            self.text = "".join(t.text for t in self.tokens)

    @property
    def bbox(self) -> BoundingBox:
        return BoundingBox.from_point_and_dimensions(
            self.page_number, self.x, self.y, self.width, self.height
        )

    def lines(self) -> list[str]:
        """Text lines, split on any line terminator, trailing empties dropped."""
        if not self.text:
            return []
        lines = _LINE_SPLIT.split(self.text)
        while lines and lines[-1] == "":
            lines.pop()
        return lines

    def line_token_ranges(self) -> list[tuple[int, int]]:
        """Inclusive (first, last) token indexes of each line of the block.

        A line-break token closes the line it ends.
        """
        ranges = []
        start = 0
        for i, token in enumerate(self.tokens):
            if token.is_newline:
                ranges.append((start, i))
                start = i + 1
        if start < len(self.tokens):
            ranges.append((start, len(self.tokens) - 1))
        return ranges

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "tokens": [t.to_dict() for t in self.tokens],
            "graphics": [g.to_dict() for g in self.graphics],
        }

    @classmethod
    def from_dict(cls, d: dict) -> Block:
        return cls(
            tokens=[Token.from_dict(t) for t in d.get("tokens", [])],
            text=d.get("text"),
            x=d.get("x", 0.0),
            y=d.get("y", 0.0),
            width=d.get("width", 0.0),
            height=d.get("height", 0.0),
            graphics=[GraphicObject.from_dict(g) for g in d.get("graphics", [])],
        )


@dataclass
class Page:
    """A page: ordered blocks, dimensions and the main content area."""
    number: int
    width: float
    height: float
    blocks: list[Block] = field(default_factory=list)
    main_area: Optional[BoundingBox] = None

    @property
    def length_char(self) -> int:
        """Number of characters carried by the tokens of the page."""
        return sum(len(t.text) for b in self.blocks for t in b.tokens)

    def to_dict(self) -> dict:
        return {
            "number": self.number,
            "width": self.width,
            "height": self.height,
            "main_area": self.main_area.to_dict() if self.main_area else None,
            "blocks": [b.to_dict() for b in self.blocks],
        }

    @classmethod
    def from_dict(cls, d: dict) -> Page:
        return cls(
            number=d["number"],
            width=d.get("width", 0.0),
            height=d.get("height", 0.0),
            main_area=BoundingBox.from_dict(d["main_area"]) if d.get("main_area") else None,
            blocks=[Block.from_dict(b) for b in d.get("blocks", [])],
        )


@dataclass
class DocumentStatistics:
    """Scaling bounds computed once per document."""
    min_block_spacing: float = 0.0
    max_block_spacing: float = 0.0
    min_character_density: float = 0.0
    max_character_density: float = 0.0


@dataclass(frozen=True, order=True)
class DocumentPointer:
    """A position in the document, in both block and document coordinates."""
    block_ptr: int
    token_block_pos: int
    token_doc_pos: int


@dataclass(frozen=True, order=True)
class DocumentPiece:
    """A contiguous range of the document, both ends inclusive."""
    start: DocumentPointer
    end: DocumentPointer


def block_density(block: Block) -> float:
    """Characters per square point, 0 when undefined."""
    text = block.text or ""
    if block.height == 0.0 or block.width == 0.0:
        return 0.0
    if "@PAGE" in text or "@IMAGE" in text:
        return 0.0
    return len(text) / (block.height * block.width)


@dataclass
class Document:
    """A layout document: pages, blocks and the flat tokenization.

    Documents can be created from:
    - A layout extractor (PDFs): via the ingest module
    - Plain text (for testing): Document.from_text()
    - JSON (for debugging): Document.from_dict() / Document.from_json()
    """
    pages: list[Page]
    doc_id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    metadata: dict = field(default_factory=dict)
    document_parts: dict[str, list[DocumentPiece]] = field(default_factory=dict)
    statistics: Optional[DocumentStatistics] = None
    blocks: list[Block] = field(init=False, default_factory=list, repr=False)
    tokenizations: list[Token] = field(init=False, default_factory=list, repr=False)

    def __post_init__(self):
        self.reindex()

    def reindex(self) -> None:
        """Rebuild the flat block list and tokenization from the pages."""
        self.blocks = []
        self.tokenizations = []
        for page in self.pages:
            for block in page.blocks:
                block.page_number = page.number
                block.start_token = len(self.tokenizations)
                self.tokenizations.extend(block.tokens)
                block.end_token = len(self.tokenizations) - 1
                self.blocks.append(block)
        self._block_starts = [b.start_token for b in self.blocks]
        self._pages_by_number = {p.number: p for p in self.pages}

    @property
    def length_char(self) -> int:
        return sum(len(t.text) for t in self.tokenizations)

    def page_of(self, block: Block) -> Page:
        return self._pages_by_number[block.page_number]

    def iter_blocks(self) -> Iterator[tuple[int, Page, Block]]:
        """Yield (document block index, page, block) in document order."""
        index = 0
        for page in self.pages:
            for block in page.blocks:
                yield index, page, block
                index += 1

    def pointer(self, token_doc_pos: int) -> DocumentPointer:
        """Pointer to the token at a document position."""
        if not 0 <= token_doc_pos < len(self.tokenizations):
            raise IndexError(f"token position {token_doc_pos} out of range")
        block_ptr = bisect.bisect_right(self._block_starts, token_doc_pos) - 1
        # skip empty blocks sharing the same start
        while self.blocks[block_ptr].end_token < token_doc_pos:
            block_ptr += 1
        block = self.blocks[block_ptr]
        return DocumentPointer(block_ptr, token_doc_pos - block.start_token, token_doc_pos)

    def piece(self, start_pos: int, end_pos: int) -> DocumentPiece:
        return DocumentPiece(self.pointer(start_pos), self.pointer(end_pos))

    def full_piece(self) -> Optional[DocumentPiece]:
        """A piece covering the whole document, None if it has no tokens."""
        if not self.tokenizations:
            return None
        return self.piece(0, len(self.tokenizations) - 1)

    def set_document_part(self, label: str, pieces: list[DocumentPiece]) -> None:
        self.document_parts[label] = sorted(pieces)

    def get_document_part(self, label: str) -> Optional[list[DocumentPiece]]:
        """Sorted pieces labelled with label, None when the zone is absent."""
        pieces = self.document_parts.get(label)
        if not pieces:
            return None
        return list(pieces)

    def produce_statistics(self) -> DocumentStatistics:
        """Compute inter-block spacing and character density bounds."""
        spacings: list[float] = []
        densities: list[float] = []
        for page in self.pages:
            lowest_pos = 0.0
            for block in page.blocks:
                if not (block.text or "").strip():
                    continue
                if block.y >= lowest_pos:
                    spacings.append(block.y - lowest_pos)
                densities.append(block_density(block))
                lowest_pos = block.y + block.height
        self.statistics = DocumentStatistics(
            min_block_spacing=min(spacings, default=0.0),
            max_block_spacing=max(spacings, default=0.0),
            min_character_density=min(densities, default=0.0),
            max_character_density=max(densities, default=0.0),
        )
        return self.statistics

    @classmethod
    def from_text(
        cls,
        text: str,
        page_width: float = 595.0,
        page_height: float = 842.0,
        margin: float = 72.0,
        char_width: float = 6.0,
        line_height: float = 12.0,
        font: str = "Courier",
        font_size: float = 10.0,
    ) -> Document:
        """Create a Document with a synthetic monospace layout.

        This is the simplest way to create a document for testing.
        Form feeds separate pages, blank lines separate blocks and each
        remaining line break becomes a line-break token.

        Args:
            text: Plain text content
            page_width, page_height: Page dimensions in points
            margin: Page margin; the main area is the page minus margins
            char_width, line_height: Monospace metrics of the tokens
            font, font_size: Typography given to every token

        Returns:
            Document instance ready for feature extraction
        """
        from doczone.features.lexical import tokenize

        pages = []
        for page_index, page_text in enumerate(text.split("\f")):
            number = page_index + 1
            blocks = []
            y = margin
            for paragraph in re.split(r"\n[ \t]*\n", page_text):
                lines = [line.rstrip() for line in paragraph.strip("\n").split("\n")]
                if not any(line.strip() for line in lines):
                    continue
                tokens = []
                for li, line in enumerate(lines):
                    x = margin
                    line_y = y + li * line_height
                    for piece in tokenize(line):
                        width = len(piece) * char_width
                        tokens.append(Token(
                            text=piece, x=x, y=line_y, width=width, height=line_height,
                            font=font, font_size=font_size,
                        ))
                        x += width
                    if li < len(lines) - 1:
                        tokens.append(Token(
                            text="\n", x=x, y=line_y, width=0.0, height=line_height,
                            font=font, font_size=font_size,
                        ))
                blocks.append(Block(
                    tokens=tokens,
                    text="\n".join(lines),
                    x=margin,
                    y=y,
                    width=max(len(line) for line in lines) * char_width,
                    height=len(lines) * line_height,
                ))
                y += (len(lines) + 1) * line_height
            pages.append(Page(
                number=number,
                width=page_width,
                height=page_height,
                blocks=blocks,
                main_area=BoundingBox(
                    margin, margin, page_width - margin, page_height - margin, page=number
                ),
            ))
        return cls(pages=pages)

    def to_dict(self) -> dict:
        return {
            "doc_id": self.doc_id,
            "metadata": self.metadata,
            "pages": [p.to_dict() for p in self.pages],
        }

    @classmethod
    def from_dict(cls, d: dict) -> Document:
        return cls(
            doc_id=d.get("doc_id", str(uuid.uuid4())[:8]),
            metadata=d.get("metadata", {}),
            pages=[Page.from_dict(p) for p in d.get("pages", [])],
        )

    def to_json(self, indent: int = 2) -> str:
        """Serialize document to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_json(cls, json_str: str) -> Document:
        """Deserialize document from JSON string."""
        return cls.from_dict(json.loads(json_str))

    def summary(self) -> str:
        """Return a human-readable summary of the document."""
        zones = ", ".join(
            f"{label} ({len(pieces)})" for label, pieces in sorted(self.document_parts.items())
        )
        return (
            f"Document '{self.metadata.get('title') or self.doc_id}'\n"
            f"  Pages: {len(self.pages)}\n"
            f"  Blocks: {len(self.blocks)}\n"
            f"  Tokens: {len(self.tokenizations)}\n"
            f"  Zones: {zones or 'none'}"
        )
