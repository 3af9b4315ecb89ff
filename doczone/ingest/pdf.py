"""
PDF layout extraction with PyMuPDF.

This module turns a PDF into the layout Document consumed by the feature
encoders. It is a thin adapter: PyMuPDF already provides the text blocks,
lines and styled spans with their coordinates.

Approach:
1. page.get_text("dict") gives blocks -> lines -> spans with bounding boxes
2. Each span is split into word/whitespace/punctuation tokens whose widths
   are interpolated from the span width
3. Image blocks and vector drawings become GraphicObjects, attached to the
   text blocks they touch
4. The main area of a page is the page rectangle minus header and footer
   margins

The parser produces a Document with:
- One Block per PyMuPDF text block, line breaks as "\\n" tokens
- Font name, size, bold and italic flags on every token
- 1-based page numbers
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from doczone.errors import IngestError
from doczone.features.lexical import tokenize
from doczone.models import (
    Block,
    BoundingBox,
    Document,
    GraphicObject,
    GraphicType,
    Page,
    Token,
)

logger = logging.getLogger(__name__)

# PyMuPDF span flags
FLAG_ITALIC = 2
FLAG_BOLD = 16


def span_tokens(span: dict) -> list[Token]:
    """Split a PyMuPDF span into positioned tokens."""
    text = span.get("text", "")
    if not text:
        return []
    x0, y0, x1, y1 = span.get("bbox", (0.0, 0.0, 0.0, 0.0))
    font = span.get("font", "")
    flags = span.get("flags", 0)
    char_width = (x1 - x0) / len(text)
    bold = bool(flags & FLAG_BOLD) or "bold" in font.lower()
    italic = bool(flags & FLAG_ITALIC) or "italic" in font.lower() or "oblique" in font.lower()

    tokens = []
    x = x0
    for piece in tokenize(text):
        width = char_width * len(piece)
        tokens.append(Token(
            text=piece,
            x=x,
            y=y0,
            width=width,
            height=y1 - y0,
            font=font,
            font_size=span.get("size", 0.0),
            bold=bold,
            italic=italic,
        ))
        x += width
    return tokens


def text_block(raw: dict) -> Optional[Block]:
    """Build a Block from a PyMuPDF text block, None if it holds no text."""
    tokens: list[Token] = []
    lines: list[str] = []
    for line in raw.get("lines", []):
        line_tokens = []
        for span in line.get("spans", []):
            line_tokens.extend(span_tokens(span))
        if not line_tokens:
            continue
        if tokens:
            last = tokens[-1]
            tokens.append(Token(
                text="\n", x=last.x + last.width, y=last.y, height=last.height,
                font=last.font, font_size=last.font_size,
            ))
        tokens.extend(line_tokens)
        lines.append("".join(t.text for t in line_tokens))
    if not tokens:
        return None
    x0, y0, x1, y1 = raw.get("bbox", (0.0, 0.0, 0.0, 0.0))
    return Block(
        tokens=tokens,
        text="\n".join(lines),
        x=x0,
        y=y0,
        width=x1 - x0,
        height=y1 - y0,
    )


class PDFParser:
    """Extract a layout Document from a PDF file.

    Usage:
        parser = PDFParser()
        doc = parser.parse("catalogue.pdf")

        for block in doc.blocks:
            print(f"{block.page_number}: {block.text[:50]}...")
    """

    def __init__(
        self,
        header_margin: float = 50.0,
        footer_margin: float = 50.0,
        extract_graphics: bool = True,
    ):
        self.header_margin = header_margin
        self.footer_margin = footer_margin
        self.extract_graphics = extract_graphics

    def parse(self, pdf_path: str | Path, pages: Optional[list[int]] = None) -> Document:
        """Parse a PDF file into a Document.

        Args:
            pdf_path: Path to PDF file
            pages: Optional list of page numbers (0-indexed)

        Returns:
            Document with blocks, tokens, graphics and main areas

        Raises:
            IngestError: If the file is missing or is not a readable PDF
        """
        try:
            import fitz  # PyMuPDF
        except ImportError:
            raise ImportError("PyMuPDF is required. Install with: pip install PyMuPDF")

        pdf_path = Path(pdf_path)
        if not pdf_path.exists():
            raise IngestError(f"PDF not found: {pdf_path}")

        try:
            pdf = fitz.open(str(pdf_path))
        except (RuntimeError, ValueError) as e:
            raise IngestError(f"Cannot open {pdf_path}: {e}") from e

        try:
            if pages is None:
                page_nums = list(range(len(pdf)))
            else:
                page_nums = [p for p in pages if 0 <= p < len(pdf)]
            doc_pages = [self._extract_page(pdf[n], n + 1) for n in page_nums]
            metadata = {
                "source_file": str(pdf_path),
                "title": (pdf.metadata or {}).get("title") or pdf_path.stem,
                "total_pages": len(pdf),
            }
        finally:
            pdf.close()

        doc = Document(pages=doc_pages, doc_id=pdf_path.stem, metadata=metadata)
        logger.info(
            "Parsed %s: %d pages, %d blocks, %d tokens",
            pdf_path.name, len(doc.pages), len(doc.blocks), len(doc.tokenizations),
        )
        return doc

    def _extract_page(self, page, number: int) -> Page:
        """Extract blocks and graphics from a PyMuPDF page."""
        import fitz

        width = page.rect.width
        height = page.rect.height
        blocks = []
        graphics = []

        flags = fitz.TEXT_PRESERVE_WHITESPACE | fitz.TEXT_PRESERVE_IMAGES | fitz.TEXT_MEDIABOX_CLIP
        raw_blocks = page.get_text("dict", flags=flags)["blocks"]
        for raw in raw_blocks:
            if raw["type"] == 0:  # Text block
                block = text_block(raw)
                if block is not None:
                    blocks.append(block)
            elif raw["type"] == 1 and self.extract_graphics:  # Image block
                x0, y0, x1, y1 = raw.get("bbox", (0.0, 0.0, 0.0, 0.0))
                graphics.append(GraphicObject(
                    GraphicType.BITMAP, BoundingBox(x0, y0, x1, y1, page=number)
                ))

        if self.extract_graphics:
            graphics.extend(self._extract_drawings(page, number))
            for block in blocks:
                box = BoundingBox(block.x, block.y, block.x + block.width,
                                  block.y + block.height, page=number)
                block.graphics = [g for g in graphics if g.bbox.intersects(box)]

        main_area = BoundingBox(
            0.0,
            self.header_margin,
            width,
            max(self.header_margin, height - self.footer_margin),
            page=number,
        )
        return Page(number=number, width=width, height=height,
                    blocks=blocks, main_area=main_area)

    def _extract_drawings(self, page, number: int) -> list[GraphicObject]:
        """Vector drawings; a drawing made only of rectangles is a box."""
        graphics = []
        for drawing in page.get_drawings():
            rect = drawing.get("rect")
            if rect is None:
                continue
            items = drawing.get("items", [])
            boxed = bool(items) and all(item[0] == "re" for item in items)
            graphics.append(GraphicObject(
                GraphicType.VECTOR_BOX if boxed else GraphicType.VECTOR,
                BoundingBox(rect.x0, rect.y0, rect.x1, rect.y1, page=number),
            ))
        return graphics


def parse_pdf(pdf_path: str | Path, pages: Optional[list[int]] = None, **kwargs) -> Document:
    """Convenience function to parse a PDF.

    Args:
        pdf_path: Path to PDF file
        pages: Optional list of page numbers (0-indexed)
        **kwargs: Passed to PDFParser

    Returns:
        Parsed Document
    """
    return PDFParser(**kwargs).parse(pdf_path, pages)
