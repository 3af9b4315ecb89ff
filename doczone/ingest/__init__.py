"""
Ingestion module for reading layout documents.

This module provides:
- PDF layout extraction with PyMuPDF
- Document JSON loading (the format written by Document.to_json)
- Plain text loading with a synthetic layout, for experiments
"""

from __future__ import annotations

import json
from pathlib import Path

from doczone.errors import IngestError
from doczone.ingest.pdf import PDFParser, parse_pdf
from doczone.models import Document


def load_document(path: str | Path) -> Document:
    """Load a Document from a .pdf, .json or .txt file.

    Raises:
        IngestError: If the file is missing, unsupported or malformed
    """
    path = Path(path)
    if not path.exists():
        raise IngestError(f"Input not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".pdf":
        return parse_pdf(path)
    if suffix == ".json":
        try:
            doc = Document.from_json(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            raise IngestError(f"Invalid document JSON in {path}: {e}") from e
        doc.metadata.setdefault("source_file", str(path))
        return doc
    if suffix == ".txt":
        doc = Document.from_text(path.read_text(encoding="utf-8"))
        doc.metadata["source_file"] = str(path)
        return doc
    raise IngestError(f"Unsupported input type {suffix!r}: expected .pdf, .json or .txt")


__all__ = [
    "load_document",
    "parse_pdf",
    "PDFParser",
]
