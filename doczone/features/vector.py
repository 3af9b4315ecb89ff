"""
Feature record: one discretised feature vector per encoded unit.

A record is mutable only while the encoder holds it in its two-slot
buffer; once rendered with to_vector() it is appended to the stream and
never touched again.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from doczone.features.lexical import prefix
from doczone.models import Token

# Number of whitespace-separated fields in a rendered vector
VECTOR_FIELDS = 30
LINE_VECTOR_FIELDS = 37


def _flag(value: bool) -> str:
    return "1" if value else "0"


@dataclass
class FeatureRecord:
    """Categorical and discretised features of one token or line."""
    string: str
    block_status: str = "BLOCKIN"
    line_status: str = "LINEIN"
    page_status: str = "PAGEIN"
    font_status: str = "SAMEFONT"
    font_size: str = "SAMEFONTSIZE"
    bold: bool = False
    italic: bool = False
    capitalisation: str = "NOCAPS"
    digit: str = "NODIGIT"
    single_char: bool = False
    punct_type: str = "NOPUNCT"
    relative_document_position: int = 0
    relative_page_position: int = 0
    punctuation_profile: str = ""
    line_length: int = 0
    repetitive_pattern: bool = False
    first_repetitive_pattern: bool = False
    bitmap_around: bool = False
    vector_around: bool = False
    in_main_area: bool = True
    indented: bool = False
    spacing_with_previous_block: int = 0
    character_density: int = 0
    # reference values, not rendered
    token: Optional[Token] = field(default=None, repr=False, compare=False)
    line: Optional[str] = field(default=None, repr=False, compare=False)

    def to_vector(self) -> str:
        """Render the record as one newline-terminated feature line."""
        return " ".join(self._fields()) + "\n"

    def _fields(self) -> list[str]:
        return [
            self.string,
            self.string.lower(),
            prefix(self.string, 1),
            prefix(self.string, 2),
            prefix(self.string, 3),
            prefix(self.string, 4),
            self.block_status,
            self.line_status,
            self.page_status,
            self.font_status,
            self.font_size,
            _flag(self.bold),
            _flag(self.italic),
            "NOCAPS" if self.digit == "ALLDIGIT" else self.capitalisation,
            self.digit,
            _flag(self.single_char),
            self.punct_type,
            str(self.relative_document_position),
            str(self.relative_page_position),
            self.punctuation_profile or "no",
            str(len(self.punctuation_profile)),
            str(self.line_length),
            _flag(self.repetitive_pattern),
            _flag(self.first_repetitive_pattern),
            _flag(self.bitmap_around),
            _flag(self.vector_around),
            _flag(self.in_main_area),
            _flag(self.indented),
            str(self.spacing_with_previous_block),
            str(self.character_density),
        ]


@dataclass
class LineFeatureRecord(FeatureRecord):
    """Features of one line: the token features plus line-only lexical flags.

    The line unit is its first word; the second word is carried as a
    feature of its own. The lexical flags look at the first word only.
    """
    second_string: Optional[str] = None
    year: bool = False
    month: bool = False
    email: bool = False
    http: bool = False
    first_page_block: bool = False
    last_page_block: bool = False

    def _fields(self) -> list[str]:
        return super()._fields() + [
            self.second_string or "no",
            _flag(self.year),
            _flag(self.month),
            _flag(self.email),
            _flag(self.http),
            _flag(self.first_page_block),
            _flag(self.last_page_block),
        ]
