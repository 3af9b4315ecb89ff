"""
Tests for the line-level feature encoder.

Run with: pytest tests/test_line_encoder.py -v
"""

import pytest

from doczone.config import EncoderConfig
from doczone.errors import DocumentTooLargeError
from doczone.features.lines import LineUnit, encode_lines, iter_block_lines
from doczone.features.vector import LINE_VECTOR_FIELDS
from doczone.models import Block, Document, Page, Token

BLOCK_STATUS = 6
LINE_STATUS = 7
PAGE_STATUS = 8
PUNCT_PROFILE = 19
PUNCT_PROFILE_LENGTH = 20
LINE_LENGTH = 21
SECOND_STRING = 30
YEAR = 31
MONTH = 32
EMAIL = 33
HTTP = 34
FIRST_PAGE_BLOCK = 35
LAST_PAGE_BLOCK = 36


def rows(encoded):
    return [line.split(" ") for line in encoded.features.splitlines()]


class TestLineUnits:
    """Tests for line splitting shared with reconstruction."""

    def test_one_record_per_line(self):
        doc = Document.from_text("Chapter 1\nIntroduction text\n\nSecond block")
        encoded = encode_lines(doc)
        assert [r.string for r in encoded.records] == ["Chapter", "Introduction", "Second"]
        assert encoded.units == [
            LineUnit(0, 0, "Chapter 1"),
            LineUnit(0, 1, "Introduction text"),
            LineUnit(1, 0, "Second block"),
        ]

    def test_skips_blank_lines(self):
        block = Block(tokens=[Token("x")], text="Title\n   \nLast line")
        assert [(i, word) for i, _, word in iter_block_lines(block)] == [(0, "Title"), (2, "Last")]

    def test_block_with_image_marker_yields_nothing(self):
        block = Block(tokens=[Token("x")], text="Plate 3\n@IMAGE plate.png")
        assert list(iter_block_lines(block)) == []

    def test_tokenless_block_yields_nothing(self):
        assert list(iter_block_lines(Block(text="orphan text"))) == []


class TestLineFeatures:
    """Tests for line-level feature values."""

    def test_block_statuses(self):
        doc = Document.from_text("one\ntwo\nthree\n\nalone")
        statuses = [r[BLOCK_STATUS] for r in rows(encode_lines(doc))]
        assert statuses == ["BLOCKSTART", "BLOCKIN", "BLOCKEND", "BLOCKSTART"]

    def test_every_line_starts(self):
        doc = Document.from_text("one\ntwo\n\nthree")
        assert all(r[LINE_STATUS] == "LINESTART" for r in rows(encode_lines(doc)))

    def test_page_statuses(self):
        doc = Document.from_text("one\ntwo\fthree")
        assert [r[PAGE_STATUS] for r in rows(encode_lines(doc))] == [
            "PAGESTART", "PAGEEND", "PAGESTART",
        ]

    def test_punctuation_profile(self):
        doc = Document.from_text("Paris, 1850.\nplain line")
        first, second = rows(encode_lines(doc))
        assert (first[PUNCT_PROFILE], first[PUNCT_PROFILE_LENGTH]) == (",.", "2")
        assert (second[PUNCT_PROFILE], second[PUNCT_PROFILE_LENGTH]) == ("no", "0")

    def test_line_length_relative_to_longest(self):
        doc = Document.from_text("Chapter 1\nIntroduction text")
        first, second = rows(encode_lines(doc))
        assert first[LINE_LENGTH] == "5"
        assert second[LINE_LENGTH] == "10"

    def test_field_count(self):
        doc = Document.from_text("Paris (1850), in-8.\nSecond line\n\nThird")
        for row in rows(encode_lines(doc)):
            assert len(row) == LINE_VECTOR_FIELDS

    def test_second_word(self):
        doc = Document.from_text("Paris (1850), in-8.\n\nThird")
        assert [r[SECOND_STRING] for r in rows(encode_lines(doc))] == ["(1850),", "no"]

    def test_lexical_flags(self):
        """Year, month, e-mail and web flags look at the first word of the line."""
        doc = Document.from_text(
            "1850 catalogue\nMai 1851\ninfo@bnf.fr contact\n"
            "http://gallica.bnf.fr notice\nplain line"
        )
        flags = [
            (r[YEAR], r[MONTH], r[EMAIL], r[HTTP]) for r in rows(encode_lines(doc))
        ]
        assert flags == [
            ("1", "0", "0", "0"),
            ("0", "1", "0", "0"),
            ("0", "0", "1", "0"),
            ("0", "0", "0", "1"),
            ("0", "0", "0", "0"),
        ]

    def test_page_block_flags(self):
        doc = Document.from_text("one\ntwo\n\nmiddle\n\nlast\fsolo")
        flags = [(r[0], r[FIRST_PAGE_BLOCK], r[LAST_PAGE_BLOCK]) for r in rows(encode_lines(doc))]
        assert flags == [
            ("one", "1", "0"),
            ("two", "1", "0"),
            ("middle", "0", "0"),
            ("last", "0", "1"),
            ("solo", "1", "1"),
        ]

    def test_repetitive_lines(self):
        doc = Document.from_text(
            "Catalogue des livres rares\n\nFirst entry\f"
            "Catalogue des livres rares\n\nSecond entry"
        )
        records = encode_lines(doc).records
        assert [(r.repetitive_pattern, r.first_repetitive_pattern) for r in records] == [
            (True, True),
            (False, False),
            (True, False),
            (False, False),
        ]


class TestLineZones:
    """Tests for zone restriction and edge cases."""

    def test_restricted_to_pieces(self):
        doc = Document.from_text("front matter\n\nbody text")
        encoded = encode_lines(doc, pieces=[doc.piece(3, 5)])
        assert [u.text for u in encoded.units] == ["body text"]

    def test_empty_piece_list(self):
        doc = Document.from_text("text")
        assert encode_lines(doc, pieces=[]) is None

    def test_empty_document(self):
        assert encode_lines(Document.from_text("")) is None

    def test_only_filtered_lines(self):
        page = Page(number=1, width=100, height=100, blocks=[
            Block(tokens=[Token("@IMAGE")], y=10, width=10, height=10),
        ])
        encoded = encode_lines(Document(pages=[page]))
        assert encoded.is_empty
        assert encoded.features == ""

    def test_size_limit(self):
        with pytest.raises(DocumentTooLargeError):
            encode_lines(Document.from_text("a\n\nb"), EncoderConfig(max_blocks=1))
