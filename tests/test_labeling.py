"""
Tests for sequence labelers and label stream parsing.

Run with: pytest tests/test_labeling.py -v
"""

import pytest

from doczone.errors import LabelingError
from doczone.labeling import (
    CallableLabeler,
    DummyLabeler,
    FileLabeler,
    create_labeler,
    parse_label_stream,
)
from doczone.labeling.stream import base_tag


class TestLabelStream:
    """Tests for parse_label_stream."""

    def test_parse(self):
        records, warnings = parse_label_stream("Intro intro I BLOCKSTART I-<front>\nto to t BLOCKIN <front>\n")
        assert warnings == []
        assert [r.unit for r in records] == ["Intro", "to"]
        assert records[0].tag == "I-<front>"
        assert records[0].base_tag == "<front>"
        assert records[0].is_begin
        assert not records[1].is_begin
        assert records[0].features == ["intro", "I", "BLOCKSTART"]

    def test_feature_access(self):
        records, _ = parse_label_stream("Intro intro I <front>\n")
        assert records[0].feature(0) == "Intro"
        assert records[0].feature(2) == "I"
        assert records[0].feature(9) is None

    def test_malformed_lines_become_warnings(self):
        records, warnings = parse_label_stream("good <body>\nlonely\n\nalso <body>\n")
        assert [r.unit for r in records] == ["good", "also"]
        assert len(warnings) == 1
        assert "line 2" in warnings[0]

    def test_expected_fields(self):
        records, warnings = parse_label_stream("a b <body>\nc <body>\n", expected_fields=3)
        assert [r.unit for r in records] == ["a"]
        assert len(warnings) == 1

    def test_width_from_first_line(self):
        """Without expected_fields, every line must match the first line's width."""
        records, warnings = parse_label_stream("a x y <body>\nb y <body>\nc x y <body>\n")
        assert [r.unit for r in records] == ["a", "c"]
        assert warnings == ["line 2: expected 4 fields, got 3"]

    def test_line_numbers(self):
        records, _ = parse_label_stream("\na <body>\n\nb <body>\n")
        assert [r.line_number for r in records] == [2, 4]

    def test_base_tag(self):
        assert base_tag("I-<body>") == "<body>"
        assert base_tag("<body>") == "<body>"


class TestLabelers:
    """Tests for the labeler backends."""

    def test_dummy(self):
        labelled = DummyLabeler("<body>").label("a x\nb y\n")
        assert labelled == "a x I-<body>\nb y <body>\n"

    def test_empty_features(self):
        assert DummyLabeler().label("") == ""

    def test_callable_adds_begin_prefix(self):
        labeler = CallableLabeler(lambda lines: ["<front>", "<front>", "<body>"])
        assert labeler.tag(["a", "b", "c"]) == ["I-<front>", "<front>", "I-<body>"]

    def test_callable_keeps_explicit_prefix(self):
        labeler = CallableLabeler(lambda lines: ["I-<body>", "I-<body>"])
        assert labeler.tag(["a", "b"]) == ["I-<body>", "I-<body>"]

    def test_count_mismatch(self):
        labeler = CallableLabeler(lambda lines: ["<body>"], name="short")
        with pytest.raises(LabelingError) as exc_info:
            labeler.label("a\nb\n")
        assert "short" in str(exc_info.value)

    def test_file_replay(self, tmp_path):
        path = tmp_path / "doc.labels"
        path.write_text("Intro f1 I-<front>\n\nbody f2 <body>\n", encoding="utf-8")
        labeler = FileLabeler(path)
        assert labeler.label("Intro f1\nbody f2\n") == "Intro f1 I-<front>\nbody f2 <body>\n"
        assert labeler.name == "file-doc.labels"


class TestFactory:
    """Tests for create_labeler."""

    def test_aliases(self, tmp_path):
        assert isinstance(create_labeler("dummy"), DummyLabeler)
        assert isinstance(create_labeler("constant", label="<entry>"), DummyLabeler)
        assert isinstance(create_labeler("function", func=lambda lines: []), CallableLabeler)
        assert isinstance(create_labeler("replay", path=tmp_path / "x"), FileLabeler)

    def test_missing_arguments(self):
        with pytest.raises(ValueError):
            create_labeler("callable")
        with pytest.raises(ValueError):
            create_labeler("file")

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown labeler backend"):
            create_labeler("crf")
