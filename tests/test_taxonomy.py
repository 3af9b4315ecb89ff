"""
Tests for zone taxonomies.

Run with: pytest tests/test_taxonomy.py -v
"""

import pytest

from doczone.taxonomy import TAXONOMIES, Label, Taxonomy, get_taxonomy, normalize_label


class TestLabels:
    """Tests for labels and their elements."""

    def test_open_close(self):
        label = Label(name="<entry>", element="entry")
        assert label.open == "<entry>"
        assert label.close == "</entry>"

    def test_attributes(self):
        label = Label(name="<other>", element="note", attributes='type="other"')
        assert label.open == '<note type="other">'
        assert label.close == "</note>"

    def test_silent(self):
        label = Label(name="<other>", element="other", silent=True)
        assert label.open == ""
        assert label.close == ""

    def test_normalize(self):
        assert normalize_label("body") == "<body>"
        assert normalize_label(" <body> ") == "<body>"


class TestTaxonomies:
    """Tests for the built-in taxonomies."""

    def test_segmenter(self):
        segmenter = get_taxonomy("segmenter")
        assert segmenter.names == ["<front>", "<body>", "<back>", "<annex>", "<other>"]
        assert segmenter["<other>"].silent

    def test_monograph(self):
        monograph = get_taxonomy("monograph")
        assert len(monograph) == 17
        assert "<toc>" in monograph
        assert monograph["<other>"].silent

    def test_body(self):
        body = get_taxonomy("body")
        assert body["entry"].open == "<entry>"
        assert body["<other>"].open == '<note type="other">'
        assert not body["<other>"].silent

    def test_lookup_is_case_insensitive_for_taxonomy_names(self):
        assert get_taxonomy("BODY") is TAXONOMIES["body"]

    def test_unknown_taxonomy(self):
        with pytest.raises(KeyError, match="Available"):
            get_taxonomy("thesis")

    def test_unknown_label(self):
        segmenter = get_taxonomy("segmenter")
        assert segmenter.get("<title>") is None
        with pytest.raises(KeyError):
            segmenter["<title>"]

    def test_custom_taxonomy(self):
        taxonomy = Taxonomy("custom", [Label(name="head", element="head")])
        assert taxonomy.names == ["<head>"]
        assert [label.name for label in taxonomy] == ["head"]
