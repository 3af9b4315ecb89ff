"""
Tests for the command-line interface.

Run with: pytest tests/test_cli.py -v
"""

import json

import pytest
from typer.testing import CliRunner

from doczone import __version__
from doczone.cli import app

runner = CliRunner()


@pytest.fixture
def catalogue(tmp_path):
    path = tmp_path / "catalogue.txt"
    path.write_text("Title page\n\nEntry one\n\nEntry two", encoding="utf-8")
    return path


@pytest.fixture
def segmenter_labels(tmp_path):
    path = tmp_path / "catalogue.labels"
    path.write_text("Title I-<front>\nEntry I-<body>\nEntry <body>\n", encoding="utf-8")
    return path


class TestGlobalOptions:
    """Tests for version and help."""

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("features", "reconstruct", "segment", "taxonomy", "info"):
            assert command in result.output


class TestFeatures:
    """Tests for the features command."""

    def test_line_mode(self, catalogue):
        result = runner.invoke(app, ["features", str(catalogue)])
        assert result.exit_code == 0
        assert "Title title T Ti Tit Titl BLOCKSTART LINESTART PAGESTART" in result.output
        assert result.output.count("LINESTART") == 3

    def test_token_mode(self, catalogue):
        result = runner.invoke(app, ["features", str(catalogue), "--mode", "token"])
        assert result.exit_code == 0
        assert "page page p pa pag page" in result.output

    def test_zone(self, catalogue, segmenter_labels):
        result = runner.invoke(app, [
            "features", str(catalogue), "--mode", "token",
            "--zone", "body", "--labels", str(segmenter_labels),
        ])
        assert result.exit_code == 0
        assert "Title" not in result.output
        assert "one one o on one one" in result.output

    def test_zone_needs_labels(self, catalogue):
        result = runner.invoke(app, ["features", str(catalogue), "--zone", "body"])
        assert result.exit_code == 1

    def test_output_file(self, catalogue, tmp_path):
        out = tmp_path / "catalogue.features"
        result = runner.invoke(app, ["features", str(catalogue), "-o", str(out)])
        assert result.exit_code == 0
        assert len(out.read_text(encoding="utf-8").splitlines()) == 3

    def test_missing_input(self, tmp_path):
        result = runner.invoke(app, ["features", str(tmp_path / "missing.pdf")])
        assert result.exit_code == 1

    def test_unknown_mode(self, catalogue):
        result = runner.invoke(app, ["features", str(catalogue), "--mode", "page"])
        assert result.exit_code == 1


class TestReconstruct:
    """Tests for the reconstruct command."""

    def test_line_mode(self, catalogue, segmenter_labels):
        result = runner.invoke(app, ["reconstruct", str(catalogue), "--labels", str(segmenter_labels)])
        assert result.exit_code == 0
        assert "<front>Title page</front>" in result.output
        assert "<body>Entry one<lb/>Entry two</body>" in result.output

    def test_token_mode(self, catalogue, tmp_path):
        labels = tmp_path / "body.labels"
        labels.write_text(
            "Title LINESTART I-<title>\npage LINEEND <title>\n"
            "Entry LINESTART I-<entry>\none LINEEND <entry>\n"
            "Entry LINESTART <entry>\ntwo LINEEND <entry>\n",
            encoding="utf-8",
        )
        result = runner.invoke(app, [
            "reconstruct", str(catalogue), "--labels", str(labels), "--mode", "token",
        ])
        assert result.exit_code == 0
        assert "<title>Title page</title>" in result.output
        assert "<entry>Entry one<lb/>Entry two</entry>" in result.output

    def test_line_mode_zone(self, catalogue, segmenter_labels, tmp_path):
        """Line labels of one zone are paired with that zone's lines only."""
        labels = tmp_path / "body_lines.labels"
        labels.write_text("Entry I-<body>\nEntry <body>\n", encoding="utf-8")
        result = runner.invoke(app, [
            "reconstruct", str(catalogue), "--labels", str(labels),
            "--zone", "body", "--segmentation", str(segmenter_labels),
        ])
        assert result.exit_code == 0
        assert "<body>Entry one<lb/>Entry two</body>" in result.output
        assert "Title" not in result.output

    def test_zone_needs_segmentation(self, catalogue, segmenter_labels):
        result = runner.invoke(app, [
            "reconstruct", str(catalogue), "--labels", str(segmenter_labels), "--zone", "body",
        ])
        assert result.exit_code == 1
        assert "--segmentation" in result.output

    def test_unknown_taxonomy(self, catalogue, segmenter_labels):
        result = runner.invoke(app, [
            "reconstruct", str(catalogue), "--labels", str(segmenter_labels), "--taxonomy", "thesis",
        ])
        assert result.exit_code == 1


class TestSegment:
    """Tests for the segment command."""

    def test_json_output(self, catalogue, segmenter_labels, tmp_path):
        out = tmp_path / "result.json"
        result = runner.invoke(app, [
            "segment", str(catalogue), "--segmenter-labels", str(segmenter_labels), "-o", str(out),
        ])
        assert result.exit_code == 0
        payload = json.loads(out.read_text(encoding="utf-8"))
        assert payload["segmentation"].startswith("<front>Title page</front>")
        assert payload["body"] == "<entry>Entry one<lb/>Entry two</entry>"
        assert payload["errors"] == []


class TestInformation:
    """Tests for taxonomy and info."""

    def test_taxonomy(self):
        result = runner.invoke(app, ["taxonomy", "body"])
        assert result.exit_code == 0
        assert "entry" in result.output
        assert "titledesc" in result.output

    def test_all_taxonomies(self):
        result = runner.invoke(app, ["taxonomy"])
        assert result.exit_code == 0
        for name in ("segmenter", "monograph", "body"):
            assert name in result.output

    def test_unknown_taxonomy(self):
        result = runner.invoke(app, ["taxonomy", "thesis"])
        assert result.exit_code == 1

    def test_info(self):
        result = runner.invoke(app, ["info"])
        assert result.exit_code == 0
        assert "DocZone" in result.output
