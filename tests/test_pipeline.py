"""
Tests for the segmentation pipeline, configuration and diagnostics.

Run with: pytest tests/test_pipeline.py -v
"""

import pytest

from doczone.config import ENV_MAX_TOKENS, EncoderConfig
from doczone.diagnostics import collect_diagnostics, summarize_checks
from doczone.errors import DocumentTooLargeError
from doczone.labeling.base import CallableLabeler, DummyLabeler
from doczone.models import Document
from doczone.pipeline import PipelineConfig, SegmentationPipeline, segment_document, segment_text


def first_word(line):
    return line.split(" ", 1)[0]


class TestPipelineConfig:
    """Tests for PipelineConfig and EncoderConfig."""

    def test_defaults(self):
        config = PipelineConfig()
        encoder = config.encoder_config()
        assert (encoder.nbbins_position, encoder.nbbins_space, encoder.nbbins_density) == (12, 5, 5)
        assert encoder.line_scale == 10
        assert config.to_dict()["body_label"] == "<body>"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv(ENV_MAX_TOKENS, "500")
        monkeypatch.setenv("DOCZONE_INDENT", "1")
        config = PipelineConfig.from_env(max_blocks=7)
        assert config.max_tokens == 500
        assert config.max_blocks == 7
        assert config.indent == 1
        assert EncoderConfig.from_env().max_tokens == 500

    def test_invalid_env(self, monkeypatch):
        monkeypatch.setenv(ENV_MAX_TOKENS, "many")
        with pytest.raises(ValueError, match=ENV_MAX_TOKENS):
            EncoderConfig.from_env()


class TestPipeline:
    """Tests for SegmentationPipeline."""

    def test_default_labelers(self):
        result = segment_text("Chapter 1\n\nSome text")
        assert result.success
        assert result.segmentation.markup == "<body>Chapter 1<lb/>Some text</body>"
        assert result.body.markup == "<entry>Chapter 1<lb/>Some text</entry>"
        assert result.stats["lines"] == 2
        assert result.stats["body_tokens"] == 4
        assert result.stats["zones"] == {"<body>": 1}

    def test_front_and_body(self):
        def segmenter(lines):
            return ["<front>" if first_word(line) == "Title" else "<body>" for line in lines]

        pipeline = SegmentationPipeline(segmenter=CallableLabeler(segmenter))
        result = pipeline.process(Document.from_text("Title page\n\nEntry one\n\nEntry two"))

        assert result.segmentation.markup == (
            "<front>Title page</front>\n\n<body>Entry one<lb/>Entry two</body>"
        )
        assert result.body.markup == "<entry>Entry one<lb/>Entry two</entry>"
        assert result.segmentation.labelled.splitlines()[0].endswith("I-<front>")

    def test_body_labeler(self):
        def body(lines):
            return ["<title>" if first_word(line) == "Entry" else "<entry>" for line in lines]

        result = segment_text("Entry one\n\nEntry two", body_labeler=CallableLabeler(body))
        assert result.body.markup == (
            "<title>Entry</title>\n\n<entry>one</entry>\n\n"
            "<title>Entry</title>\n\n<entry>two</entry>"
        )

    def test_missing_body_zone(self):
        pipeline = SegmentationPipeline(segmenter=DummyLabeler("<front>"))
        result = pipeline.process(Document.from_text("Title page"))
        assert result.success
        assert result.body.found is False
        assert result.body.markup == ""

    def test_empty_document(self):
        result = segment_text("")
        assert result.success
        assert result.segmentation.found is False
        assert result.body.found is False
        assert result.stats["lines"] == 0

    def test_body_failure_is_recorded(self):
        failing = CallableLabeler(lambda lines: [], name="broken")
        result = segment_text("Chapter 1", body_labeler=failing)
        assert not result.success
        assert "broken" in result.errors[0]
        assert result.segmentation.markup == "<body>Chapter 1</body>"

    def test_too_large_raises(self):
        pipeline = SegmentationPipeline(config=PipelineConfig(max_tokens=1))
        with pytest.raises(DocumentTooLargeError):
            pipeline.process(Document.from_text("Chapter 1"))

    def test_progress(self):
        calls = []
        pipeline = SegmentationPipeline(progress_callback=lambda msg, pct: calls.append(pct))
        pipeline.process(Document.from_text("Chapter 1"))
        assert calls[-1] == 1.0
        assert calls == sorted(calls)

    def test_warnings_collected(self):
        segmenter = CallableLabeler(lambda lines: ["<weird>"] * len(lines))
        result = segment_text("Chapter 1", segmenter=segmenter)
        assert result.warnings
        assert result.body.found is False

    def test_segment_document(self, tmp_path):
        path = tmp_path / "catalogue.txt"
        path.write_text("Chapter 1\n\nSome text", encoding="utf-8")
        result = segment_document(path)
        assert result.document.metadata["source_file"] == str(path)
        assert result.body.found


class TestDiagnostics:
    """Tests for environment diagnostics."""

    def test_collect(self, monkeypatch):
        monkeypatch.delenv(ENV_MAX_TOKENS, raising=False)
        checks = collect_diagnostics()
        names = [c.name for c in checks]
        assert "Typer" in names
        assert ENV_MAX_TOKENS in names
        summary = summarize_checks(checks)
        assert sum(summary.values()) == len(checks)

    def test_invalid_env_is_an_error(self, monkeypatch):
        monkeypatch.setenv(ENV_MAX_TOKENS, "lots")
        checks = {c.name: c for c in collect_diagnostics()}
        assert checks[ENV_MAX_TOKENS].status == "error"

    def test_negative_env_is_an_error(self, monkeypatch):
        monkeypatch.setenv(ENV_MAX_TOKENS, "-1")
        checks = {c.name: c for c in collect_diagnostics()}
        assert checks[ENV_MAX_TOKENS].status == "error"
