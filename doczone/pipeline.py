"""
Main zone segmentation pipeline for DocZone.

This module orchestrates the complete segmentation workflow:
1. Compute layout statistics (spacing and density bounds)
2. Encode the document line by line and label it with the segmenter
3. Map the line labels back to document zones
4. Encode the body zone token by token and label it with the body model
5. Rebuild both label streams into markup

Design Philosophy:
- Pipeline is configurable via PipelineConfig
- Each stage is independent and testable (segment / segment_body)
- Labelers are injected: the pipeline never knows which model runs
- Progress callbacks for CLI integration
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from doczone.config import (
    DEFAULT_MAX_BLOCKS,
    DEFAULT_MAX_TOKENS,
    ENV_MAX_BLOCKS,
    ENV_MAX_TOKENS,
    LINESCALE,
    NBBINS_DENSITY,
    NBBINS_POSITION,
    NBBINS_SPACE,
    EncoderConfig,
    int_from_env,
)
from doczone.errors import DocumentTooLargeError
from doczone.features.encoder import encode_tokens
from doczone.features.lines import encode_lines
from doczone.labeling.base import DummyLabeler, SequenceLabeler
from doczone.models import Document
from doczone.reconstruct import MarkupReconstructor
from doczone.segmentation import assign_zones
from doczone.taxonomy import get_taxonomy

logger = logging.getLogger(__name__)

# Type alias for progress callbacks
ProgressCallback = Callable[[str, float], None]

ENV_INDENT = "DOCZONE_INDENT"


@dataclass
class PipelineConfig:
    """Configuration for the segmentation pipeline."""
    # Discretisation
    nbbins_position: int = NBBINS_POSITION
    nbbins_space: int = NBBINS_SPACE
    nbbins_density: int = NBBINS_DENSITY
    line_scale: int = LINESCALE

    # Admission control
    max_blocks: int = DEFAULT_MAX_BLOCKS
    max_tokens: int = DEFAULT_MAX_TOKENS

    # Models
    segmenter_taxonomy: str = "segmenter"
    body_taxonomy: str = "body"
    body_label: str = "<body>"

    # Markup
    indent: int = 0

    @classmethod
    def from_env(cls, **overrides) -> PipelineConfig:
        """Build a config from DOCZONE_* environment variables."""
        values = {
            "max_blocks": int_from_env(ENV_MAX_BLOCKS, DEFAULT_MAX_BLOCKS),
            "max_tokens": int_from_env(ENV_MAX_TOKENS, DEFAULT_MAX_TOKENS),
            "indent": int_from_env(ENV_INDENT, 0),
        }
        values.update(overrides)
        return cls(**values)

    def encoder_config(self) -> EncoderConfig:
        return EncoderConfig(
            nbbins_position=self.nbbins_position,
            nbbins_space=self.nbbins_space,
            nbbins_density=self.nbbins_density,
            line_scale=self.line_scale,
            max_blocks=self.max_blocks,
            max_tokens=self.max_tokens,
        )

    def to_dict(self) -> dict:
        """Serialize config for logging/debugging."""
        return {
            **self.encoder_config().to_dict(),
            "segmenter_taxonomy": self.segmenter_taxonomy,
            "body_taxonomy": self.body_taxonomy,
            "body_label": self.body_label,
            "indent": self.indent,
        }


@dataclass
class ZoneResult:
    """Outcome of one labeling stage.

    found is False when the stage had nothing to work on (empty document,
    absent zone); this is a normal outcome, not an error.
    """
    label: str
    found: bool = True
    features: str = ""
    labelled: str = ""
    markup: str = ""
    units: int = 0
    warnings: list[str] = field(default_factory=list)


@dataclass
class PipelineResult:
    """Result of running the segmentation pipeline.

    Contains the document (with its zones filled in) plus the outcome of
    each stage.
    """
    document: Document
    config: PipelineConfig
    segmentation: ZoneResult
    body: Optional[ZoneResult] = None
    stats: dict = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return len(self.errors) == 0

    @property
    def warnings(self) -> list[str]:
        warnings = list(self.segmentation.warnings)
        if self.body is not None:
            warnings.extend(self.body.warnings)
        return warnings


class SegmentationPipeline:
    """Main pipeline orchestrating encoders, labelers and reconstruction.

    Usage:
        pipeline = SegmentationPipeline(
            segmenter=create_labeler("file", path="segmentation.labels"),
            body_labeler=create_labeler("dummy", label="<entry>"),
        )

        doc = Document.from_text("Chapter 1\\n\\nSome text")
        result = pipeline.process(doc)

        print(result.body.markup)
    """

    def __init__(
        self,
        config: PipelineConfig | None = None,
        segmenter: SequenceLabeler | None = None,
        body_labeler: SequenceLabeler | None = None,
        progress_callback: ProgressCallback | None = None,
    ):
        self.config = config or PipelineConfig()
        self.progress_callback = progress_callback or (lambda msg, pct: None)
        self.segmenter = segmenter or DummyLabeler(self.config.body_label)
        self.body_labeler = body_labeler or DummyLabeler("<entry>")
        self.segmenter_taxonomy = get_taxonomy(self.config.segmenter_taxonomy)
        self.body_taxonomy = get_taxonomy(self.config.body_taxonomy)

    def segment(self, doc: Document) -> ZoneResult:
        """Label the lines of a document and assign its zones.

        Raises:
            DocumentTooLargeError: If the document is over a size ceiling
        """
        self.progress_callback("Computing layout statistics...", 0.1)
        doc.produce_statistics()

        self.progress_callback("Encoding lines...", 0.2)
        encoded = encode_lines(doc, self.config.encoder_config())
        if encoded is None or encoded.is_empty:
            logger.info("Document %s has no encodable lines", doc.doc_id)
            doc.document_parts.clear()
            return ZoneResult(label="segmentation", found=False)

        self.progress_callback("Labelling zones...", 0.35)
        labelled = self.segmenter.label(encoded.features)
        assignment = assign_zones(doc, labelled, encoded.units, self.segmenter_taxonomy)
        logger.info("Document %s zones: %s", doc.doc_id, ", ".join(assignment.labels) or "none")

        self.progress_callback("Rebuilding zone markup...", 0.45)
        reconstructor = MarkupReconstructor(self.segmenter_taxonomy, indent=self.config.indent)
        rebuilt = reconstructor.reconstruct_lines(labelled, doc.blocks)

        return ZoneResult(
            label="segmentation",
            features=encoded.features,
            labelled=labelled,
            markup=rebuilt.markup,
            units=len(encoded.records),
            warnings=assignment.warnings + rebuilt.warnings,
        )

    def segment_body(self, doc: Document) -> ZoneResult:
        """Label the tokens of the body zone.

        The zone must have been assigned first (segment() or by hand).
        """
        label = self.config.body_label
        pieces = doc.get_document_part(label)
        if pieces is None:
            logger.info("Document %s has no %s zone", doc.doc_id, label)
            return ZoneResult(label=label, found=False)

        self.progress_callback("Encoding body tokens...", 0.6)
        encoded = encode_tokens(doc, pieces, self.config.encoder_config())
        if encoded is None or encoded.is_empty:
            logger.info("Zone %s of document %s has no encodable tokens", label, doc.doc_id)
            return ZoneResult(label=label, found=False)

        self.progress_callback("Labelling body...", 0.75)
        labelled = self.body_labeler.label(encoded.features)

        self.progress_callback("Rebuilding body markup...", 0.9)
        reconstructor = MarkupReconstructor(self.body_taxonomy, indent=self.config.indent)
        rebuilt = reconstructor.reconstruct_tokens(labelled, encoded.tokens)

        return ZoneResult(
            label=label,
            features=encoded.features,
            labelled=labelled,
            markup=rebuilt.markup,
            units=len(encoded.records),
            warnings=rebuilt.warnings,
        )

    def process(self, doc: Document) -> PipelineResult:
        """Run segmentation then body labeling on a document.

        A failure in the body stage is recorded in the result's errors and
        keeps the segmentation result; a document over a size ceiling
        always raises.
        """
        errors = []
        segmentation = self.segment(doc)

        body = None
        try:
            body = self.segment_body(doc)
        except DocumentTooLargeError:
            raise
        except Exception as e:
            logger.error("Body labeling failed for document %s: %s", doc.doc_id, e)
            errors.append(f"Body labeling failed: {e}")

        self.progress_callback("Complete!", 1.0)

        stats = {
            "pages": len(doc.pages),
            "blocks": len(doc.blocks),
            "tokens": len(doc.tokenizations),
            "lines": segmentation.units,
            "body_tokens": body.units if body is not None else 0,
            "zones": {label: len(pieces) for label, pieces in doc.document_parts.items()},
        }
        return PipelineResult(
            document=doc,
            config=self.config,
            segmentation=segmentation,
            body=body,
            stats=stats,
            errors=errors,
        )


# ============================================================================
# Convenience Functions
# ============================================================================

def segment_text(
    text: str,
    segmenter: SequenceLabeler | None = None,
    body_labeler: SequenceLabeler | None = None,
) -> PipelineResult:
    """Quick segmentation of plain text.

    The text gets a synthetic layout (see Document.from_text); for more
    control, use SegmentationPipeline directly.
    """
    pipeline = SegmentationPipeline(
        config=PipelineConfig.from_env(),
        segmenter=segmenter,
        body_labeler=body_labeler,
    )
    return pipeline.process(Document.from_text(text))


def segment_document(
    input_path: str | Path,
    segmenter: SequenceLabeler | None = None,
    body_labeler: SequenceLabeler | None = None,
    progress: ProgressCallback | None = None,
) -> PipelineResult:
    """Segment a PDF or document JSON file."""
    from doczone.ingest import load_document

    doc = load_document(input_path)
    pipeline = SegmentationPipeline(
        config=PipelineConfig.from_env(),
        segmenter=segmenter,
        body_labeler=body_labeler,
        progress_callback=progress,
    )
    return pipeline.process(doc)
