"""
DocZone: layout-aware zone segmentation of document streams

Turns a laid-out document (PDF, or its JSON dump) into feature-vector
streams for an external sequence labeler, and turns the labeler's output
back into zones and XML-like markup.

Core Components:
1. Line and token feature encoders over the document layout
2. Zone taxonomies (segmenter, monograph, body) and their markup elements
3. Markup reconstruction with token resynchronisation
"""

__version__ = "0.1.0"

from doczone.models import Document, Page, Block, Token
from doczone.pipeline import SegmentationPipeline, PipelineConfig

__all__ = [
    "Document",
    "Page",
    "Block",
    "Token",
    "SegmentationPipeline",
    "PipelineConfig",
]
