"""
Feature extraction for zone segmentation.

This module provides:
- Token-level encoding of a zone (body model input)
- Line-level encoding of a document (segmenter model input)
- Lexical classes and discretisation helpers
- Running header/footer pattern detection
"""

from doczone.features.encoder import EncodedZone, encode_tokens, check_size
from doczone.features.lines import EncodedLines, LineUnit, encode_lines, iter_block_lines
from doczone.features.vector import FeatureRecord, LineFeatureRecord, VECTOR_FIELDS, LINE_VECTOR_FIELDS

__all__ = [
    "EncodedZone",
    "encode_tokens",
    "check_size",
    "EncodedLines",
    "LineUnit",
    "encode_lines",
    "iter_block_lines",
    "FeatureRecord",
    "LineFeatureRecord",
    "VECTOR_FIELDS",
    "LINE_VECTOR_FIELDS",
]
