"""
Sequence labeling: the opaque model boundary.

This module provides:
- The SequenceLabeler interface and simple backends
- Parsing of the label stream returned by a labeler
"""

from doczone.labeling.base import (
    SequenceLabeler,
    DummyLabeler,
    CallableLabeler,
    FileLabeler,
    create_labeler,
)
from doczone.labeling.stream import LabelRecord, parse_label_stream, base_tag

__all__ = [
    "SequenceLabeler",
    "DummyLabeler",
    "CallableLabeler",
    "FileLabeler",
    "create_labeler",
    "LabelRecord",
    "parse_label_stream",
    "base_tag",
]
