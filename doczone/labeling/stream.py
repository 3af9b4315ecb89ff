"""
Label stream parsing.

A labeler returns the feature stream it was given with one extra field per
line: the tag, optionally prefixed with "I-" when the unit begins a span.

    Introduction introduction I In Int Intr BLOCKSTART ... I-<front>
    to to t to to to BLOCKIN ... <front>

Malformed lines never abort a pass: they are skipped and reported as
warnings alongside the parsed records.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

logger = logging.getLogger(__name__)

BEGIN_PREFIX = "I-"


def base_tag(tag: str) -> str:
    """Tag without its span-begin prefix."""
    if tag.startswith(BEGIN_PREFIX):
        return tag[len(BEGIN_PREFIX):]
    return tag


@dataclass
class LabelRecord:
    """One line of a label stream."""
    unit: str
    tag: str
    features: list[str] = field(default_factory=list)
    line_number: int = 0

    @property
    def base_tag(self) -> str:
        return base_tag(self.tag)

    @property
    def is_begin(self) -> bool:
        return self.tag.startswith(BEGIN_PREFIX)

    def feature(self, index: int) -> Optional[str]:
        """Feature at a vector position, counting the unit as field 0."""
        if index == 0:
            return self.unit
        if 0 < index <= len(self.features):
            return self.features[index - 1]
        return None


def parse_label_stream(
    text: str, expected_fields: Optional[int] = None
) -> tuple[list[LabelRecord], list[str]]:
    """Parse a labeler output into records.

    Args:
        text: Label stream, one unit per line
        expected_fields: Exact number of fields per line (features + tag);
            when omitted, the width of the first well-formed line is expected
            of every other line

    Returns:
        (records, warnings): warnings describe every skipped line
    """
    records: list[LabelRecord] = []
    warnings: list[str] = []
    for line_number, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        fields = line.split()
        if len(fields) < 2:
            warnings.append(f"line {line_number}: expected a unit and a tag, got {line!r}")
            continue
        if expected_fields is None:
            expected_fields = len(fields)
        elif len(fields) != expected_fields:
            warnings.append(
                f"line {line_number}: expected {expected_fields} fields, got {len(fields)}"
            )
            continue
        records.append(LabelRecord(
            unit=fields[0],
            tag=fields[-1],
            features=fields[1:-1],
            line_number=line_number,
        ))
    for warning in warnings:
        logger.warning("Malformed label line skipped: %s", warning)
    return records, warnings
