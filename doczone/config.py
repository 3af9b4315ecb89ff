"""
Project-wide configuration for DocZone.

This module defines the discretisation constants used by the feature
encoders and the resource ceilings that guard them against oversized
documents.

Module Contents:
    APP_NAME: Application name for display purposes
    NBBINS_POSITION: Bins for relative document/page position
    NBBINS_SPACE: Bins for inter-block spacing
    NBBINS_DENSITY: Bins for block character density
    LINESCALE: Projection scale for line length
    DEFAULT_MAX_BLOCKS: Block ceiling applied before feature extraction
    DEFAULT_MAX_TOKENS: Token ceiling applied before feature extraction
    EncoderConfig: Bundles the values above, overridable from the environment

Example:
    >>> from doczone.config import EncoderConfig
    >>> config = EncoderConfig.from_env()
    >>> print(config.max_tokens)
"""

from __future__ import annotations

import os
from dataclasses import dataclass

# Application name for display and identification
APP_NAME = "DocZone"

# Default bins for relative position
NBBINS_POSITION = 12

# Default bins for inter-block spacing
NBBINS_SPACE = 5

# Default bins for block character density
NBBINS_DENSITY = 5

# Projection scale for line length
LINESCALE = 10

# Some PDFs hold hundreds of thousands of blocks; past these the scan is refused
DEFAULT_MAX_BLOCKS = 100000
DEFAULT_MAX_TOKENS = 1000000

# Environment variables read by EncoderConfig.from_env()
ENV_MAX_BLOCKS = "DOCZONE_MAX_BLOCKS"
ENV_MAX_TOKENS = "DOCZONE_MAX_TOKENS"


def int_from_env(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


@dataclass
class EncoderConfig:
    """Settings shared by the line and token feature encoders."""
    nbbins_position: int = NBBINS_POSITION
    nbbins_space: int = NBBINS_SPACE
    nbbins_density: int = NBBINS_DENSITY
    line_scale: int = LINESCALE
    max_blocks: int = DEFAULT_MAX_BLOCKS
    max_tokens: int = DEFAULT_MAX_TOKENS

    @classmethod
    def from_env(cls) -> EncoderConfig:
        """Build a config whose ceilings can be overridden by env vars."""
        return cls(
            max_blocks=int_from_env(ENV_MAX_BLOCKS, DEFAULT_MAX_BLOCKS),
            max_tokens=int_from_env(ENV_MAX_TOKENS, DEFAULT_MAX_TOKENS),
        )

    def to_dict(self) -> dict:
        """Serialize config for logging/debugging."""
        return {
            "nbbins_position": self.nbbins_position,
            "nbbins_space": self.nbbins_space,
            "nbbins_density": self.nbbins_density,
            "line_scale": self.line_scale,
            "max_blocks": self.max_blocks,
            "max_tokens": self.max_tokens,
        }
