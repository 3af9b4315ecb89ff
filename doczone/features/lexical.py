"""
Lexical utilities shared by the feature encoders.

This module provides the small character-level tests and projections
that turn a piece of text into categorical feature values:
- Tokenisation of raw lines into words, whitespace and punctuation
- Degenerate line filtering (image references, page markers)
- Line pattern normalisation for running header/footer detection
- Capitalisation, digit and punctuation classes
- Linear scaling of a raw value into a fixed number of bins

Design:
- Pure functions, no state: safe to call from any encoder pass
- Class names are the literal values written to the feature stream
"""

from __future__ import annotations

import re

# ============================================================================
# Pattern Definitions
# ============================================================================

# Characters that split a line into tokens; each one is kept as a token itself
DELIMITERS = " \n\r\t\f\u00a0([ •*,:;?.!/)-–−‐«»„\"“”‘’'`$#@]*♦♥♣♠"

_TOKENIZE_PATTERN = re.compile("([" + re.escape(DELIMITERS) + "])")

# Characters reported in a line's punctuation profile
PUNCTUATIONS = ",:;?.!)-–−\"“”‘’'`$]*♦♥♣♠•"

# Markers and file names a layout extractor leaves in place of non-text content
TRIVIAL_MARKERS = ("@IMAGE", "@PAGE")
IMAGE_SUFFIXES = (".pbm", ".ppm", ".svg", ".jpg", ".png")

_PUNCT_ONLY_PATTERN = re.compile(r"^[^\w\s]+$")
_ALL_DIGIT_PATTERN = re.compile(r"^\d+$")
_PATTERN_STRIP = re.compile(r"[\d\W_]+")
_WORD_SPLIT = re.compile(r"[ \t]+")
_YEAR_PATTERN = re.compile(r"[12][0-9]{3}")
_EMAIL_PATTERN = re.compile(r"[\w.+'-]+@[\w-]+(?:\.[\w-]+)*\.[A-Za-z]{2,}")
_HTTP_PATTERN = re.compile(r"(?:https?|ftp)://|www\.", re.IGNORECASE)

# Month names and abbreviations, English and French, lowercased
MONTHS = frozenset({
    "january", "february", "march", "april", "may", "june", "july",
    "august", "september", "october", "november", "december",
    "jan", "feb", "mar", "apr", "jun", "jul", "aug", "sep", "sept",
    "oct", "nov", "dec",
    "janvier", "février", "fevrier", "mars", "avril", "mai", "juin",
    "juillet", "août", "aout", "septembre", "octobre", "novembre", "décembre",
    "decembre", "janv", "févr", "fevr", "avr", "juil", "déc",
})

# Literal punctuation classes, checked after the generic PUNCT test
_PUNCT_TYPES = {
    "(": "OPENBRACKET",
    "[": "OPENBRACKET",
    ")": "ENDBRACKET",
    "]": "ENDBRACKET",
    ".": "DOT",
    ",": "COMMA",
    "-": "HYPHEN",
    '"': "QUOTE",
    "'": "QUOTE",
    "`": "QUOTE",
}


def tokenize(text: str) -> list[str]:
    """Split text into word and delimiter tokens, dropping nothing but empties.

    Example:
        >>> tokenize("Chapter 1.")
        ['Chapter', ' ', '1', '.']
    """
    return [piece for piece in _TOKENIZE_PATTERN.split(text) if piece]


def filter_line(line: str | None) -> bool:
    """Return True when a line carries no usable text.

    Empty lines, image placeholders, page markers and image file names are
    filtered out of the feature stream.
    """
    if not line:
        return True
    if any(marker in line for marker in TRIVIAL_MARKERS):
        return True
    return any(suffix in line for suffix in IMAGE_SUFFIXES)


def is_trivial(text: str) -> bool:
    """Whether a token is skipped when looking ahead for the end of a line."""
    if not text or not text.strip():
        return True
    if text.startswith(TRIVIAL_MARKERS):
        return True
    return any(suffix in text for suffix in IMAGE_SUFFIXES)


def get_pattern(line: str) -> str:
    """Normalise a line to its letters only, lowercased.

    Page numbers and punctuation vary between occurrences of a running
    header, so both are removed before comparison.
    """
    return _PATTERN_STRIP.sub("", line).lower()


def first_word(line: str) -> str | None:
    """First space/tab separated word of a line, None if there is none."""
    for word in _WORD_SPLIT.split(line):
        word = word.replace(" ", "").replace("\n", "").strip()
        if word:
            return word
    return None


def second_word(line: str) -> str | None:
    """Second space/tab separated word of a line, None if there is none."""
    words = [w for w in _WORD_SPLIT.split(line) if w]
    return words[1] if len(words) > 1 else None


def is_year(text: str) -> bool:
    """True when text contains a four-digit year from 1000 to 2999."""
    return _YEAR_PATTERN.search(text) is not None


def is_month(text: str) -> bool:
    return text.lower().rstrip(".,;:") in MONTHS


def is_email(text: str) -> bool:
    return _EMAIL_PATTERN.search(text) is not None


def is_http(text: str) -> bool:
    """True for web addresses (http://, https://, ftp:// or www.)."""
    return _HTTP_PATTERN.search(text) is not None


def prefix(text: str, n: int) -> str:
    """First n characters of text (the whole text when shorter)."""
    return text[:n]


def capitalisation(text: str) -> str:
    """INITCAP, ALLCAP or NOCAPS."""
    if not text:
        return "NOCAPS"
    has_cased = any(c.isupper() for c in text)
    if has_cased and not any(c.islower() for c in text):
        return "ALLCAP"
    if text[0].isupper():
        return "INITCAP"
    return "NOCAPS"


def digit_class(text: str) -> str:
    """ALLDIGIT, CONTAINSDIGITS or NODIGIT."""
    if _ALL_DIGIT_PATTERN.match(text):
        return "ALLDIGIT"
    if any(c.isdigit() for c in text):
        return "CONTAINSDIGITS"
    return "NODIGIT"


def punctuation_type(text: str) -> str:
    """Punctuation class of a token.

    Literal brackets, dot, comma, hyphen and quotes have their own class;
    any other punctuation-only token is PUNCT.
    """
    if text in _PUNCT_TYPES:
        return _PUNCT_TYPES[text]
    if _PUNCT_ONLY_PATTERN.match(text):
        return "PUNCT"
    return "NOPUNCT"


def punctuation_profile(line: str) -> str:
    """Concatenation of the punctuation characters of a line, in order."""
    return "".join(c for c in line if c in PUNCTUATIONS)


def linear_scaling(pos: float, total: float, nbins: int) -> int:
    """Project pos in [0, total] onto an integer bin in [0, nbins].

    Values at or beyond total map to nbins, values at or below zero map to
    bin 0. A non-positive total also maps to bin 0.

    Example:
        >>> linear_scaling(5, 10, 12)
        6
        >>> linear_scaling(10, 10, 12)
        12
    """
    if total <= 0:
        return 0
    if pos >= total:
        return nbins
    if pos <= 0:
        return 0
    return int(pos / total * nbins)
