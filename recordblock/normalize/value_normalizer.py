"""
Value normalizer for RecordBlock.

Strips diacritics and punctuation and collapses whitespace so that
differently formatted spellings of the same value produce the same keys.
"""

import re
import unicodedata

# Everything that is not a letter, digit or whitespace. \w admits "_",
# which is punctuation for blocking purposes.
_PUNCTUATION_PATTERN = re.compile(r"[^\w\s]|_")
_WHITESPACE_PATTERN = re.compile(r"\s+")


def strip_diacritics(value: str) -> str:
    """Decompose to NFD and drop combining marks."""
    return "".join(
        c for c in unicodedata.normalize("NFD", value)
        if not unicodedata.combining(c)
    )


def normalize(value: str) -> str:
    """
    Normalize a raw value for blocking comparison.

    Args:
        value: Raw field value

    Returns:
        Normalized value, empty string for empty or blank input
    """
    if not value or not isinstance(value, str):
        return ""

    text = strip_diacritics(value)
    text = text.replace("ß", "ss").replace("ẞ", "SS")
    text = _PUNCTUATION_PATTERN.sub("", text)
    text = _WHITESPACE_PATTERN.sub(" ", text).strip()

    return text
