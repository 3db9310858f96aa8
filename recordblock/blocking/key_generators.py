"""
Blocking key generators for RecordBlock.

One generator per blocking method plus the dispatcher that applies
normalization, case folding and per-method defaults before routing a value
to its generator.
"""

import logging
import re
from typing import List, Optional, Union

from recordblock.blocking.models import BlockingMethod, BlockingOptions
from recordblock.blocking.phonetic import (
    generate_cologne_phonetic,
    generate_metaphone,
    generate_soundex,
)
from recordblock.normalize.value_normalizer import normalize

logger = logging.getLogger(__name__)

DEFAULT_PREFIX_LENGTH = 3
DEFAULT_SUFFIX_LENGTH = 3
DEFAULT_NGRAM_SIZE = 3
COMPOSITE_PREFIX_LENGTH = 3
PAD_CHAR = "_"

_WHITESPACE_PATTERN = re.compile(r"\s")


def _strip_whitespace(value: str) -> str:
    return _WHITESPACE_PATTERN.sub("", value)


def generate_exact_key(value: str) -> List[str]:
    """Value as a single key."""
    return [value]


def generate_prefix_key(value: str, length: int = DEFAULT_PREFIX_LENGTH) -> str:
    """
    First ``length`` characters with whitespace removed.

    Right-padded with ``_`` so the key is always ``length`` long,
    e.g. ``generate_prefix_key("Ab", 4) == "Ab__"``.
    """
    return _strip_whitespace(value)[:length].ljust(length, PAD_CHAR)


def generate_suffix_key(value: str, length: int = DEFAULT_SUFFIX_LENGTH) -> str:
    """Last ``length`` characters with whitespace removed, left-padded with ``_``."""
    cleaned = _strip_whitespace(value)
    return cleaned[max(0, len(cleaned) - length):].rjust(length, PAD_CHAR)


def generate_ngram_keys(value: str, n: int = DEFAULT_NGRAM_SIZE) -> List[str]:
    """
    Distinct contiguous substrings of length ``n`` in first-seen order.

    A value shorter than ``n`` yields itself as its only key.
    """
    cleaned = _strip_whitespace(value)
    if len(cleaned) < n:
        return [cleaned] if cleaned else []

    ngrams = (cleaned[i:i + n] for i in range(len(cleaned) - n + 1))
    return list(dict.fromkeys(ngrams))


def generate_composite_keys(value: str) -> List[str]:
    """Prefix(3), Soundex and Cologne Phonetic keys, empties dropped."""
    keys = [
        generate_prefix_key(value, COMPOSITE_PREFIX_LENGTH),
        generate_soundex(value),
        generate_cologne_phonetic(value),
    ]
    return [key for key in keys if key]


def _positive_int(value: Optional[int], default: int) -> int:
    if isinstance(value, int) and not isinstance(value, bool) and value > 0:
        return value
    return default


def generate_keys_for_value(value: str, method: Union[BlockingMethod, str],
                            options: Optional[BlockingOptions] = None) -> List[str]:
    """
    Generate blocking keys for a single value.

    Args:
        value: Raw field value
        method: Blocking method; unrecognized methods fall back to the
            processed value as a single key
        options: Method tuning options

    Returns:
        List of non-empty keys, empty if the processed value is empty
    """
    options = options or BlockingOptions()

    processed = normalize(value) if options.normalize else value
    if options.case_insensitive:
        processed = processed.lower()

    if not processed or not processed.strip():
        return []

    resolved = BlockingMethod.coerce(method)

    if resolved is BlockingMethod.EXACT or resolved is BlockingMethod.NORMALIZED:
        keys = generate_exact_key(processed)
    elif resolved is BlockingMethod.PREFIX:
        length = _positive_int(options.prefix_length, DEFAULT_PREFIX_LENGTH)
        keys = [generate_prefix_key(processed, length)]
    elif resolved is BlockingMethod.SUFFIX:
        length = _positive_int(options.suffix_length, DEFAULT_SUFFIX_LENGTH)
        keys = [generate_suffix_key(processed, length)]
    elif resolved is BlockingMethod.SOUNDEX:
        keys = [generate_soundex(processed)]
    elif resolved is BlockingMethod.COLOGNE_PHONETIC:
        keys = [generate_cologne_phonetic(processed)]
    elif resolved is BlockingMethod.NGRAM:
        size = _positive_int(options.ngram_size, DEFAULT_NGRAM_SIZE)
        keys = generate_ngram_keys(processed, size)
    elif resolved is BlockingMethod.METAPHONE:
        keys = [generate_metaphone(processed)]
    elif resolved is BlockingMethod.COMPOSITE:
        keys = generate_composite_keys(processed)
    else:
        logger.debug(f"Unknown blocking method {method!r}, using processed value as key")
        keys = [processed]

    return [key for key in keys if key]
