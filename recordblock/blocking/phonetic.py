"""
Phonetic encoders for RecordBlock.

Soundex for English names, Cologne Phonetic for German/DACH names and a
simplified Metaphone. Encoders accept any string and return an empty code
when the input has no encodable letters.
"""

import re

from recordblock.normalize.value_normalizer import strip_diacritics

_NON_LETTER_PATTERN = re.compile(r"[^A-Z]")

_SOUNDEX_CODES = {
    "B": "1", "F": "1", "P": "1", "V": "1",
    "C": "2", "G": "2", "J": "2", "K": "2", "Q": "2", "S": "2", "X": "2", "Z": "2",
    "D": "3", "T": "3",
    "L": "4",
    "M": "5", "N": "5",
    "R": "6",
}

_GERMAN_UMLAUTS = {"Ä": "A", "Ö": "O", "Ü": "U", "ß": "SS", "ẞ": "SS"}

# Neighbour sets for the letter C in Cologne Phonetic
_C_HARD_AT_START = frozenset("AHKLOQRUX")
_C_HARD_INSIDE = frozenset("AHKOQUX")

_METAPHONE_SUBSTITUTIONS = [
    (re.compile(r"^(KN|GN|PN|AE|WR)"), lambda m: m.group(1)[1]),
    (re.compile(r"MB$"), "M"),
    (re.compile(r"X"), "KS"),
    (re.compile(r"PH"), "F"),
    (re.compile(r"GH"), "F"),
    (re.compile(r"CK"), "K"),
    (re.compile(r"SCH"), "SK"),
    (re.compile(r"SH"), "X"),
    (re.compile(r"TH"), "0"),
    (re.compile(r"TCH"), "X"),
    (re.compile(r"WH"), "W"),
]

# Each substitution rewrites only its first match. Letters absent from the
# table (H, Y) are silent, as is the "0" left by TH.
_METAPHONE_CODES = {
    "B": "P", "C": "K", "D": "T", "F": "F", "G": "K", "J": "J", "K": "K",
    "L": "L", "M": "M", "N": "N", "P": "P", "Q": "K", "R": "R", "S": "S",
    "T": "T", "V": "F", "W": "W", "X": "KS", "Z": "S",
}

_METAPHONE_MAX_LENGTH = 6


def _letters_only(value: str) -> str:
    """Uppercase, strip diacritics and drop everything but A-Z."""
    return _NON_LETTER_PATTERN.sub("", strip_diacritics(value.upper()))


def generate_soundex(value: str) -> str:
    """
    Generate the American Soundex code for a value.

    Vowels, H and W reset the previous code, so identical codes on either
    side of them are both emitted.

    Args:
        value: Input string

    Returns:
        Four character code such as ``R163``, or empty string
    """
    if not value:
        return ""

    cleaned = _letters_only(value)
    if not cleaned:
        return ""

    first_letter = cleaned[0]
    result = first_letter
    last_code = _SOUNDEX_CODES.get(first_letter, "")

    for char in cleaned[1:]:
        if len(result) >= 4:
            break
        code = _SOUNDEX_CODES.get(char)
        if code and code != last_code:
            result += code
            last_code = code
        elif not code:
            last_code = ""

    return result.ljust(4, "0")


def _cologne_code(char: str, prev: str, next_: str, is_first: bool) -> str:
    """Code for a single letter given its neighbours."""
    if char in "AEIOUJY":
        return "0"
    if char == "H":
        return ""
    if char == "B":
        return "1"
    if char == "P":
        return "3" if next_ == "H" else "1"
    if char in "DT":
        return "8" if next_ in ("C", "S", "Z") else "2"
    if char in "FVW":
        return "3"
    if char in "GKQ":
        return "4"
    if char == "C":
        if is_first:
            return "4" if next_ in _C_HARD_AT_START else "8"
        if prev in ("S", "Z"):
            return "8"
        return "4" if next_ in _C_HARD_INSIDE else "8"
    if char == "X":
        return "8" if prev in ("C", "K", "Q") else "48"
    if char == "L":
        return "5"
    if char in "MN":
        return "6"
    if char == "R":
        return "7"
    if char in "SZ":
        return "8"
    return ""


def generate_cologne_phonetic(value: str) -> str:
    """
    Generate the Cologne Phonetic (Kölner Phonetik) code for a value.

    Phonetically similar German spellings share a code, e.g. Meyer/Meier
    (``67``) and Schmidt/Schmitt (``862``). H emits nothing and does not
    interrupt a run of identical digits.

    Args:
        value: Input string

    Returns:
        Digit code, ``"0"`` when every digit was a vowel code, or empty
        string when the value has no letters
    """
    if not value:
        return ""

    text = value
    for umlaut, replacement in _GERMAN_UMLAUTS.items():
        text = text.replace(umlaut, replacement).replace(umlaut.lower(), replacement)
    text = _letters_only(text)
    if not text:
        return ""

    last_index = len(text) - 1
    codes = []
    for i, char in enumerate(text):
        prev = text[i - 1] if i > 0 else ""
        next_ = text[i + 1] if i < last_index else ""
        codes.append(_cologne_code(char, prev, next_, i == 0))

    result = []
    last_digit = ""
    for code in codes:
        for digit in code:
            if digit != last_digit:
                result.append(digit)
                last_digit = digit

    encoded = "".join(result).replace("0", "")
    return encoded or "0"


def generate_metaphone(value: str) -> str:
    """
    Generate a simplified Metaphone code for a value.

    Args:
        value: Input string

    Returns:
        Code of at most six characters, or empty string
    """
    if not value:
        return ""

    text = _letters_only(value)
    if not text:
        return ""

    for pattern, replacement in _METAPHONE_SUBSTITUTIONS:
        text = pattern.sub(replacement, text, count=1)

    result = ""
    for i, char in enumerate(text):
        if len(result) >= _METAPHONE_MAX_LENGTH:
            break
        if char in "AEIOU":
            if i == 0:
                result += "A"
        else:
            result += _METAPHONE_CODES.get(char, "")

    return result[:_METAPHONE_MAX_LENGTH]
