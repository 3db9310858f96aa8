"""
Unit tests for value normalization.
"""

import pytest
import sys
from pathlib import Path

# Add project root to path
sys.path.append(str(Path(__file__).parent.parent))

from recordblock.normalize.value_normalizer import normalize, strip_diacritics


class TestNormalize:
    """Test cases for the value normalizer."""

    def test_strips_diacritics(self):
        """Test combining marks are removed."""
        assert normalize("Müller") == "Muller"
        assert normalize("Café") == "Cafe"
        assert strip_diacritics("Ångström") == "Angstrom"

    def test_sharp_s(self):
        """Test German sharp s becomes ss."""
        assert normalize("Straße") == "Strasse"
        assert normalize("Weiß") == "Weiss"

    def test_punctuation_removed(self):
        """Test non letter/digit characters are dropped."""
        assert normalize("O'Brien-Smith") == "OBrienSmith"
        assert normalize("foo_bar") == "foobar"
        assert normalize("ACME, Inc.") == "ACME Inc"
        assert normalize("DE 123/456") == "DE 123456"

    def test_whitespace_collapsed(self):
        """Test whitespace runs collapse and are trimmed."""
        assert normalize("  Hello,   World! ") == "Hello World"
        assert normalize("a\t\nb") == "a b"

    def test_empty_input(self):
        """Test empty and blank input yields empty string."""
        assert normalize("") == ""
        assert normalize("   ") == ""
        assert normalize("!!!") == ""
        assert normalize(None) == ""

    @pytest.mark.parametrize("value", [
        "Müller-Lüdenscheidt",
        "  Straße 12a, 50667 Köln ",
        "Ærøskøbing",
        "São Paulo",
        "x_y__z",
        "Ｆｕｌｌｗｉｄｔｈ",
        "naïve café",
        "",
    ])
    def test_idempotent(self, value):
        """Test normalizing twice equals normalizing once."""
        once = normalize(value)
        assert normalize(once) == once


if __name__ == "__main__":
    pytest.main([__file__])
