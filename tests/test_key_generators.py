"""
Unit tests for blocking key generators and the dispatcher.
"""

import pytest
import sys
from pathlib import Path

# Add project root to path
sys.path.append(str(Path(__file__).parent.parent))

from recordblock.blocking.key_generators import (
    generate_composite_keys,
    generate_keys_for_value,
    generate_ngram_keys,
    generate_prefix_key,
    generate_suffix_key,
)
from recordblock.blocking.models import BlockingMethod, BlockingOptions


class TestPrefixSuffix:
    """Test cases for fixed-length prefix and suffix keys."""

    def test_prefix_padding(self):
        """Test short values are right-padded."""
        assert generate_prefix_key("Ab", 4) == "Ab__"
        assert generate_prefix_key("", 3) == "___"

    def test_prefix_removes_whitespace(self):
        """Test internal whitespace is removed before slicing."""
        assert generate_prefix_key("New York", 4) == "NewY"

    def test_suffix_padding(self):
        """Test short values are left-padded."""
        assert generate_suffix_key("Ab", 4) == "__Ab"
        assert generate_suffix_key("Berlin", 3) == "lin"
        assert generate_suffix_key("Bad Ems", 4) == "dEms"

    @pytest.mark.parametrize("value", ["", "a", "Ab", "Schmidt", "Frankfurt am Main"])
    @pytest.mark.parametrize("n", [1, 2, 3, 4, 6, 10])
    def test_fixed_length(self, value, n):
        """Test keys always have the requested length."""
        assert len(generate_prefix_key(value, n)) == n
        assert len(generate_suffix_key(value, n)) == n


class TestNgram:
    """Test cases for n-gram keys."""

    def test_berlin_trigrams(self):
        """Test trigrams of a single word."""
        assert set(generate_ngram_keys("Berlin", 3)) == {"Ber", "erl", "rli", "lin"}

    def test_deduplicated(self):
        """Test repeated n-grams are emitted once, in first-seen order."""
        assert generate_ngram_keys("aaaa", 2) == ["aa"]
        assert generate_ngram_keys("abab", 2) == ["ab", "ba"]

    def test_whitespace_removed(self):
        """Test n-grams span word boundaries."""
        assert generate_ngram_keys("a bc", 3) == ["abc"]

    def test_short_value(self):
        """Test values shorter than n yield themselves."""
        assert generate_ngram_keys("ab", 3) == ["ab"]
        assert generate_ngram_keys("", 3) == []


class TestComposite:
    """Test cases for composite keys."""

    def test_union_of_methods(self):
        """Test prefix, Soundex and Cologne Phonetic are combined."""
        assert generate_composite_keys("meyer") == ["mey", "M600", "67"]

    def test_empty_codes_dropped(self):
        """Test empty phonetic codes are filtered out."""
        assert generate_composite_keys("123") == ["123"]


class TestDispatcher:
    """Test cases for generate_keys_for_value."""

    def test_exact_normalizes_and_lowercases(self):
        """Test default options normalize and case-fold."""
        assert generate_keys_for_value("Müller", BlockingMethod.EXACT) == ["muller"]

    def test_case_sensitive(self):
        """Test case folding can be disabled."""
        options = BlockingOptions(case_insensitive=False)
        assert generate_keys_for_value("Müller", BlockingMethod.EXACT, options) == ["Muller"]

    def test_normalization_opt_out(self):
        """Test raw values pass through when normalization is off."""
        options = BlockingOptions(normalize=False, case_insensitive=False)
        assert generate_keys_for_value("Müller!", BlockingMethod.NORMALIZED, options) == ["Müller!"]

    def test_method_as_string(self):
        """Test method names are accepted as strings."""
        assert generate_keys_for_value("Meyer", "cologne_phonetic") == ["67"]

    def test_prefix_options(self):
        """Test prefix length option and default."""
        assert generate_keys_for_value("Schmidt", BlockingMethod.PREFIX) == ["sch"]
        options = BlockingOptions(prefix_length=5)
        assert generate_keys_for_value("Schmidt", BlockingMethod.PREFIX, options) == ["schmi"]

    def test_invalid_length_uses_default(self):
        """Test non-positive lengths fall back to the default."""
        options = BlockingOptions(prefix_length=0, suffix_length=-2)
        assert generate_keys_for_value("Schmidt", BlockingMethod.PREFIX, options) == ["sch"]
        assert generate_keys_for_value("Schmidt", BlockingMethod.SUFFIX, options) == ["idt"]

    def test_ngram(self):
        """Test n-gram dispatch with size option."""
        options = BlockingOptions(ngram_size=4)
        assert generate_keys_for_value("Berlin", BlockingMethod.NGRAM, options) == ["berl", "erli", "rlin"]

    def test_phonetic_methods(self):
        """Test Soundex and Metaphone dispatch."""
        assert generate_keys_for_value("Robert", BlockingMethod.SOUNDEX) == ["R163"]
        assert generate_keys_for_value("Thomas", BlockingMethod.METAPHONE) == ["MS"]

    def test_unknown_method_falls_back(self):
        """Test unknown methods return the processed value."""
        assert generate_keys_for_value("Müller GmbH", "double_metaphone") == ["muller gmbh"]

    def test_empty_values_produce_no_keys(self):
        """Test values that normalize to nothing produce no keys."""
        assert generate_keys_for_value("", BlockingMethod.PREFIX) == []
        assert generate_keys_for_value("?!", BlockingMethod.EXACT) == []
        assert generate_keys_for_value("   ", BlockingMethod.COMPOSITE) == []

    def test_phonetic_without_letters(self):
        """Test a digits-only value produces no phonetic key."""
        assert generate_keys_for_value("4711", BlockingMethod.SOUNDEX) == []


if __name__ == "__main__":
    pytest.main([__file__])
