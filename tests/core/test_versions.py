"""
Tests for dotted version parsing and ordering.
"""

import pytest

from toolchaincheck.core.exceptions import InvalidVersionError
from toolchaincheck.core.versions import Version


class TestVersionParsing:
    """Test Version construction."""

    def test_two_components(self):
        """Test parsing a toolchain-style version."""
        version = Version("4.0")
        assert version.components == (4, 0)
        assert str(version) == "4.0"

    def test_three_components(self):
        """Test parsing a host-style version."""
        assert Version("3.6.3").components == (3, 6, 3)

    def test_leading_v_stripped(self):
        """Test 'v' prefix is accepted."""
        assert Version("v4.3.1") == Version("4.3.1")

    def test_dash_separator(self):
        """Test '-' separators are read as dots."""
        assert Version("3-3-0") == Version("3.3.0")

    @pytest.mark.parametrize("text", ["", "abc", "4.x", "4..0", "4.0-beta"])
    def test_invalid(self, text):
        """Test malformed versions raise InvalidVersionError."""
        with pytest.raises(InvalidVersionError):
            Version(text)

    def test_coerce(self):
        """Test coerce accepts strings and Versions."""
        version = Version("4.0")
        assert Version.coerce(version) is version
        assert Version.coerce("4.0") == version

    def test_major_minor(self):
        """Test major_minor truncates to two components."""
        assert Version("4.3.1").major_minor == "4.3"

    def test_repr(self):
        """Test repr shows normalized text."""
        assert repr(Version("v4.0")) == "Version('4.0')"


class TestVersionOrdering:
    """Test Version comparison."""

    def test_numeric_not_lexical(self):
        """Test components compare as integers."""
        assert Version("3.10") > Version("3.9")

    def test_prefix_sorts_first(self):
        """Test a shorter prefix is lower than its extension."""
        assert Version("4.0") < Version("4.0.0")
        assert Version("4.0") != Version("4.0.0")

    def test_inclusive_comparisons(self):
        """Test <= and >= hold at equality."""
        assert Version("3.6.3") <= Version("3.6.3")
        assert Version("3.6.3") >= Version("3.6.3")

    def test_hashable(self):
        """Test equal versions hash the same."""
        assert {Version("4.0"), Version("v4.0")} == {Version("4.0")}

    def test_not_equal_to_string(self):
        """Test Version does not compare equal to plain text."""
        assert Version("4.0") != "4.0"
