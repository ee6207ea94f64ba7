"""
Unit tests for version parsing and comparison.
"""

import pytest

from configkit.core.version import (
    SUPPORTED_API_VERSIONS,
    ToolVersion,
    VersionError,
    api_version,
    is_supported_api,
    meets_minimum,
)


class TestToolVersionParse:
    """Test ToolVersion.parse."""

    def test_dotted(self):
        """Test plain dotted version."""
        assert ToolVersion.parse("4.4.5").parts == (4, 4, 5)

    def test_non_numeric_suffix_ignored(self):
        """Test a trailing svn marker is ignored."""
        assert ToolVersion.parse("2.9svn").parts == (2, 9)

    def test_prefix_ignored(self):
        """Test non-numeric prefixes are ignored."""
        assert ToolVersion.parse("v1.2").parts == (1, 2)

    def test_no_digits_raises(self):
        """Test text without digits is rejected."""
        with pytest.raises(VersionError):
            ToolVersion.parse("unknown")

    def test_str(self):
        """Test string form joins components."""
        assert str(ToolVersion.parse("gcc-4.1")) == "4.1"


class TestToolVersionSearch:
    """Test ToolVersion.search on tool output."""

    def test_bison_output(self):
        """Test version is found in bison --version output."""
        output = "bison (GNU Bison) 2.4.1\nWritten by Robert Corbett.\n"
        assert ToolVersion.search(output) == ToolVersion.parse("2.4.1")

    def test_dumpversion_output(self):
        """Test compiler -dumpversion output."""
        assert ToolVersion.search("4.4.5\n").parts == (4, 4, 5)

    def test_no_version(self):
        """Test output without a version."""
        assert ToolVersion.search("command not found") is None


class TestOrdering:
    """Test ordering of versions."""

    def test_prefix_sorts_first(self):
        """Test a strict prefix is smaller."""
        assert ToolVersion.parse("4") < ToolVersion.parse("4.1")

    def test_numeric_not_lexical(self):
        """Test components compare numerically."""
        assert ToolVersion.parse("2.10") > ToolVersion.parse("2.9")

    def test_equal_and_hashable(self):
        """Test equal versions hash equally."""
        assert len({ToolVersion.parse("2.8"), ToolVersion.parse("v2.8")}) == 1


class TestMeetsMinimum:
    """Test minimum version checks."""

    @pytest.mark.parametrize(
        "candidate,required,expected",
        [
            ("4.4.5", "4.1", True),
            ("4.1", "4.1", True),
            ("4.0.9", "4.1", False),
            ("5", "4.1", True),
            ("4", "4.1", False),
            ("2.3", "2.3", True),
            ("2.2.9", "2.3", False),
        ],
    )
    def test_cases(self, candidate, required, expected):
        """Test element-wise comparison where a missing component fails."""
        assert meets_minimum(candidate, required) is expected

    def test_accepts_tool_versions(self):
        """Test ToolVersion and tuple arguments."""
        assert meets_minimum(ToolVersion.parse("2.4.1"), (2, 3))


class TestApiVersion:
    """Test locator API identifiers."""

    def test_two_eight(self):
        """Test 2.8 maps to 208."""
        assert api_version("2.8") == 208

    def test_two_digit_minor(self):
        """Test minor is zero-padded to two digits."""
        assert api_version("2.10") == 210

    def test_patch_ignored(self):
        """Test components after minor are ignored."""
        assert api_version("2.9.1") == 209

    def test_single_component(self):
        """Test a bare major version has no identifier."""
        assert api_version("3") is None

    def test_supported_set_is_exact(self):
        """Test only 2.8 and 2.9 are supported."""
        assert SUPPORTED_API_VERSIONS == {208, 209}
        assert is_supported_api(208)
        assert is_supported_api(209)
        assert not is_supported_api(207)
        assert not is_supported_api(210)
        assert not is_supported_api(None)
