"""
Loose version parsing and comparison.

Build tools and the toolkit locator report versions in free-form text
("gcc (GCC) 4.4.5", "bison (GNU Bison) 2.4.1", "2.9svn"). This module turns
such text into ordered integer tuples and gates acceptance on them.

Unlike semantic-version comparison, a missing trailing component never counts
as zero when checking a minimum: "4" does not satisfy "4.1".

Usage:
    from configkit.core.version import ToolVersion, meets_minimum

    found = ToolVersion.search("gcc (GCC) 4.4.5")
    if not meets_minimum(found, ToolVersion.parse("4.1")):
        ...
"""

import functools
import re
from typing import Optional, Sequence, Tuple, Union

_DIGITS = re.compile(r"\d+")
_VERSION_TOKEN = re.compile(r"\d+(?:\.\d+)*")

# Locator API identifiers (major * 100 + minor) this build supports.
SUPPORTED_API_VERSIONS = frozenset({208, 209})


class VersionError(ValueError):
    """Raised when text contains no version digits at all."""

    pass


@functools.total_ordering
class ToolVersion:
    """
    Ordered tuple of non-negative integers parsed from a version string.

    Ordering is lexicographic by component, so a strict prefix sorts first:
    ToolVersion.parse("4") < ToolVersion.parse("4.1").

    Example:
        >>> ToolVersion.parse("2.9svn").parts
        (2, 9)
        >>> ToolVersion.parse("4") < ToolVersion.parse("4.1")
        True
    """

    __slots__ = ("parts", "original")

    def __init__(self, parts: Sequence[int], original: str = ""):
        self.parts: Tuple[int, ...] = tuple(int(p) for p in parts)
        self.original = original or ".".join(str(p) for p in self.parts)

    @classmethod
    def parse(cls, text: str) -> "ToolVersion":
        """
        Extract every digit group of text, in order.

        Separators and non-numeric prefixes/suffixes are ignored.

        Args:
            text: Free-form version string (e.g. "2.8", "v4.1.2", "2.9svn")

        Returns:
            ToolVersion instance

        Raises:
            VersionError: If text contains no digits
        """
        groups = _DIGITS.findall(text or "")
        if not groups:
            raise VersionError(f"No version number in: {text!r}")
        return cls([int(g) for g in groups], text.strip())

    @classmethod
    def search(cls, output: str) -> Optional["ToolVersion"]:
        """
        Find the first version-looking token in tool output and parse it.

        Args:
            output: Output of a tool's version flag

        Returns:
            ToolVersion, or None if output holds no digits
        """
        match = _VERSION_TOKEN.search(output or "")
        if not match:
            return None
        return cls.parse(match.group(0))

    def __len__(self) -> int:
        return len(self.parts)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ToolVersion):
            return NotImplemented
        return self.parts == other.parts

    def __lt__(self, other: "ToolVersion") -> bool:
        if not isinstance(other, ToolVersion):
            return NotImplemented
        return self.parts < other.parts

    def __hash__(self) -> int:
        return hash(self.parts)

    def __str__(self) -> str:
        return ".".join(str(p) for p in self.parts)

    def __repr__(self) -> str:
        return f"ToolVersion('{self}')"


def _coerce(version: Union[str, Sequence[int], ToolVersion]) -> ToolVersion:
    if isinstance(version, ToolVersion):
        return version
    if isinstance(version, str):
        return ToolVersion.parse(version)
    return ToolVersion(version)


def meets_minimum(
    candidate: Union[str, Sequence[int], ToolVersion],
    required: Union[str, Sequence[int], ToolVersion],
) -> bool:
    """
    Check that candidate satisfies a required minimum version.

    Components are compared left to right. The first strictly greater
    component succeeds, the first strictly smaller one fails, and a
    component missing from candidate fails.

    Args:
        candidate: Version that was found
        required: Minimum acceptable version

    Returns:
        True if candidate meets the minimum

    Example:
        >>> meets_minimum("4.4.5", "4.1")
        True
        >>> meets_minimum("4", "4.1")
        False
    """
    found = _coerce(candidate).parts
    needed = _coerce(required).parts

    for index, minimum in enumerate(needed):
        if index >= len(found):
            return False
        if found[index] > minimum:
            return True
        if found[index] < minimum:
            return False
    return True


def api_version(text: str) -> Optional[int]:
    """
    Convert a locator version string into its integer API identifier.

    "2.8" becomes 208 and "2.10" becomes 210. Text with fewer than two
    numeric components has no API identifier.

    Args:
        text: Output of the locator's --version flag

    Returns:
        Integer API identifier or None
    """
    try:
        parts = ToolVersion.parse(text).parts
    except VersionError:
        return None
    if len(parts) < 2:
        return None
    return int("%d%02d" % parts[:2])


def is_supported_api(identifier: Optional[int]) -> bool:
    """Check an API identifier against the supported set."""
    return identifier in SUPPORTED_API_VERSIONS
