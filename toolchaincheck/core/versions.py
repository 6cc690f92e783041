"""
Dotted numeric version parsing and ordering.

Both toolchain versions ("4.0", "3.5") and host versions ("4.3.1") use this
type, so the two axes share one total order: components are compared as an
integer tuple, and a shorter prefix sorts before a longer one
(``4.0 < 4.0.0``).
"""

import re
from typing import Tuple, Union

from toolchaincheck.core.exceptions import InvalidVersionError

_VERSION_RE = re.compile(r"^\d+(?:[.-]\d+)*$")


class Version:
    """
    Dotted numeric version parser and comparator.

    Example:
        >>> Version("3.6.3") <= Version("3.6.3")
        True
        >>> Version("4.0") < Version("4.0.0")
        True
    """

    __slots__ = ("original", "components")

    def __init__(self, version_string: str):
        """
        Parse version string.

        Args:
            version_string: Version such as "4.0", "3.6.3" or "v4.3.1"

        Raises:
            InvalidVersionError: If version format is invalid
        """
        self.original = str(version_string)
        self.components = self._parse(self.original)

    @classmethod
    def coerce(cls, value: Union["Version", str]) -> "Version":
        """Return ``value`` as a Version, parsing strings."""
        if isinstance(value, Version):
            return value
        return cls(value)

    def _parse(self, version_string: str) -> Tuple[int, ...]:
        text = version_string.strip()
        if text[:1] in ("v", "V"):
            text = text[1:]

        if not _VERSION_RE.match(text):
            raise InvalidVersionError(
                f"Invalid version format: {version_string!r}. "
                f"Expected dotted integers such as 4.0 or 3.6.3"
            )

        return tuple(int(part) for part in re.split(r"[.-]", text))

    @property
    def major_minor(self) -> str:
        """First two components as text (e.g., '4.3' for 4.3.1)."""
        return ".".join(str(c) for c in self.components[:2])

    def __lt__(self, other: "Version") -> bool:
        return self.components < other.components

    def __le__(self, other: "Version") -> bool:
        return self.components <= other.components

    def __gt__(self, other: "Version") -> bool:
        return self.components > other.components

    def __ge__(self, other: "Version") -> bool:
        return self.components >= other.components

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.components == other.components

    def __ne__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.components != other.components

    def __hash__(self) -> int:
        return hash(self.components)

    def __str__(self) -> str:
        return ".".join(str(c) for c in self.components)

    def __repr__(self) -> str:
        return f"Version('{self}')"


__all__ = ["Version"]
