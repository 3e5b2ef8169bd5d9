"""
Format versions of JJM model files.

JJM files come in two grammars: the legacy single-stock layout used up to
the 2014 assessments and the multi-stock (``2015MS``) layout.  The version
is selected once when a file is opened and drives grammar selection, field
layout and which diagnostics fields are populated.
"""

from __future__ import annotations

from enum import Enum

from pyjjm.core.exceptions import VersionMismatchError


class FileKind(Enum):
    """Kind of structured JJM input file."""

    CONTROL = "control"
    DATA = "data"


class FormatVersion(Enum):
    """Known JJM file format versions."""

    LEGACY = "2014"
    MS = "2015MS"

    @property
    def is_multi_stock(self) -> bool:
        return self is FormatVersion.MS

    @classmethod
    def from_tag(cls, tag: str | FormatVersion) -> FormatVersion:
        """Return the version for a tag such as ``"2015MS"``.

        Raises
        ------
        VersionMismatchError
            If the tag names no known version.
        """
        if isinstance(tag, FormatVersion):
            return tag
        normalized = str(tag).strip().upper()
        for member in cls:
            if member.value.upper() == normalized or member.name == normalized:
                return member
        raise VersionMismatchError(
            f"Unknown JJM format version: {tag!r}. "
            f"Available: {[m.value for m in cls]}",
            found=str(tag),
        )

    def __str__(self) -> str:
        return self.value


DEFAULT_VERSION = FormatVersion.MS
