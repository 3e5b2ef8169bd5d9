"""
Record differ for comparing JJM structured records.

This module compares the nested field mappings produced by the structured
parser (scalars, numpy vectors and matrices, name lists and repeated
blocks) and reports the differences as a flat list of items.  Record
equality is defined on top of it.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import numpy as np


class DiffType(Enum):
    """Type of difference detected."""

    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"


@dataclass
class DiffItem:
    """
    A single difference item.

    Attributes:
        path: Path to the differing item (e.g., 'stocks[2].Pwtatage')
        diff_type: Type of difference (added, removed, modified)
        old_value: Original value (None if added)
        new_value: New value (None if removed)
    """

    path: str
    diff_type: DiffType
    old_value: Any = None
    new_value: Any = None

    def __repr__(self) -> str:
        if self.diff_type == DiffType.ADDED:
            return f"+ {self.path}: {self.new_value}"
        elif self.diff_type == DiffType.REMOVED:
            return f"- {self.path}: {self.old_value}"
        else:
            return f"~ {self.path}: {self.old_value} -> {self.new_value}"


@dataclass
class RecordDiff:
    """
    Difference between two field mappings.

    Attributes:
        items: List of difference items
    """

    items: list[DiffItem] = field(default_factory=list)

    @property
    def is_identical(self) -> bool:
        """Check if the records are identical."""
        return len(self.items) == 0

    def __iter__(self) -> Iterator[DiffItem]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    @classmethod
    def compare(
        cls,
        fields1: Mapping[str, Any],
        fields2: Mapping[str, Any],
        tolerance: float = 0.0,
    ) -> RecordDiff:
        """
        Compare two field mappings.

        Args:
            fields1: First mapping (original)
            fields2: Second mapping (modified)
            tolerance: Absolute tolerance for float arrays; 0 means exact

        Returns:
            RecordDiff containing all differences
        """
        diff = cls()
        _diff_mapping(fields1, fields2, "", tolerance, diff.items)
        return diff


def _join(prefix: str, name: str) -> str:
    return f"{prefix}.{name}" if prefix else name


def _diff_mapping(
    m1: Mapping[str, Any],
    m2: Mapping[str, Any],
    prefix: str,
    tolerance: float,
    items: list[DiffItem],
) -> None:
    for name in m1:
        if name not in m2:
            items.append(DiffItem(_join(prefix, name), DiffType.REMOVED, old_value=m1[name]))
    for name in m2:
        if name not in m1:
            items.append(DiffItem(_join(prefix, name), DiffType.ADDED, new_value=m2[name]))
    for name in m1:
        if name in m2:
            _diff_value(m1[name], m2[name], _join(prefix, name), tolerance, items)


def _diff_value(
    v1: Any,
    v2: Any,
    path: str,
    tolerance: float,
    items: list[DiffItem],
) -> None:
    if isinstance(v1, Mapping) and isinstance(v2, Mapping):
        _diff_mapping(v1, v2, path, tolerance, items)
        return

    if isinstance(v1, np.ndarray) or isinstance(v2, np.ndarray):
        if not arrays_equal(v1, v2, tolerance):
            items.append(DiffItem(path, DiffType.MODIFIED, old_value=v1, new_value=v2))
        return

    if _is_block_list(v1) and _is_block_list(v2):
        if len(v1) != len(v2):
            items.append(
                DiffItem(f"{path}.length", DiffType.MODIFIED, old_value=len(v1), new_value=len(v2))
            )
            return
        for i, (b1, b2) in enumerate(zip(v1, v2)):
            _diff_mapping(b1, b2, f"{path}[{i + 1}]", tolerance, items)
        return

    if type(v1) is not type(v2) or v1 != v2:
        items.append(DiffItem(path, DiffType.MODIFIED, old_value=v1, new_value=v2))


def _is_block_list(value: Any) -> bool:
    return (
        isinstance(value, Sequence)
        and not isinstance(value, str)
        and all(isinstance(v, Mapping) for v in value)
    )


def arrays_equal(a: Any, b: Any, tolerance: float = 0.0) -> bool:
    """Compare two arrays by shape, dtype kind and values."""
    if not isinstance(a, np.ndarray) or not isinstance(b, np.ndarray):
        return False
    if a.shape != b.shape or a.dtype.kind != b.dtype.kind:
        return False
    if tolerance > 0 and a.dtype.kind == "f":
        return bool(np.allclose(a, b, rtol=0.0, atol=tolerance, equal_nan=True))
    if a.dtype.kind == "f":
        return bool(np.array_equal(a, b, equal_nan=True))
    return bool(np.array_equal(a, b))


def diff_records(a: Any, b: Any, tolerance: float = 0.0) -> RecordDiff:
    """Compare two records (or plain field mappings) structurally.

    The record version is compared as a pseudo-field named ``version``.
    """
    fields1 = getattr(a, "fields", a)
    fields2 = getattr(b, "fields", b)
    diff = RecordDiff.compare(fields1, fields2, tolerance)
    version1 = getattr(a, "version", None)
    version2 = getattr(b, "version", None)
    if version1 != version2:
        diff.items.insert(
            0, DiffItem("version", DiffType.MODIFIED, old_value=version1, new_value=version2)
        )
    return diff


def records_equal(a: Any, b: Any) -> bool:
    """Return ``True`` if two records have identical fields and version."""
    return diff_records(a, b).is_identical
