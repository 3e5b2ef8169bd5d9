"""Record comparison tools for JJM models."""

from __future__ import annotations

from pyjjm.comparison.differ import (
    DiffItem,
    DiffType,
    RecordDiff,
    arrays_equal,
    diff_records,
    records_equal,
)

__all__ = [
    "DiffItem",
    "DiffType",
    "RecordDiff",
    "arrays_equal",
    "diff_records",
    "records_equal",
]
