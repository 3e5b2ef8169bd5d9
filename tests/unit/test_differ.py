"""Unit tests for record differ functionality."""

from __future__ import annotations

import numpy as np

from pyjjm.comparison.differ import (
    DiffItem,
    DiffType,
    RecordDiff,
    arrays_equal,
    diff_records,
    records_equal,
)
from pyjjm.core.records import DataRecord


class TestDiffItem:
    def test_repr(self) -> None:
        assert repr(DiffItem("a", DiffType.ADDED, new_value=1)) == "+ a: 1"
        assert repr(DiffItem("a", DiffType.REMOVED, old_value=1)) == "- a: 1"
        assert repr(DiffItem("a", DiffType.MODIFIED, 1, 2)) == "~ a: 1 -> 2"


class TestArraysEqual:
    def test_equal(self) -> None:
        assert arrays_equal(np.array([1.0, 2.0]), np.array([1.0, 2.0]))

    def test_nan_equal(self) -> None:
        assert arrays_equal(np.array([np.nan]), np.array([np.nan]))

    def test_dtype_kind_differs(self) -> None:
        assert not arrays_equal(np.array([1, 2]), np.array([1.0, 2.0]))

    def test_shape_differs(self) -> None:
        assert not arrays_equal(np.zeros((2, 1)), np.zeros(2))

    def test_tolerance(self) -> None:
        a = np.array([1.0, 2.0])
        assert not arrays_equal(a, a + 1e-9)
        assert arrays_equal(a, a + 1e-9, tolerance=1e-6)

    def test_non_array(self) -> None:
        assert not arrays_equal([1.0], np.array([1.0]))


class TestRecordDiff:
    def test_identical(self) -> None:
        diff = RecordDiff.compare({"a": 1, "b": np.arange(3)}, {"a": 1, "b": np.arange(3)})
        assert diff.is_identical
        assert len(diff) == 0

    def test_added_removed_modified(self) -> None:
        diff = RecordDiff.compare({"a": 1, "b": 2}, {"a": 3, "c": 4})
        by_path = {item.path: item.diff_type for item in diff}
        assert by_path == {
            "a": DiffType.MODIFIED,
            "b": DiffType.REMOVED,
            "c": DiffType.ADDED,
        }

    def test_nested_blocks(self) -> None:
        old = {"stocks": ({"stockName": "N", "Pwtatage": np.array([1.0])},)}
        new = {"stocks": ({"stockName": "N", "Pwtatage": np.array([2.0])},)}
        diff = RecordDiff.compare(old, new)
        assert [item.path for item in diff] == ["stocks[1].Pwtatage"]

    def test_block_count(self) -> None:
        diff = RecordDiff.compare({"s": ({"x": 1},)}, {"s": ({"x": 1}, {"x": 2})})
        assert [item.path for item in diff] == ["s.length"]

    def test_int_float_scalars_differ(self) -> None:
        assert not RecordDiff.compare({"n": 2}, {"n": 2.0}).is_identical


class TestDiffRecords:
    def test_version_difference_reported_first(self, legacy_data, ms_data) -> None:
        diff = diff_records(legacy_data, ms_data)
        assert diff.items[0].path == "version"
        assert any(item.path == "Pwtatage" for item in diff)

    def test_records_equal(self, ms_data) -> None:
        copy = DataRecord(version=ms_data.version, fields=ms_data.to_dict())
        assert records_equal(ms_data, copy)
        fields = ms_data.to_dict()
        fields["Fcaton"][1, 2] += 1.0
        assert not records_equal(ms_data, DataRecord(version="2015MS", fields=fields))
