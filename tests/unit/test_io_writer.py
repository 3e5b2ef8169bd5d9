"""Unit tests for the structured JJM writer."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import numpy as np
import pytest

from pyjjm.core.exceptions import IncompleteRecordError, ValidationError, VersionMismatchError
from pyjjm.core.version import FileKind, FormatVersion
from pyjjm.io.grammar import LEGACY_DATA, MS_CONTROL, MS_DATA
from pyjjm.io.parser import parse_file
from pyjjm.io.writer import StructuredWriter, validate_record, write, write_record


class TestValidateRecord:
    def test_valid_records(self, ms_control, ms_data, legacy_data) -> None:
        validate_record(ms_control, MS_CONTROL)
        validate_record(ms_data, MS_DATA)
        validate_record(legacy_data, LEGACY_DATA)

    def test_missing_fields(self, ms_data) -> None:
        fields = ms_data.to_dict()
        del fields["Fcaton"]
        del fields["fisheries"][1]["Fwtatage"]
        with pytest.raises(IncompleteRecordError) as exc_info:
            validate_record(fields, MS_DATA)
        assert exc_info.value.missing == ["Fcaton", "fisheries[2].Fwtatage"]

    def test_none_counts_as_missing(self, ms_data) -> None:
        fields = ms_data.to_dict()
        fields["Pspwn"] = None
        with pytest.raises(IncompleteRecordError, match="Pspwn"):
            validate_record(fields, MS_DATA)

    def test_wrong_shape(self, ms_data) -> None:
        fields = ms_data.to_dict()
        fields["Fcaton"] = np.zeros((2, 3))
        with pytest.raises(ValidationError) as exc_info:
            validate_record(fields, MS_DATA)
        assert any("Fcaton" in e and "(2, 10)" in e for e in exc_info.value.errors)

    def test_wrong_block_count(self, ms_control) -> None:
        fields = ms_control.to_dict()
        fields["stocks"].append(dict(fields["stocks"][0]))
        with pytest.raises(ValidationError) as exc_info:
            validate_record(fields, MS_CONTROL)
        assert any("expected 2 blocks" in e for e in exc_info.value.errors)

    def test_wrong_name_count(self, ms_data) -> None:
        fields = ms_data.to_dict()
        fields["Fnames"] = ["only_one"]
        with pytest.raises(ValidationError):
            validate_record(fields, MS_DATA)

    def test_float_in_int_field(self, ms_data) -> None:
        fields = ms_data.to_dict()
        fields["Fnum"] = 2.0
        with pytest.raises(ValidationError, match="error"):
            validate_record(fields, MS_DATA)

    def test_float_array_in_int_field(self, ms_data) -> None:
        fields = ms_data.to_dict()
        fields["years"] = np.array([2000.0, 2009.0])
        with pytest.raises(ValidationError) as exc_info:
            validate_record(fields, MS_DATA)
        assert any("years" in e for e in exc_info.value.errors)

    def test_int_in_float_field(self, ms_data) -> None:
        fields = ms_data.to_dict()
        fields["Pspwn"] = 6
        with pytest.raises(ValidationError) as exc_info:
            validate_record(fields, MS_DATA)
        assert exc_info.value.errors == ["Pspwn: expected float, got int"]

    def test_int_array_in_float_field(self, ms_data) -> None:
        fields = ms_data.to_dict()
        fields["Fcaton"] = np.ones((2, 10), dtype=np.int64)
        with pytest.raises(ValidationError) as exc_info:
            validate_record(fields, MS_DATA)
        assert any("Fcaton" in e for e in exc_info.value.errors)

    def test_empty_array_checked_for_kind(self, ms_control) -> None:
        fields = ms_control.to_dict()
        fields["Fsel"][0]["Fselchangeyears"] = np.array([])
        with pytest.raises(ValidationError) as exc_info:
            validate_record(fields, MS_CONTROL)
        assert any("Fselchangeyears" in e for e in exc_info.value.errors)

    def test_unsigned_array_in_int_field(self, ms_data) -> None:
        fields = ms_data.to_dict()
        fields["years"] = np.array([2000, 2009], dtype=np.uint32)
        with pytest.raises(ValidationError):
            validate_record(fields, MS_DATA)

    def test_unwritable_names(self, ms_data) -> None:
        fields = ms_data.to_dict()
        fields["Fnames"] = ["N%Chile", "Offshore"]
        with pytest.raises(ValidationError):
            validate_record(fields, MS_DATA)

    def test_multiline_text(self, ms_control) -> None:
        fields = ms_control.to_dict()
        fields["modelName"] = "two\nlines"
        with pytest.raises(ValidationError):
            validate_record(fields, MS_CONTROL)


class TestStructuredWriter:
    def test_render_labels_every_field(self, ms_data) -> None:
        text = StructuredWriter(MS_DATA).render(ms_data)
        lines = text.splitlines()
        assert lines[0] == "# JJM data file (multi-stock)"
        assert "#years  first and last year" in lines
        assert lines[lines.index("#years  first and last year") + 1] == "2000 2009"
        assert "#Fnames  fishery names" in lines
        assert "N_Chile%SC_Chile_PS" in lines
        assert "# ---- fisheries 2 of 2 ----" in lines

    def test_header_with_timestamp(self, ms_control) -> None:
        text = StructuredWriter(MS_CONTROL).render(ms_control, generated=datetime(2024, 5, 1, 12, 0))
        assert "# Model: ms" in text
        assert "# Format: 2015MS" in text
        assert "# Generated by pyjjm on 2024-05-01 12:00:00" in text

    def test_render_is_deterministic(self, ms_control) -> None:
        writer = StructuredWriter(MS_CONTROL)
        assert writer.render(ms_control) == writer.render(ms_control)

    def test_wrong_grammar_for_record(self, legacy_data, ms_data) -> None:
        with pytest.raises(VersionMismatchError):
            StructuredWriter(MS_DATA).render(legacy_data)
        with pytest.raises(VersionMismatchError):
            StructuredWriter(MS_CONTROL).render(ms_data)

    def test_plain_mapping_accepted(self, ms_data) -> None:
        writer = StructuredWriter(MS_DATA)
        assert writer.render(ms_data.to_dict()) == writer.render(ms_data)


class TestWrite:
    def test_write_record_round_trip(self, tmp_path: Path, ms_control) -> None:
        path = write_record(ms_control, tmp_path / "config" / "ms.ctl")
        assert path.exists()
        assert parse_file(path, FileKind.CONTROL, FormatVersion.MS) == ms_control

    def test_incomplete_record_creates_no_file(self, tmp_path: Path, ms_data) -> None:
        fields = ms_data.to_dict()
        del fields["Pageerr"]
        path = tmp_path / "out.dat"
        with pytest.raises(IncompleteRecordError):
            write(fields, MS_DATA, path)
        assert not path.exists()
        assert list(tmp_path.iterdir()) == []

    def test_invalid_record_leaves_existing_file(self, tmp_path: Path, ms_data) -> None:
        path = tmp_path / "out.dat"
        path.write_text("previous contents\n")
        fields = ms_data.to_dict()
        fields["Fcaton"] = np.zeros((1, 1))
        with pytest.raises(ValidationError):
            write(fields, MS_DATA, path)
        assert path.read_text() == "previous contents\n"

    def test_written_files_identical(self, tmp_path: Path, legacy_data) -> None:
        first = write_record(legacy_data, tmp_path / "a.dat")
        second = write_record(legacy_data, tmp_path / "b.dat")
        assert first.read_bytes() == second.read_bytes()
