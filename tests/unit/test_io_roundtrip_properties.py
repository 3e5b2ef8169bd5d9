"""Property-based tests for parse/write roundtrip consistency using Hypothesis."""

from __future__ import annotations

import string

import numpy as np
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from pyjjm.comparison.differ import diff_records
from pyjjm.core.exceptions import ValidationError, VersionMismatchError
from pyjjm.core.records import ControlRecord, DataRecord
from pyjjm.core.version import FormatVersion
from pyjjm.io.grammar import get_grammar
from pyjjm.io.parser import parse_lines
from pyjjm.io.writer import StructuredWriter, validate_record
from pyjjm.sample_models import create_sample_control, create_sample_data

# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

any_finite_float = st.floats(allow_nan=False, allow_infinity=False)
versions = st.sampled_from(list(FormatVersion))
names = st.text(alphabet=string.ascii_letters + string.digits + "_.-", min_size=1, max_size=12)


@st.composite
def data_record_strategy(draw: st.DrawFn) -> DataRecord:
    """Generate a data record with random dimensions, names and catches."""
    version = draw(versions)
    first_year = draw(st.integers(min_value=1950, max_value=2020))
    n_years = draw(st.integers(min_value=1, max_value=6))
    first_age = draw(st.integers(min_value=0, max_value=2))
    n_ages = draw(st.integers(min_value=1, max_value=5))
    fisheries = draw(st.lists(names, min_size=1, max_size=3))
    indices = draw(st.lists(names, min_size=0, max_size=3))

    record = create_sample_data(
        version,
        years=(first_year, first_year + n_years - 1),
        ages=(first_age, first_age + n_ages - 1),
        fishery_names=fisheries,
        index_names=indices,
        seed=draw(st.integers(min_value=0, max_value=2**16)),
    )
    fields = record.to_dict()
    catch = draw(
        st.lists(any_finite_float, min_size=len(fisheries) * n_years, max_size=len(fisheries) * n_years)
    )
    fields["Fcaton"] = np.array(catch, dtype=np.float64).reshape(len(fisheries), n_years)
    fields["Pspwn"] = draw(any_finite_float)
    return DataRecord(version=version, fields=fields)


@st.composite
def control_record_strategy(draw: st.DrawFn) -> ControlRecord:
    """Generate a control record with random stocks and selectivity blocks."""
    version = draw(versions)
    n_stock = draw(st.integers(min_value=1, max_value=4))
    n_ages = draw(st.integers(min_value=1, max_value=6))
    record = create_sample_control(
        version,
        n_stock=n_stock,
        model_name=draw(names),
        data_file=draw(names) + ".dat",
        ages=(1, n_ages),
        fishery_names=draw(st.lists(names, min_size=1, max_size=4)),
        index_names=draw(st.lists(names, min_size=0, max_size=4)),
    )
    fields = record.to_dict()
    fields["Fmult"] = np.array(draw(st.lists(any_finite_float, min_size=3, max_size=3)))
    if version.is_multi_stock:
        stock_names = draw(st.lists(names, min_size=n_stock, max_size=n_stock))
        for block, name in zip(fields["stocks"], stock_names):
            block["stockName"] = name
            block["Pwtatage"] = np.array(
                draw(st.lists(any_finite_float, min_size=n_ages, max_size=n_ages))
            )
    return ControlRecord(version=version, fields=fields)


def _round_trip(record):
    grammar = get_grammar(record.kind, record.version)
    text = StructuredWriter(grammar).render(record)
    return text, parse_lines(text.splitlines(), record.kind, record.version)


# ---------------------------------------------------------------------------
# Property tests
# ---------------------------------------------------------------------------


@pytest.mark.property
class TestRoundTripProperties:
    """Writing then parsing returns an equal record."""

    @given(record=data_record_strategy())
    @settings(max_examples=30, deadline=None)
    def test_data_round_trip(self, record: DataRecord) -> None:
        _, parsed = _round_trip(record)
        diff = diff_records(record, parsed)
        assert diff.is_identical, list(diff)

    @given(record=control_record_strategy())
    @settings(max_examples=30, deadline=None)
    def test_control_round_trip(self, record: ControlRecord) -> None:
        _, parsed = _round_trip(record)
        assert parsed == record
        assert parsed.n_stock == record.n_stock
        assert parsed.stock_names == record.stock_names

    @given(record=control_record_strategy())
    @settings(max_examples=20, deadline=None)
    def test_write_is_deterministic(self, record: ControlRecord) -> None:
        first, parsed = _round_trip(record)
        second, _ = _round_trip(parsed)
        assert first == second


@pytest.mark.property
class TestVersionIsolationProperties:
    """A file written for one version never parses under the other."""

    @given(record=st.one_of(data_record_strategy(), control_record_strategy()))
    @settings(max_examples=20, deadline=None)
    def test_other_version_rejected(self, record) -> None:
        text, _ = _round_trip(record)
        other = next(v for v in FormatVersion if v is not record.version)
        with pytest.raises(VersionMismatchError):
            parse_lines(text.splitlines(), record.kind, other)


@pytest.mark.property
class TestFloatFieldProperties:
    """Integer values in float fields are rejected before writing."""

    @given(
        record=data_record_strategy(),
        spawn=st.integers(min_value=-100, max_value=100),
    )
    @settings(max_examples=20, deadline=None)
    def test_int_scalar_rejected(self, record: DataRecord, spawn: int) -> None:
        fields = record.to_dict()
        fields["Pspwn"] = spawn
        with pytest.raises(ValidationError) as exc_info:
            validate_record(fields, get_grammar(record.kind, record.version))
        assert exc_info.value.errors == ["Pspwn: expected float, got int"]

    @given(
        record=control_record_strategy(),
        fmult=st.lists(st.integers(min_value=0, max_value=5), min_size=3, max_size=3),
    )
    @settings(max_examples=20, deadline=None)
    def test_int_array_rejected(self, record: ControlRecord, fmult: list[int]) -> None:
        fields = record.to_dict()
        fields["Fmult"] = np.array(fmult, dtype=np.int64)
        with pytest.raises(ValidationError) as exc_info:
            validate_record(fields, get_grammar(record.kind, record.version))
        assert any(e.startswith("Fmult:") for e in exc_info.value.errors)

    @given(record=data_record_strategy(), spawn=st.integers(min_value=-100, max_value=100))
    @settings(max_examples=20, deadline=None)
    def test_integral_float_round_trips(self, record: DataRecord, spawn: int) -> None:
        fields = record.to_dict()
        fields["Pspwn"] = float(spawn)
        record = DataRecord(version=record.version, fields=fields)
        _, parsed = _round_trip(record)
        assert parsed == record
        assert type(parsed["Pspwn"]) is float
