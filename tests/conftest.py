"""Pytest configuration and fixtures for pyjjm tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from pyjjm.core.records import ControlRecord, DataRecord, ModelRecord
from pyjjm.core.version import FormatVersion
from pyjjm.sample_models import (
    create_sample_control,
    create_sample_data,
    create_sample_model,
    write_sample_model,
)


def pytest_configure(config) -> None:
    config.addinivalue_line("markers", "property: Hypothesis property-based tests")


@pytest.fixture
def legacy_data() -> DataRecord:
    """Single-stock (2014) data record."""
    return create_sample_data(FormatVersion.LEGACY)


@pytest.fixture
def ms_data() -> DataRecord:
    """Multi-stock (2015MS) data record."""
    return create_sample_data(FormatVersion.MS)


@pytest.fixture
def legacy_control() -> ControlRecord:
    """Single-stock (2014) control record."""
    return create_sample_control(FormatVersion.LEGACY, model_name="legacy", data_file="legacy.dat")


@pytest.fixture
def ms_control() -> ControlRecord:
    """Two-stock (2015MS) control record."""
    return create_sample_control(FormatVersion.MS, n_stock=2, model_name="ms", data_file="ms.dat")


@pytest.fixture
def ms_model() -> ModelRecord:
    """Two-stock model with report tables for each stock."""
    return create_sample_model("mod1", version=FormatVersion.MS, n_stock=2)


@pytest.fixture
def legacy_model() -> ModelRecord:
    """Single-stock legacy model with report tables."""
    return create_sample_model("mod0", version=FormatVersion.LEGACY)


@pytest.fixture
def model_dir(tmp_path: Path) -> Path:
    """
    Directory holding two finished runs in the standard layout.

    Layout:
        config/mod1.ctl, config/mod2.ctl
        input/mod1.dat, input/mod2.dat
        results/mod1.par, mod1.yld, mod1_1_R.rep, mod1_2_R.rep, ...

    ``mod1`` is a two-stock 2015MS model, ``mod2`` a legacy 2014 model.
    """
    write_sample_model(tmp_path, "mod1", version=FormatVersion.MS, n_stock=2)
    write_sample_model(tmp_path, "mod2", version=FormatVersion.LEGACY)
    return tmp_path
