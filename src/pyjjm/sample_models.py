"""
Sample model generators for pyjjm documentation and testing.

This module provides functions to create synthetic JJM models for
demonstration, testing, and documentation purposes.  The records follow
the control and data grammars exactly, so they can be written and read
back without requiring actual JJM input files.

Example
-------
>>> from pyjjm.sample_models import create_sample_model
>>> model = create_sample_model("mod1", n_stock=2)
>>> model.info.stock_names
('Stock_1', 'Stock_2')
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any

import numpy as np

from pyjjm.core.collection import ModelCollection
from pyjjm.core.records import (
    ControlRecord,
    DataRecord,
    ModelInfo,
    ModelRecord,
    ReportRecord,
    ReportTable,
)
from pyjjm.core.version import DEFAULT_VERSION, FormatVersion
from pyjjm.io.config import JJMFileConfig
from pyjjm.io.jjm_writer import atomic_write_text
from pyjjm.io.model_loader import write_model
from pyjjm.io.reports import REPORT_SCHEMAS, render_report

DEFAULT_FISHERIES = ("N_Chile", "SC_Chile_PS", "FarNorth", "Offshore_Trawl")
DEFAULT_INDICES = ("Chile_AcousCS", "Chile_CPUE", "Peru_Acoustic")


def _ints(values: Sequence[int]) -> np.ndarray:
    return np.asarray(values, dtype=np.int64)


def _age_comp(rng: np.random.Generator, n_rows: int, n_ages: int) -> np.ndarray:
    raw = rng.uniform(0.1, 1.0, size=(n_rows, n_ages))
    return np.round(raw / raw.sum(axis=1, keepdims=True), 4)


def _weight_at_age(n_ages: int, scale: float = 1.0) -> np.ndarray:
    ages = np.arange(1, n_ages + 1)
    return np.round(scale * 0.05 * ages**1.5, 4)


def _maturity_at_age(n_ages: int, a50: float = 2.5) -> np.ndarray:
    ages = np.arange(1, n_ages + 1)
    return np.round(1.0 / (1.0 + np.exp(-2.0 * (ages - a50))), 4)


def create_sample_data(
    version: FormatVersion | str = DEFAULT_VERSION,
    years: tuple[int, int] = (2000, 2009),
    ages: tuple[int, int] = (1, 8),
    fishery_names: Sequence[str] = DEFAULT_FISHERIES[:2],
    index_names: Sequence[str] = DEFAULT_INDICES[:2],
    seed: int = 42,
) -> DataRecord:
    """
    Create a sample data record.

    Parameters
    ----------
    version : FormatVersion or str, optional
        Format version. Legacy records carry population weight and
        maturity at age; multi-stock records keep them in the control file.
    years : tuple of int, optional
        First and last data year. Default is (2000, 2009).
    ages : tuple of int, optional
        First and last age. Default is (1, 8).
    fishery_names : sequence of str, optional
        Fishery names.
    index_names : sequence of str, optional
        Abundance index names.
    seed : int, optional
        Random seed for the observations.

    Returns
    -------
    DataRecord
        Record with every field of the data grammar.
    """
    version = FormatVersion.from_tag(version)
    rng = np.random.default_rng(seed)
    year_list = np.arange(years[0], years[1] + 1)
    n_years = len(year_list)
    n_ages = ages[1] - ages[0] + 1
    n_fish = len(fishery_names)

    fisheries = []
    for _ in fishery_names:
        comp_years = year_list[::2]
        fisheries.append(
            {
                "FnumyearsA": len(comp_years),
                "Fageyears": _ints(comp_years),
                "Fagesample": np.full(len(comp_years), 50.0),
                "Fagecomp": _age_comp(rng, len(comp_years), n_ages),
                "Fwtatage": _weight_at_age(n_ages, 1.1),
            }
        )

    indices = []
    for _ in index_names:
        idx_years = year_list[1:]
        age_years = year_list[1::3]
        indices.append(
            {
                "Inumyears": len(idx_years),
                "Iyears": _ints(idx_years),
                "Imonths": 6.0,
                "Index": np.round(rng.uniform(500.0, 5000.0, size=len(idx_years)), 1),
                "Indexerr": np.full(len(idx_years), 0.2),
                "Inumageyears": len(age_years),
                "Iyearsage": _ints(age_years),
                "Iagesample": np.full(len(age_years), 25.0),
                "Ipropage": _age_comp(rng, len(age_years), n_ages),
                "Iwtatage": _weight_at_age(n_ages),
            }
        )

    fields: dict[str, Any] = {
        "years": _ints(years),
        "ages": _ints(ages),
        "lengths": _ints((10, 50)),
        "Fnum": n_fish,
        "Fnames": list(fishery_names),
        "Fcaton": np.round(rng.uniform(100.0, 2000.0, size=(n_fish, n_years)), 2),
        "Fcatonerr": np.full((n_fish, n_years), 0.05),
        "fisheries": fisheries,
        "Inum": len(index_names),
        "Inames": list(index_names),
        "indices": indices,
    }
    if not version.is_multi_stock:
        fields["Pwtatage"] = _weight_at_age(n_ages).reshape(n_ages, 1)
        fields["Pmatatage"] = _maturity_at_age(n_ages).reshape(n_ages, 1)
    fields["Pspwn"] = 10.0
    fields["Pageerr"] = np.eye(n_ages)
    return DataRecord(version=version, fields=fields)


def _stock_settings() -> dict[str, Any]:
    return {
        "SrType": 2,
        "AgeError": 0,
        "Retro": 0,
        "Steepness": np.array([0.8, 0.05, -4.0]),
        "SigmaR": np.array([0.6, 0.2, -3.0]),
        "Mest": np.array([0.33, 0.05, -4.0]),
    }


def _selectivity(prefix: str, names: Sequence[str], n_ages: int, first_year: int) -> list:
    blocks = []
    for i, _ in enumerate(names):
        n_changes = i % 2
        blocks.append(
            {
                f"{prefix}seltype": 1,
                f"{prefix}nselages": min(6, n_ages),
                f"{prefix}selphase": 2 + i,
                f"{prefix}selcurv": 1.0,
                f"{prefix}seldome": 0.5,
                f"{prefix}nselchanges": n_changes,
                f"{prefix}selchangeyears": _ints([first_year + 5] * n_changes),
                f"{prefix}selchangesigma": np.full(n_changes, 0.7),
                f"{prefix}selinit": np.round(np.linspace(0.1, 1.0, n_ages), 4),
            }
        )
    return blocks


def create_sample_control(
    version: FormatVersion | str = DEFAULT_VERSION,
    n_stock: int = 1,
    model_name: str = "sample",
    data_file: str = "sample.dat",
    ages: tuple[int, int] = (1, 8),
    ref_years: tuple[int, int] = (2000, 2009),
    fishery_names: Sequence[str] = DEFAULT_FISHERIES[:2],
    index_names: Sequence[str] = DEFAULT_INDICES[:2],
) -> ControlRecord:
    """
    Create a sample control record.

    ``n_stock`` is ignored for the legacy version, which always has one
    stock.  Fisheries and indices are assigned to stocks round-robin.
    """
    version = FormatVersion.from_tag(version)
    n_ages = ages[1] - ages[0] + 1

    fields: dict[str, Any] = {"dataFile": data_file, "modelName": model_name}
    if version.is_multi_stock:
        fields["nStock"] = n_stock
    fields.update(
        {
            "ages": _ints(ages),
            "refYears": _ints(ref_years),
            "Fnames": list(fishery_names),
            "Inames": list(index_names),
        }
    )
    if version.is_multi_stock:
        fields["Fstock"] = _ints([i % n_stock + 1 for i in range(len(fishery_names))])
        fields["Istock"] = _ints([i % n_stock + 1 for i in range(len(index_names))])
        fields["stocks"] = [
            {
                "stockName": f"Stock_{j + 1}",
                **_stock_settings(),
                "Pwtatage": _weight_at_age(n_ages, 1.0 + 0.1 * j),
                "Pmatatage": _maturity_at_age(n_ages, 2.5 + 0.5 * j),
            }
            for j in range(n_stock)
        ]
    else:
        fields.update(_stock_settings())
    fields["Fsel"] = _selectivity("F", fishery_names, n_ages, ref_years[0])
    fields["Isel"] = _selectivity("I", index_names, n_ages, ref_years[0])
    fields["Nproj"] = 5
    fields["nFscenarios"] = 3
    fields["Fmult"] = np.array([0.0, 0.5, 1.0])
    return ControlRecord(version=version, fields=fields)


def create_sample_report(
    stock: str = "Stock_1",
    years: tuple[int, int] = (2000, 2009),
    ages: tuple[int, int] = (1, 8),
    seed: int = 0,
) -> ReportRecord:
    """Create sample report tables for one stock."""
    rng = np.random.default_rng(seed)
    year_list = np.arange(years[0], years[1] + 1, dtype=np.float64)
    n_years = len(year_list)
    n_ages = ages[1] - ages[0] + 1

    msy = np.round(rng.uniform(0.1, 2.0, size=(n_years, len(REPORT_SCHEMAS["msy_mt"]))), 4)
    msy[:, 0] = year_list

    ssb = np.round(rng.uniform(1000.0, 5000.0, size=n_years), 1)
    ssb_table = np.column_stack([year_list, ssb, 0.1 * ssb, 0.8 * ssb, 1.2 * ssb])

    n_at_age = np.round(rng.uniform(10.0, 1000.0, size=(n_years, n_ages)), 2)
    n_table = np.column_stack([year_list, n_at_age])

    tables = {
        "msy_mt": ReportTable("msy_mt", REPORT_SCHEMAS["msy_mt"], msy),
        "SSB": ReportTable("SSB", REPORT_SCHEMAS["SSB"], ssb_table),
        "N": ReportTable(
            "N", ("year",) + tuple(f"V{j}" for j in range(2, n_ages + 2)), n_table
        ),
    }
    return ReportRecord(stock=stock, tables=tables)


def create_sample_model(
    model: str = "sample",
    version: FormatVersion | str = DEFAULT_VERSION,
    n_stock: int = 1,
    years: tuple[int, int] = (2000, 2009),
    ages: tuple[int, int] = (1, 8),
) -> ModelRecord:
    """
    Create a complete sample model with control, data and report tables.

    Example
    -------
    >>> model = create_sample_model("h1", version="2014")
    >>> model.info.n_stock
    1
    """
    data = create_sample_data(version, years=years, ages=ages)
    control = create_sample_control(
        version,
        n_stock=n_stock,
        model_name=model,
        data_file=f"{model}.dat",
        ages=ages,
        ref_years=years,
    )
    output = {
        stock: create_sample_report(stock, years=years, ages=ages, seed=j)
        for j, stock in enumerate(control.stock_names)
    }
    return ModelRecord(
        info=ModelInfo.from_records(model, control, data),
        data=data,
        control=control,
        output=output,
    )


def write_sample_model(
    base_path: Path | str,
    model: str = "sample",
    version: FormatVersion | str = DEFAULT_VERSION,
    n_stock: int = 1,
    with_outputs: bool = True,
) -> ModelRecord:
    """
    Write a sample model into the standard directory layout.

    Control and data files always go to ``config/`` and ``input/``; with
    ``with_outputs`` the report, parameter and yield files of a finished
    run go to ``results/``.

    Returns
    -------
    ModelRecord
        The record that was written.
    """
    config = JJMFileConfig(base_path)
    record = create_sample_model(model, version=version, n_stock=n_stock)
    write_model(ModelCollection([(model, record)]), config.config_path, config.input_path)

    if with_outputs:
        for i, report in enumerate(record.output.values(), start=1):
            atomic_write_text(config.report_file(model, i), render_report(report))
        atomic_write_text(
            config.parameter_file(model),
            "# Number of parameters = 3 Objective function value = 1234.5"
            "  Maximum gradient component = 0.0001\n"
            "# log_Rzero:\n9.5\n"
            "# log_sigmar:\n-0.51\n"
            "# rec_dev:\n0.1 -0.2 0.05\n",
        )
        atomic_write_text(
            config.yield_file(model),
            "# yield summary\nMSY 1500.0\nBmsy 4200.0 420.0\nFmsy 0.25\n",
        )
    return record
