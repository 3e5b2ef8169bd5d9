"""
Immutable per-stock inputs for diagnostics and plotting.

Plotting code needs, for every stock of every model, the stock's report
tables together with its population weight and maturity at age.  Where
those live depends on the format version: legacy files keep a single
column in the data file, multi-stock files keep one row per stock in the
control file.  :func:`build_diagnostics` resolves this once and returns
frozen values; the model records themselves are never modified.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from pyjjm.core.collection import ModelCollection
from pyjjm.core.records import ModelRecord, ReportRecord
from pyjjm.core.version import FormatVersion

# Report table and column positions (1-based) used by kobe plots
KOBE_TABLE = "msy_mt"
KOBE_YEAR_COLUMN = 1
KOBE_F_COLUMN = 4
KOBE_B_COLUMN = 13


def _readonly(array: NDArray) -> NDArray:
    array = np.array(array, dtype=np.float64)
    array.flags.writeable = False
    return array


@dataclass(frozen=True, eq=False)
class StockDiagnostics:
    """
    Diagnostics inputs for one stock of one model.

    Attributes:
        model: Display name of the model
        stock: Stock name
        version: Format version of the model files
        report: Report tables of the stock (None if the model was not run)
        weight_at_age: Population weight at age, shape ``(n_ages,)``
        maturity_at_age: Population maturity at age, shape ``(n_ages,)``
    """

    model: str
    stock: str
    version: FormatVersion
    report: ReportRecord | None
    weight_at_age: NDArray[np.float64]
    maturity_at_age: NDArray[np.float64]


@dataclass(frozen=True, eq=False)
class KobeSeries:
    """Stock status trajectory: B/Bmsy against F/Fmsy by year."""

    years: NDArray[np.int64]
    B_Bmsy: NDArray[np.float64]
    F_Fmsy: NDArray[np.float64]


def stock_biology(record: ModelRecord, stock_index: int) -> tuple[NDArray, NDArray]:
    """Return weight and maturity at age of the stock at *stock_index*."""
    if record.version is FormatVersion.MS:
        weight = record.control.weight_at_age.T[:, stock_index]
        maturity = record.control.maturity_at_age.T[:, stock_index]
    else:
        weight = record.data.weight_at_age[:, 0]
        maturity = record.data.maturity_at_age[:, 0]
    return _readonly(weight), _readonly(maturity)


def build_model_diagnostics(record: ModelRecord) -> dict[str, StockDiagnostics]:
    """Return per-stock diagnostics inputs of one model, in stock order."""
    views = {}
    for j, stock in enumerate(record.info.stock_names):
        weight, maturity = stock_biology(record, j)
        views[stock] = StockDiagnostics(
            model=record.info.model,
            stock=stock,
            version=record.version,
            report=record.output.get(stock),
            weight_at_age=weight,
            maturity_at_age=maturity,
        )
    return views


def build_diagnostics(collection: ModelCollection) -> dict[str, dict[str, StockDiagnostics]]:
    """Return ``{model: {stock: StockDiagnostics}}`` in collection order."""
    return {name: build_model_diagnostics(record) for name, record in collection.items()}


def kobe_series(report: ReportRecord) -> KobeSeries:
    """Extract the kobe trajectory from a stock's ``msy_mt`` table.

    Raises
    ------
    KeyError
        If the report has no ``msy_mt`` table.
    """
    table = report[KOBE_TABLE]
    values = table.values
    return KobeSeries(
        years=values[:, KOBE_YEAR_COLUMN - 1].astype(np.int64),
        B_Bmsy=values[:, KOBE_B_COLUMN - 1],
        F_Fmsy=values[:, KOBE_F_COLUMN - 1],
    )
