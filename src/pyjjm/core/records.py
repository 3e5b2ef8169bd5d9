"""
Structured records for JJM model files and run outputs.

A record produced by the structured parser is an immutable mapping from
field name to value.  Scalars are plain ``int``/``float``/``str``, vectors
and matrices are read-only numpy arrays, name lists are tuples of ``str``
and repeated blocks are tuples of nested read-only mappings.

:class:`ControlRecord` and :class:`DataRecord` wrap the parsed control and
data files and expose the fields downstream code relies on.  Run outputs
are held in :class:`ReportRecord` (per stock), :class:`ParameterRecord`
and :class:`YieldRecord`.  :class:`ModelRecord` groups everything read for
one model.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, ClassVar

import numpy as np
from numpy.typing import NDArray

from pyjjm.core.version import FileKind, FormatVersion


def _freeze(value: Any) -> Any:
    """Return a read-only view of a parsed value."""
    if isinstance(value, np.ndarray):
        value = value.view()
        value.flags.writeable = False
        return value
    if isinstance(value, np.generic):
        # numpy scalars are stored as the Python values the parser returns
        return value.item()
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return value


@dataclass(frozen=True, eq=False)
class StructuredRecord(Mapping):
    """
    Base class for records parsed from a JJM grammar.

    Attributes:
        version: Format version the record was parsed with
        fields: Field name to value mapping, in grammar order
        source: File the record was read from, if any
    """

    kind: ClassVar[FileKind]

    version: FormatVersion
    fields: Mapping[str, Any]
    source: Path | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "version", FormatVersion.from_tag(self.version))
        object.__setattr__(
            self, "fields", MappingProxyType({k: _freeze(v) for k, v in self.fields.items()})
        )
        if self.source is not None:
            object.__setattr__(self, "source", Path(self.source))

    def __getitem__(self, name: str) -> Any:
        return self.fields[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def __eq__(self, other: object) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        from pyjjm.comparison.differ import records_equal

        return records_equal(self, other)

    __hash__ = None  # type: ignore[assignment]

    def to_dict(self) -> dict[str, Any]:
        """Return a mutable deep copy of the fields."""
        return _thaw(self.fields)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(version={self.version.value!r}, "
            f"n_fields={len(self.fields)}, source={self.source})"
        )


def _thaw(value: Any) -> Any:
    if isinstance(value, np.ndarray):
        return value.copy()
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_thaw(v) for v in value]
    return value


@dataclass(frozen=True, eq=False, repr=False)
class ControlRecord(StructuredRecord):
    """Parsed control (``.ctl``) file."""

    kind: ClassVar[FileKind] = FileKind.CONTROL

    @property
    def data_file(self) -> str:
        return self.fields["dataFile"]

    @property
    def model_name(self) -> str:
        return self.fields["modelName"]

    @property
    def n_stock(self) -> int:
        if self.version.is_multi_stock:
            return self.fields["nStock"]
        return 1

    @property
    def ages(self) -> tuple[int, int]:
        first, last = self.fields["ages"]
        return int(first), int(last)

    @property
    def n_ages(self) -> int:
        first, last = self.ages
        return last - first + 1

    @property
    def ref_years(self) -> tuple[int, int]:
        first, last = self.fields["refYears"]
        return int(first), int(last)

    @property
    def fishery_names(self) -> list[str]:
        return list(self.fields["Fnames"])

    @property
    def index_names(self) -> list[str]:
        return list(self.fields["Inames"])

    @property
    def stocks(self) -> tuple[Mapping[str, Any], ...]:
        """Per-stock blocks (empty for legacy files)."""
        return tuple(self.fields.get("stocks", ()))

    @property
    def stock_names(self) -> list[str]:
        if self.version.is_multi_stock:
            return [block["stockName"] for block in self.stocks]
        return ["Stock_1"]

    @property
    def weight_at_age(self) -> NDArray[np.float64] | None:
        """Population weight at age, shape ``(n_stock, n_ages)`` (MS only)."""
        return self._stack_stock_field("Pwtatage")

    @property
    def maturity_at_age(self) -> NDArray[np.float64] | None:
        """Population maturity at age, shape ``(n_stock, n_ages)`` (MS only)."""
        return self._stack_stock_field("Pmatatage")

    def _stack_stock_field(self, name: str) -> NDArray[np.float64] | None:
        if not self.version.is_multi_stock:
            return None
        return np.vstack([block[name] for block in self.stocks])


@dataclass(frozen=True, eq=False, repr=False)
class DataRecord(StructuredRecord):
    """Parsed data (``.dat``) file."""

    kind: ClassVar[FileKind] = FileKind.DATA

    @property
    def years(self) -> tuple[int, int]:
        first, last = self.fields["years"]
        return int(first), int(last)

    @property
    def n_years(self) -> int:
        first, last = self.years
        return last - first + 1

    @property
    def year_range(self) -> NDArray[np.int64]:
        first, last = self.years
        return np.arange(first, last + 1)

    @property
    def ages(self) -> tuple[int, int]:
        first, last = self.fields["ages"]
        return int(first), int(last)

    @property
    def n_ages(self) -> int:
        first, last = self.ages
        return last - first + 1

    @property
    def fishery_names(self) -> list[str]:
        return list(self.fields["Fnames"])

    @property
    def index_names(self) -> list[str]:
        return list(self.fields["Inames"])

    @property
    def catch(self) -> NDArray[np.float64]:
        """Total catch, shape ``(n_fisheries, n_years)``."""
        return self.fields["Fcaton"]

    @property
    def weight_at_age(self) -> NDArray[np.float64] | None:
        """Population weight at age, shape ``(n_ages, 1)`` (legacy only)."""
        return self.fields.get("Pwtatage")

    @property
    def maturity_at_age(self) -> NDArray[np.float64] | None:
        """Population maturity at age, shape ``(n_ages, 1)`` (legacy only)."""
        return self.fields.get("Pmatatage")


# =============================================================================
# Run outputs
# =============================================================================


@dataclass(frozen=True, eq=False)
class ReportTable:
    """
    A named numeric table from a report file.

    Attributes:
        name: Section name (without the leading ``$``)
        columns: Column names, in file order
        values: Table values, shape ``(n_rows, n_columns)``
    """

    name: str
    columns: tuple[str, ...]
    values: NDArray[np.float64]

    def __post_init__(self) -> None:
        object.__setattr__(self, "columns", tuple(self.columns))
        object.__setattr__(self, "values", _freeze(np.asarray(self.values, dtype=np.float64)))

    @property
    def n_rows(self) -> int:
        return self.values.shape[0]

    @property
    def is_year_indexed(self) -> bool:
        return bool(self.columns) and self.columns[0] == "year"

    @property
    def years(self) -> NDArray[np.int64]:
        if not self.is_year_indexed:
            raise KeyError(f"Table {self.name!r} has no year column")
        return self.values[:, 0].astype(np.int64)

    def column(self, name: str) -> NDArray[np.float64]:
        """Return a column by name."""
        try:
            idx = self.columns.index(name)
        except ValueError:
            raise KeyError(f"Table {self.name!r} has no column {name!r}") from None
        return self.values[:, idx]

    def to_dataframe(self):
        """Return the table as a pandas DataFrame."""
        import pandas as pd

        return pd.DataFrame(self.values, columns=list(self.columns))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ReportTable):
            return NotImplemented
        return (
            self.name == other.name
            and self.columns == other.columns
            and np.array_equal(self.values, other.values, equal_nan=True)
        )

    __hash__ = None  # type: ignore[assignment]


@dataclass(frozen=True)
class ReportRecord:
    """Report tables for one stock of a completed run."""

    stock: str
    tables: Mapping[str, ReportTable] = field(default_factory=dict)
    source: Path | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "tables", MappingProxyType(dict(self.tables)))

    def __getitem__(self, name: str) -> ReportTable:
        return self.tables[name]

    def __contains__(self, name: object) -> bool:
        return name in self.tables

    @property
    def table_names(self) -> list[str]:
        return list(self.tables)


@dataclass(frozen=True, eq=False)
class ParameterRecord:
    """
    Parameter estimates from an ADMB ``.par`` file.

    Attributes:
        n_parameters: Number of estimated parameters
        objective: Objective function value
        max_gradient: Maximum gradient component
        values: Parameter name to estimate(s)
    """

    n_parameters: int = 0
    objective: float = float("nan")
    max_gradient: float = float("nan")
    values: Mapping[str, NDArray[np.float64]] = field(default_factory=dict)
    source: Path | None = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "values", MappingProxyType({k: _freeze(v) for k, v in self.values.items()})
        )

    def __getitem__(self, name: str) -> NDArray[np.float64]:
        return self.values[name]


@dataclass(frozen=True, eq=False)
class YieldRecord:
    """Yield summary values from a ``.yld`` file."""

    values: Mapping[str, NDArray[np.float64]] = field(default_factory=dict)
    source: Path | None = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "values", MappingProxyType({k: _freeze(v) for k, v in self.values.items()})
        )

    def __getitem__(self, name: str) -> NDArray[np.float64]:
        return self.values[name]


# =============================================================================
# Model record
# =============================================================================


@dataclass(frozen=True)
class ModelInfo:
    """
    Summary information for one model.

    Attributes:
        model: Display name (used for legends; changed by renaming)
        version: Format version of the model files
        n_stock: Number of stocks
        stock_names: Stock names, in control-file order
        fishery_names: Fishery names
        index_names: Abundance index names
        years: First and last data year
        ages: First and last age
        files: File role ('control', 'data', ...) to path
    """

    model: str
    version: FormatVersion
    n_stock: int = 1
    stock_names: tuple[str, ...] = ()
    fishery_names: tuple[str, ...] = ()
    index_names: tuple[str, ...] = ()
    years: tuple[int, int] | None = None
    ages: tuple[int, int] | None = None
    files: Mapping[str, Path] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "stock_names", tuple(self.stock_names))
        object.__setattr__(self, "fishery_names", tuple(self.fishery_names))
        object.__setattr__(self, "index_names", tuple(self.index_names))
        object.__setattr__(self, "files", MappingProxyType(dict(self.files)))

    @classmethod
    def from_records(
        cls,
        model: str,
        control: ControlRecord,
        data: DataRecord,
        files: Mapping[str, Path] | None = None,
    ) -> ModelInfo:
        return cls(
            model=model,
            version=control.version,
            n_stock=control.n_stock,
            stock_names=control.stock_names,
            fishery_names=control.fishery_names,
            index_names=control.index_names,
            years=data.years,
            ages=control.ages,
            files=files or {},
        )


@dataclass(frozen=True, eq=False)
class ModelRecord:
    """
    Everything read for one model.

    Attributes:
        info: Summary information and display name
        data: Parsed data file
        control: Parsed control file
        parameters: Parameter estimates (None if the model was not run)
        yields: Yield summary (None if the model was not run)
        output: Stock name to report tables, in control-file stock order
    """

    info: ModelInfo
    data: DataRecord
    control: ControlRecord
    parameters: ParameterRecord | None = None
    yields: YieldRecord | None = None
    output: Mapping[str, ReportRecord] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "output", MappingProxyType(dict(self.output)))

    @property
    def name(self) -> str:
        return self.info.model

    @property
    def version(self) -> FormatVersion:
        return self.info.version
