"""
Readers for JJM run outputs.

A completed JJM run leaves three kinds of text output:

1. Per-stock report files (``<model>_<i>_R.rep``): named numeric tables,
   each introduced by a ``$name`` line and followed by whitespace
   separated rows.
2. The yield file (``<model>.yld``): ``label value [value ...]`` rows.
3. The ADMB parameter file (``<model>.par``): a header line with the
   parameter count, objective function value and maximum gradient, then
   ``# name:`` lines each followed by the estimate rows.

The yield and parameter files are shared by all stocks of a model.

Known report tables have a fixed column layout that does not depend on
the file format version.  Tables whose first column is ``year`` must have
strictly increasing years; rows are never re-sorted.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from pathlib import Path

import numpy as np

from pyjjm.core.exceptions import LengthMismatchError, MalformedInputError
from pyjjm.core.records import ParameterRecord, ReportRecord, ReportTable, YieldRecord
from pyjjm.io.jjm_reader import COMMENT_CHAR, is_comment_line, parse_float
from pyjjm.io.jjm_writer import format_row

logger = logging.getLogger(__name__)

# Section header marker of report files
SECTION_CHAR = "$"

_ESTIMATE_COLUMNS = ("year", "value", "sd", "lower", "upper")

# Fixed column layout of known report tables
REPORT_SCHEMAS: dict[str, tuple[str, ...]] = {
    "msy_mt": (
        "year",
        "Fspr",
        "survival_spr",
        "F_Fmsy",
        "Fmsy",
        "F",
        "Fsprmsy",
        "MSY",
        "MSYL",
        "Bmsy",
        "Bzero",
        "SSB",
        "B_Bmsy",
    ),
    "SSB": _ESTIMATE_COLUMNS,
    "TotBiom": _ESTIMATE_COLUMNS,
    "R": _ESTIMATE_COLUMNS,
    "TotF": _ESTIMATE_COLUMNS,
}

# Tables indexed by year whose remaining columns depend on the model (ages)
YEAR_INDEXED_TABLES = frozenset({"N", "F", "Z", "Obs_catch", "Pred_catch"})

_PAR_HEADER = re.compile(
    r"Number of parameters\s*=\s*(?P<n>\d+)"
    r".*?Objective function value\s*=\s*(?P<obj>\S+)"
    r".*?Maximum gradient component\s*=\s*(?P<grad>\S+)",
    re.IGNORECASE,
)


# =============================================================================
# Report files
# =============================================================================


def table_columns(name: str, width: int) -> tuple[str, ...]:
    """Return the column names of table *name* with *width* columns."""
    if name in REPORT_SCHEMAS:
        return REPORT_SCHEMAS[name]
    if name in YEAR_INDEXED_TABLES:
        return ("year",) + tuple(f"V{j}" for j in range(2, width + 1))
    return tuple(f"V{j}" for j in range(1, width + 1))


def _build_table(
    name: str,
    rows: list[list[float]],
    row_lines: list[int],
    filepath: Path,
) -> ReportTable:
    width = len(rows[0]) if rows else len(REPORT_SCHEMAS.get(name, ()))
    for row, line_num in zip(rows, row_lines):
        if len(row) != width:
            raise MalformedInputError(
                f"Expected {width} columns, got {len(row)}",
                line_number=line_num,
                field=name,
                filepath=filepath,
            )

    columns = table_columns(name, width)
    if rows and len(columns) != width:
        raise MalformedInputError(
            f"Table '{name}' has {width} columns, expected {len(columns)}",
            line_number=row_lines[0],
            field=name,
            filepath=filepath,
        )

    values = np.array(rows, dtype=np.float64).reshape(len(rows), len(columns))
    if columns and columns[0] == "year":
        steps = np.diff(values[:, 0])
        bad = np.flatnonzero(steps <= 0)
        if bad.size:
            i = int(bad[0]) + 1
            raise MalformedInputError(
                f"Years must be strictly increasing: {values[i - 1, 0]:g} then {values[i, 0]:g}",
                line_number=row_lines[i],
                field=name,
                filepath=filepath,
            )
    return ReportTable(name=name, columns=columns, values=values)


def read_report(filepath: Path | str, stock: str) -> ReportRecord:
    """Read one per-stock report file.

    Args:
        filepath: Path to the report file
        stock: Name of the stock the report belongs to

    Returns:
        ReportRecord with one table per ``$`` section

    Raises:
        MalformedInputError: If a row is not numeric, rows of a table differ
            in width, a known table has the wrong width, a section repeats
            or years are not strictly increasing.
    """
    filepath = Path(filepath)
    with open(filepath) as f:
        lines = f.read().splitlines()

    tables: dict[str, ReportTable] = {}
    name: str | None = None
    rows: list[list[float]] = []
    row_lines: list[int] = []

    def flush() -> None:
        if name is not None:
            tables[name] = _build_table(name, rows, row_lines, filepath)

    for line_num, line in enumerate(lines, start=1):
        stripped = line.strip()
        if stripped.startswith(SECTION_CHAR):
            flush()
            name = stripped[1:].strip()
            if not name:
                raise MalformedInputError(
                    "Empty section name", line_number=line_num, filepath=filepath
                )
            if name in tables:
                raise MalformedInputError(
                    f"Duplicate section '{name}'",
                    line_number=line_num,
                    field=name,
                    filepath=filepath,
                )
            rows, row_lines = [], []
            continue
        if is_comment_line(line):
            continue
        if name is None:
            raise MalformedInputError(
                "Data before the first section header", line_number=line_num, filepath=filepath
            )
        rows.append([parse_float(tok, name, line_num, filepath) for tok in stripped.split()])
        row_lines.append(line_num)
    flush()

    logger.info("Read report %s for stock %s (%d tables)", filepath, stock, len(tables))
    return ReportRecord(stock=stock, tables=tables, source=filepath)


def render_report(report: ReportRecord) -> str:
    """Return the text of a report file holding *report*'s tables."""
    lines = []
    for table in report.tables.values():
        lines.append(f"{SECTION_CHAR}{table.name}")
        for row in table.values:
            lines.append(format_row(row))
    return "\n".join(lines) + "\n"


def read_reports(
    paths: Sequence[Path | str],
    stock_names: Sequence[str],
) -> dict[str, ReportRecord]:
    """Read one report file per stock, in stock order.

    Args:
        paths: Report files, one per stock
        stock_names: Stock names in control-file order

    Returns:
        Stock name to ReportRecord, ordered as *stock_names*

    Raises:
        LengthMismatchError: If the number of paths and stocks differ.
    """
    if len(paths) != len(stock_names):
        raise LengthMismatchError(len(stock_names), len(paths), what="report files")
    return {stock: read_report(path, stock) for path, stock in zip(paths, stock_names)}


# =============================================================================
# Parameter and yield files
# =============================================================================


def read_parameters(filepath: Path | str) -> ParameterRecord:
    """Read an ADMB ``.par`` file.

    Parameters with one value row become 1-D arrays, those with several
    rows of equal width 2-D arrays; rows of unequal width are concatenated.
    """
    filepath = Path(filepath)
    with open(filepath) as f:
        lines = f.read().splitlines()

    n_parameters = 0
    objective = float("nan")
    max_gradient = float("nan")
    blocks: dict[str, list[list[float]]] = {}
    current: str | None = None

    for line_num, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped:
            continue
        if stripped.startswith(COMMENT_CHAR):
            body = stripped.lstrip(COMMENT_CHAR).strip()
            match = _PAR_HEADER.search(body)
            if match:
                n_parameters = int(match.group("n"))
                objective = parse_float(match.group("obj"), "objective", line_num, filepath)
                max_gradient = parse_float(match.group("grad"), "max_gradient", line_num, filepath)
            elif body.endswith(":"):
                current = body[:-1].strip()
                if current in blocks:
                    raise MalformedInputError(
                        f"Duplicate parameter '{current}'",
                        line_number=line_num,
                        field=current,
                        filepath=filepath,
                    )
                blocks[current] = []
            continue
        if current is None:
            raise MalformedInputError(
                "Value before the first parameter name", line_number=line_num, filepath=filepath
            )
        blocks[current].append(
            [parse_float(tok, current, line_num, filepath) for tok in stripped.split()]
        )

    values: dict[str, np.ndarray] = {}
    for name, rows in blocks.items():
        if len(rows) == 1:
            values[name] = np.array(rows[0], dtype=np.float64)
        elif rows and len({len(r) for r in rows}) == 1:
            values[name] = np.array(rows, dtype=np.float64)
        else:
            values[name] = np.array([v for r in rows for v in r], dtype=np.float64)

    logger.info("Read parameters %s (%d parameters)", filepath, len(values))
    return ParameterRecord(
        n_parameters=n_parameters,
        objective=objective,
        max_gradient=max_gradient,
        values=values,
        source=filepath,
    )


def read_yield(filepath: Path | str) -> YieldRecord:
    """Read a ``.yld`` yield summary file."""
    filepath = Path(filepath)
    with open(filepath) as f:
        lines = f.read().splitlines()

    values: dict[str, np.ndarray] = {}
    for line_num, line in enumerate(lines, start=1):
        if is_comment_line(line):
            continue
        label, *rest = line.split()
        if label in values:
            raise MalformedInputError(
                f"Duplicate yield entry '{label}'",
                line_number=line_num,
                field=label,
                filepath=filepath,
            )
        values[label] = np.array(
            [parse_float(tok, label, line_num, filepath) for tok in rest], dtype=np.float64
        )

    logger.info("Read yield %s (%d entries)", filepath, len(values))
    return YieldRecord(values=values, source=filepath)
