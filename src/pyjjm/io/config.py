"""
File configuration for JJM model directories.

A JJM working directory keeps control files, data files and run outputs
in separate sub-directories.  :class:`JJMFileConfig` holds that layout and
the naming conventions of every file belonging to a model.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass
class JJMFileConfig:
    """
    Configuration for the files of JJM models under one base directory.

    Control files are ``<config_dir>/<model>.ctl``; the data file is named
    by the control file and lives in ``input_dir``; run outputs are
    ``<model>.par``, ``<model>.yld`` and one ``<model>_<i>_R.rep`` per stock
    (``i`` counted from 1) in ``output_dir``.
    """

    base_path: Path = Path(".")
    config_dir: str = "config"
    input_dir: str = "input"
    output_dir: str = "results"

    control_ext: str = ".ctl"
    parameter_ext: str = ".par"
    yield_ext: str = ".yld"
    report_suffix: str = "_R.rep"

    def __post_init__(self) -> None:
        self.base_path = Path(self.base_path)

    @property
    def config_path(self) -> Path:
        return self.base_path / self.config_dir

    @property
    def input_path(self) -> Path:
        return self.base_path / self.input_dir

    @property
    def output_path(self) -> Path:
        return self.base_path / self.output_dir

    def control_file(self, model: str) -> Path:
        return self.config_path / f"{model}{self.control_ext}"

    def data_file(self, data_file: str) -> Path:
        return self.input_path / data_file

    def parameter_file(self, model: str) -> Path:
        return self.output_path / f"{model}{self.parameter_ext}"

    def yield_file(self, model: str) -> Path:
        return self.output_path / f"{model}{self.yield_ext}"

    def report_file(self, model: str, stock_number: int) -> Path:
        """Report file of the *stock_number*-th stock (1-based)."""
        if stock_number < 1:
            raise ValueError(f"Stock numbers start at 1, got {stock_number}")
        return self.output_path / f"{model}_{stock_number}{self.report_suffix}"

    def report_files(self, model: str, n_stock: int) -> list[Path]:
        return [self.report_file(model, i) for i in range(1, n_stock + 1)]
