"""Unit tests for JJM file configuration."""

from __future__ import annotations

from pathlib import Path

import pytest

from pyjjm.io.config import JJMFileConfig


class TestJJMFileConfig:
    def test_defaults(self) -> None:
        config = JJMFileConfig("assessment")
        assert config.base_path == Path("assessment")
        assert config.config_path == Path("assessment/config")
        assert config.input_path == Path("assessment/input")
        assert config.output_path == Path("assessment/results")

    def test_model_files(self) -> None:
        config = JJMFileConfig("a")
        assert config.control_file("mod1") == Path("a/config/mod1.ctl")
        assert config.data_file("mod1.dat") == Path("a/input/mod1.dat")
        assert config.parameter_file("mod1") == Path("a/results/mod1.par")
        assert config.yield_file("mod1") == Path("a/results/mod1.yld")

    def test_report_files_are_one_based(self) -> None:
        config = JJMFileConfig("a")
        assert config.report_files("mod1", 2) == [
            Path("a/results/mod1_1_R.rep"),
            Path("a/results/mod1_2_R.rep"),
        ]

    def test_invalid_stock_number(self) -> None:
        with pytest.raises(ValueError):
            JJMFileConfig("a").report_file("mod1", 0)

    def test_custom_directories(self) -> None:
        config = JJMFileConfig("a", config_dir="ctl", input_dir="dat", output_dir="out")
        assert config.control_file("m") == Path("a/ctl/m.ctl")
        assert config.data_file("m.dat") == Path("a/dat/m.dat")
        assert config.report_file("m", 1) == Path("a/out/m_1_R.rep")
