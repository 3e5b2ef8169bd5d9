"""
pyjjm - Python package for JJM (Joint Jack Mackerel) stock assessment models.

This package provides tools for:
- Reading and writing JJM control and data files in both format versions
- Reading run outputs (reports, parameter estimates, yields)
- Combining and renaming models for cross-model comparison
- Preparing per-stock inputs for diagnostics plots
"""

from __future__ import annotations

__version__ = "0.1.0"

from pyjjm.core.collection import ModelCollection, combine_models, rename_models
from pyjjm.core.diagnostics import build_diagnostics, kobe_series
from pyjjm.core.exceptions import (
    DuplicateModelNameError,
    IncompleteRecordError,
    JJMIOError,
    LengthMismatchError,
    MalformedInputError,
    PyJJMError,
    ValidationError,
    VersionMismatchError,
)
from pyjjm.core.records import ControlRecord, DataRecord, ModelRecord, ReportRecord
from pyjjm.core.version import FileKind, FormatVersion
from pyjjm.io.model_loader import (
    compare_models,
    read_config,
    read_external_file,
    read_model,
    write_model,
)
from pyjjm.io.parser import parse, parse_file
from pyjjm.io.writer import write, write_record
from pyjjm.sample_models import (
    create_sample_control,
    create_sample_data,
    create_sample_model,
    create_sample_report,
)

__all__ = [
    "__version__",
    # Versions
    "FileKind",
    "FormatVersion",
    # Records
    "ControlRecord",
    "DataRecord",
    "ReportRecord",
    "ModelRecord",
    # Parse and write
    "parse",
    "parse_file",
    "write",
    "write_record",
    # Models
    "read_model",
    "read_config",
    "read_external_file",
    "write_model",
    "compare_models",
    "ModelCollection",
    "combine_models",
    "rename_models",
    "build_diagnostics",
    "kobe_series",
    # Exceptions
    "PyJJMError",
    "ValidationError",
    "JJMIOError",
    "MalformedInputError",
    "VersionMismatchError",
    "IncompleteRecordError",
    "DuplicateModelNameError",
    "LengthMismatchError",
    # Sample models
    "create_sample_data",
    "create_sample_control",
    "create_sample_report",
    "create_sample_model",
]
