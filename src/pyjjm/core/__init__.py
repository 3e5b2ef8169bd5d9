"""Core data structures for pyjjm."""

from __future__ import annotations

from pyjjm.core.collection import ModelCollection, combine_models, rename_models
from pyjjm.core.diagnostics import (
    KobeSeries,
    StockDiagnostics,
    build_diagnostics,
    build_model_diagnostics,
    kobe_series,
)
from pyjjm.core.exceptions import (
    CollectionError,
    DuplicateModelNameError,
    IncompleteRecordError,
    JJMIOError,
    LengthMismatchError,
    MalformedInputError,
    PyJJMError,
    ValidationError,
    VersionMismatchError,
)
from pyjjm.core.records import (
    ControlRecord,
    DataRecord,
    ModelInfo,
    ModelRecord,
    ParameterRecord,
    ReportRecord,
    ReportTable,
    StructuredRecord,
    YieldRecord,
)
from pyjjm.core.version import DEFAULT_VERSION, FileKind, FormatVersion

__all__ = [
    # Versions
    "FileKind",
    "FormatVersion",
    "DEFAULT_VERSION",
    # Records
    "StructuredRecord",
    "ControlRecord",
    "DataRecord",
    "ReportTable",
    "ReportRecord",
    "ParameterRecord",
    "YieldRecord",
    "ModelInfo",
    "ModelRecord",
    # Collections
    "ModelCollection",
    "combine_models",
    "rename_models",
    # Diagnostics
    "StockDiagnostics",
    "KobeSeries",
    "build_diagnostics",
    "build_model_diagnostics",
    "kobe_series",
    # Exceptions
    "PyJJMError",
    "ValidationError",
    "JJMIOError",
    "MalformedInputError",
    "VersionMismatchError",
    "IncompleteRecordError",
    "CollectionError",
    "DuplicateModelNameError",
    "LengthMismatchError",
]
