"""I/O handlers for JJM file formats."""

from __future__ import annotations

from pyjjm.io.config import JJMFileConfig
from pyjjm.io.grammar import (
    GRAMMARS,
    FormatGrammar,
    check_version,
    detect_version,
    get_grammar,
)
from pyjjm.io.jjm_reader import TokenReader
from pyjjm.io.model_loader import (
    ModelConfig,
    check_pairing,
    compare_models,
    read_config,
    read_external_file,
    read_model,
    write_model,
)
from pyjjm.io.parser import StructuredParser, parse, parse_file, parse_lines
from pyjjm.io.reports import (
    read_parameters,
    read_report,
    read_reports,
    read_yield,
    render_report,
)
from pyjjm.io.writer import StructuredWriter, validate_record, write, write_record

__all__ = [
    # Configuration
    "JJMFileConfig",
    # Grammars and version detection
    "FormatGrammar",
    "GRAMMARS",
    "get_grammar",
    "detect_version",
    "check_version",
    # Structured parser and writer
    "TokenReader",
    "StructuredParser",
    "parse",
    "parse_lines",
    "parse_file",
    "StructuredWriter",
    "validate_record",
    "write",
    "write_record",
    # Run outputs
    "read_report",
    "read_reports",
    "render_report",
    "read_parameters",
    "read_yield",
    # Model loader
    "ModelConfig",
    "check_pairing",
    "read_model",
    "read_config",
    "read_external_file",
    "write_model",
    "compare_models",
]
