"""
Structured parser for JJM control and data files.

Walks a :class:`~pyjjm.io.grammar.FormatGrammar` against a
:class:`~pyjjm.io.jjm_reader.TokenReader` and builds the field mapping of
a :class:`~pyjjm.core.records.ControlRecord` or
:class:`~pyjjm.core.records.DataRecord`.

Example
-------
>>> from pyjjm.io.parser import parse_file
>>> control = parse_file("config/mod1.ctl", "control", "2015MS")  # doctest: +SKIP
>>> control.n_stock  # doctest: +SKIP
2
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import numpy as np

from pyjjm.core.exceptions import MalformedInputError
from pyjjm.core.records import ControlRecord, DataRecord, StructuredRecord
from pyjjm.core.version import FileKind, FormatVersion
from pyjjm.io.grammar import (
    FieldSpec,
    FormatGrammar,
    Matrix,
    Names,
    Repeat,
    Scalar,
    Vector,
    check_version,
    describe_dim,
    get_grammar,
    resolve_dim,
)
from pyjjm.io.jjm_reader import TokenReader, split_names

logger = logging.getLogger(__name__)

RECORD_TYPES: dict[FileKind, type[StructuredRecord]] = {
    FileKind.CONTROL: ControlRecord,
    FileKind.DATA: DataRecord,
}

_DTYPES = {int: np.int64, float: np.float64}


class StructuredParser:
    """Parser for one grammar.

    Parameters
    ----------
    grammar : FormatGrammar
        Layout of the file to parse.
    """

    def __init__(self, grammar: FormatGrammar) -> None:
        self.grammar = grammar
        self._reader: TokenReader | None = None

    def parse(self, reader: TokenReader) -> dict[str, Any]:
        """Parse all fields of the grammar from *reader*.

        Returns
        -------
        dict
            Field name to value, in grammar order.

        Raises
        ------
        MalformedInputError
            If a value is missing or malformed, if the file is out of step
            with the grammar, or if data remains after the last field.
        """
        self._reader = reader
        try:
            fields: dict[str, Any] = {}
            self._parse_fields(self.grammar.fields, [fields], "")
            if not reader.at_end():
                raise MalformedInputError(
                    "Unexpected trailing data after the last field",
                    line_number=reader.line_number + 1,
                    filepath=reader.source,
                )
        finally:
            self._reader = None
        return fields

    # ------------------------------------------------------------------

    def _error(self, message: str, path: str) -> MalformedInputError:
        assert self._reader is not None
        return MalformedInputError(
            message,
            line_number=self._reader.line_number,
            field=path,
            filepath=self._reader.source,
        )

    def _dim(self, dim: Any, scopes: Sequence[Mapping[str, Any]], path: str) -> int:
        try:
            return resolve_dim(dim, scopes)
        except (KeyError, TypeError, ValueError) as exc:
            raise self._error(f"Cannot resolve dimension {describe_dim(dim)}", path) from exc

    def _check_label(self, spec: FieldSpec, path: str) -> None:
        """Fail if the next value is labelled as a different field."""
        assert self._reader is not None
        labels = self._reader.pending_labels()
        if not labels or spec.name in labels:
            return
        known = [label for label in labels if label in self.grammar.field_names]
        if known:
            raise MalformedInputError(
                f"Expected field '{spec.name}' but found section '{known[-1]}'",
                line_number=self._reader.line_number + 1,
                field=path,
                filepath=self._reader.source,
            )

    def _parse_fields(
        self,
        specs: Sequence[FieldSpec],
        scopes: list[dict[str, Any]],
        prefix: str,
    ) -> None:
        target = scopes[-1]
        for spec in specs:
            path = f"{prefix}{spec.name}"
            target[spec.name] = self._parse_field(spec, scopes, path)
            logger.debug("Parsed %s (line %d)", path, self._reader.line_number)

    def _parse_field(
        self,
        spec: FieldSpec,
        scopes: list[dict[str, Any]],
        path: str,
    ) -> Any:
        reader = self._reader
        assert reader is not None

        if isinstance(spec, Repeat):
            count = self._dim(spec.count, scopes, path)
            blocks = []
            for i in range(count):
                block: dict[str, Any] = {}
                self._parse_fields(spec.fields, [*scopes, block], f"{path}[{i + 1}].")
                blocks.append(block)
            return blocks

        if isinstance(spec, Scalar):
            self._check_label(spec, path)
            if spec.kind is str:
                return reader.next_line(path)
            return reader.next_scalar(spec.kind, path)

        if isinstance(spec, Names):
            self._check_label(spec, path)
            names = split_names(reader.next_line(path))
            if spec.count is not None:
                expected = self._dim(spec.count, scopes, path)
                if len(names) != expected:
                    raise self._error(f"Expected {expected} names, got {len(names)}", path)
            return names

        if isinstance(spec, Vector):
            n = self._dim(spec.length, scopes, path)
            if n > 0:
                self._check_label(spec, path)
            return np.array(reader.next_vector(n, spec.kind, path), dtype=_DTYPES[spec.kind])

        if isinstance(spec, Matrix):
            rows = self._dim(spec.rows, scopes, path)
            cols = self._dim(spec.cols, scopes, path)
            if rows * cols > 0:
                self._check_label(spec, path)
            values = reader.next_vector(rows * cols, spec.kind, path)
            return np.array(values, dtype=_DTYPES[spec.kind]).reshape(rows, cols)

        raise TypeError(f"Unknown field descriptor: {spec!r}")


def parse(reader: TokenReader, grammar: FormatGrammar) -> dict[str, Any]:
    """Parse the fields of *grammar* from *reader*."""
    return StructuredParser(grammar).parse(reader)


def parse_lines(
    lines: list[str],
    kind: FileKind | str,
    version: FormatVersion | str,
    source: Path | str | None = None,
) -> StructuredRecord:
    """Parse in-memory file lines into a record.

    The version is checked against the file's labels before any field is
    read.

    Raises
    ------
    VersionMismatchError
        If the file belongs to another format version.
    MalformedInputError
        If the file does not follow the grammar.
    """
    grammar = get_grammar(kind, version)
    check_version(lines, grammar, source)
    reader = TokenReader(lines, source=source if source is not None else "<memory>")
    fields = parse(reader, grammar)
    record_type = RECORD_TYPES[grammar.kind]
    return record_type(
        version=grammar.version,
        fields=fields,
        source=Path(source) if source is not None else None,
    )


def parse_file(
    filepath: Path | str,
    kind: FileKind | str,
    version: FormatVersion | str,
) -> StructuredRecord:
    """Read and parse a control or data file.

    Args:
        filepath: Path to the file
        kind: ``"control"`` or ``"data"``
        version: Format version tag, e.g. ``"2015MS"``

    Returns:
        ControlRecord or DataRecord
    """
    filepath = Path(filepath)
    with open(filepath) as f:
        lines = f.read().splitlines()
    record = parse_lines(lines, kind, version, source=filepath)
    logger.info(
        "Read %s file %s (%s, %d fields)",
        record.kind.value, filepath, record.version.value, len(record.fields),
    )
    return record
