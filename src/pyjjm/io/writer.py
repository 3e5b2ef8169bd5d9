"""
Structured writer for JJM control and data files.

The inverse of :mod:`pyjjm.io.parser`: walks the same grammar against a
record and emits the text layout the JJM executable reads.  Every field is
preceded by a ``#<name>`` label line, vectors go on one line and matrices
one row per line with right-aligned columns.

The record is validated completely and the text rendered in memory before
the destination is touched; the file is then replaced atomically.

Example
-------
>>> from pyjjm.io.writer import write_record
>>> write_record(control, "config/mod1.ctl")  # doctest: +SKIP
PosixPath('config/mod1.ctl')
"""

from __future__ import annotations

import io
import logging
from collections.abc import Mapping, Sequence
from datetime import datetime
from pathlib import Path
from typing import Any, TextIO

import numpy as np

from pyjjm.core.exceptions import IncompleteRecordError, ValidationError, VersionMismatchError
from pyjjm.core.records import StructuredRecord
from pyjjm.io.grammar import (
    FieldSpec,
    FormatGrammar,
    Matrix,
    Names,
    Repeat,
    Scalar,
    Vector,
    describe_dim,
    get_grammar,
    resolve_dim,
)
from pyjjm.io.jjm_reader import COMMENT_CHAR, NAME_SEPARATOR
from pyjjm.io.jjm_writer import (
    atomic_write_text,
    format_matrix,
    format_names,
    format_number,
    format_row,
    write_comment,
    write_label,
)
from pyjjm.templates.engine import TemplateEngine

logger = logging.getLogger(__name__)

HEADER_TEMPLATE = "header.j2"


# =============================================================================
# Validation
# =============================================================================


class _Checker:
    """Collects missing fields and shape errors of a record."""

    def __init__(self) -> None:
        self.missing: list[str] = []
        self.errors: list[str] = []

    def check(self, specs: Sequence[FieldSpec], scopes: list[Mapping[str, Any]], prefix: str) -> None:
        fields = scopes[-1]
        for spec in specs:
            path = f"{prefix}{spec.name}"
            if spec.name not in fields or fields[spec.name] is None:
                self.missing.append(path)
                continue
            self._check_field(spec, fields[spec.name], scopes, path)

    def _dim(self, dim: Any, scopes: list[Mapping[str, Any]], path: str) -> int | None:
        try:
            return resolve_dim(dim, scopes)
        except KeyError:
            # Reported as missing where the referenced field is checked
            return None
        except (TypeError, ValueError):
            self.errors.append(f"{path}: cannot resolve dimension {describe_dim(dim)}")
            return None

    def _check_field(
        self,
        spec: FieldSpec,
        value: Any,
        scopes: list[Mapping[str, Any]],
        path: str,
    ) -> None:
        if isinstance(spec, Repeat):
            if isinstance(value, (str, Mapping)) or not isinstance(value, Sequence):
                self.errors.append(f"{path}: expected a sequence of blocks")
                return
            count = self._dim(spec.count, scopes, path)
            if count is not None and len(value) != count:
                self.errors.append(
                    f"{path}: expected {count} blocks ({describe_dim(spec.count)}), got {len(value)}"
                )
            for i, block in enumerate(value):
                if not isinstance(block, Mapping):
                    self.errors.append(f"{path}[{i + 1}]: expected a mapping")
                    continue
                self.check(spec.fields, [*scopes, block], f"{path}[{i + 1}].")
            return

        if isinstance(spec, Scalar):
            self._check_scalar(spec.kind, value, path)
            return

        if isinstance(spec, Names):
            if isinstance(value, str) or not isinstance(value, Sequence):
                self.errors.append(f"{path}: expected a list of names")
                return
            for name in value:
                if not _is_writable_name(name):
                    self.errors.append(f"{path}: name {name!r} cannot be written")
            if spec.count is not None:
                count = self._dim(spec.count, scopes, path)
                if count is not None and len(value) != count:
                    self.errors.append(f"{path}: expected {count} names, got {len(value)}")
            return

        if isinstance(spec, Vector):
            shape = (self._dim(spec.length, scopes, path),)
        else:
            shape = (self._dim(spec.rows, scopes, path), self._dim(spec.cols, scopes, path))
        array = np.asarray(value)
        if array.ndim != len(shape):
            self.errors.append(f"{path}: expected {len(shape)}-D array, got {array.ndim}-D")
            return
        if None not in shape and array.shape != shape:
            self.errors.append(f"{path}: expected shape {shape}, got {array.shape}")
        if not _kind_matches(spec.kind, array):
            self.errors.append(f"{path}: expected {spec.kind.__name__} values, got {array.dtype}")

    def _check_scalar(self, kind: type, value: Any, path: str) -> None:
        if kind is str:
            if not isinstance(value, str) or not _is_writable_text(value):
                self.errors.append(f"{path}: {value!r} cannot be written as one text line")
        elif kind is int:
            if isinstance(value, (bool, np.bool_)) or not isinstance(value, (int, np.integer)):
                self.errors.append(f"{path}: expected int, got {type(value).__name__}")
        elif not isinstance(value, (float, np.floating)):
            self.errors.append(f"{path}: expected float, got {type(value).__name__}")


def _is_writable_text(value: str) -> bool:
    return bool(value) and " ".join(value.split()) == value and not value.startswith(COMMENT_CHAR)


def _is_writable_name(value: Any) -> bool:
    return (
        isinstance(value, str)
        and _is_writable_text(value)
        and NAME_SEPARATOR not in value
    )


def _kind_matches(kind: type, array: np.ndarray) -> bool:
    if kind is int:
        return array.dtype.kind == "i"
    return array.dtype.kind == "f"


def validate_record(record: Mapping[str, Any], grammar: FormatGrammar) -> None:
    """Check that *record* can be written with *grammar*.

    Raises
    ------
    IncompleteRecordError
        If fields required by the grammar are missing.
    ValidationError
        If values have the wrong type, shape or repeat count.
    """
    fields = record.fields if isinstance(record, StructuredRecord) else record
    checker = _Checker()
    checker.check(grammar.fields, [fields], "")
    if checker.missing:
        raise IncompleteRecordError(
            f"Record is missing {len(checker.missing)} field(s) required by {grammar}: "
            + ", ".join(checker.missing),
            missing=checker.missing,
        )
    if checker.errors:
        raise ValidationError(
            f"Record does not fit {grammar}: {len(checker.errors)} error(s)",
            errors=checker.errors,
        )


# =============================================================================
# Rendering
# =============================================================================


class StructuredWriter:
    """Writer for one grammar.

    Parameters
    ----------
    grammar : FormatGrammar
        Layout of the file to write.
    template_engine : TemplateEngine, optional
        Engine used to render the file header.
    """

    def __init__(
        self,
        grammar: FormatGrammar,
        template_engine: TemplateEngine | None = None,
    ) -> None:
        self.grammar = grammar
        self._engine = template_engine or TemplateEngine()

    def render(
        self,
        record: Mapping[str, Any],
        model: str = "",
        generated: datetime | None = None,
    ) -> str:
        """Validate *record* and return the file text."""
        if isinstance(record, StructuredRecord):
            if record.kind is not self.grammar.kind or record.version is not self.grammar.version:
                raise VersionMismatchError(
                    f"Cannot write a {record.kind.value}/{record.version.value} record "
                    f"with the {self.grammar} layout",
                    expected=self.grammar.version.value,
                    found=record.version.value,
                )
            fields = record.fields
        else:
            fields = record
        validate_record(fields, self.grammar)

        buf = io.StringIO()
        buf.write(
            self._engine.render_template(
                HEADER_TEMPLATE,
                title=self.grammar.title,
                model=model or fields.get("modelName", ""),
                version=self.grammar.version.value,
                generated=generated,
            )
        )
        self._write_fields(buf, self.grammar.fields, fields)
        return buf.getvalue()

    def write(
        self,
        record: Mapping[str, Any],
        filepath: Path | str,
        model: str = "",
        generated: datetime | None = None,
    ) -> Path:
        """Write *record* to *filepath*, completely or not at all."""
        text = self.render(record, model=model, generated=generated)
        filepath = atomic_write_text(filepath, text)
        logger.info("Wrote %s file %s", self.grammar, filepath)
        return filepath

    def _write_fields(self, f: TextIO, specs: Sequence[FieldSpec], fields: Mapping[str, Any]) -> None:
        for spec in specs:
            value = fields[spec.name]
            if isinstance(spec, Repeat):
                for i, block in enumerate(value):
                    write_comment(f, f"---- {spec.name} {i + 1} of {len(value)} ----")
                    self._write_fields(f, spec.fields, block)
                continue

            write_label(f, spec.name, getattr(spec, "description", ""))
            if isinstance(spec, Scalar):
                text = value if spec.kind is str else format_number(_as_kind(value, spec.kind))
                f.write(f"{text}\n")
            elif isinstance(spec, Names):
                f.write(f"{format_names(value)}\n")
            elif isinstance(spec, Vector):
                array = np.asarray(value)
                if array.size:
                    f.write(format_row(array.astype(_numpy_type(spec.kind))) + "\n")
            elif isinstance(spec, Matrix):
                array = np.asarray(value).astype(_numpy_type(spec.kind))
                for line in format_matrix(array):
                    f.write(f"{line}\n")


def _numpy_type(kind: type) -> type:
    return np.int64 if kind is int else np.float64


def _as_kind(value: Any, kind: type) -> int | float:
    return int(value) if kind is int else float(value)


def write(
    record: Mapping[str, Any],
    grammar: FormatGrammar,
    filepath: Path | str,
    model: str = "",
    generated: datetime | None = None,
) -> Path:
    """Write *record* with *grammar* to *filepath*."""
    return StructuredWriter(grammar).write(record, filepath, model=model, generated=generated)


def write_record(
    record: StructuredRecord,
    filepath: Path | str,
    model: str = "",
    generated: datetime | None = None,
) -> Path:
    """Write a parsed record with the grammar of its kind and version."""
    grammar = get_grammar(record.kind, record.version)
    return write(record, grammar, filepath, model=model, generated=generated)
