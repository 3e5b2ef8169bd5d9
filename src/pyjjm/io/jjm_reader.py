"""
Token-level reading utilities for JJM text files.

JJM control and data files are free-format: values are separated by
whitespace and may span lines, and ``#`` starts a comment line.  The
model's own reader labels each section with a comment naming the field
(``#Fcaton``), which we keep as a *label* so the structured parser can
detect a file that is out of step with its grammar.

Every ``io/`` reader should import helpers from this module rather than
defining its own copy.
"""

from __future__ import annotations

from collections import deque
from pathlib import Path

from pyjjm.core.exceptions import MalformedInputError

# Full-line comment character for JJM files
COMMENT_CHAR = "#"

# Separator of name lists such as "N_Chile%SC_Chile_PS%FarNorth"
NAME_SEPARATOR = "%"


def is_comment_line(line: str) -> bool:
    """Check if line is a JJM comment or blank.

    Comments may be indented.
    """
    stripped = line.strip()
    return not stripped or stripped.startswith(COMMENT_CHAR)


def comment_label(line: str) -> str:
    """Return the label of a comment line.

    The label is the first word after the ``#`` marker with any trailing
    ``:`` removed, or ``""`` for an empty comment.

    >>> comment_label("#Fcaton")
    'Fcaton'
    >>> comment_label("# years: first and last")
    'years'
    """
    body = line.strip().lstrip(COMMENT_CHAR).strip()
    if not body:
        return ""
    return body.split()[0].rstrip(":")


def split_names(value: str) -> list[str]:
    """Split a ``%``-separated name list, dropping empty entries."""
    return [name.strip() for name in value.split(NAME_SEPARATOR) if name.strip()]


def parse_int(
    value: str,
    context: str = "",
    line_number: int | None = None,
    filepath: Path | str | None = None,
) -> int:
    """Parse a string as an integer with descriptive error on failure.

    Integral floats such as ``"3.0"`` are accepted; ``"3.5"`` is not.

    Parameters
    ----------
    value : str
        The string to parse.
    context : str
        Name of the field being parsed (for error messages).
    line_number : int, optional
        Line number in the source file (for error messages).
    filepath : Path or str, optional
        Source file (for error messages).
    """
    try:
        return int(value)
    except (ValueError, TypeError):
        pass
    try:
        number = parse_float(value, context, line_number, filepath)
    except MalformedInputError:
        number = None
    if number is None or not number.is_integer():
        raise MalformedInputError(
            f"Expected integer, got {value!r}",
            line_number=line_number,
            field=context or None,
            filepath=filepath,
        )
    return int(number)


def parse_float(
    value: str,
    context: str = "",
    line_number: int | None = None,
    filepath: Path | str | None = None,
) -> float:
    """Parse a string as a float with descriptive error on failure.

    Fortran double-precision exponents (``1.5D+02``) are accepted.
    """
    try:
        return float(value.replace("D", "E").replace("d", "e"))
    except (ValueError, TypeError, AttributeError) as exc:
        raise MalformedInputError(
            f"Expected number, got {value!r}",
            line_number=line_number,
            field=context or None,
            filepath=filepath,
        ) from exc


class TokenReader:
    """Forward-only token reader over the lines of a JJM file.

    The whole file is held in memory; the file handle is closed as soon
    as the lines are loaded.  Tokens are consumed with
    :meth:`next_scalar`, :meth:`next_vector` and :meth:`next_line`.
    Comment and blank lines are skipped transparently, but their labels
    are remembered until the next token is consumed.

    Parameters
    ----------
    lines : list[str]
        Raw file lines.
    source : str or Path
        Name used in error messages.
    """

    __slots__ = ("_lines", "_pos", "_pending", "_labels", "_line_num", "source")

    def __init__(self, lines: list[str], source: Path | str = "<memory>") -> None:
        self._lines = lines
        self._pos = 0
        self._pending: deque[str] = deque()
        self._labels: list[str] = []
        self._line_num = 0
        self.source = source

    @classmethod
    def from_file(cls, filepath: Path | str) -> TokenReader:
        """Load a file into a reader."""
        filepath = Path(filepath)
        with open(filepath) as f:
            lines = f.read().splitlines()
        return cls(lines, source=filepath)

    @classmethod
    def from_text(cls, text: str, source: Path | str = "<memory>") -> TokenReader:
        return cls(text.splitlines(), source=source)

    @property
    def line_number(self) -> int:
        """1-based line number of the last consumed token."""
        return self._line_num

    # ------------------------------------------------------------------
    # Line handling
    # ------------------------------------------------------------------

    def _advance_to_data(self) -> bool:
        """Skip comment lines up to the next data line without consuming it.

        Returns ``False`` at EOF.
        """
        while self._pos < len(self._lines):
            line = self._lines[self._pos]
            if not is_comment_line(line):
                return True
            label = comment_label(line)
            if label:
                self._labels.append(label)
            self._pos += 1
        return False

    def _fill(self, field: str) -> None:
        """Load the tokens of the next data line, raising at EOF."""
        if not self._advance_to_data():
            raise MalformedInputError(
                "Unexpected end of file",
                line_number=self._pos,
                field=field or None,
                filepath=self.source,
            )
        self._pending.extend(self._lines[self._pos].split())
        self._pos += 1
        self._line_num = self._pos

    def _take(self, field: str) -> str:
        if not self._pending:
            self._fill(field)
        self._labels.clear()
        return self._pending.popleft()

    def pending_labels(self) -> list[str]:
        """Return labels of comments between the last token and the next one.

        Only meaningful at a line boundary; returns ``[]`` while tokens of
        the current line remain.
        """
        if self._pending:
            return []
        self._advance_to_data()
        return list(self._labels)

    def at_end(self) -> bool:
        """Return ``True`` if no data tokens remain."""
        return not self._pending and not self._advance_to_data()

    # ------------------------------------------------------------------
    # Token access
    # ------------------------------------------------------------------

    def _coerce(self, token: str, kind: type, field: str) -> int | float | str:
        if kind is int:
            return parse_int(token, field, self._line_num, self.source)
        if kind is float:
            return parse_float(token, field, self._line_num, self.source)
        return token

    def next_scalar(self, kind: type = float, field: str = "") -> int | float | str:
        """Consume one token and coerce it to *kind* (``int``, ``float``, ``str``)."""
        return self._coerce(self._take(field), kind, field)

    def next_vector(self, n: int, kind: type = float, field: str = "") -> list:
        """Consume *n* tokens, which may span several lines."""
        return [self._coerce(self._take(field), kind, field) for _ in range(n)]

    def next_line(self, field: str = "") -> str:
        """Consume the rest of the current line, or the next data line.

        Used for free-text values (file names, ``%``-separated name lists).
        """
        if not self._pending:
            self._fill(field)
        self._labels.clear()
        value = " ".join(self._pending)
        self._pending.clear()
        return value
