"""
Unified JJM file line-writing utilities.

Mirrors ``jjm_reader.py`` on the output side: every ``io/`` writer should
import helpers from this module rather than defining its own copy.

Canonical helpers
-----------------
- ``write_comment``     -- write a JJM comment line (``# ...``)
- ``write_label``       -- write a field label line (``#Fcaton``)
- ``format_number``     -- format one number so it reads back exactly
- ``format_row``        -- format a vector as one line
- ``format_matrix``     -- format a matrix as right-aligned rows
- ``ensure_parent_dir`` -- create parent directories for an output path
- ``atomic_write_text`` -- write a whole file or nothing
"""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Sequence
from pathlib import Path
from typing import TextIO

import numpy as np

from pyjjm.io.jjm_reader import COMMENT_CHAR, NAME_SEPARATOR

logger = logging.getLogger(__name__)


def write_comment(f: TextIO, text: str = "") -> None:
    """Write a JJM comment line.

    Produces ``# <text>\\n``, or a bare ``#`` line for empty text.
    """
    f.write(f"{COMMENT_CHAR} {text}\n" if text else f"{COMMENT_CHAR}\n")


def write_label(f: TextIO, name: str, description: str = "") -> None:
    """Write the label line that precedes a field value.

    The label is written flush against the ``#`` so that it reads back as
    the field name.
    """
    if description:
        f.write(f"{COMMENT_CHAR}{name}  {description}\n")
    else:
        f.write(f"{COMMENT_CHAR}{name}\n")


def format_number(value: object) -> str:
    """Format an int or float so that parsing it returns the same value.

    Floats use the shortest representation that round-trips (``repr``).
    """
    if isinstance(value, (bool, np.bool_)):
        return str(int(value))
    if isinstance(value, (int, np.integer)):
        return str(int(value))
    return repr(float(value))


def format_row(values: Sequence[object] | np.ndarray, widths: Sequence[int] | None = None) -> str:
    """Format a vector as one whitespace-separated line.

    Args:
        values: Values of the row
        widths: Optional column widths for right alignment
    """
    texts = [format_number(v) for v in values]
    if widths is None:
        return " ".join(texts)
    return " ".join(f"{t:>{w}}" for t, w in zip(texts, widths))


def format_matrix(matrix: np.ndarray) -> list[str]:
    """Format a 2-D array as lines with right-aligned columns."""
    matrix = np.asarray(matrix)
    if matrix.size == 0:
        return []
    texts = [[format_number(v) for v in row] for row in matrix]
    widths = [max(len(row[j]) for row in texts) for j in range(matrix.shape[1])]
    return [" ".join(f"{t:>{w}}" for t, w in zip(row, widths)) for row in texts]


def format_names(names: Sequence[str]) -> str:
    """Join a name list with the ``%`` separator.

    An empty list is written as a lone ``%`` so that the line is not blank;
    blank lines are skipped by the reader.
    """
    if not names:
        return NAME_SEPARATOR
    return NAME_SEPARATOR.join(names)


def ensure_parent_dir(filepath: Path) -> None:
    """Create parent directories for *filepath* if they do not exist.

    Parameters
    ----------
    filepath : Path
        Target file path whose parent directory tree will be created.
    """
    filepath.parent.mkdir(parents=True, exist_ok=True)


def atomic_write_text(filepath: Path | str, text: str) -> Path:
    """Write *text* to *filepath* completely or not at all.

    The text goes to a temporary file in the destination directory which
    then replaces the destination.  On any failure the temporary file is
    removed and the destination is left as it was.

    Returns:
        Path to the written file
    """
    filepath = Path(filepath)
    ensure_parent_dir(filepath)

    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{filepath.name}.", suffix=".tmp", dir=str(filepath.parent)
    )
    try:
        with os.fdopen(fd, "w") as f:
            f.write(text)
        os.replace(tmp_name, filepath)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise
    logger.debug("Replaced %s (%d bytes)", filepath, len(text))
    return filepath
