"""Custom exceptions for pyjjm package."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path


class PyJJMError(Exception):
    """Base exception for all pyjjm errors."""

    pass


class ValidationError(PyJJMError):
    """Error raised when a record fails structural validation."""

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class JJMIOError(PyJJMError):
    """Error related to file I/O operations."""

    pass


class MalformedInputError(JJMIOError):
    """Error raised when a file does not match its expected layout.

    Carries the location of the failure where it is known: the file path,
    the field being parsed and the 1-based line number.
    """

    def __init__(
        self,
        message: str,
        line_number: int | None = None,
        field: str | None = None,
        filepath: Path | str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.line_number = line_number
        self.field = field
        self.filepath = Path(filepath) if filepath is not None else None

    def __str__(self) -> str:
        location = []
        if self.filepath is not None:
            location.append(str(self.filepath))
        if self.line_number is not None:
            location.append(f"line {self.line_number}")
        if self.field:
            location.append(f"field '{self.field}'")
        if not location:
            return self.message
        return f"{self.message} ({', '.join(location)})"


class VersionMismatchError(JJMIOError):
    """Error raised when a file is read with the grammar of another version."""

    def __init__(
        self,
        message: str,
        expected: str | None = None,
        found: str | None = None,
    ) -> None:
        super().__init__(message)
        self.expected = expected
        self.found = found


class IncompleteRecordError(JJMIOError):
    """Error raised when a record lacks fields required to write it."""

    def __init__(self, message: str, missing: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.missing = list(missing)


class CollectionError(PyJJMError):
    """Error related to model collection operations."""

    pass


class DuplicateModelNameError(CollectionError):
    """Error raised when two models share the same name in a collection."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Duplicate model name: {name!r}")
        self.name = name


class LengthMismatchError(CollectionError):
    """Error raised when a sequence does not match the size it pairs with."""

    def __init__(self, expected: int, got: int, what: str = "names") -> None:
        super().__init__(f"Expected {expected} {what}, got {got}")
        self.expected = expected
        self.got = got
