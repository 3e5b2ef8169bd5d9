"""
Declarative grammars of JJM control and data files.

The JJM executable reads its input files positionally: each value follows
the previous one and repetition counts are taken from values read
earlier in the same file (the number of fisheries, the number of stocks,
the age range, ...).  A grammar lists those fields in order so that the
structured parser and writer walk exactly the same layout.

Field descriptors
-----------------
- :class:`Scalar`  -- one ``int``, ``float`` or ``str`` value
- :class:`Vector`  -- a fixed or referenced number of values
- :class:`Matrix`  -- ``rows x cols`` values, one row per line
- :class:`Names`   -- a ``%``-separated list of names on one line
- :class:`Repeat`  -- a sub-grammar repeated a referenced number of times

Dimensions are an ``int``, the name of an integer scalar read earlier,
:func:`span` (length of an inclusive ``[first, last]`` range) or
:func:`size` (length of a name list).  References are resolved in the
innermost repeat block first, then outward.

Example
-------
>>> from pyjjm.core.version import FileKind, FormatVersion
>>> grammar = get_grammar(FileKind.CONTROL, FormatVersion.MS)
>>> grammar.fields[2].name
'nStock'
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from functools import cached_property
from typing import Any, Union

from pyjjm.core.exceptions import VersionMismatchError
from pyjjm.core.version import FileKind, FormatVersion
from pyjjm.io.jjm_reader import comment_label, is_comment_line

# =============================================================================
# Dimensions
# =============================================================================


@dataclass(frozen=True)
class Span:
    """Length of the inclusive range stored in a 2-vector field."""

    name: str


@dataclass(frozen=True)
class Size:
    """Length of a name-list field."""

    name: str


Dim = Union[int, str, Span, Size]


def span(name: str) -> Span:
    return Span(name)


def size(name: str) -> Size:
    return Size(name)


def lookup(name: str, scopes: Sequence[Mapping[str, Any]]) -> Any:
    """Find *name* in the innermost scope that defines it."""
    for scope in reversed(scopes):
        if name in scope:
            return scope[name]
    raise KeyError(name)


def resolve_dim(dim: Dim, scopes: Sequence[Mapping[str, Any]]) -> int:
    """Resolve a dimension against the values read so far.

    Raises
    ------
    KeyError
        If a referenced field has not been read.
    """
    if isinstance(dim, int):
        return dim
    if isinstance(dim, Span):
        first, last = lookup(dim.name, scopes)
        return max(int(last) - int(first) + 1, 0)
    if isinstance(dim, Size):
        return len(lookup(dim.name, scopes))
    return max(int(lookup(dim, scopes)), 0)


def describe_dim(dim: Dim) -> str:
    if isinstance(dim, Span):
        return f"span({dim.name})"
    if isinstance(dim, Size):
        return f"size({dim.name})"
    return str(dim)


# =============================================================================
# Field descriptors
# =============================================================================


@dataclass(frozen=True)
class FieldSpec:
    """Base class of field descriptors."""

    name: str


@dataclass(frozen=True)
class Scalar(FieldSpec):
    kind: type = float
    description: str = ""


@dataclass(frozen=True)
class Vector(FieldSpec):
    length: Dim = 1
    kind: type = float
    description: str = ""


@dataclass(frozen=True)
class Matrix(FieldSpec):
    rows: Dim = 1
    cols: Dim = 1
    kind: type = float
    description: str = ""


@dataclass(frozen=True)
class Names(FieldSpec):
    count: Dim | None = None
    description: str = ""


@dataclass(frozen=True)
class Repeat(FieldSpec):
    count: Dim = 1
    fields: tuple[FieldSpec, ...] = ()
    description: str = ""


def _leaf_names(fields: Iterable[FieldSpec]) -> Iterator[str]:
    for spec in fields:
        if isinstance(spec, Repeat):
            yield from _leaf_names(spec.fields)
        else:
            yield spec.name


# =============================================================================
# Grammar
# =============================================================================


@dataclass(frozen=True)
class FormatGrammar:
    """
    Ordered field layout of one (file kind, format version) pair.

    Attributes:
        kind: Control or data file
        version: Format version
        fields: Top-level field descriptors, in file order
        title: Human-readable file description used in written headers
    """

    kind: FileKind
    version: FormatVersion
    fields: tuple[FieldSpec, ...]
    title: str = ""

    def __post_init__(self) -> None:
        names = list(_leaf_names(self.fields))
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate field names in grammar: {duplicates}")

    @cached_property
    def field_names(self) -> frozenset[str]:
        """All leaf field names, including those inside repeat blocks."""
        return frozenset(_leaf_names(self.fields))

    @cached_property
    def required_labels(self) -> frozenset[str]:
        """Names of the top-level leaf fields."""
        return frozenset(s.name for s in self.fields if not isinstance(s, Repeat))

    def others(self) -> list[FormatGrammar]:
        """Grammars of the same file kind for other versions."""
        return [
            g for (kind, version), g in GRAMMARS.items()
            if kind is self.kind and version is not self.version
        ]

    def label_conflicts(self, labels: Iterable[str]) -> list[str]:
        """Return the reasons a set of file labels does not fit this grammar.

        A label known only to another version's grammar does not fit, nor
        does the absence of a top-level label only this version defines.
        Files without any known label cannot be judged and never conflict.
        """
        labels = set(labels)
        elsewhere: set[str] = set()
        for other in self.others():
            elsewhere |= other.field_names
        if not labels & (self.field_names | elsewhere):
            return []

        reasons = [
            f"label '{label}' is not part of the {self.version.value} layout"
            for label in sorted(labels & (elsewhere - self.field_names))
        ]
        reasons.extend(
            f"label '{label}' required by the {self.version.value} layout is missing"
            for label in sorted((self.required_labels - elsewhere) - labels)
        )
        return reasons

    def __str__(self) -> str:
        return f"{self.kind.value}/{self.version.value}"


# =============================================================================
# Concrete grammars
# =============================================================================

_DATA_FISHERIES = (
    Vector("years", 2, int, "first and last year"),
    Vector("ages", 2, int, "first and last age"),
    Vector("lengths", 2, int, "first and last length bin"),
    Scalar("Fnum", int, "number of fisheries"),
    Names("Fnames", "Fnum", "fishery names"),
    Matrix("Fcaton", "Fnum", span("years"), float, "total catch by fishery and year"),
    Matrix("Fcatonerr", "Fnum", span("years"), float, "catch CV by fishery and year"),
    Repeat(
        "fisheries",
        "Fnum",
        (
            Scalar("FnumyearsA", int, "number of years with age compositions"),
            Vector("Fageyears", "FnumyearsA", int, "years with age compositions"),
            Vector("Fagesample", "FnumyearsA", float, "effective sample sizes"),
            Matrix("Fagecomp", "FnumyearsA", span("ages"), float, "catch proportions at age"),
            Vector("Fwtatage", span("ages"), float, "mean weight at age in the catch"),
        ),
        "per-fishery age composition",
    ),
)

_DATA_INDICES = (
    Scalar("Inum", int, "number of abundance indices"),
    Names("Inames", "Inum", "index names"),
    Repeat(
        "indices",
        "Inum",
        (
            Scalar("Inumyears", int, "number of index years"),
            Vector("Iyears", "Inumyears", int, "index years"),
            Scalar("Imonths", float, "survey month"),
            Vector("Index", "Inumyears", float, "index values"),
            Vector("Indexerr", "Inumyears", float, "index standard errors"),
            Scalar("Inumageyears", int, "number of years with age compositions"),
            Vector("Iyearsage", "Inumageyears", int, "years with age compositions"),
            Vector("Iagesample", "Inumageyears", float, "effective sample sizes"),
            Matrix("Ipropage", "Inumageyears", span("ages"), float, "index proportions at age"),
            Vector("Iwtatage", span("ages"), float, "mean weight at age in the index"),
        ),
        "per-index observations",
    ),
)

_DATA_POPULATION = (
    Matrix("Pwtatage", span("ages"), 1, float, "population weight at age"),
    Matrix("Pmatatage", span("ages"), 1, float, "population maturity at age"),
)

_DATA_TAIL = (
    Scalar("Pspwn", float, "spawning month"),
    Matrix("Pageerr", span("ages"), span("ages"), float, "ageing error matrix"),
)

_CTL_HEADER = (
    Scalar("dataFile", str, "data file name"),
    Scalar("modelName", str, "model name"),
)

_CTL_STRUCTURE = (
    Vector("ages", 2, int, "first and last age"),
    Vector("refYears", 2, int, "first and last year of the reference period"),
    Names("Fnames", None, "fishery names"),
    Names("Inames", None, "index names"),
)

_CTL_STOCK_SETTINGS = (
    Scalar("SrType", int, "stock-recruitment type"),
    Scalar("AgeError", int, "use ageing error (0/1)"),
    Scalar("Retro", int, "retrospective years"),
    Vector("Steepness", 3, float, "prior mean, CV and phase"),
    Vector("SigmaR", 3, float, "prior mean, CV and phase"),
    Vector("Mest", 3, float, "natural mortality prior mean, CV and phase"),
)

_CTL_SELECTIVITY = tuple(
    Repeat(
        f"{prefix}sel",
        size(f"{prefix}names"),
        (
            Scalar(f"{prefix}seltype", int, "selectivity type"),
            Scalar(f"{prefix}nselages", int, "ages with selectivity parameters"),
            Scalar(f"{prefix}selphase", int, "estimation phase"),
            Scalar(f"{prefix}selcurv", float, "curvature penalty"),
            Scalar(f"{prefix}seldome", float, "dome-shape penalty"),
            Scalar(f"{prefix}nselchanges", int, "number of selectivity change years"),
            Vector(f"{prefix}selchangeyears", f"{prefix}nselchanges", int, "change years"),
            Vector(f"{prefix}selchangesigma", f"{prefix}nselchanges", float, "change CVs"),
            Vector(f"{prefix}selinit", span("ages"), float, "initial selectivity at age"),
        ),
        f"{label} selectivity",
    )
    for prefix, label in (("F", "fishery"), ("I", "index"))
)

_CTL_PROJECTION = (
    Scalar("Nproj", int, "number of projection years"),
    Scalar("nFscenarios", int, "number of F scenarios"),
    Vector("Fmult", "nFscenarios", float, "F multipliers of the projection scenarios"),
)

LEGACY_DATA = FormatGrammar(
    FileKind.DATA,
    FormatVersion.LEGACY,
    _DATA_FISHERIES + _DATA_INDICES + _DATA_POPULATION + _DATA_TAIL,
    title="JJM data file",
)

MS_DATA = FormatGrammar(
    FileKind.DATA,
    FormatVersion.MS,
    _DATA_FISHERIES + _DATA_INDICES + _DATA_TAIL,
    title="JJM data file (multi-stock)",
)

LEGACY_CONTROL = FormatGrammar(
    FileKind.CONTROL,
    FormatVersion.LEGACY,
    _CTL_HEADER + _CTL_STRUCTURE + _CTL_STOCK_SETTINGS + _CTL_SELECTIVITY + _CTL_PROJECTION,
    title="JJM control file",
)

MS_CONTROL = FormatGrammar(
    FileKind.CONTROL,
    FormatVersion.MS,
    _CTL_HEADER
    + (Scalar("nStock", int, "number of stocks"),)
    + _CTL_STRUCTURE
    + (
        Vector("Fstock", size("Fnames"), int, "stock of each fishery"),
        Vector("Istock", size("Inames"), int, "stock of each index"),
        Repeat(
            "stocks",
            "nStock",
            (Scalar("stockName", str, "stock name"),)
            + _CTL_STOCK_SETTINGS
            + (
                Vector("Pwtatage", span("ages"), float, "population weight at age"),
                Vector("Pmatatage", span("ages"), float, "population maturity at age"),
            ),
            "per-stock settings",
        ),
    )
    + _CTL_SELECTIVITY
    + _CTL_PROJECTION,
    title="JJM control file (multi-stock)",
)

GRAMMARS: dict[tuple[FileKind, FormatVersion], FormatGrammar] = {
    (g.kind, g.version): g for g in (LEGACY_DATA, MS_DATA, LEGACY_CONTROL, MS_CONTROL)
}


def get_grammar(kind: FileKind | str, version: FormatVersion | str) -> FormatGrammar:
    """Return the grammar for a file kind and format version."""
    kind = FileKind(kind)
    version = FormatVersion.from_tag(version)
    return GRAMMARS[(kind, version)]


# =============================================================================
# Version detection
# =============================================================================


def scan_labels(lines: Iterable[str]) -> set[str]:
    """Collect the labels of all comment lines."""
    return {comment_label(line) for line in lines if is_comment_line(line)} - {""}


def detect_version(lines: Sequence[str], kind: FileKind | str) -> FormatVersion | None:
    """Infer the format version of a file from its comment labels.

    Returns ``None`` if the labels fit no version or more than one.
    """
    labels = scan_labels(lines)
    fits = [
        g.version for (k, _), g in GRAMMARS.items()
        if k is FileKind(kind) and not g.label_conflicts(labels)
    ]
    return fits[0] if len(fits) == 1 else None


def check_version(lines: Sequence[str], grammar: FormatGrammar, source: object = None) -> None:
    """Fail fast if a file was written for another version of *grammar*.

    Raises
    ------
    VersionMismatchError
        If the file's labels belong to another version.
    """
    reasons = grammar.label_conflicts(scan_labels(lines))
    if not reasons:
        return
    found = detect_version(lines, grammar.kind)
    where = f"{source}: " if source is not None else ""
    raise VersionMismatchError(
        f"{where}not a {grammar.version.value} {grammar.kind.value} file ("
        + "; ".join(reasons)
        + ")",
        expected=grammar.version.value,
        found=found.value if found is not None else None,
    )


__all__ = [
    "Dim",
    "FieldSpec",
    "FormatGrammar",
    "GRAMMARS",
    "LEGACY_CONTROL",
    "LEGACY_DATA",
    "MS_CONTROL",
    "MS_DATA",
    "Matrix",
    "Names",
    "Repeat",
    "Scalar",
    "Size",
    "Span",
    "Vector",
    "check_version",
    "describe_dim",
    "detect_version",
    "get_grammar",
    "resolve_dim",
    "scan_labels",
    "size",
    "span",
]
