"""
Load and write complete JJM models.

Reading a model resolves its files through :class:`JJMFileConfig`,
detects the format version from the control file, parses the control and
data files and, when the model has been run, its parameter, yield and
per-stock report files.

Example
-------
>>> from pyjjm.io.model_loader import compare_models
>>> models = compare_models(["mod1", "mod2"], base_path="assessment")  # doctest: +SKIP
>>> models.names  # doctest: +SKIP
['mod1', 'mod2']
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from pyjjm.core.collection import ModelCollection, combine_models
from pyjjm.core.exceptions import ValidationError
from pyjjm.core.records import ControlRecord, DataRecord, ModelInfo, ModelRecord, StructuredRecord
from pyjjm.core.version import DEFAULT_VERSION, FileKind, FormatVersion
from pyjjm.io.config import JJMFileConfig
from pyjjm.io.grammar import detect_version, get_grammar
from pyjjm.io.jjm_writer import atomic_write_text
from pyjjm.io.parser import parse_file
from pyjjm.io.reports import read_parameters, read_reports, read_yield
from pyjjm.io.writer import StructuredWriter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelConfig:
    """Control and data records of one model, without run outputs."""

    control: ControlRecord
    data: DataRecord


def detect_file_version(filepath: Path | str, kind: FileKind | str) -> FormatVersion:
    """Infer the format version of a file, falling back to the default.

    A file whose labels fit no version, or fit both, is reported as the
    default version; parsing it then decides whether it really is one.
    """
    with open(filepath) as f:
        lines = f.read().splitlines()
    version = detect_version(lines, kind)
    if version is None:
        logger.debug("Could not infer version of %s, assuming %s", filepath, DEFAULT_VERSION)
        return DEFAULT_VERSION
    return version


def read_external_file(
    filepath: Path | str,
    kind: FileKind | str,
    version: FormatVersion | str | None = None,
) -> StructuredRecord:
    """Parse a standalone control or data file.

    Args:
        filepath: Path to the file
        kind: ``"control"`` or ``"data"``
        version: Format version; inferred from the file when omitted

    Returns:
        ControlRecord or DataRecord
    """
    if version is None:
        version = detect_file_version(filepath, kind)
    return parse_file(filepath, kind, version)


def check_pairing(control: ControlRecord, data: DataRecord) -> None:
    """Check that a control file describes its data file.

    Raises:
        ValidationError: If ages, fishery or index names differ, if the
            reference years fall outside the data years, or if a fishery or
            index is assigned to a stock that does not exist.
    """
    errors = []
    if control.version is not data.version:
        errors.append(
            f"control is {control.version.value} but data is {data.version.value}"
        )
    if control.ages != data.ages:
        errors.append(f"ages differ: control {control.ages}, data {data.ages}")
    first, last = data.years
    ref_first, ref_last = control.ref_years
    if not first <= ref_first <= ref_last <= last:
        errors.append(
            f"reference years {control.ref_years} outside data years {data.years}"
        )
    if control.fishery_names != data.fishery_names:
        errors.append(
            f"fishery names differ: control {control.fishery_names}, data {data.fishery_names}"
        )
    if control.index_names != data.index_names:
        errors.append(
            f"index names differ: control {control.index_names}, data {data.index_names}"
        )
    if control.version.is_multi_stock:
        for name in ("Fstock", "Istock"):
            bad = [int(s) for s in control[name] if not 1 <= s <= control.n_stock]
            if bad:
                errors.append(f"{name} refers to unknown stocks {bad} (nStock={control.n_stock})")
    if errors:
        raise ValidationError(
            f"Control file {control.source} does not match data file {data.source}",
            errors=errors,
        )


def read_config(
    model: str,
    base_path: Path | str = ".",
    config: JJMFileConfig | None = None,
    version: FormatVersion | str | None = None,
) -> ModelConfig:
    """Read the control and data files of a model."""
    config = config or JJMFileConfig(base_path)
    ctl_path = config.control_file(model)
    if version is None:
        version = detect_file_version(ctl_path, FileKind.CONTROL)

    control = parse_file(ctl_path, FileKind.CONTROL, version)
    data = parse_file(config.data_file(control.data_file), FileKind.DATA, version)
    check_pairing(control, data)
    return ModelConfig(control=control, data=data)


def read_model(
    model: str,
    base_path: Path | str = ".",
    config: JJMFileConfig | None = None,
    version: FormatVersion | str | None = None,
) -> ModelCollection:
    """
    Read all files of one model.

    Parameter, yield and report files are optional as a whole: a model
    that has not been run has none of them.  Once any report file exists,
    every stock must have one.

    Parameters
    ----------
    model : str
        Model name, the stem of its control file.
    base_path : Path or str
        Directory holding the config, input and results directories.
    config : JJMFileConfig, optional
        File layout; overrides ``base_path``.
    version : FormatVersion or str, optional
        Format version; inferred from the control file when omitted.

    Returns
    -------
    ModelCollection
        One-entry collection keyed by *model*.
    """
    config = config or JJMFileConfig(base_path)
    pair = read_config(model, config=config, version=version)
    control, data = pair.control, pair.data

    files = {
        "control": config.control_file(model),
        "data": config.data_file(control.data_file),
    }

    par_path = config.parameter_file(model)
    parameters = read_parameters(par_path) if par_path.exists() else None
    if parameters is not None:
        files["parameters"] = par_path

    yld_path = config.yield_file(model)
    yields = read_yield(yld_path) if yld_path.exists() else None
    if yields is not None:
        files["yield"] = yld_path

    report_paths = config.report_files(model, control.n_stock)
    if any(p.exists() for p in report_paths):
        output = read_reports(report_paths, control.stock_names)
        for i, path in enumerate(report_paths, start=1):
            files[f"report_{i}"] = path
    else:
        logger.warning("No report files for model %s in %s", model, config.output_path)
        output = {}

    record = ModelRecord(
        info=ModelInfo.from_records(model, control, data, files),
        data=data,
        control=control,
        parameters=parameters,
        yields=yields,
        output=output,
    )
    logger.info(
        "Read model %s (%s, %d stock(s))", model, control.version.value, control.n_stock
    )
    return ModelCollection([(model, record)])


def compare_models(
    names: Sequence[str],
    base_path: Path | str = ".",
    config: JJMFileConfig | None = None,
    version: FormatVersion | str | None = None,
) -> ModelCollection:
    """Read several models and combine them, in the order given.

    Every model is read before any is combined; the first failure
    propagates and no collection is returned.
    """
    if isinstance(names, str):
        names = [names]
    models = [read_model(name, base_path, config=config, version=version) for name in names]
    return combine_models(*models)


def write_model(
    collection: ModelCollection,
    ctl_dir: Path | str,
    dat_dir: Path | str,
) -> dict[str, tuple[Path, Path]]:
    """
    Write the control and data files of every model in a collection.

    Each data record goes to ``<dat_dir>/<dataFile>`` as named by its
    control record, each control record to ``<ctl_dir>/<name>.ctl``.
    All files are rendered before the first one is written, so a record
    that fails validation leaves the directories untouched.

    Returns
    -------
    dict
        Model name to ``(control path, data path)``.
    """
    ctl_dir = Path(ctl_dir)
    dat_dir = Path(dat_dir)

    rendered = []
    for name, record in collection.items():
        control, data = record.control, record.data
        ctl_text = StructuredWriter(get_grammar(FileKind.CONTROL, control.version)).render(
            control, model=record.info.model
        )
        dat_text = StructuredWriter(get_grammar(FileKind.DATA, data.version)).render(
            data, model=record.info.model
        )
        rendered.append(
            (name, ctl_dir / f"{name}.ctl", ctl_text, dat_dir / control.data_file, dat_text)
        )

    written = {}
    for name, ctl_path, ctl_text, dat_path, dat_text in rendered:
        atomic_write_text(dat_path, dat_text)
        atomic_write_text(ctl_path, ctl_text)
        written[name] = (ctl_path, dat_path)
        logger.info("Wrote model %s: %s, %s", name, ctl_path, dat_path)
    return written
