"""
Multi-model collections for cross-model comparison.

This module combines named model records into one ordered collection:

- :class:`ModelCollection`: immutable, ordered mapping of model name to
  :class:`~pyjjm.core.records.ModelRecord`
- :func:`combine_models`: build a collection, rejecting duplicate names
- :func:`rename_models`: replace the display names used in legends

Insertion order is significant: it drives the legend order of
cross-model plots.

Example
-------
>>> from pyjjm.core.collection import combine_models, rename_models
>>> models = combine_models(("h1_0.00", mod1), ("h1_0.01", mod2))  # doctest: +SKIP
>>> models.names  # doctest: +SKIP
['h1_0.00', 'h1_0.01']
>>> renamed = rename_models(models, ["h=0.8", "h=0.65"])  # doctest: +SKIP
>>> renamed.display_names  # doctest: +SKIP
['h=0.8', 'h=0.65']
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable, Iterator, Mapping, Sequence
from types import MappingProxyType
from typing import Union

from pyjjm.core.exceptions import DuplicateModelNameError, LengthMismatchError
from pyjjm.core.records import ModelRecord, ReportRecord

logger = logging.getLogger(__name__)


class ModelCollection(Mapping):
    """
    Ordered, uniquely keyed set of model records.

    Parameters
    ----------
    models : iterable of (str, ModelRecord)
        Name/record pairs in the order they should appear.

    Raises
    ------
    DuplicateModelNameError
        If a name appears more than once.
    """

    __slots__ = ("_models",)

    def __init__(self, models: Iterable[tuple[str, ModelRecord]] = ()) -> None:
        ordered: dict[str, ModelRecord] = {}
        for name, record in models:
            if name in ordered:
                raise DuplicateModelNameError(name)
            ordered[name] = record
        self._models = MappingProxyType(ordered)

    def __getitem__(self, name: str) -> ModelRecord:
        return self._models[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._models)

    def __len__(self) -> int:
        return len(self._models)

    def __repr__(self) -> str:
        return f"ModelCollection({self.names!r})"

    @property
    def names(self) -> list[str]:
        """Collection keys, in insertion order."""
        return list(self._models)

    @property
    def display_names(self) -> list[str]:
        """Display names stored in each model's info, in insertion order."""
        return [record.info.model for record in self._models.values()]

    def by_stock(self) -> dict[str, dict[str, ReportRecord]]:
        """Return ``{model: {stock: ReportRecord}}`` in collection order."""
        return {name: dict(record.output) for name, record in self._models.items()}


ModelEntry = Union[tuple[str, ModelRecord], Sequence[tuple[str, ModelRecord]], ModelCollection]


def _flatten(entries: Iterable[ModelEntry]) -> Iterator[tuple[str, ModelRecord]]:
    for entry in entries:
        if isinstance(entry, Mapping):
            yield from entry.items()
        elif (
            isinstance(entry, tuple)
            and len(entry) == 2
            and isinstance(entry[0], str)
            and isinstance(entry[1], ModelRecord)
        ):
            yield entry
        else:
            yield from _flatten(entry)


def combine_models(*models: ModelEntry) -> ModelCollection:
    """
    Combine models into one collection.

    Parameters
    ----------
    *models : (str, ModelRecord), sequence of pairs, or ModelCollection
        Models in the order they should appear.  Collections (such as the
        one-entry collection returned by reading a model) are flattened.

    Returns
    -------
    ModelCollection
        New collection; the arguments are not modified.

    Raises
    ------
    DuplicateModelNameError
        If a model name repeats.
    """
    collection = ModelCollection(_flatten(models))
    logger.info("Combined %d models: %s", len(collection), ", ".join(collection.names))
    return collection


def rename_models(collection: ModelCollection, new_names: Sequence[str]) -> ModelCollection:
    """
    Replace the display name of each model, positionally.

    Collection keys and order are unchanged; only ``info.model`` of each
    record is replaced.

    Parameters
    ----------
    collection : ModelCollection
        Models to rename.
    new_names : sequence of str
        One display name per model.

    Returns
    -------
    ModelCollection
        New collection holding renamed copies of the records.

    Raises
    ------
    LengthMismatchError
        If ``len(new_names) != len(collection)``.
    """
    if isinstance(new_names, str):
        new_names = [new_names]
    if len(new_names) != len(collection):
        raise LengthMismatchError(len(collection), len(new_names))

    renamed = []
    for (key, record), display in zip(collection.items(), new_names):
        info = dataclasses.replace(record.info, model=display)
        renamed.append((key, dataclasses.replace(record, info=info)))
    return ModelCollection(renamed)
