"""Applying a loaded snapshot to a live parameter store."""

from __future__ import annotations

import logging
from collections.abc import Collection
from dataclasses import dataclass, field

from .errors import IndexOutOfRangeError, NotYetLoadedError
from .snapshot import SnapshotCollection
from .store import ParameterStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ApplyReport:
    """Outcome of applying one snapshot, grouped by parameter name."""

    index: int
    applied: list[str] = field(default_factory=list)
    kept_constant: list[str] = field(default_factory=list)
    unknown: list[str] = field(default_factory=list)


def apply_snapshot(
    collection: SnapshotCollection,
    index: int,
    store: ParameterStore,
    fixed_names: Collection[str] = (),
    *,
    verbose: bool = False,
) -> ApplyReport:
    """Write the values of snapshot ``index`` into ``store``.

    Names in ``fixed_names`` are never written. Names the store does not know
    are skipped without error, since a snapshot may come from a model with
    more parameters than the current one.

    Raises:
        NotYetLoadedError: If ``collection`` was never loaded.
        IndexOutOfRangeError: If ``index`` does not address a snapshot.
    """
    if not collection.loaded:
        raise NotYetLoadedError()
    if index < 0 or index >= collection.count():
        raise IndexOutOfRangeError(index, collection.count())

    fixed = frozenset(fixed_names)
    report = ApplyReport(index=index)
    if verbose:
        logger.info("Setting parameter values for point %d", index)

    for name, value in collection[index].items():
        if name in fixed:
            report.kept_constant.append(name)
            if verbose and store.has_variable(name):
                logger.info(
                    "\tLeft %-15s = %12.6f constant", name, store.get_value(name)
                )
            continue
        if not store.has_variable(name):
            report.unknown.append(name)
            continue
        store.set_value(name, value)
        report.applied.append(name)
        if verbose:
            logger.info("\tSet  %-15s = %12.6f", name, store.get_value(name))
    return report


__all__ = ["ApplyReport", "apply_snapshot"]
