"""Parameter cache tying the writer, parser and applier together."""

from __future__ import annotations

import logging
from collections.abc import Collection
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from .applier import ApplyReport, apply_snapshot
from .config import CacheConfig
from .errors import (
    MissingResultAtPointError,
    RequestedPointError,
    RequestedPointMismatchError,
    RequestedPointOutOfRangeError,
)
from .parser import parse_snapshots
from .scan import Scanner
from .snapshot import SnapshotCollection
from .store import ParameterStore, fixed_names
from .writer import SnapshotWriter, label_1d, label_2d, open_collection

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CacheReport:
    """Summary of one cache file write."""

    path: Path
    solutions: int = 0
    requested_points: int = 0
    issues: list[RequestedPointError] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.solutions + self.requested_points


class ParameterCache:
    """Saves fit solutions to a cache file and restores them as start values.

    The loaded collection is replaced wholesale on every successful load; a
    missing file leaves the previous collection untouched.
    """

    def __init__(self, config: CacheConfig | None = None) -> None:
        self._config = config if config is not None else CacheConfig()
        self._collection = SnapshotCollection.not_loaded()

    @property
    def config(self) -> CacheConfig:
        return self._config

    @property
    def collection(self) -> SnapshotCollection:
        return self._collection

    @property
    def loaded(self) -> bool:
        return self._collection.loaded

    def count(self) -> int:
        return self._collection.count()

    def cache_parameters(
        self,
        scanner: Scanner,
        path: Path,
        *,
        timestamp: datetime | None = None,
    ) -> CacheReport:
        """Write the scanner's solutions and the requested points to ``path``.

        A requested point whose scan cell holds no result stops the write of
        any further requested points; blocks already written stay in the file
        and :class:`MissingResultAtPointError` is raised once it is closed.
        """
        verbose = self._config.verbose
        report = CacheReport(path=Path(path))
        failure: MissingResultAtPointError | None = None
        with open_collection(
            path, scanner.solutions, timestamp=timestamp, verbose=verbose
        ) as writer:
            report.solutions = writer.count

            try:
                self._write_requested_1d(scanner, writer, report)
                self._write_requested_2d(scanner, writer, report)
            except MissingResultAtPointError as error:
                failure = error
            report.requested_points = writer.count - report.solutions

        if failure is not None:
            logger.error("%s Further requested points were not cached.", failure)
            report.issues.append(failure)
            raise failure
        return report

    def _write_requested_1d(
        self,
        scanner: Scanner,
        writer: SnapshotWriter,
        report: CacheReport,
    ) -> None:
        points = self._config.save_nuisances_1d
        if not points:
            return
        written = 0
        for point in points:
            result = scanner.grid_1d.result_at(point) if scanner.grid_1d else None
            if result is None:
                raise MissingResultAtPointError((point,))
            writer.write_solution(result, label_1d(scanner.scan_var1_name, point))
            written += 1
        if self._config.verbose:
            logger.info("Cached %d further 1-D points", written)

    def _write_requested_2d(
        self,
        scanner: Scanner,
        writer: SnapshotWriter,
        report: CacheReport,
    ) -> None:
        points_x = self._config.save_nuisances_2dx
        points_y = self._config.save_nuisances_2dy
        if not points_x and not points_y:
            return
        if len(points_x) != len(points_y):
            mismatch = RequestedPointMismatchError(len(points_x), len(points_y))
            logger.error("%s", mismatch)
            report.issues.append(mismatch)
            return

        grid = scanner.grid_2d
        written = 0
        for x, y in zip(points_x, points_y):
            if grid is None:
                raise MissingResultAtPointError((x, y))
            x_bin, y_bin = grid.locate(x, y)
            if not grid.in_range(x_bin, y_bin):
                out_of_range = RequestedPointOutOfRangeError((x, y))
                logger.warning("%s", out_of_range)
                report.issues.append(out_of_range)
                continue
            result = grid.result_at_bins(x_bin, y_bin)
            if result is None:
                raise MissingResultAtPointError((x, y))
            label = label_2d(scanner.scan_var1_name, x, scanner.scan_var2_name, y)
            writer.write_solution(result, label)
            written += 1
        if self._config.verbose:
            logger.info("Cached %d further 2-D points", written)

    def load(self, path: Path) -> bool:
        """Load starting values from ``path``.

        Returns:
            True if a file was loaded.
        """
        collection = parse_snapshots(path, verbose=self._config.verbose)
        if not collection.loaded:
            return False
        self._collection = collection
        return True

    def set_point(
        self,
        store: ParameterStore,
        index: int,
        fixed: Collection[str] | None = None,
    ) -> ApplyReport:
        """Apply snapshot ``index`` to ``store``.

        Without an explicit ``fixed`` set, the store's constant variables and
        the configured fix parameters are left untouched.
        """
        if fixed is None:
            fixed = store.constant_names() | fixed_names(self._config.fix_parameters)
        return apply_snapshot(
            self._collection,
            index,
            store,
            fixed,
            verbose=self._config.verbose,
        )

    def debug_print(self) -> str:
        """Log and return the listing of all loaded snapshots."""
        text = "\n".join(self._collection.describe())
        logger.info("%s", text)
        return text


__all__ = ["CacheReport", "ParameterCache"]
