"""Serialisation of fit results into the parameter cache text format."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import Any, IO

from .errors import WriteTargetUnavailableError
from .results import FitResult

logger = logging.getLogger(__name__)

TOOL_IDENTITY = "paramcache"
NAME_WIDTH = 25
VALUE_WIDTH = 12
EXCLUDED_SUBSTRING = "obs"


def _format_timestamp(moment: datetime) -> str:
    return moment.strftime("%a %b %d %H:%M:%S %Y")


def format_fit_result(result: FitResult) -> list[str]:
    """Return the quality summary and parameter lines of one solution block.

    Floating and constant parameters are listed together sorted by name;
    names containing ``obs`` are observables and are left out.
    """
    lines = [
        f"### FCN: {result.min_nll:g}, EDM: {result.edm:g}",
        f"### COV quality: {result.cov_qual}, status: {result.status}, "
        f"confirmed: {'yes' if result.confirmed else 'no'}",
    ]
    parameters = sorted(
        (*result.floating_parameters(), *result.constant_parameters()),
        key=lambda parameter: parameter.name,
    )
    for parameter in parameters:
        if EXCLUDED_SUBSTRING in parameter.name:
            continue
        lines.append(
            f"{parameter.name:<{NAME_WIDTH}s} "
            f"{parameter.value:{VALUE_WIDTH}.6f} "
            f"{parameter.error_lo:{VALUE_WIDTH}.6f} "
            f"{parameter.error_hi:{VALUE_WIDTH}.6f}"
        )
    return lines


def label_1d(var_name: str, value: float) -> str:
    return f"--sn at {var_name} = {value:10.5f}"


def label_2d(x_name: str, x: float, y_name: str, y: float) -> str:
    return f"not glob min just min at {x_name} = {x:g} , {y_name} = {y:g}"


class SnapshotWriter:
    """Streams solution blocks into a cache file.

    The destination is truncated on open. Blocks are numbered with a running
    counter shared by primary solutions and requested points.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._handle: IO[str] = self._path.open("w", encoding="utf-8")
        except OSError as error:
            raise WriteTargetUnavailableError(
                self._path, error.strerror or str(error)
            ) from error
        self._count = 0

    def __enter__(self) -> SnapshotWriter:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        exc_tb: Any,
    ) -> None:
        self.close()

    def write_header(self, timestamp: datetime | None = None) -> None:
        """Write the identity, timestamp and column header comment lines."""
        moment = timestamp if timestamp is not None else datetime.now()
        self._handle.write(f"##### auto-generated by {TOOL_IDENTITY} ####### \n")
        self._handle.write(f"##### printed on {_format_timestamp(moment)} ######\n")
        self._handle.write(
            f"{'# ParameterName':<{NAME_WIDTH}s} "
            f"{'value':>{VALUE_WIDTH}s} "
            f"{'errLow':>{VALUE_WIDTH}s} "
            f"{'errHigh':>{VALUE_WIDTH}s}\n"
        )

    def write_solution(self, result: FitResult, label: str | None = None) -> int:
        """Append one solution block and return its index."""
        index = self._count
        title = f"SOLUTION {index}" if label is None else f"SOLUTION {index} ({label})"
        self._handle.write("\n")
        self._handle.write(f"----- {title} -----\n")
        for line in format_fit_result(result):
            self._handle.write(f"{line}\n")
        self._handle.flush()
        self._count += 1
        return index

    def close(self) -> None:
        if not self._handle.closed:
            self._handle.close()

    @property
    def count(self) -> int:
        """Number of blocks written so far."""
        return self._count

    @property
    def path(self) -> Path:
        return self._path


def open_collection(
    path: Path,
    primary: Sequence[FitResult],
    *,
    timestamp: datetime | None = None,
    verbose: bool = False,
) -> SnapshotWriter:
    """Open ``path`` and write the header and the primary solution blocks.

    The returned writer is positioned for requested-point blocks and must be
    closed by the caller, typically with a ``with`` statement.
    """
    logger.info("Saving parameters to: %s", path)
    writer = SnapshotWriter(path)
    try:
        writer.write_header(timestamp)
        for result in primary:
            writer.write_solution(result)
    except BaseException:
        writer.close()
        raise
    if verbose:
        logger.info("Cached %d solutions", writer.count)
    return writer


def write_collection(
    path: Path,
    primary: Sequence[FitResult],
    requested_1d: Sequence[tuple[float, FitResult]] = (),
    requested_2d: Sequence[tuple[float, float, FitResult]] = (),
    *,
    var1_name: str = "var1",
    var2_name: str = "var2",
    timestamp: datetime | None = None,
    verbose: bool = False,
) -> int:
    """Write primary solutions followed by requested points to ``path``.

    Returns:
        The number of solution blocks written.
    """
    with open_collection(
        path, primary, timestamp=timestamp, verbose=verbose
    ) as writer:
        for value, result in requested_1d:
            writer.write_solution(result, label_1d(var1_name, value))
        for x, y, result in requested_2d:
            writer.write_solution(result, label_2d(var1_name, x, var2_name, y))
        if verbose and (requested_1d or requested_2d):
            logger.info("Cached %d further points", writer.count - len(primary))
        return writer.count


__all__ = [
    "SnapshotWriter",
    "format_fit_result",
    "label_1d",
    "label_2d",
    "open_collection",
    "write_collection",
]
