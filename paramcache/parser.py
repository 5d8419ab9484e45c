"""Parsing of parameter cache files back into snapshot collections."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import IO

from .errors import MalformedRecordError, MissingSourceError
from .snapshot import Snapshot, SnapshotCollection

logger = logging.getLogger(__name__)

SOLUTION_MARKER = "----"
COMMENT_MARKER = "#"


def parse_snapshot_lines(
    lines: Iterable[str],
    source: str = "<string>",
) -> SnapshotCollection:
    """Parse cache-format lines into a loaded collection.

    Blank lines and ``#`` comments are skipped, a line starting with ``----``
    opens a new snapshot, and any other line assigns its second token as the
    value of the parameter named by the first. Tokens past the value are the
    error columns and are ignored.

    Raises:
        MalformedRecordError: For a data line before the first solution
            marker, a data line with a single token, or a non-numeric value.
    """
    blocks: list[dict[str, float]] = []
    for line_number, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line.startswith(COMMENT_MARKER):
            continue
        if line.startswith(SOLUTION_MARKER):
            blocks.append({})
            continue

        current = len(blocks) - 1 if blocks else None
        if current is None:
            raise MalformedRecordError(
                "parameter line before the first solution marker",
                source=source,
                line_number=line_number,
                line=raw,
            )
        tokens = line.split()
        if len(tokens) < 2:
            raise MalformedRecordError(
                "expected a parameter name followed by a value",
                source=source,
                line_number=line_number,
                line=raw,
                solution_index=current,
            )
        name, text = tokens[0], tokens[1]
        try:
            value = float(text)
        except ValueError as error:
            raise MalformedRecordError(
                f"value of {name!r} is not a number",
                source=source,
                line_number=line_number,
                line=raw,
                solution_index=current,
            ) from error
        blocks[current][name] = value

    return SnapshotCollection.from_snapshots(Snapshot(values) for values in blocks)


def _decoded_lines(handle: IO[bytes], source: str) -> Iterator[str]:
    for line_number, raw in enumerate(handle, start=1):
        try:
            yield raw.decode("utf-8")
        except UnicodeDecodeError as error:
            raise MalformedRecordError(
                f"line is not valid UTF-8 ({error.reason})",
                source=source,
                line_number=line_number,
                line=raw.decode("utf-8", errors="replace"),
            ) from error


def parse_snapshots(
    path: Path,
    *,
    verbose: bool = False,
    missing_ok: bool = True,
) -> SnapshotCollection:
    """Load a cache file.

    By default a missing file is not fatal: the error is logged and a
    collection in the not-loaded state is returned so the caller can carry on
    without cached starting values. With ``missing_ok=False`` it raises
    :class:`MissingSourceError` instead.
    """
    source = Path(path)
    if not source.is_file():
        if not missing_ok:
            raise MissingSourceError(source)
        logger.error("Parameter cache file not found: %s", source)
        return SnapshotCollection.not_loaded()

    if verbose:
        logger.info("Loading parameters from file %s", source)
    with source.open("rb") as handle:
        collection = parse_snapshot_lines(
            _decoded_lines(handle, str(source)), source=str(source)
        )
    if verbose:
        for line in collection.describe():
            logger.info("%s", line)
    return collection


__all__ = ["parse_snapshot_lines", "parse_snapshots"]
