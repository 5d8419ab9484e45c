"""Exception types raised by the parameter cache."""

from __future__ import annotations

from pathlib import Path


class ParameterCacheError(Exception):
    """Base class for every error raised by the parameter cache."""


class MissingSourceError(ParameterCacheError, FileNotFoundError):
    """Raised when a cache file to be loaded does not exist."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        super().__init__(f"Parameter cache file not found: {self.path}")


class MalformedRecordError(ParameterCacheError, ValueError):
    """Raised when a line of a cache file cannot be parsed."""

    def __init__(
        self,
        reason: str,
        *,
        source: str,
        line_number: int,
        line: str,
        solution_index: int | None = None,
    ) -> None:
        self.reason = reason
        self.source = source
        self.line_number = line_number
        self.line = line
        self.solution_index = solution_index
        where = f"{source}:{line_number}"
        if solution_index is not None:
            where += f" (solution {solution_index})"
        super().__init__(f"{where}: {reason}: {line.rstrip()!r}")


class WriteTargetUnavailableError(ParameterCacheError, OSError):
    """Raised when the destination of a cache file cannot be opened."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = Path(path)
        super().__init__(f"Cannot write parameter cache to {self.path}: {reason}")


class NotYetLoadedError(ParameterCacheError, RuntimeError):
    """Raised when a snapshot is applied before any cache file was loaded."""

    def __init__(self) -> None:
        super().__init__(
            "Can't set starting point as no starting values have been loaded."
        )


class IndexOutOfRangeError(ParameterCacheError, IndexError):
    """Raised when a snapshot index does not exist in the loaded collection."""

    def __init__(self, index: int, count: int) -> None:
        self.index = index
        self.count = count
        super().__init__(
            f"Parameter point number {index} not found "
            f"(collection holds {count} solutions)."
        )


class RequestedPointError(ParameterCacheError):
    """Base class for problems with explicitly requested scan points."""


class RequestedPointMismatchError(RequestedPointError, ValueError):
    """Raised when x and y lists of requested 2-D points differ in length."""

    def __init__(self, x_count: int, y_count: int) -> None:
        self.x_count = x_count
        self.y_count = y_count
        super().__init__(
            "Requested 2-D points have different sizes: "
            f"{x_count} x values, {y_count} y values."
        )


class RequestedPointOutOfRangeError(RequestedPointError, ValueError):
    """Raised when a requested point lies outside the scanned range."""

    def __init__(self, point: tuple[float, ...]) -> None:
        self.point = point
        coords = ", ".join(f"{value:g}" for value in point)
        super().__init__(f"Requested point ({coords}) is out of scan range.")


class MissingResultAtPointError(RequestedPointError, LookupError):
    """Raised when the scan holds no fit result for a requested point."""

    def __init__(self, point: tuple[float, ...]) -> None:
        self.point = point
        coords = ", ".join(f"{value:g}" for value in point)
        super().__init__(f"No fit result at scan point ({coords}).")


__all__ = [
    "ParameterCacheError",
    "MissingSourceError",
    "MalformedRecordError",
    "WriteTargetUnavailableError",
    "NotYetLoadedError",
    "IndexOutOfRangeError",
    "RequestedPointError",
    "RequestedPointMismatchError",
    "RequestedPointOutOfRangeError",
    "MissingResultAtPointError",
]
