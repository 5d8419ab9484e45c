"""Cache of fit parameter values for resuming and re-seeding fits."""

from __future__ import annotations

from .applier import ApplyReport, apply_snapshot
from .cache import CacheReport, ParameterCache
from .config import CacheConfig, cache_config_from_mapping, load_cache_config
from .errors import (
    IndexOutOfRangeError,
    MalformedRecordError,
    MissingResultAtPointError,
    MissingSourceError,
    NotYetLoadedError,
    ParameterCacheError,
    RequestedPointError,
    RequestedPointMismatchError,
    RequestedPointOutOfRangeError,
    WriteTargetUnavailableError,
)
from .parser import parse_snapshot_lines, parse_snapshots
from .results import FitParameter, FitResult, fit_result_from_mapping
from .scan import ScanAxis, ScanGrid1D, ScanGrid2D, Scanner, load_scanner
from .snapshot import Snapshot, SnapshotCollection
from .store import (
    ParameterStore,
    ParameterTable,
    Variable,
    fixed_names,
    load_parameter_table,
)
from .writer import (
    SnapshotWriter,
    format_fit_result,
    open_collection,
    write_collection,
)

__all__ = [
    "ApplyReport",
    "apply_snapshot",
    "CacheReport",
    "ParameterCache",
    "CacheConfig",
    "cache_config_from_mapping",
    "load_cache_config",
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
    "parse_snapshot_lines",
    "parse_snapshots",
    "FitParameter",
    "FitResult",
    "fit_result_from_mapping",
    "ScanAxis",
    "ScanGrid1D",
    "ScanGrid2D",
    "Scanner",
    "load_scanner",
    "Snapshot",
    "SnapshotCollection",
    "ParameterStore",
    "ParameterTable",
    "Variable",
    "fixed_names",
    "load_parameter_table",
    "SnapshotWriter",
    "format_fit_result",
    "open_collection",
    "write_collection",
]
