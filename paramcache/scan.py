"""Scan grids mapping scanned coordinates to stored fit results."""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .results import FitResult, fit_result_from_mapping, fit_results_from_sequence


@dataclass(frozen=True, slots=True)
class ScanAxis:
    """Uniformly binned scan axis.

    Bins are numbered from 1 to ``points``. Coordinates below ``minimum`` map
    to the underflow bin 0 and coordinates at or above ``maximum`` map to the
    overflow bin ``points + 1``. NaN maps to the overflow bin.
    """

    name: str
    minimum: float
    maximum: float
    points: int

    def __post_init__(self) -> None:
        if self.points <= 0:
            msg = f"Axis {self.name!r} needs a positive number of points."
            raise ValueError(msg)
        if not self.maximum > self.minimum:
            msg = f"Axis {self.name!r} maximum must exceed its minimum."
            raise ValueError(msg)

    @property
    def bin_width(self) -> float:
        return (self.maximum - self.minimum) / self.points

    def find_bin(self, value: float) -> int:
        """Return the 1-based bin holding ``value``."""
        if math.isnan(value):
            return self.points + 1
        if value < self.minimum:
            return 0
        if value >= self.maximum:
            return self.points + 1
        index = int(math.floor((value - self.minimum) / self.bin_width)) + 1
        return min(index, self.points)

    def contains_bin(self, index: int) -> bool:
        return 1 <= index <= self.points

    def bin_center(self, index: int) -> float:
        return self.minimum + (index - 0.5) * self.bin_width


@dataclass(slots=True)
class ScanGrid1D:
    """Fit results of a one-dimensional scan keyed by bin."""

    axis: ScanAxis
    results: dict[int, FitResult] = field(default_factory=dict)

    def result_at(self, value: float) -> FitResult | None:
        """Return the stored result for the bin containing ``value``."""
        index = self.axis.find_bin(value)
        if not self.axis.contains_bin(index):
            return None
        return self.results.get(index)


@dataclass(slots=True)
class ScanGrid2D:
    """Fit results of a two-dimensional scan keyed by (x bin, y bin)."""

    x_axis: ScanAxis
    y_axis: ScanAxis
    results: dict[tuple[int, int], FitResult] = field(default_factory=dict)

    def locate(self, x: float, y: float) -> tuple[int, int]:
        return self.x_axis.find_bin(x), self.y_axis.find_bin(y)

    def in_range(self, x_bin: int, y_bin: int) -> bool:
        return self.x_axis.contains_bin(x_bin) and self.y_axis.contains_bin(y_bin)

    def result_at_bins(self, x_bin: int, y_bin: int) -> FitResult | None:
        return self.results.get((x_bin, y_bin))


@dataclass(slots=True)
class Scanner:
    """Primary solutions of a scan together with its per-point results."""

    solutions: list[FitResult] = field(default_factory=list)
    grid_1d: ScanGrid1D | None = None
    grid_2d: ScanGrid2D | None = None

    @property
    def scan_var1_name(self) -> str:
        if self.grid_2d is not None:
            return self.grid_2d.x_axis.name
        if self.grid_1d is not None:
            return self.grid_1d.axis.name
        return "var1"

    @property
    def scan_var2_name(self) -> str:
        if self.grid_2d is not None:
            return self.grid_2d.y_axis.name
        return "var2"


def _axis_from_mapping(data: Any, *, label: str) -> ScanAxis:
    if not isinstance(data, Mapping):
        msg = f"Scan axis {label!r} must be a mapping."
        raise ValueError(msg)
    try:
        return ScanAxis(
            name=str(data["name"]),
            minimum=float(data["min"]),
            maximum=float(data["max"]),
            points=int(data["points"]),
        )
    except KeyError as error:
        msg = f"Scan axis {label!r} is missing required key: {error.args[0]}"
        raise ValueError(msg) from error


def _entries(data: Mapping[str, Any], key: str) -> Sequence[Mapping[str, Any]]:
    entries = data.get(key) or []
    if not isinstance(entries, list):
        msg = f"Scan '{key}' must be a list."
        raise ValueError(msg)
    return entries


def _bin_index(entry: Mapping[str, Any], key: str) -> int:
    if not isinstance(entry, Mapping) or key not in entry:
        msg = f"Scan result entry is missing required key: {key}"
        raise ValueError(msg)
    return int(entry[key])


def scanner_from_mapping(data: Mapping[str, Any]) -> Scanner:
    """Build a scanner from parsed YAML.

    Expected keys: ``solutions`` (list of fit results) and an optional
    ``scan`` mapping with ``var1``/``var2`` axes plus ``results_1d`` entries
    carrying ``bin`` and ``results_2d`` entries carrying ``xbin``/``ybin``.
    """
    solutions = fit_results_from_sequence(data.get("solutions") or [])
    scan = data.get("scan") or {}
    if not isinstance(scan, Mapping):
        msg = "'scan' must be a mapping."
        raise ValueError(msg)

    grid_1d: ScanGrid1D | None = None
    grid_2d: ScanGrid2D | None = None
    if "var1" in scan:
        x_axis = _axis_from_mapping(scan["var1"], label="var1")
        grid_1d = ScanGrid1D(axis=x_axis)
        for entry in _entries(scan, "results_1d"):
            grid_1d.results[_bin_index(entry, "bin")] = fit_result_from_mapping(entry)
        if "var2" in scan:
            y_axis = _axis_from_mapping(scan["var2"], label="var2")
            grid_2d = ScanGrid2D(x_axis=x_axis, y_axis=y_axis)
            for entry in _entries(scan, "results_2d"):
                key = (_bin_index(entry, "xbin"), _bin_index(entry, "ybin"))
                grid_2d.results[key] = fit_result_from_mapping(entry)
    return Scanner(solutions=solutions, grid_1d=grid_1d, grid_2d=grid_2d)


def load_scanner(path: Path) -> Scanner:
    """Load a scanner from a YAML results file."""
    with Path(path).open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, Mapping):
        msg = f"Expected mapping in YAML file: {path}"
        raise ValueError(msg)
    return scanner_from_mapping(data)


__all__ = [
    "ScanAxis",
    "ScanGrid1D",
    "ScanGrid2D",
    "Scanner",
    "scanner_from_mapping",
    "load_scanner",
]
