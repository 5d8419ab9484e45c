"""Snapshots of named parameter values and the collections holding them."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


@dataclass(frozen=True, slots=True)
class Snapshot:
    """One candidate solution: a mapping of parameter name to value.

    Names are unique; when built from pairs a later duplicate overwrites the
    earlier value.
    """

    values: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        normalized = {str(name): float(value) for name, value in self.values.items()}
        object.__setattr__(self, "values", MappingProxyType(normalized))

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, float]]) -> Snapshot:
        values: dict[str, float] = {}
        for name, value in pairs:
            values[name] = value
        return cls(values)

    def __len__(self) -> int:
        return len(self.values)

    def __contains__(self, name: object) -> bool:
        return name in self.values

    def __getitem__(self, name: str) -> float:
        return self.values[name]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Snapshot):
            return NotImplemented
        return dict(self.values) == dict(other.values)

    def __hash__(self) -> int:
        return hash(frozenset(self.values.items()))

    def names(self) -> list[str]:
        return sorted(self.values)

    def items(self) -> Iterator[tuple[str, float]]:
        """Iterate over (name, value) pairs sorted by name."""
        for name in self.names():
            yield name, self.values[name]

    def to_dict(self) -> dict[str, float]:
        return dict(self.values)


@dataclass(frozen=True, slots=True)
class SnapshotCollection:
    """Indexed sequence of snapshots loaded from, or written to, one cache file.

    A collection is either *not loaded* (``snapshots is None``) or *loaded*
    with a possibly empty tuple of snapshots, so the loaded state can never
    disagree with the data it guards.
    """

    snapshots: tuple[Snapshot, ...] | None = None

    @classmethod
    def not_loaded(cls) -> SnapshotCollection:
        return cls(None)

    @classmethod
    def from_snapshots(cls, snapshots: Iterable[Snapshot]) -> SnapshotCollection:
        return cls(tuple(snapshots))

    @property
    def loaded(self) -> bool:
        return self.snapshots is not None

    def count(self) -> int:
        return len(self.snapshots) if self.snapshots is not None else 0

    def __len__(self) -> int:
        return self.count()

    def __iter__(self) -> Iterator[Snapshot]:
        return iter(self.snapshots or ())

    def __getitem__(self, index: int) -> Snapshot:
        if self.snapshots is None:
            msg = "Snapshot collection has not been loaded."
            raise IndexError(msg)
        return self.snapshots[index]

    def describe(self) -> list[str]:
        """Return the human-readable listing of every snapshot."""
        lines = [f"There are {self.count()} solutions with values:"]
        for index, snapshot in enumerate(self):
            lines.append(f"SOLUTION {index}")
            for name, value in snapshot.items():
                lines.append(f"{name:<25s} {value:12.6f}")
        return lines


__all__ = ["Snapshot", "SnapshotCollection"]
