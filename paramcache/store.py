"""Parameter store interface and an in-memory implementation."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import yaml


@runtime_checkable
class ParameterStore(Protocol):
    """Named-variable table the cache writes starting values into."""

    def has_variable(self, name: str) -> bool: ...

    def get_value(self, name: str) -> float: ...

    def set_value(self, name: str, value: float) -> None: ...

    def constant_names(self) -> frozenset[str]: ...


@dataclass(slots=True)
class Variable:
    """A single named model variable."""

    name: str
    value: float
    constant: bool = False


class ParameterTable:
    """Dictionary-backed :class:`ParameterStore`."""

    def __init__(self, variables: Iterable[Variable] = ()) -> None:
        self._variables: dict[str, Variable] = {}
        for variable in variables:
            self.add(variable)

    def __len__(self) -> int:
        return len(self._variables)

    def __contains__(self, name: object) -> bool:
        return name in self._variables

    def add(self, variable: Variable) -> None:
        """Register a variable, replacing any previous one of the same name."""
        self._variables[variable.name] = Variable(
            name=variable.name,
            value=float(variable.value),
            constant=bool(variable.constant),
        )

    def has_variable(self, name: str) -> bool:
        return name in self._variables

    def get_value(self, name: str) -> float:
        return self._lookup(name).value

    def set_value(self, name: str, value: float) -> None:
        self._lookup(name).value = float(value)

    def set_constant(self, name: str, constant: bool = True) -> None:
        self._lookup(name).constant = constant

    def constant_names(self) -> frozenset[str]:
        return frozenset(
            name for name, variable in self._variables.items() if variable.constant
        )

    def to_mapping(self) -> dict[str, dict[str, Any]]:
        """Return a YAML-friendly view of the table."""
        return {
            name: {"value": variable.value, "constant": variable.constant}
            for name, variable in sorted(self._variables.items())
        }

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ParameterTable:
        """Build a table from ``name: value`` or ``name: {value, constant}``."""
        table = cls()
        for name, entry in data.items():
            if isinstance(entry, Mapping):
                if "value" not in entry:
                    msg = f"Variable {name!r} is missing 'value'."
                    raise ValueError(msg)
                table.add(
                    Variable(
                        name=str(name),
                        value=float(entry["value"]),
                        constant=bool(entry.get("constant", False)),
                    )
                )
            else:
                table.add(Variable(name=str(name), value=float(entry)))
        return table

    def _lookup(self, name: str) -> Variable:
        try:
            return self._variables[name]
        except KeyError as error:
            msg = f"Unknown variable: {name}"
            raise KeyError(msg) from error


def load_parameter_table(path: Path) -> ParameterTable:
    """Load a parameter table from the ``parameters`` mapping of a YAML file."""
    with Path(path).open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, Mapping):
        msg = f"Expected mapping in YAML file: {path}"
        raise ValueError(msg)
    parameters = data.get("parameters", data)
    if not isinstance(parameters, Mapping):
        msg = f"'parameters' must be a mapping in YAML file: {path}"
        raise ValueError(msg)
    return ParameterTable.from_mapping(parameters)


def save_parameter_table(path: Path, table: ParameterTable) -> None:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8") as handle:
        yaml.safe_dump({"parameters": table.to_mapping()}, handle, sort_keys=True)


def fixed_names(fix_parameters: Iterable[Any]) -> frozenset[str]:
    """Collect the names of fix-parameter requests.

    Entries may be plain strings or objects exposing a ``name`` attribute.
    """
    names: set[str] = set()
    for entry in fix_parameters:
        names.add(entry if isinstance(entry, str) else str(entry.name))
    return frozenset(names)


__all__ = [
    "ParameterStore",
    "Variable",
    "ParameterTable",
    "load_parameter_table",
    "save_parameter_table",
    "fixed_names",
]
