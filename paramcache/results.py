"""Fit result records consumed by the parameter cache."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class FitParameter:
    """A named fit parameter with its value and asymmetric errors."""

    name: str
    value: float
    error_lo: float = 0.0
    error_hi: float = 0.0
    constant: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            msg = "Parameter name must be a non-empty string."
            raise ValueError(msg)
        if any(char.isspace() for char in self.name):
            msg = f"Parameter name must not contain whitespace: {self.name!r}"
            raise ValueError(msg)
        if self.name.startswith(("#", "----")):
            msg = (
                "Parameter name must not start with a comment or solution "
                f"marker: {self.name!r}"
            )
            raise ValueError(msg)
        object.__setattr__(self, "value", float(self.value))
        object.__setattr__(self, "error_lo", float(self.error_lo))
        object.__setattr__(self, "error_hi", float(self.error_hi))


@dataclass(frozen=True, slots=True)
class FitResult:
    """Outcome of one minimisation as reported by the upstream fitter.

    The quality numbers are recorded as given; nothing here interprets them.

    Attributes:
        min_nll: Negative log-likelihood at the minimum.
        edm: Estimated distance to minimum.
        cov_qual: Covariance matrix quality code.
        status: Minimiser status code.
        confirmed: Whether the minimum was confirmed by a refit.
        parameters: Floating and constant parameters of the fit.
    """

    min_nll: float
    edm: float
    cov_qual: int
    status: int
    confirmed: bool = False
    parameters: tuple[FitParameter, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "parameters", tuple(self.parameters))
        seen: set[str] = set()
        for parameter in self.parameters:
            if parameter.name in seen:
                msg = f"Duplicate parameter {parameter.name!r} in fit result."
                raise ValueError(msg)
            seen.add(parameter.name)

    def floating_parameters(self) -> tuple[FitParameter, ...]:
        """Return the parameters that were free in the fit."""
        return tuple(p for p in self.parameters if not p.constant)

    def constant_parameters(self) -> tuple[FitParameter, ...]:
        """Return the parameters that were held constant in the fit."""
        return tuple(p for p in self.parameters if p.constant)


def _parameter_from_mapping(name: str, data: Any) -> FitParameter:
    if isinstance(data, (int, float)) and not isinstance(data, bool):
        return FitParameter(name=name, value=float(data))
    if not isinstance(data, Mapping):
        msg = f"Parameter {name!r} must be a number or a mapping."
        raise ValueError(msg)
    if "value" not in data:
        msg = f"Parameter {name!r} is missing 'value'."
        raise ValueError(msg)
    return FitParameter(
        name=name,
        value=float(data["value"]),
        error_lo=float(data.get("error_lo", 0.0)),
        error_hi=float(data.get("error_hi", 0.0)),
        constant=bool(data.get("constant", False)),
    )


def fit_result_from_mapping(data: Mapping[str, Any]) -> FitResult:
    """Build a fit result from a plain mapping such as parsed YAML."""
    if not isinstance(data, Mapping):
        msg = "Fit result entry must be a mapping."
        raise ValueError(msg)
    raw_parameters = data.get("parameters") or {}
    if not isinstance(raw_parameters, Mapping):
        msg = "Fit result 'parameters' must be a mapping of name to value."
        raise ValueError(msg)
    parameters = tuple(
        _parameter_from_mapping(str(name), value)
        for name, value in raw_parameters.items()
    )
    return FitResult(
        min_nll=float(data.get("min_nll", 0.0)),
        edm=float(data.get("edm", 0.0)),
        cov_qual=int(data.get("cov_qual", -1)),
        status=int(data.get("status", -1)),
        confirmed=bool(data.get("confirmed", False)),
        parameters=parameters,
    )


def fit_results_from_sequence(items: Iterable[Any]) -> list[FitResult]:
    """Build fit results from a sequence of mappings."""
    return [fit_result_from_mapping(item) for item in items]


__all__ = [
    "FitParameter",
    "FitResult",
    "fit_result_from_mapping",
    "fit_results_from_sequence",
]
