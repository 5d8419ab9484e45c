"""Configuration loading for parameter cache runs."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml


@dataclass(frozen=True, slots=True)
class CacheConfig:
    verbose: bool = False
    save_nuisances_1d: tuple[float, ...] = ()
    save_nuisances_2dx: tuple[float, ...] = ()
    save_nuisances_2dy: tuple[float, ...] = ()
    fix_parameters: tuple[str, ...] = ()


def _load_yaml(path: Path) -> Mapping[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, Mapping):
        msg = f"Expected mapping in YAML file: {path}"
        raise ValueError(msg)
    return data


def _float_tuple(data: Mapping[str, Any], key: str) -> tuple[float, ...]:
    raw = data.get(key)
    if raw is None:
        return ()
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return (float(raw),)
    if not isinstance(raw, list):
        msg = f"'{key}' must be a number or a list of numbers"
        raise ValueError(msg)
    return tuple(float(item) for item in raw)


def cache_config_from_mapping(data: Mapping[str, Any]) -> CacheConfig:
    fix = data.get("fix_parameters") or []
    if isinstance(fix, str):
        fix = [fix]
    return CacheConfig(
        verbose=bool(data.get("verbose", data.get("debug", False))),
        save_nuisances_1d=_float_tuple(data, "save_nuisances_1d"),
        save_nuisances_2dx=_float_tuple(data, "save_nuisances_2dx"),
        save_nuisances_2dy=_float_tuple(data, "save_nuisances_2dy"),
        fix_parameters=tuple(str(name) for name in fix),
    )


def load_cache_config(path: Path) -> CacheConfig:
    return cache_config_from_mapping(_load_yaml(Path(path)))


__all__ = ["CacheConfig", "cache_config_from_mapping", "load_cache_config"]
