from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

import pytest
from paramcache.cache import ParameterCache
from paramcache.config import CacheConfig
from paramcache.errors import (
    IndexOutOfRangeError,
    MalformedRecordError,
    MissingResultAtPointError,
    NotYetLoadedError,
    RequestedPointMismatchError,
    RequestedPointOutOfRangeError,
)
from paramcache.parser import parse_snapshots
from paramcache.results import FitParameter, FitResult
from paramcache.scan import ScanAxis, ScanGrid1D, ScanGrid2D, Scanner
from paramcache.store import ParameterTable, Variable

STAMP = datetime(2026, 10, 18, 9, 0, 0)


def _result(mu: float) -> FitResult:
    return FitResult(
        min_nll=-mu,
        edm=0.0,
        cov_qual=3,
        status=0,
        confirmed=True,
        parameters=(
            FitParameter("mu", mu, -0.1, 0.1),
            FitParameter("lumi", 2.0, constant=True),
        ),
    )


def _scanner() -> Scanner:
    x_axis = ScanAxis("gamma", 0.0, 4.0, 4)
    y_axis = ScanAxis("r_dk", 0.0, 4.0, 4)
    return Scanner(
        solutions=[_result(1.0), _result(2.0)],
        grid_1d=ScanGrid1D(x_axis, {1: _result(10.0), 2: _result(11.0)}),
        grid_2d=ScanGrid2D(x_axis, y_axis, {(1, 1): _result(20.0)}),
    )


def _mu_values(path: Path) -> list[float]:
    return [snapshot["mu"] for snapshot in parse_snapshots(path)]


def test_cache_writes_primary_and_requested_points(tmp_path: Path) -> None:
    target = tmp_path / "cache.dat"
    config = CacheConfig(
        save_nuisances_1d=(0.5, 1.5),
        save_nuisances_2dx=(0.5,),
        save_nuisances_2dy=(0.5,),
    )

    report = ParameterCache(config).cache_parameters(_scanner(), target, timestamp=STAMP)

    assert report.solutions == 2
    assert report.requested_points == 3
    assert report.issues == []
    assert _mu_values(target) == [1.0, 2.0, 10.0, 11.0, 20.0]
    text = target.read_text(encoding="utf-8")
    assert "(--sn at gamma =    0.50000)" in text
    assert "not glob min just min at gamma = 0.5 , r_dk = 0.5" in text


def test_mismatched_2d_points_skip_section(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    target = tmp_path / "cache.dat"
    config = CacheConfig(save_nuisances_2dx=(1.0, 2.0), save_nuisances_2dy=(3.0,))

    with caplog.at_level(logging.ERROR):
        report = ParameterCache(config).cache_parameters(_scanner(), target)

    assert report.requested_points == 0
    assert len(report.issues) == 1
    assert isinstance(report.issues[0], RequestedPointMismatchError)
    assert "different sizes" in caplog.text
    assert _mu_values(target) == [1.0, 2.0]


def test_out_of_range_2d_point_is_skipped(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    target = tmp_path / "cache.dat"
    config = CacheConfig(
        save_nuisances_2dx=(9.0, 0.5),
        save_nuisances_2dy=(0.5, 0.5),
    )

    with caplog.at_level(logging.WARNING):
        report = ParameterCache(config).cache_parameters(_scanner(), target)

    assert report.requested_points == 1
    assert [type(issue) for issue in report.issues] == [RequestedPointOutOfRangeError]
    assert "out of scan range" in caplog.text
    assert _mu_values(target) == [1.0, 2.0, 20.0]


def test_missing_result_stops_requested_points(tmp_path: Path) -> None:
    target = tmp_path / "cache.dat"
    config = CacheConfig(
        save_nuisances_1d=(0.5, 3.5, 1.5),
        save_nuisances_2dx=(0.5,),
        save_nuisances_2dy=(0.5,),
    )

    with pytest.raises(MissingResultAtPointError) as excinfo:
        ParameterCache(config).cache_parameters(_scanner(), target)

    assert excinfo.value.point == (3.5,)
    assert _mu_values(target) == [1.0, 2.0, 10.0]


def test_missing_2d_result_keeps_written_blocks(tmp_path: Path) -> None:
    target = tmp_path / "cache.dat"
    config = CacheConfig(
        save_nuisances_2dx=(0.5, 2.5),
        save_nuisances_2dy=(0.5, 2.5),
    )

    with pytest.raises(MissingResultAtPointError):
        ParameterCache(config).cache_parameters(_scanner(), target)

    assert _mu_values(target) == [1.0, 2.0, 20.0]


def test_load_replaces_collection_wholesale(tmp_path: Path) -> None:
    first = tmp_path / "first.dat"
    second = tmp_path / "second.dat"
    first.write_text("----\nmu 1\n----\nmu 2\n", encoding="utf-8")
    second.write_text("----\nmu 3\n", encoding="utf-8")
    cache = ParameterCache()

    assert cache.load(first)
    assert cache.count() == 2
    assert cache.load(second)
    assert cache.count() == 1
    assert cache.collection[0]["mu"] == 3.0


def test_missing_file_keeps_previous_collection(tmp_path: Path) -> None:
    source = tmp_path / "cache.dat"
    source.write_text("----\nmu 1\n", encoding="utf-8")
    cache = ParameterCache()
    cache.load(source)

    assert not cache.load(tmp_path / "absent.dat")
    assert cache.loaded
    assert cache.count() == 1


def test_malformed_file_keeps_previous_collection(tmp_path: Path) -> None:
    good = tmp_path / "good.dat"
    bad = tmp_path / "bad.dat"
    good.write_text("----\nmu 1\n", encoding="utf-8")
    bad.write_text("----\nmu one\n", encoding="utf-8")
    cache = ParameterCache()
    cache.load(good)

    with pytest.raises(MalformedRecordError):
        cache.load(bad)
    assert cache.collection[0]["mu"] == 1.0


def test_set_point_requires_load() -> None:
    cache = ParameterCache()

    with pytest.raises(NotYetLoadedError):
        cache.set_point(ParameterTable([Variable("mu", 0.0)]), 0)


def test_set_point_respects_constants_and_fix_parameters(tmp_path: Path) -> None:
    target = tmp_path / "cache.dat"
    ParameterCache().cache_parameters(_scanner(), target)
    table = ParameterTable(
        [
            Variable("mu", 0.0),
            Variable("lumi", 5.0, constant=True),
            Variable("sigma", 1.0),
        ]
    )
    cache = ParameterCache(CacheConfig(fix_parameters=("sigma",)))
    cache.load(target)

    report = cache.set_point(table, 1)

    assert table.get_value("mu") == 2.0
    assert table.get_value("lumi") == 5.0
    assert report.kept_constant == ["lumi"]
    with pytest.raises(IndexOutOfRangeError):
        cache.set_point(table, cache.count())


def test_save_then_apply_round_trip(tmp_path: Path) -> None:
    target = tmp_path / "cache.dat"
    ParameterCache().cache_parameters(_scanner(), target)
    table = ParameterTable([Variable("mu", 0.0), Variable("lumi", 5.0)])
    cache = ParameterCache()
    cache.load(target)

    cache.set_point(table, 0, fixed=())

    assert table.get_value("mu") == 1.0
    assert table.get_value("lumi") == 2.0


def test_debug_print_lists_solutions(tmp_path: Path) -> None:
    source = tmp_path / "cache.dat"
    source.write_text("----\nmu 1\n", encoding="utf-8")
    cache = ParameterCache()
    cache.load(source)

    text = cache.debug_print()

    assert text.startswith("There are 1 solutions")
    assert "SOLUTION 0" in text


def test_out_of_range_1d_point_counts_as_missing_result(tmp_path: Path) -> None:
    target = tmp_path / "cache.dat"
    config = CacheConfig(save_nuisances_1d=(-1.0, 0.5))

    with pytest.raises(MissingResultAtPointError) as excinfo:
        ParameterCache(config).cache_parameters(_scanner(), target)

    assert excinfo.value.point == (-1.0,)
    assert _mu_values(target) == [1.0, 2.0]


def test_nan_2d_point_is_out_of_range(tmp_path: Path) -> None:
    target = tmp_path / "cache.dat"
    config = CacheConfig(
        save_nuisances_2dx=(float("nan"), 0.5),
        save_nuisances_2dy=(0.5, 0.5),
    )

    report = ParameterCache(config).cache_parameters(_scanner(), target)

    assert [type(issue) for issue in report.issues] == [RequestedPointOutOfRangeError]
    assert _mu_values(target) == [1.0, 2.0, 20.0]
