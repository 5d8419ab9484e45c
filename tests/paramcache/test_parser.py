from __future__ import annotations

import logging
from pathlib import Path

import pytest
from paramcache.errors import MalformedRecordError, MissingSourceError
from paramcache.parser import parse_snapshot_lines, parse_snapshots
from paramcache.snapshot import Snapshot

WELL_FORMED = """\
##### auto-generated by paramcache #######
##### printed on Sat Oct 18 13:34:00 2026 ######
# ParameterName                value       errLow      errHigh

----- SOLUTION 0 -----
### FCN: -120.5, EDM: 1e-05
### COV quality: 3, status: 0, confirmed: yes
alpha                          0.250000    -0.010000     0.010000
mu                             1.234567    -0.100000     0.120000

----- SOLUTION 1 (--sn at gamma =    1.50000) -----
### FCN: -118.1, EDM: 2e-05
### COV quality: 3, status: 0, confirmed: no
alpha                          0.300000    -0.010000     0.010000
mu                             2.000000    -0.100000     0.120000
"""


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_parse_example_block_keeps_obs_names(tmp_path: Path) -> None:
    source = _write(
        tmp_path / "cache.dat",
        "----- SOLUTION 0 -----\nmu 1.234567\nobs_x 9.0\n",
    )

    collection = parse_snapshots(source)

    assert collection.loaded
    assert collection.count() == 1
    assert collection[0] == Snapshot({"mu": 1.234567, "obs_x": 9.0})


def test_parse_reads_every_solution(tmp_path: Path) -> None:
    collection = parse_snapshots(_write(tmp_path / "cache.dat", WELL_FORMED))

    assert collection.count() == 2
    assert collection[0]["mu"] == pytest.approx(1.234567)
    assert collection[1]["alpha"] == pytest.approx(0.3)
    assert collection[1].names() == ["alpha", "mu"]


def test_parse_is_idempotent(tmp_path: Path) -> None:
    source = _write(tmp_path / "cache.dat", WELL_FORMED)

    assert parse_snapshots(source) == parse_snapshots(source)


def test_comments_and_blank_lines_do_not_change_result() -> None:
    noisy_lines = []
    for line in WELL_FORMED.splitlines():
        noisy_lines.extend(["", "   ", "# interleaved comment", "  ## indented"])
        noisy_lines.append(line)
    noisy_lines.append("")

    clean = parse_snapshot_lines(WELL_FORMED.splitlines())
    noisy = parse_snapshot_lines(noisy_lines)

    assert noisy == clean


def test_tabs_and_repeated_spaces_separate_tokens() -> None:
    collection = parse_snapshot_lines(["-----", "mu\t\t 1.5   -0.1  0.1"])

    assert collection[0]["mu"] == 1.5


def test_file_without_solutions_loads_empty(tmp_path: Path) -> None:
    collection = parse_snapshots(_write(tmp_path / "cache.dat", "# only comments\n\n"))

    assert collection.loaded
    assert collection.count() == 0


def test_missing_file_is_not_loaded(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    missing = tmp_path / "absent.dat"

    with caplog.at_level(logging.ERROR):
        collection = parse_snapshots(missing)

    assert not collection.loaded
    assert "absent.dat" in caplog.text


def test_missing_file_raises_when_required(tmp_path: Path) -> None:
    with pytest.raises(MissingSourceError) as excinfo:
        parse_snapshots(tmp_path / "absent.dat", missing_ok=False)
    assert isinstance(excinfo.value, FileNotFoundError)


def test_data_line_before_marker_is_malformed(tmp_path: Path) -> None:
    source = _write(tmp_path / "cache.dat", "mu 1.0\n----- SOLUTION 0 -----\n")

    with pytest.raises(MalformedRecordError) as excinfo:
        parse_snapshots(source)

    assert excinfo.value.line_number == 1
    assert excinfo.value.solution_index is None
    assert "cache.dat:1" in str(excinfo.value)


def test_single_token_line_is_malformed() -> None:
    with pytest.raises(MalformedRecordError) as excinfo:
        parse_snapshot_lines(["----- SOLUTION 0 -----", "mu 1.0", "sigma"])

    assert excinfo.value.line_number == 3
    assert excinfo.value.solution_index == 0


def test_non_numeric_value_is_malformed() -> None:
    lines = ["----- SOLUTION 0 -----", "----- SOLUTION 1 -----", "mu abc"]

    with pytest.raises(MalformedRecordError) as excinfo:
        parse_snapshot_lines(lines)

    assert excinfo.value.solution_index == 1
    assert "'mu'" in str(excinfo.value)
    assert isinstance(excinfo.value, ValueError)


def test_invalid_utf8_is_malformed(tmp_path: Path) -> None:
    source = tmp_path / "cache.dat"
    source.write_bytes(b"# fit by J\xe9r\xf4me\n----- SOLUTION 0 -----\nmu 1.0\n")

    with pytest.raises(MalformedRecordError) as excinfo:
        parse_snapshots(source)

    assert excinfo.value.line_number == 1
    assert "cache.dat:1" in str(excinfo.value)
    assert "UTF-8" in str(excinfo.value)


def test_crlf_line_endings_are_accepted(tmp_path: Path) -> None:
    source = tmp_path / "cache.dat"
    source.write_bytes(b"# header\r\n----- SOLUTION 0 -----\r\nmu 1.5\r\n")

    collection = parse_snapshots(source)

    assert collection[0] == Snapshot({"mu": 1.5})
