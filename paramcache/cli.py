"""Command-line interface for parameter cache files."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from .cache import ParameterCache
from .config import CacheConfig, load_cache_config
from .errors import ParameterCacheError
from .parser import parse_snapshots
from .scan import load_scanner
from .store import load_parameter_table, save_parameter_table


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _load_config(args: argparse.Namespace) -> CacheConfig:
    config = load_cache_config(Path(args.config)) if args.config else CacheConfig()
    if args.verbose:
        config = replace(config, verbose=True)
    return config


def _cmd_save(args: argparse.Namespace) -> int:
    config = _load_config(args)
    scanner = load_scanner(Path(args.results))

    if args.dry_run:
        print("[save] configuration validated")
        print(f"  results: {args.results}")
        print(f"  output: {args.output}")
        print(f"  solutions: {len(scanner.solutions)}")
        print(f"  requested 1-D points: {len(config.save_nuisances_1d)}")
        print(f"  requested 2-D points: {len(config.save_nuisances_2dx)}")
        return 0

    cache = ParameterCache(config)
    try:
        report = cache.cache_parameters(scanner, Path(args.output))
    except ParameterCacheError as error:
        print(f"[save] {error}", file=sys.stderr)
        return 1
    print(
        f"[save] wrote {report.total} solutions to {report.path} "
        f"({report.requested_points} requested points)"
    )
    for issue in report.issues:
        print(f"  warning: {issue}")
    return 0


def _cmd_show(args: argparse.Namespace) -> int:
    config = _load_config(args)
    try:
        collection = parse_snapshots(
            Path(args.cache_file),
            verbose=config.verbose,
            missing_ok=False,
        )
    except ParameterCacheError as error:
        print(f"[show] {error}", file=sys.stderr)
        return 1
    for line in collection.describe():
        print(line)
    return 0


def _cmd_apply(args: argparse.Namespace) -> int:
    config = _load_config(args)
    if args.fix:
        config = replace(
            config, fix_parameters=config.fix_parameters + tuple(args.fix)
        )
    cache = ParameterCache(config)
    table = load_parameter_table(Path(args.parameters))
    try:
        if not cache.load(Path(args.cache_file)):
            print(f"[apply] file not found: {args.cache_file}", file=sys.stderr)
            return 1
        report = cache.set_point(table, args.index)
    except ParameterCacheError as error:
        print(f"[apply] {error}", file=sys.stderr)
        return 1

    print(f"[apply] solution {report.index} from {args.cache_file}")
    print(f"  set: {len(report.applied)}")
    print(f"  left constant: {len(report.kept_constant)}")
    print(f"  not in model: {len(report.unknown)}")
    output = Path(args.output) if args.output else Path(args.parameters)
    save_parameter_table(output, table)
    print(f"  parameters written to {output}")
    return 0


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=None,
        help="Path to cache configuration YAML",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Print detailed progress information",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="paramcache",
        description="Save, inspect and apply cached fit parameter values",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    save = subparsers.add_parser(
        "save",
        help="Write fit solutions and requested scan points to a cache file",
    )
    save.add_argument("--results", required=True, help="Path to fit results YAML")
    save.add_argument("--output", required=True, help="Destination cache file")
    save.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate inputs without writing the cache file",
    )
    _add_common(save)
    save.set_defaults(func=_cmd_save)

    show = subparsers.add_parser("show", help="List the solutions of a cache file")
    show.add_argument("cache_file", help="Cache file to read")
    _add_common(show)
    show.set_defaults(func=_cmd_show)

    apply = subparsers.add_parser(
        "apply",
        help="Set parameter values from one cached solution",
    )
    apply.add_argument("cache_file", help="Cache file to read")
    apply.add_argument(
        "--parameters",
        required=True,
        help="Path to parameter table YAML",
    )
    apply.add_argument(
        "--index",
        type=int,
        default=0,
        help="Solution index to apply (zero-based)",
    )
    apply.add_argument(
        "--output",
        default=None,
        help="Where to write the updated parameter table (default: in place)",
    )
    apply.add_argument(
        "--fix",
        nargs="+",
        default=[],
        help="Parameter names to leave unchanged",
    )
    _add_common(apply)
    apply.set_defaults(func=_cmd_apply)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    result = args.func(args)
    return int(result)


if __name__ == "__main__":  # pragma: no cover - entry point
    raise SystemExit(main())
