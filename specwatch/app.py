import argparse
import sys
import os
from pathlib import Path
from typing import List, Optional

from . import __version__
from .cleanup import cleanup_legacy_pointers
from .config import RUN_LOG_FILENAME, META_FILENAME, WatchConfig
from .env import load_env
from .logger import get_logger, reset_logger
from .runlog import read_run_log
from .storage import read_metadata
from .watcher import run_once


def _dir_arg(value: Optional[str], env_name: str, default: str) -> Path:
    return Path(value or os.getenv(env_name) or default)


def cmd_run(args: argparse.Namespace) -> int:
    try:
        config = WatchConfig.from_env(
            source_url=args.url,
            data_dir=args.data_dir,
            diff_dir=args.diff_dir,
            log_dir=args.log_dir,
            diff_command=args.diff_command,
            fetch_timeout=args.timeout,
            diff_timeout=args.diff_timeout,
            legacy_pointers=args.legacy_pointers,
            log_level=args.log_level,
        )
    except ValueError as e:
        raise SystemExit(str(e))

    reset_logger()
    logger = get_logger(level=config.log_level, log_dir=config.log_dir)
    logger.debug("Starting run", url=config.source_url, data_dir=str(config.data_dir))
    outcome = run_once(config)
    logger.log_metrics_summary()
    return outcome.exit_code


def cmd_status(args: argparse.Namespace) -> int:
    data_dir = _dir_arg(args.data_dir, "SPECWATCH_DATA_DIR", "data")
    log_dir = _dir_arg(args.log_dir, "SPECWATCH_LOG_DIR", "logs")
    meta_path = data_dir / META_FILENAME
    record = read_metadata(meta_path)
    if record is None:
        print(f"No metadata found at {meta_path} (next run is a first run).")
        return 0
    print(f"Metadata: {meta_path}\n")
    for key, value in record.to_dict().items():
        print(f"  {key}: {value if value is not None else '-'}")
    runs = read_run_log(log_dir / RUN_LOG_FILENAME)
    if runs:
        print(f"\nLast run: {runs[-1]}")
    return 0


def cmd_history(args: argparse.Namespace) -> int:
    data_dir = _dir_arg(args.data_dir, "SPECWATCH_DATA_DIR", "data")
    diff_dir = _dir_arg(args.diff_dir, "SPECWATCH_DIFF_DIR", "diffs")
    # Dated names sort chronologically
    snapshots = sorted(
        (p for p in data_dir.glob("????-??-??-*.json") if p.is_file()),
        key=lambda p: p.name,
        reverse=True,
    )
    reports = sorted(diff_dir.glob("*.txt"), key=lambda p: p.name, reverse=True)
    if args.limit is not None:
        snapshots = snapshots[:args.limit]
        reports = reports[:args.limit]

    if not snapshots:
        print(f"No snapshots in {data_dir}.")
    else:
        print(f"Snapshots ({data_dir}):")
        for p in snapshots:
            print(f" - {p.name}")
    if reports:
        print(f"\nDiff reports ({diff_dir}):")
        for p in reports:
            print(f" - {p.name}")
    return 0


def cmd_cleanup_legacy(args: argparse.Namespace) -> int:
    data_dir = _dir_arg(args.data_dir, "SPECWATCH_DATA_DIR", "data")
    removed = cleanup_legacy_pointers(data_dir)
    if not removed:
        print("No legacy pointer files found.")
        return 0
    for p in removed:
        print(f"Removed {p}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="specwatch", description="Archive and diff a remote API schema when it changes")
    parser.add_argument("--version", action="store_true", help="Show version")

    paths = argparse.ArgumentParser(add_help=False)
    paths.add_argument("--data-dir", help="Snapshot and metadata directory (or SPECWATCH_DATA_DIR, default: data)")
    paths.add_argument("--diff-dir", help="Diff report directory (or SPECWATCH_DIFF_DIR, default: diffs)")
    paths.add_argument("--log-dir", help="Run log directory (or SPECWATCH_LOG_DIR, default: logs)")

    subparsers = parser.add_subparsers(dest="command")
    run = subparsers.add_parser("run", parents=[paths], help="Fetch once, archive and diff on change (default)")
    run.add_argument("--url", help="Document URL (or set SPECWATCH_SOURCE_URL)")
    run.add_argument("--diff-command", help="Diff tool command, or 'unified' for a built-in text diff")
    run.add_argument("--timeout", type=float, help="Fetch timeout in seconds (default 30)")
    run.add_argument("--diff-timeout", type=float, help="Diff tool timeout in seconds (default: none)")
    run.add_argument("--legacy-pointers", action="store_true", help="Also maintain latest.json and previous.json copies")
    run.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Console log level")
    run.set_defaults(func=cmd_run)

    st = subparsers.add_parser("status", parents=[paths], help="Show stored metadata and the last run")
    st.set_defaults(func=cmd_status)

    hist = subparsers.add_parser("history", parents=[paths], help="List snapshots and diff reports, newest first")
    hist.add_argument("--limit", type=int, help="Show at most N entries of each kind")
    hist.set_defaults(func=cmd_history)

    cl = subparsers.add_parser("cleanup-legacy", parents=[paths], help="Remove deprecated latest.json/previous.json")
    cl.set_defaults(func=cmd_cleanup_legacy)

    return parser


def main(argv: Optional[List[str]] = None):
    # Load .env if present (SPECWATCH_SOURCE_URL, SPECWATCH_DATA_DIR, etc.)
    load_env()
    argv = sys.argv[1:] if argv is None else list(argv)
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if not hasattr(args, "func"):
        args = parser.parse_args(["run"] + argv)

    raise SystemExit(args.func(args))


if __name__ == "__main__":
    main()
