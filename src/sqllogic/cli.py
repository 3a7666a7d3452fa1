"""Command-line front end for running SQL logic test scripts."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from sqllogic.adapters import ADAPTERS, MEMORY, AdapterUnavailable
from sqllogic.report import Reporter
from sqllogic.runner import Runner, RunnerConfig

# Exit codes beyond the pass (0) / fail (1) convention
EXIT_USAGE = 2
EXIT_UNAVAILABLE = 3


def run_files(
    paths: list[Path],
    config: RunnerConfig,
    json_path: Path | None = None,
    quiet: bool = False,
) -> int:
    """Run scripts and print the report.

    Args:
        paths: Script files to run, in order.
        config: Runner settings.
        json_path: Where to write the machine-readable summary, if anywhere.
        quiet: If True, omit the per-script status lines.

    Returns:
        0 if every directive passed, 1 on any failure or parse error,
        3 if the backend could not be opened.
    """
    reporter = Reporter()
    runner = Runner(config, reporter)
    try:
        runner.run(paths)
    except AdapterUnavailable as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_UNAVAILABLE

    print(reporter.render(show_scripts=not quiet))

    if json_path is not None:
        try:
            json_path.write_text(reporter.to_json())
        except OSError as e:
            print(f"Error writing to {json_path}: {e}", file=sys.stderr)
            return 1

    return reporter.exit_code()


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    arg_parser = argparse.ArgumentParser(
        prog="sqllogic",
        description="Run SQL logic test scripts against a SQL backend",
    )
    arg_parser.add_argument(
        "scripts",
        type=Path,
        nargs="+",
        help="Test script files to run",
    )
    arg_parser.add_argument(
        "-e", "--engine",
        choices=sorted(ADAPTERS),
        default="sqlite",
        help="Backend to run the scripts against (default: sqlite)",
    )
    arg_parser.add_argument(
        "-d", "--database",
        default=MEMORY,
        help="Directory for per-script database files (default: in-memory)",
    )
    arg_parser.add_argument(
        "-j", "--workers",
        type=int,
        default=1,
        help="Number of scripts to run in parallel",
    )
    arg_parser.add_argument(
        "-t", "--timeout",
        type=float,
        default=None,
        help="Seconds allowed per statement",
    )
    arg_parser.add_argument(
        "--json",
        type=Path,
        default=None,
        help="Write a machine-readable summary to this file",
    )
    arg_parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Only print failures and the summary line",
    )
    arg_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log every executed directive",
    )

    args = arg_parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    missing = [path for path in args.scripts if not path.is_file()]
    if missing:
        for path in missing:
            print(f"Error: File not found: {path}", file=sys.stderr)
        return EXIT_USAGE

    if args.workers < 1:
        print("Error: --workers must be at least 1", file=sys.stderr)
        return EXIT_USAGE

    if args.timeout is not None and args.timeout <= 0:
        print("Error: --timeout must be positive", file=sys.stderr)
        return EXIT_USAGE

    config = RunnerConfig(
        engine=args.engine,
        database=args.database,
        workers=args.workers,
        timeout=args.timeout,
    )
    return run_files(args.scripts, config, json_path=args.json, quiet=args.quiet)


if __name__ == "__main__":
    sys.exit(main())
