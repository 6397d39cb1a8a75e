"""
Run a shell-style process pipeline and stream its output to the log.

Example:

    procpipe "cat build.log | grep -i error | sort" -C ./project -s "0 errors"

A stage that exits with a failure status still counts as successful when
any line it prints matches a --success-pattern.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from dotenv import load_dotenv
from pydantic import ValidationError

from .config import RunnerConfig
from .errors import ProcPipeError, report_error
from .runner import PipelineRunner

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(message)s"


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="procpipe",
        description=__doc__,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("command", help="Pipe-delimited command line to run")
    parser.add_argument(
        "-C",
        "--directory",
        default=None,
        help="Working directory for every stage "
        "(default: PROCPIPE_DEFAULT_DIRECTORY or '.')",
    )
    parser.add_argument(
        "-s",
        "--success-pattern",
        dest="success_patterns",
        action="append",
        default=[],
        metavar="REGEX",
        help="Treat a failing stage as successful if a line matches REGEX (repeatable)",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only show warnings and errors on the console",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Also append log records to this file",
    )
    return parser.parse_args(argv)


def configure_logging(quiet: bool, log_file: str | None) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    handlers[0].setLevel(logging.WARNING if quiet else logging.DEBUG)
    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        handlers.append(file_handler)
    logging.basicConfig(
        level=logging.DEBUG, format=LOG_FORMAT, handlers=handlers, force=True
    )


def main(argv: Sequence[str] | None = None) -> int:
    load_dotenv()
    args = parse_args(argv)
    configure_logging(args.quiet, args.log_file)
    log = logging.getLogger("procpipe")

    try:
        config = RunnerConfig.from_env()
    except ValidationError as exc:
        report_error(exc, "invalid PROCPIPE_* configuration", sink=log)
        return 2

    runner = PipelineRunner(config, sink=log)
    directory = args.directory or config.default_directory
    try:
        result = runner.run_in_directory(args.command, directory, args.success_patterns)
    except (ProcPipeError, ValueError) as exc:
        report_error(exc, "cannot run pipeline", sink=log)
        return 2

    if not result.ok:
        report_error(result.error, "pipeline failed", "fatal", sink=log)
    return 0


if __name__ == "__main__":
    sys.exit(main())
