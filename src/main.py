#!/usr/bin/env python3
"""
netstat-stats
=============

Counts connection states in captured Windows netstat output, in total and
for one owning process.

A capture is either a single ``netstat -a -b`` listing, or the output of a
loop that prints ``date /t`` and ``time /t`` before each listing. The second
form produces one report row per snapshot.

Usage:
    netstat-stats capture.txt                       # auto-detect, default format
    netstat-stats capture.txt --format table        # per-state lines
    netstat-stats capture.txt --process tomcat.exe  # count another process
    netstat-stats capture.txt --format json > report.json
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from config import settings
from parsers import NetstatParseError, NetstatParser, SnapshotParser
from services import REPORT_WRITERS, aggregate, get_report_writer
from services.file_validator import read_capture
from utils.logging_utils import setup_logging, get_logger, LogTimer

logger = get_logger(__name__)

# Report format used when neither --format nor REPORT_FORMAT is set
DEFAULT_FORMATS = {
    "single": "table",
    "snapshots": "csv",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="netstat-stats",
        description="Count connection states in captured Windows netstat output",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  netstat-stats capture.txt                        # CSV rows for a timestamped capture
  netstat-stats capture.txt --mode single          # Treat the file as one listing
  netstat-stats capture.txt --format table --all-states
  netstat-stats capture.txt --process tomcat.exe --format json
        """,
    )
    parser.add_argument("file", help="netstat capture to read")
    parser.add_argument(
        "--mode", choices=["auto", "single", "snapshots"], default="auto",
        help="Capture layout (default: auto-detect from date lines)",
    )
    parser.add_argument(
        "--format", choices=sorted(REPORT_WRITERS), default=None,
        help="Report format (default: csv for snapshots, table for a single listing)",
    )
    parser.add_argument(
        "--process", type=str, default=None, metavar="NAME",
        help=f"Process to count separately (default: {settings.PROCESS_FILTER})",
    )
    parser.add_argument(
        "--all-states", action="store_true",
        help="Keep states with no connections in table reports",
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0,
        help="Log progress to stderr (-vv for debug)",
    )
    parser.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], default=None,
        help=f"Explicit log level (default: {settings.LOG_LEVEL})",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {settings.APP_VERSION}",
    )
    return parser


def resolve_log_level(args: argparse.Namespace) -> str:
    if args.log_level:
        return args.log_level
    if args.verbose >= 2 or settings.DEBUG:
        return "DEBUG"
    if args.verbose == 1:
        return "INFO"
    return settings.LOG_LEVEL


def detect_mode(data: str) -> str:
    return NetstatParser().detect_format(data) or "single"


def run(args: argparse.Namespace, stdout: Optional[TextIO] = None) -> int:
    """Parse the capture named by ``args.file`` and print its report."""
    stdout = stdout or sys.stdout
    path = Path(args.file)

    data = read_capture(path)

    mode = detect_mode(data) if args.mode == "auto" else args.mode
    fmt = args.format or settings.REPORT_FORMAT or DEFAULT_FORMATS[mode]
    process = args.process if args.process is not None else settings.PROCESS_FILTER

    logger.info(f"Processing {path} (mode={mode}, format={fmt}, process={process})")

    writer = get_report_writer(
        fmt,
        stdout,
        process,
        width=settings.TABLE_LABEL_WIDTH,
        include_zero=args.all_states,
        timestamp_format=settings.TIMESTAMP_OUTPUT_FORMAT,
        source=str(path),
    )

    if mode == "snapshots":
        with LogTimer(logger, f"Reporting snapshots from {path.name}") as timer:
            snapshot_count = 0
            record_count = 0
            for snapshot in SnapshotParser().iter_snapshots(data):
                writer.write(aggregate(snapshot.records, process), snapshot)
                snapshot_count += 1
                record_count += len(snapshot.records)
            timer.set_record_count(record_count)
            timer.add_info("snapshot_count", snapshot_count)
    else:
        with LogTimer(logger, f"Parsing {path.name}") as timer:
            records = NetstatParser().parse(data)
            timer.set_record_count(len(records))
        writer.write(aggregate(records, process))

    writer.close()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if settings.REPORT_FORMAT and settings.REPORT_FORMAT not in REPORT_WRITERS:
        parser.error(
            f"REPORT_FORMAT={settings.REPORT_FORMAT!r} is not one of {', '.join(sorted(REPORT_WRITERS))}"
        )

    setup_logging(resolve_log_level(args))

    try:
        return run(args)
    except NetstatParseError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"ERROR: cannot read {args.file}: {e.strerror or e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
