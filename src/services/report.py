"""
Report rendering for aggregated connection counts.

Three shapes are supported:
- csv:   one header line, then one row per snapshot (time, totals, process counts)
- table: one "<STATE> (total/<process>):  <total>/<process count>" line per state
- json:  the pydantic Report document, written once all snapshots are in
"""

import logging
from typing import Optional, Sequence, TextIO

from parsers.base import ConnectionState, Snapshot
from schemas import Report, SnapshotReport, StateCountResponse
from services.aggregator import REPORTABLE_STATES, StateCounts

logger = logging.getLogger(__name__)

DEFAULT_TIMESTAMP_OUTPUT_FORMAT = "%m/%d/%y %H:%M"
DEFAULT_LABEL_WIDTH = 32
CSV_SEPARATOR = ", "


def process_label(process: Optional[str]) -> str:
    """Short column label for a process name (java.exe -> java)."""
    if not process:
        return "process"
    if process.lower().endswith(".exe"):
        return process[:-4]
    return process


def format_csv_header(states: Sequence[ConnectionState], label: str) -> str:
    columns = ["# time"]
    columns.extend(f"{s.value} (total)" for s in states)
    columns.extend(f"{s.value} ({label})" for s in states)
    return CSV_SEPARATOR.join(columns)


def format_csv_row(
    counts: StateCounts,
    snapshot: Optional[Snapshot] = None,
    timestamp_format: str = DEFAULT_TIMESTAMP_OUTPUT_FORMAT,
) -> str:
    if snapshot is not None and snapshot.timestamp is not None:
        time_column = snapshot.timestamp.strftime(timestamp_format)
    else:
        time_column = ""
    columns = [time_column]
    columns.extend(str(n) for n in counts.totals)
    columns.extend(str(n) for n in counts.filtered)
    return CSV_SEPARATOR.join(columns)


def format_table(
    counts: StateCounts,
    label: str,
    width: int = DEFAULT_LABEL_WIDTH,
    include_zero: bool = False,
) -> list[str]:
    """Render one line per state; states with no connections are skipped."""
    rows = counts.counts if include_zero else counts.non_zero()
    lines = []
    for c in rows:
        name = f"{c.state.value} (total/{label}):"
        lines.append(f"{name:<{width}}{c.total}/{c.filtered}")
    return lines


def to_snapshot_report(counts: StateCounts, snapshot: Optional[Snapshot] = None) -> SnapshotReport:
    return SnapshotReport(
        timestamp=snapshot.timestamp if snapshot else None,
        label=snapshot.label if snapshot else None,
        record_count=counts.record_count,
        states=[
            StateCountResponse(state=c.state, total=c.total, filtered=c.filtered)
            for c in counts.counts
        ],
    )


class ReportWriter:
    """Base writer; subclasses render each snapshot as it is closed."""

    def __init__(self, stream: TextIO, process: Optional[str] = None, **options):
        self.stream = stream
        self.process = process
        self.label = process_label(process)
        self.states = options.get("states", REPORTABLE_STATES)
        self.snapshots_written = 0

    def write(self, counts: StateCounts, snapshot: Optional[Snapshot] = None) -> None:
        self._write(counts, snapshot)
        self.snapshots_written += 1

    def _write(self, counts: StateCounts, snapshot: Optional[Snapshot]) -> None:
        raise NotImplementedError

    def close(self) -> None:
        self.stream.flush()

    def _println(self, line: str) -> None:
        self.stream.write(line + "\n")


class CsvReportWriter(ReportWriter):
    """Comma separated rows, header printed once per run."""

    def __init__(self, stream: TextIO, process: Optional[str] = None, **options):
        super().__init__(stream, process, **options)
        self.timestamp_format = options.get("timestamp_format") or DEFAULT_TIMESTAMP_OUTPUT_FORMAT
        self.header_written = False

    def _write(self, counts: StateCounts, snapshot: Optional[Snapshot]) -> None:
        if not self.header_written:
            self._println(format_csv_header(self.states, self.label))
            self.header_written = True
        self._println(format_csv_row(counts, snapshot, self.timestamp_format))


class TableReportWriter(ReportWriter):
    """Aligned per-state lines; snapshots are preceded by their timestamp."""

    def __init__(self, stream: TextIO, process: Optional[str] = None, **options):
        super().__init__(stream, process, **options)
        self.width = options.get("width") or DEFAULT_LABEL_WIDTH
        self.include_zero = bool(options.get("include_zero", False))
        self.timestamp_format = options.get("timestamp_format") or DEFAULT_TIMESTAMP_OUTPUT_FORMAT

    def _write(self, counts: StateCounts, snapshot: Optional[Snapshot]) -> None:
        if snapshot is not None:
            if self.snapshots_written:
                self._println("")
            heading = snapshot.timestamp.strftime(self.timestamp_format) if snapshot.timestamp else snapshot.label
            self._println(f"{heading}:")
        for line in format_table(counts, self.label, self.width, self.include_zero):
            self._println(line)


class JsonReportWriter(ReportWriter):
    """Collects snapshot reports and writes one JSON document on close."""

    def __init__(self, stream: TextIO, process: Optional[str] = None, **options):
        super().__init__(stream, process, **options)
        self.report = Report(source=options.get("source"), process=process)
        self.indent = options.get("indent", 2)

    def _write(self, counts: StateCounts, snapshot: Optional[Snapshot]) -> None:
        self.report.snapshots.append(to_snapshot_report(counts, snapshot))

    def close(self) -> None:
        self._println(self.report.model_dump_json(indent=self.indent))
        super().close()


REPORT_WRITERS = {
    "csv": CsvReportWriter,
    "table": TableReportWriter,
    "json": JsonReportWriter,
}


def get_report_writer(fmt: str, stream: TextIO, process: Optional[str] = None, **options) -> ReportWriter:
    """Get a report writer by format name.

    Raises:
        ValueError: If fmt is not registered
    """
    writer_class = REPORT_WRITERS.get(fmt.lower())
    if writer_class is None:
        raise ValueError(
            f"Unknown report format: {fmt}. Available: {', '.join(REPORT_WRITERS.keys())}"
        )
    logger.debug(f"Using {writer_class.__name__} (process={process})")
    return writer_class(stream, process, **options)
