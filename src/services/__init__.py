"""Services package for netstat-stats."""

from .aggregator import (
    aggregate,
    count_by_state,
    StateCount,
    StateCounts,
    REPORTABLE_STATES,
)
from .report import (
    get_report_writer,
    process_label,
    ReportWriter,
    CsvReportWriter,
    TableReportWriter,
    JsonReportWriter,
    REPORT_WRITERS,
)

__all__ = [
    "aggregate",
    "count_by_state",
    "StateCount",
    "StateCounts",
    "REPORTABLE_STATES",
    "get_report_writer",
    "process_label",
    "ReportWriter",
    "CsvReportWriter",
    "TableReportWriter",
    "JsonReportWriter",
    "REPORT_WRITERS",
]
