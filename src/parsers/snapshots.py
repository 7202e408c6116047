"""Parser for captures holding several timestamped netstat snapshots.

The capture script loops over ``date /t``, ``time /t`` and ``netstat -a -b``,
so the file is a sequence of blocks:

    09/09/2017
    10:15
    TCP    10.0.0.1:80     10.0.0.2:61000     ESTABLISHED
     [java.exe]
    ...
"""

import logging
from datetime import datetime
from typing import Iterable, Iterator, List, Optional, Tuple

from .base import BaseParser, Snapshot
from .errors import TimestampParseError
from .netstat import DATE_LINE_RE, TIME_LINE_RE, NetstatParser

logger = logging.getLogger(__name__)

TIMESTAMP_INPUT_FORMAT = "%d/%m/%Y %H:%M"


class SnapshotParser(BaseParser):
    """Split a capture into snapshots and parse each one's connections."""

    source_type: str = "netstat-snapshots"

    def __init__(self, record_parser: Optional[NetstatParser] = None):
        self.record_parser = record_parser or NetstatParser()

    def parse(self, data: str, **kwargs) -> List[Snapshot]:
        """
        Parse a timestamped capture.

        Args:
            data: Raw capture as string
            **kwargs: Additional arguments (unused)

        Returns:
            Snapshots in input order, each with its connection records
        """
        return list(self.iter_snapshots(data))

    def detect_format(self, data: str) -> Optional[str]:
        return self.record_parser.detect_format(data)

    def iter_snapshots(self, data: str) -> Iterator[Snapshot]:
        """Yield each snapshot as soon as the next date line closes it."""
        return self.iter_snapshots_from_lines(self.iter_lines(data))

    def iter_snapshots_from_lines(self, lines: Iterable[Tuple[int, str]]) -> Iterator[Snapshot]:
        self.record_parser.reset()
        current: Optional[Snapshot] = None

        for line_number, line in lines:
            line = line.strip()
            if not line:
                continue

            if DATE_LINE_RE.match(line):
                # Connections seen before the first date line belong to the
                # first snapshot.
                records = self.record_parser.take_records()
                if current is not None:
                    current.records.extend(records)
                    yield self._close(current)
                    records = []
                current = Snapshot(date_string=line, line_number=line_number, records=records)
                continue

            if TIME_LINE_RE.match(line):
                self._set_time(current, line_number, line)
                continue

            self.record_parser.feed(line_number, line)

        leftover = self.record_parser.finish()
        if current is not None:
            current.records.extend(leftover)
            yield self._close(current)
        elif leftover:
            logger.warning(f"Ignoring {len(leftover)} connection records outside any snapshot")

    def _set_time(self, snapshot: Optional[Snapshot], line_number: int, line: str) -> None:
        """Combine the held date with this time line into the snapshot timestamp."""
        if snapshot is None:
            raise TimestampParseError(line_number, line, "time line without a preceding date line")

        date_match = DATE_LINE_RE.match(snapshot.date_string)
        time_match = TIME_LINE_RE.match(line)
        combined = f"{date_match.group('date')} {time_match.group('time')}"
        try:
            snapshot.timestamp = datetime.strptime(combined, TIMESTAMP_INPUT_FORMAT)
        except ValueError:
            raise TimestampParseError(
                line_number, line, f"'{combined}' does not match {TIMESTAMP_INPUT_FORMAT}"
            ) from None
        snapshot.time_string = line

    def _close(self, snapshot: Snapshot) -> Snapshot:
        if snapshot.timestamp is None:
            raise TimestampParseError(
                snapshot.line_number, snapshot.date_string, "date line without a matching time line"
            )
        logger.debug(
            f"Snapshot {snapshot.label} closed",
            extra={"record_count": len(snapshot.records), "line_number": snapshot.line_number},
        )
        return snapshot
