"""Windows netstat connection listing parser.

Handles captures of ``netstat -a -b``-style output where each connection
line may be followed by the owning executable in brackets:

    TCP    10.0.0.1:80          10.0.0.2:61000         ESTABLISHED
     [java.exe]
"""

import logging
import re
from typing import List, Mapping, Optional, Tuple

from network.constants import MAX_PORT, STANDARD_PORTS
from .base import BaseParser, ConnectionRecord, ConnectionState, Protocol
from .errors import (
    MalformedLineError,
    UnknownPortNameError,
    UnknownStateError,
    UnrecognizedProtocolError,
)

logger = logging.getLogger(__name__)

# Snapshot boundary lines written by the capture script (``date /t``, ``time /t``)
DATE_LINE_RE = re.compile(r"^(?P<date>[0-3][0-9]/[0-1][0-9]/\d{4}).*")
TIME_LINE_RE = re.compile(r"^(?P<time>[0-2]\d:\d\d).*")

PORT_NUMBER_RE = re.compile(r"[0-9]+")


class NetstatParser(BaseParser):
    """Single-pass parser turning netstat lines into connection records.

    The parser can be driven in one call with :meth:`parse`, or line by line
    with :meth:`feed` and :meth:`finish` when another parser owns the loop.
    """

    source_type: str = "netstat"

    def __init__(self, standard_ports: Mapping[str, int] = STANDARD_PORTS):
        self.standard_ports = standard_ports
        self._records: List[ConnectionRecord] = []
        self._current: Optional[ConnectionRecord] = None

    def parse(self, data: str, **kwargs) -> List[ConnectionRecord]:
        """
        Parse a netstat capture and return its connection records.

        Args:
            data: Raw netstat output as string
            **kwargs: Additional arguments (unused)

        Returns:
            Connection records in input order

        Raises:
            NetstatParseError: On the first line that cannot be parsed
        """
        self.reset()
        for line_number, line in self.iter_lines(data):
            self.feed(line_number, line)
        return self.finish()

    def detect_format(self, data: str) -> Optional[str]:
        """
        Detect whether the capture holds timestamped snapshots.

        Returns:
            'snapshots', 'single', or None when no connection line is present
        """
        has_connections = False
        for _, line in self.iter_lines(data):
            if DATE_LINE_RE.match(line):
                return "snapshots"
            if not has_connections and self.is_connection_line(line):
                has_connections = True
        return "single" if has_connections else None

    def reset(self) -> None:
        """Drop all completed and pending records."""
        self._records = []
        self._current = None

    @property
    def pending(self) -> Optional[ConnectionRecord]:
        """The record still open for a continuation line, if any."""
        return self._current

    def feed(self, line_number: int, line: str) -> None:
        """Consume one input line."""
        line = line.strip()
        if not line:
            return

        if self.is_connection_line(line):
            # A new connection line completes the previous record
            self._flush()
            self._current = self.parse_connection_line(line_number, line)
            return

        if self._current is not None:
            self._add_continuation(line_number, line)

    def take_records(self) -> List[ConnectionRecord]:
        """Complete the pending record and hand over everything parsed so far."""
        self._flush()
        records, self._records = self._records, []
        return records

    def finish(self) -> List[ConnectionRecord]:
        """Signal end of input and return the completed records."""
        return self.take_records()

    @staticmethod
    def is_connection_line(line: str) -> bool:
        """True if the first token of the line is a protocol literal."""
        parts = line.split(None, 1)
        return bool(parts) and parts[0] in Protocol.__members__

    def parse_connection_line(self, line_number: int, line: str) -> ConnectionRecord:
        """
        Parse one connection line.

        Format: ``<PROTO> <local-host>:<port> <remote-host>:<port> <STATE>``
        where a port is either numeric or a standard service name.
        """
        raw = line.strip()
        parts = raw.split(None, 1)
        if not parts or parts[0] not in Protocol.__members__:
            token = parts[0] if parts else ""
            raise UnrecognizedProtocolError(line_number, raw, f"unknown connection type '{token}'")

        protocol = Protocol(parts[0])
        rest = parts[1] if len(parts) > 1 else ""

        # State is the last token on the line
        pieces = rest.rsplit(None, 1)
        if len(pieces) < 2:
            raise MalformedLineError(line_number, raw, "no space separator identified before the state")
        addresses, state_token = pieces

        try:
            state = ConnectionState(state_token)
        except ValueError:
            raise UnknownStateError(line_number, raw, state_token) from None

        # 1.2.3.4:80        1.2.3.5:61122
        endpoints = addresses.split(None, 1)
        if len(endpoints) < 2:
            raise MalformedLineError(
                line_number, raw, "missing space separator between local address and remote address"
            )

        local_host, local_port = self._parse_address(line_number, raw, endpoints[0], "local")
        remote_host, remote_port = self._parse_address(line_number, raw, endpoints[1].strip(), "remote")

        return ConnectionRecord(
            protocol=protocol,
            state=state,
            local_host=local_host,
            local_port=local_port,
            remote_host=remote_host,
            remote_port=remote_port,
            line_number=line_number,
        )

    def resolve_port(self, token: str) -> Optional[int]:
        """Resolve a numeric or named port, None if the name is unknown."""
        if PORT_NUMBER_RE.fullmatch(token):
            return int(token)
        return self.standard_ports.get(token)

    def _parse_address(self, line_number: int, line: str, address: str, side: str) -> Tuple[str, int]:
        """Split ``host:port`` on the last colon and resolve the port."""
        host, sep, port_token = address.rpartition(":")
        if not sep:
            raise MalformedLineError(line_number, line, f"missing ':' separator in the {side} address")

        # int() rejects digit strings longer than sys.get_int_max_str_digits()
        if PORT_NUMBER_RE.fullmatch(port_token) and len(port_token.lstrip("0")) > len(str(MAX_PORT)):
            raise MalformedLineError(line_number, line, f"{side} port out of range")

        port = self.resolve_port(port_token)
        if port is None:
            raise UnknownPortNameError(line_number, line, port_token, side)
        if port > MAX_PORT:
            raise MalformedLineError(line_number, line, f"{side} port {port} out of range")

        return host, port

    def _add_continuation(self, line_number: int, line: str) -> None:
        """Attach a bracketed process name to the pending record."""
        # Anything else between connection blocks (service names, "Can not
        # obtain ownership information", headers) is ignored.
        if not line.startswith("["):
            return

        if not line.endswith("]"):
            raise MalformedLineError(line_number, line, "invalid process, missing closing ']'")

        name = line[1:-1]
        if not self._current.attach_process(name):
            logger.debug(
                f"Line {line_number}: ignoring process {name!r}, "
                f"record already owned by {self._current.owning_process!r}"
            )

    def _flush(self) -> None:
        if self._current is None:
            return
        self._records.append(self._current)
        self._current = None
