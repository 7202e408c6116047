"""Base classes and data structures for netstat capture parsing."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional


class Protocol(str, Enum):
    """Transport protocol of a connection line."""

    TCP = "TCP"
    UDP = "UDP"


class ConnectionState(str, Enum):
    """Connection states as printed by Windows netstat."""

    CLOSED = "CLOSED"
    CLOSE_WAIT = "CLOSE_WAIT"
    CLOSING = "CLOSING"
    ESTABLISHED = "ESTABLISHED"
    FIN_WAIT_1 = "FIN_WAIT_1"
    FIN_WAIT_2 = "FIN_WAIT_2"
    LAST_ACK = "LAST_ACK"
    LISTENING = "LISTENING"
    SYN_RECEIVED = "SYN_RECEIVED"
    SYN_SENT = "SYN_SENT"
    TIME_WAIT = "TIME_WAIT"


@dataclass
class ConnectionRecord:
    """Represents one parsed connection line and its optional process line."""

    protocol: Protocol
    state: ConnectionState
    local_host: str
    local_port: int
    remote_host: str
    remote_port: int
    owning_process: Optional[str] = None
    line_number: Optional[int] = None

    @property
    def local_address(self) -> str:
        return f"{self.local_host}:{self.local_port}"

    @property
    def remote_address(self) -> str:
        return f"{self.remote_host}:{self.remote_port}"

    @property
    def has_process(self) -> bool:
        return self.owning_process is not None

    def attach_process(self, name: str) -> bool:
        """Attach the owning process name.

        Returns False, leaving the record untouched, if a process is already
        attached.
        """
        if self.owning_process is not None:
            return False
        self.owning_process = name
        return True


@dataclass
class Snapshot:
    """Connection records captured at one point in time."""

    date_string: str
    line_number: int
    time_string: Optional[str] = None
    timestamp: Optional[datetime] = None
    records: List[ConnectionRecord] = field(default_factory=list)

    @property
    def label(self) -> str:
        if self.time_string:
            return f"{self.date_string} {self.time_string}"
        return self.date_string


class BaseParser(ABC):
    """Abstract base class for netstat capture parsers."""

    source_type: str = "unknown"

    @abstractmethod
    def parse(self, data: str, **kwargs):
        """Parse input data and return structured result."""
        pass

    def detect_format(self, data: str) -> Optional[str]:
        """Detect the format of input data. Override in subclasses."""
        return None

    @staticmethod
    def iter_lines(data: str) -> Iterable[tuple]:
        """Yield (line_number, stripped_line) pairs, 1-based."""
        for line_number, line in enumerate(data.splitlines(), start=1):
            yield line_number, line.strip()
