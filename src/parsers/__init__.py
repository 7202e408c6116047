"""Parser package for netstat captures.

This package turns captured netstat text into connection records and
timestamped snapshots.
"""

from .base import (
    BaseParser,
    ConnectionRecord,
    ConnectionState,
    Protocol,
    Snapshot,
)
from .errors import (
    NetstatParseError,
    UnrecognizedProtocolError,
    MalformedLineError,
    UnknownStateError,
    UnknownPortNameError,
    TimestampParseError,
)
from .netstat import NetstatParser
from .snapshots import SnapshotParser

# Parser registry mapping capture modes to parser classes
PARSERS = {
    "single": NetstatParser,
    "snapshots": SnapshotParser,
}


def get_parser(mode: str) -> BaseParser:
    """Get a parser instance by capture mode.

    Args:
        mode: Capture mode ('single' or 'snapshots')

    Returns:
        Parser instance

    Raises:
        ValueError: If mode is not registered
    """
    parser_class = PARSERS.get(mode.lower())
    if parser_class is None:
        raise ValueError(
            f"Unknown parser: {mode}. Available: {', '.join(PARSERS.keys())}"
        )
    return parser_class()


__all__ = [
    "BaseParser",
    "ConnectionRecord",
    "ConnectionState",
    "Protocol",
    "Snapshot",
    "NetstatParseError",
    "UnrecognizedProtocolError",
    "MalformedLineError",
    "UnknownStateError",
    "UnknownPortNameError",
    "TimestampParseError",
    "NetstatParser",
    "SnapshotParser",
    "PARSERS",
    "get_parser",
]
