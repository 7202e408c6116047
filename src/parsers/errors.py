"""Exceptions raised while parsing netstat captures.

Every error is tied to the 1-based line number and the raw content of the
offending line so the CLI can print one actionable diagnostic.
"""

from typing import Optional


class NetstatParseError(Exception):
    """Base class for all netstat parsing failures."""

    def __init__(self, line_number: int, line: str, message: str):
        self.line_number = line_number
        self.line = line
        self.message = message
        super().__init__(f"line {line_number}: {message}: {line}")


class UnrecognizedProtocolError(NetstatParseError):
    """A connection line does not start with TCP or UDP."""


class MalformedLineError(NetstatParseError):
    """A required delimiter is missing or a continuation line is broken."""


class UnknownStateError(MalformedLineError):
    """The state token is not a recognized connection state."""

    def __init__(self, line_number: int, line: str, state: str):
        self.state = state
        super().__init__(line_number, line, f"invalid state '{state}'")


class UnknownPortNameError(NetstatParseError):
    """A non-numeric port is missing from the standard port table."""

    def __init__(self, line_number: int, line: str, token: str, side: Optional[str] = None):
        self.token = token
        self.side = side
        where = f"{side} " if side else ""
        super().__init__(line_number, line, f"unknown standard {where}port '{token}'")


class TimestampParseError(NetstatParseError):
    """A date/time pair does not form a valid snapshot timestamp."""
