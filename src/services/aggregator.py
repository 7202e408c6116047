"""
Connection state aggregation.

Counts the records of one snapshot by connection state, both over all
records and restricted to a single owning process.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from parsers.base import ConnectionRecord, ConnectionState

logger = logging.getLogger(__name__)

# Report column order
REPORTABLE_STATES = (
    ConnectionState.ESTABLISHED,
    ConnectionState.LISTENING,
    ConnectionState.TIME_WAIT,
    ConnectionState.CLOSED,
    ConnectionState.CLOSE_WAIT,
    ConnectionState.CLOSING,
    ConnectionState.FIN_WAIT_1,
    ConnectionState.FIN_WAIT_2,
    ConnectionState.LAST_ACK,
    ConnectionState.SYN_RECEIVED,
    ConnectionState.SYN_SENT,
)


@dataclass
class StateCount:
    """Counts for one connection state."""
    state: ConnectionState
    total: int = 0
    filtered: int = 0  # Records owned by the filter process


@dataclass
class StateCounts:
    """Aggregated counts for one snapshot, in report order."""
    process: Optional[str]
    counts: List[StateCount] = field(default_factory=list)
    record_count: int = 0

    @property
    def totals(self) -> List[int]:
        return [c.total for c in self.counts]

    @property
    def filtered(self) -> List[int]:
        return [c.filtered for c in self.counts]

    def by_state(self) -> Dict[ConnectionState, StateCount]:
        return {c.state: c for c in self.counts}

    def non_zero(self) -> List[StateCount]:
        return [c for c in self.counts if c.total > 0]


def count_by_state(
    records: Iterable[ConnectionRecord],
    state: ConnectionState,
    process: Optional[str] = None,
) -> int:
    """
    Count records in the given state.

    Args:
        records: Connection records to scan
        state: State to match
        process: None counts every record in the state; otherwise only
            records owned by exactly this process count, and an empty
            name matches nothing

    Returns:
        Number of matching records
    """
    count = 0
    for record in records:
        if record.state != state:
            continue
        if process is None or (process and record.owning_process == process):
            count += 1
    return count


def aggregate(
    records: Sequence[ConnectionRecord],
    process: Optional[str] = None,
    states: Sequence[ConnectionState] = REPORTABLE_STATES,
) -> StateCounts:
    """
    Aggregate records into per-state totals and process-filtered counts.

    A None or empty ``process`` gives zero filtered counts, unlike
    ``count_by_state`` where None means every record. Single read-only
    pass; the output order follows ``states``, not the data.
    """
    totals: Dict[ConnectionState, int] = {s: 0 for s in states}
    filtered: Dict[ConnectionState, int] = {s: 0 for s in states}

    for record in records:
        if record.state not in totals:
            continue
        totals[record.state] += 1
        if process and record.owning_process == process:
            filtered[record.state] += 1

    result = StateCounts(
        process=process,
        counts=[StateCount(state=s, total=totals[s], filtered=filtered[s]) for s in states],
        record_count=len(records),
    )

    logger.debug(
        f"Aggregated {len(records)} records over {len(states)} states (process={process})",
        extra={"record_count": len(records)},
    )
    return result
