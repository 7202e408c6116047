"""
Pydantic v2 schemas for serialized reports.

The JSON report is built from these models so the shape of the output is
declared in one place and validated on the way out.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from parsers.base import ConnectionState


class StateCountResponse(BaseModel):
    """Counts for one connection state."""

    model_config = ConfigDict(use_enum_values=True)

    state: ConnectionState
    total: int = Field(ge=0)
    filtered: int = Field(ge=0)

    @field_validator("filtered")
    @classmethod
    def validate_filtered(cls, v, info):
        total = info.data.get("total")
        if total is not None and v > total:
            raise ValueError(f"filtered count {v} exceeds total {total}")
        return v


class SnapshotReport(BaseModel):
    """Aggregated counts for one snapshot."""

    timestamp: Optional[datetime] = None
    label: Optional[str] = None
    record_count: int = Field(ge=0)
    states: List[StateCountResponse] = Field(default_factory=list)


class Report(BaseModel):
    """Full report for one capture file."""

    source: Optional[str] = None
    process: Optional[str] = None
    snapshots: List[SnapshotReport] = Field(default_factory=list)
