"""
Pytest configuration and fixtures for netstat-stats tests.

Provides:
- Sample captures from the repository samples/ directory
- Parser instances
- A small factory for connection records
"""

from pathlib import Path

import pytest

from parsers import NetstatParser, SnapshotParser
from parsers.base import ConnectionRecord, ConnectionState, Protocol


REPO_ROOT = Path(__file__).resolve().parents[2]
SAMPLES_DIR = REPO_ROOT / "samples"


@pytest.fixture
def samples_dir() -> Path:
    return SAMPLES_DIR


@pytest.fixture
def windows_sample() -> str:
    """Single netstat -a -b listing."""
    return (SAMPLES_DIR / "netstat_windows.txt").read_text()


@pytest.fixture
def snapshots_sample() -> str:
    """Two timestamped listings from a capture loop."""
    return (SAMPLES_DIR / "netstat_snapshots.txt").read_text()


@pytest.fixture
def parser() -> NetstatParser:
    return NetstatParser()


@pytest.fixture
def snapshot_parser() -> SnapshotParser:
    return SnapshotParser()


@pytest.fixture
def make_record():
    """
    Build a ConnectionRecord with sensible defaults.

    Usage:
        make_record(ConnectionState.ESTABLISHED, process="java.exe")
    """
    def _make(state=ConnectionState.ESTABLISHED, process=None, protocol=Protocol.TCP):
        return ConnectionRecord(
            protocol=protocol,
            state=state,
            local_host="10.0.0.1",
            local_port=80,
            remote_host="10.0.0.2",
            remote_port=61000,
            owning_process=process,
        )
    return _make
