"""Account snapshot types and the latest-snapshot table."""

from bridge.core.snapshots.models import (
    MarketPosition,
    Position,
    Snapshot,
    SnapshotValidationError,
    WorkingOrder,
    parse_snapshot,
    parse_snapshot_table,
)
from bridge.core.snapshots.store import SnapshotStore, SnapshotTableWire

__all__ = [
    "MarketPosition",
    "Position",
    "Snapshot",
    "SnapshotStore",
    "SnapshotTableWire",
    "SnapshotValidationError",
    "WorkingOrder",
    "parse_snapshot",
    "parse_snapshot_table",
]
