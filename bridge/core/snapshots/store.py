from __future__ import annotations

import threading
from typing import Any, Mapping, Optional

from bridge.core.snapshots.models import Snapshot, SnapshotValidationError

SnapshotTableWire = dict[str, dict[str, Any]]


class SnapshotStore:
    """
    Latest snapshot per account.

    Every update replaces the account's snapshot as a whole and returns the
    wire form of the entire table, built inside the same critical section,
    so relays and broadcasts never carry a half-applied update.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._latest: dict[str, Snapshot] = {}

    def apply(self, snapshot: Snapshot) -> SnapshotTableWire:
        if not snapshot.account:
            raise SnapshotValidationError("account is required")
        with self._lock:
            self._latest[snapshot.account] = snapshot
            return self._wire_locked()

    def merge(self, snapshots: Mapping[str, Snapshot]) -> SnapshotTableWire:
        for account, snapshot in snapshots.items():
            if not account or snapshot.account != account:
                raise SnapshotValidationError(f"snapshot key {account!r} does not match its account")
        with self._lock:
            self._latest.update(snapshots)
            return self._wire_locked()

    def to_wire(self) -> SnapshotTableWire:
        with self._lock:
            return self._wire_locked()

    def get(self, account: str) -> Optional[Snapshot]:
        with self._lock:
            return self._latest.get(account)

    def accounts(self) -> list[str]:
        with self._lock:
            return sorted(self._latest)

    def __len__(self) -> int:
        with self._lock:
            return len(self._latest)

    def _wire_locked(self) -> SnapshotTableWire:
        return {account: snapshot.to_wire() for account, snapshot in self._latest.items()}
